"""Validates JSON-like instances against draft-03/draft-04 style schemas.

The Validator walks a schema against an instance depth first. For each schema
node it runs the keyword validators of ``jsonvalidator.attributes`` in a fixed
order and merges their errors into one flat, path-addressed result.

Validation may populate defaults into the instance it is given: when a nested
schema declares ``default`` and the corresponding value is absent, a copy of the
default is written into the parent object or array. Pass
``skip_defaults=True`` to leave the instance untouched.
"""

import copy
import logging
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from jsonvalidator.attributes import KEYWORD_VALIDATORS
from jsonvalidator.constants import IGNORED_KEYWORDS
from jsonvalidator.formats import FormatHandler, FormatRegistry
from jsonvalidator.helpers import SchemaContext, SchemaError, ValidationResult
from jsonvalidator.resolver import SchemaRegistry, schema_id
from jsonvalidator.typeregistry import UNDEFINED, TypePredicate, TypeRegistry

logger = logging.getLogger(__name__)

_OPTION_ALIASES = {
    'allowUnknownAttributes': 'allow_unknown_attributes',
    'skipDefaults': 'skip_defaults',
    'propertyName': 'property_name',
    'skipAttributes': 'skip_attributes',
    'throwError': 'throw_error',
    'base': 'base_uri',
}


class ValidatorOptions:
    """Flags that control one validation call.

    Attributes:
        allow_unknown_attributes: When False, a schema keyword without a
            validator raises SchemaError
        skip_defaults: When True, ``default`` values are neither applied nor
            written back into the instance
        property_name: Property path of the root instance in error records
        skip_attributes: Keywords to ignore entirely
        throw_error: Raise the first ValidationError instead of returning an
            invalid result
        base_uri: URI that relative ``$ref`` values of the root schema resolve
            against
    """

    def __init__(self, allow_unknown_attributes: bool = True, skip_defaults: bool = False,
                 property_name: str = '', skip_attributes: Optional[Iterable[str]] = None,
                 throw_error: bool = False, base_uri: str = ''):
        self.allow_unknown_attributes = allow_unknown_attributes
        self.skip_defaults = skip_defaults
        self.property_name = property_name or ''
        self.skip_attributes = frozenset(skip_attributes or ())
        self.throw_error = throw_error
        self.base_uri = base_uri or ''

    @classmethod
    def coerce(cls, options: Union['ValidatorOptions', Mapping[str, Any], None]) -> 'ValidatorOptions':
        """Builds options from None, a mapping (snake or camel case keys) or options."""
        if options is None:
            return cls()
        if isinstance(options, ValidatorOptions):
            return options
        if isinstance(options, Mapping):
            kwargs = {_OPTION_ALIASES.get(key, key): value for key, value in options.items()}
            try:
                return cls(**kwargs)
            except TypeError as e:
                raise ValueError(f"Unknown validator option in {sorted(options)}") from e
        raise TypeError(f"Options must be a mapping or ValidatorOptions, got {type(options).__name__}")

    def __repr__(self) -> str:
        return (f"ValidatorOptions(allow_unknown_attributes={self.allow_unknown_attributes}, "
                f"skip_defaults={self.skip_defaults}, property_name={self.property_name!r})")


class Validator:
    """Schema validator with its own format, type and schema registries."""

    def __init__(self, options: Union[ValidatorOptions, Mapping[str, Any], None] = None):
        self.options = ValidatorOptions.coerce(options)
        self.formats = FormatRegistry()
        self.types = TypeRegistry()
        self.schemas = SchemaRegistry()
        self.attributes = KEYWORD_VALIDATORS
        self._keywords = frozenset(keyword for keyword, _ in KEYWORD_VALIDATORS)

    def add_format(self, name: str, handler: Union[str, FormatHandler]) -> None:
        self.formats.add_format(name, handler)

    def add_type(self, name: str, predicate: TypePredicate) -> None:
        self.types.add_type(name, predicate)

    def add_schema(self, schema: Mapping[str, Any], uri: Optional[str] = None) -> str:
        return self.schemas.add_schema(schema, uri)

    def validate(self, instance: Any, schema: Any,
                 options: Union[ValidatorOptions, Mapping[str, Any], None] = None,
                 context: Union[SchemaContext, Mapping[str, Any], None] = None) -> ValidationResult:
        """Validates an instance against a schema.

        Args:
            instance: The value to validate; UNDEFINED stands for an absent value
            schema: The schema document
            options: Flags for this call, defaulting to the validator's options
            context: A SchemaContext or a mapping with a ``property_path``
                (or ``propertyPath``) to start from

        Returns:
            ValidationResult with every error found

        Raises:
            SchemaError: If the schema is malformed
            ValidationError: If ``throw_error`` is set and the instance is invalid
        """
        opts = self.options if options is None else ValidatorOptions.coerce(options)
        ctx = self._root_context(schema, opts, context)
        result = self.validate_schema(instance, schema, ctx)
        if opts.throw_error and result.errors:
            raise result.errors[0]
        return result

    def _root_context(self, schema: Any, opts: ValidatorOptions,
                      context: Union[SchemaContext, Mapping[str, Any], None]) -> SchemaContext:
        if isinstance(context, SchemaContext):
            if context.options is not None:
                return context
            return SchemaContext(context.schema, opts, context.property_path, context.visited,
                                 context.base_uri, context.root)
        property_path = opts.property_name
        if isinstance(context, Mapping):
            property_path = context.get('property_path', context.get('propertyPath', property_path)) or ''
        elif context is not None:
            raise TypeError(f"Context must be a mapping or SchemaContext, got {type(context).__name__}")
        base_uri = opts.base_uri or schema_id(schema) or ''
        return SchemaContext(schema, opts, property_path, base_uri=base_uri)

    def validate_schema(self, instance: Any, schema: Any, ctx: SchemaContext) -> ValidationResult:
        """Applies one schema node to an instance.

        This is the recursive entry point keyword validators call for nested
        schemas.
        """
        if schema is None:
            raise SchemaError("schema is undefined")
        if isinstance(schema, str):
            schema = {'$ref': schema}
        if not isinstance(schema, Mapping):
            raise SchemaError(f"schema must be an object, got {type(schema).__name__}", schema)
        opts = ctx.options if ctx.options is not None else self.options

        if '$ref' in schema:
            target, document_uri, document = self.schemas.resolve(schema['$ref'], ctx.base_uri, ctx.root)
            ref_ctx = ctx.make_child(target, None, instance, base_uri=document_uri or ctx.base_uri, root=document)
            return self.validate_schema(instance, target, ref_ctx)

        result = ValidationResult(instance, schema, ctx)
        if schema.get('required') is True and (instance is UNDEFINED or instance is None):
            result.add_error("is required")
            return result

        defaulted = False
        if instance is UNDEFINED and 'default' in schema and not opts.skip_defaults:
            instance = copy.deepcopy(schema['default'])
            result.instance = instance
            defaulted = True

        if not opts.allow_unknown_attributes:
            for keyword in schema:
                if keyword not in IGNORED_KEYWORDS and keyword not in self._keywords:
                    raise SchemaError(f"Unsupported attribute: {keyword}", schema)

        extends = schema.get('extends')
        if extends is not None:
            for base in (extends if isinstance(extends, list) else [extends]):
                result.import_errors(self.validate_schema(instance, base, ctx.make_child(base, None, instance)))

        for keyword, validate_keyword in self.attributes:
            if keyword in schema and keyword not in opts.skip_attributes:
                result.import_errors(validate_keyword(self, instance, schema, ctx))

        if defaulted and result.errors:
            logger.warning("Default value at '%s' does not conform to its schema", ctx.property_path or '<root>')
        return result

    def test_type(self, instance: Any, type_spec: Any, ctx: SchemaContext) -> bool:
        """Tests an instance against a type name or a schema used as a type."""
        if isinstance(type_spec, Mapping):
            return self.validate_schema(instance, type_spec, ctx.make_child(type_spec, None, instance)).valid
        if isinstance(type_spec, str):
            return self.types.test_type(instance, type_spec)
        return True


_default_validator: Optional[Validator] = None


def get_default_validator() -> Validator:
    """Returns the validator backing the module-level functions."""
    global _default_validator
    if _default_validator is None:
        _default_validator = Validator()
    return _default_validator


def validate(instance: Any, schema: Any,
             options: Union[ValidatorOptions, Mapping[str, Any], None] = None,
             context: Union[SchemaContext, Mapping[str, Any], None] = None) -> ValidationResult:
    """Validates an instance with the default validator. See Validator.validate."""
    return get_default_validator().validate(instance, schema, options, context)


def add_format(name: str, handler: Union[str, FormatHandler, Callable[[str], Any]]) -> None:
    """Registers a format on the default validator."""
    get_default_validator().add_format(name, handler)


def add_type(name: str, predicate: TypePredicate) -> None:
    """Registers a custom type on the default validator."""
    get_default_validator().add_type(name, predicate)

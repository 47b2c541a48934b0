"""Validation context, results and errors shared by the validator modules."""

import json
import re
from typing import Any, List, Mapping, Optional, Tuple, Union
from urllib.parse import urljoin

from jsonvalidator.constants import SUBSCHEMA_LABEL
from jsonvalidator.typeregistry import UNDEFINED

_IDENTIFIER = re.compile(r'^[A-Za-z_$][A-Za-z0-9_$]*$')


class JsonValidatorError(Exception):
    """Base class for errors raised by jsonvalidator."""


class SchemaError(JsonValidatorError):
    """Raised when a schema document is malformed.

    This signals a defect in the schema, not in the instance being validated,
    and is never collected into a ValidationResult.
    """

    def __init__(self, message: str, schema: Any = None):
        self.message = message
        self.schema = schema
        super().__init__(message)


class ValidationError(JsonValidatorError):
    """A single constraint violation found in an instance."""

    def __init__(self, message: str, property_path: str = '', schema: Any = None, instance: Any = UNDEFINED):
        self.message = message
        self.property = property_path
        self.schema = schema
        self.instance = instance
        self.nested_errors: List[ValidationError] = []
        super().__init__(self.stack)

    @property
    def stack(self) -> str:
        if self.property:
            return f"{self.property} {self.message}"
        return self.message

    def to_dict(self) -> dict:
        return {'property': self.property, 'message': self.message}

    def __repr__(self) -> str:
        return f"ValidationError(property={self.property!r}, message={self.message!r})"


def join_path(path: str, name: Union[str, int]) -> str:
    """Extends a property path by a key or an array index."""
    if isinstance(name, int):
        return f"{path}[{name}]"
    if not _IDENTIFIER.match(name):
        return f"{path}[{json.dumps(name)}]"
    return f"{path}.{name}" if path else name


class SchemaContext:
    """Immutable position of one validation step.

    Attributes:
        schema: The schema node being applied at this step
        options: The ValidatorOptions of the current call
        property_path: Dot/bracket path of the instance being checked
        visited: (schema, instance) identity pairs on the current branch
        base_uri: URI that relative $ref values resolve against
        root: Document that fragment-only $ref values resolve against
    """

    __slots__ = ('schema', 'options', 'property_path', 'visited', 'base_uri', 'root')

    def __init__(self, schema: Any, options: Any = None, property_path: str = '',
                 visited: Tuple[Tuple[int, int], ...] = (), base_uri: str = '', root: Any = None):
        object.__setattr__(self, 'schema', schema)
        object.__setattr__(self, 'options', options)
        object.__setattr__(self, 'property_path', property_path)
        object.__setattr__(self, 'visited', visited)
        object.__setattr__(self, 'base_uri', base_uri)
        object.__setattr__(self, 'root', schema if root is None else root)

    def __setattr__(self, name, value):
        raise AttributeError('SchemaContext is immutable')

    def make_child(self, schema: Any, property_name: Optional[Union[str, int]] = None,
                   instance: Any = UNDEFINED, base_uri: Optional[str] = None,
                   root: Any = None) -> 'SchemaContext':
        """Returns a context one step deeper, leaving this one untouched."""
        path = self.property_path if property_name is None else join_path(self.property_path, property_name)
        if base_uri is None:
            base_uri = self.base_uri
            if isinstance(schema, Mapping):
                schema_id = schema.get('$id', schema.get('id'))
                if isinstance(schema_id, str) and schema_id:
                    base_uri = urljoin(base_uri, schema_id) if base_uri else schema_id
        visited = self.visited + ((id(schema), id(instance)),)
        return SchemaContext(schema, self.options, path, visited, base_uri,
                             self.root if root is None else root)

    def __repr__(self) -> str:
        return f"SchemaContext(property_path={self.property_path!r})"


class ValidationResult:
    """Errors found while validating one instance against one schema node."""

    def __init__(self, instance: Any, schema: Any, ctx: Optional[SchemaContext] = None):
        self.instance = instance
        self.schema = schema
        self.ctx = ctx if ctx is not None else SchemaContext(schema)
        self.property_path = self.ctx.property_path
        self.errors: List[ValidationError] = []

    @property
    def valid(self) -> bool:
        return not self.errors

    def add_error(self, message: str, property_path: Optional[str] = None) -> ValidationError:
        error = ValidationError(
            message,
            self.property_path if property_path is None else property_path,
            self.schema,
            self.instance,
        )
        self.errors.append(error)
        return error

    def import_errors(self, other: 'ValidationResult') -> None:
        """Appends the errors of another result without re-wrapping them."""
        if other is not None:
            self.errors.extend(other.errors)

    def summary(self) -> str:
        """Renders the result as human readable text."""
        if self.valid:
            return "✓ Valid"
        lines = [f"✗ Invalid: {len(self.errors)} error(s)"]
        for i, error in enumerate(self.errors):
            lines.append(f"  {i}: {error.stack}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        return f"ValidationResult(valid={self.valid}, errors={self.errors})"


def deep_equal(left: Any, right: Any) -> bool:
    """Strict structural equality for JSON-like values.

    Booleans never equal numbers, integers equal floats of the same value,
    mappings compare by key set regardless of order, sequences compare
    element-wise.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if set(left.keys()) != set(right.keys()):
            return False
        return all(deep_equal(left[key], right[key]) for key in left)
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        if len(left) != len(right):
            return False
        return all(deep_equal(a, b) for a, b in zip(left, right))
    if type(left) is not type(right):
        return False
    return left == right


def to_text(value: Any) -> str:
    """Stringifies an instance the way JSON would print a scalar."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None:
        return 'null'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple, Mapping)):
        return json.dumps(value, separators=(',', ':'), default=str)
    return str(value)


def join_values(values: Any) -> str:
    """Renders a list of values for an error message, comma separated."""
    return ','.join(to_text(value) for value in values)


def schema_label(schema: Any, fallback: str = SUBSCHEMA_LABEL) -> str:
    """Names a subschema for messages: its id, title, $ref, or the fallback."""
    if isinstance(schema, Mapping):
        schema_id = schema.get('id') or schema.get('$id')
        if schema_id:
            return f"<{schema_id}>"
        if schema.get('title'):
            return json.dumps(schema['title'])
        if schema.get('$ref'):
            return f"<{schema['$ref']}>"
    return fallback


def describe_type(type_spec: Any) -> str:
    """Names a member of a ``type`` or ``disallow`` keyword."""
    if isinstance(type_spec, str):
        return type_spec
    return schema_label(type_spec)

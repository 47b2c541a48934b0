"""Keyword validators.

Every validator has the signature ``(validator, instance, schema, ctx)`` and
returns a ValidationResult, empty when the keyword is satisfied. ``validator``
is the orchestrating Validator, used to recurse into nested schemas and to
reach the type and format registries. A validator never raises for bad data;
it raises SchemaError only when the schema itself is malformed.

Apart from ``required``, no keyword constrains an absent (UNDEFINED) value.
"""

import copy
import re
from collections.abc import MutableMapping, MutableSequence
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Mapping, Tuple

from jsonvalidator.constants import KEYWORD_ORDER
from jsonvalidator.helpers import (SchemaContext, SchemaError, ValidationResult, deep_equal, describe_type,
                                   join_path, join_values, schema_label, to_text)
from jsonvalidator.typeregistry import UNDEFINED, is_array, is_number, is_object

KeywordValidator = Callable[[Any, Any, Mapping[str, Any], SchemaContext], ValidationResult]


def _is_absent(value: Any) -> bool:
    return value is UNDEFINED or value is None


def _is_blank(value: Any, schema: Mapping[str, Any]) -> bool:
    """Absent, null, or an empty string that is not required."""
    return _is_absent(value) or (value == '' and isinstance(value, str) and not schema.get('required'))


def _store(container: Any, key: Any, old: Any, new: Any) -> None:
    """Writes a defaulted value back into its parent container."""
    if new is old or new is UNDEFINED:
        return
    if isinstance(container, (MutableMapping, MutableSequence)):
        container[key] = new


def _number(schema: Mapping[str, Any], keyword: str) -> Any:
    """Reads a numeric keyword argument, accepting numeric strings."""
    value = schema[keyword]
    if is_number(value):
        return value
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            pass
        else:
            return int(number) if number.is_integer() else number
    raise SchemaError(f"{keyword} must be a number", schema)


def _list_keyword(schema: Mapping[str, Any], keyword: str) -> list:
    members = schema[keyword]
    if not isinstance(members, (list, tuple)) or not members:
        raise SchemaError(f"{keyword} must be a non-empty array", schema)
    return list(members)


def validate_type(validator, instance, schema, ctx):
    result = ValidationResult(instance, schema, ctx)
    if instance is UNDEFINED:
        return result
    types = schema['type'] if isinstance(schema['type'], list) else [schema['type']]
    if not any(validator.test_type(instance, type_spec, ctx) for type_spec in types):
        names = ','.join(describe_type(type_spec) for type_spec in types)
        result.add_error(("is not a " if len(types) == 1 else "is none of ") + names)
    return result


def validate_not(validator, instance, schema, ctx, keyword='not'):
    """Fails when the instance matches a prohibited type or schema."""
    result = ValidationResult(instance, schema, ctx)
    if instance is UNDEFINED:
        return result
    prohibited = schema.get(keyword)
    if prohibited is None:
        return result
    if not isinstance(prohibited, list):
        prohibited = [prohibited]
    for type_spec in prohibited:
        if not validator.test_type(instance, type_spec, ctx):
            continue
        if isinstance(type_spec, Mapping) and isinstance(type_spec.get('required'), list):
            for name in type_spec['required']:
                result.add_error('can not be present', join_path(ctx.property_path, name))
        else:
            result.add_error("is of prohibited type " + describe_type(type_spec))
    return result


def validate_disallow(validator, instance, schema, ctx):
    return validate_not(validator, instance, schema, ctx, keyword='disallow')


def validate_enum(validator, instance, schema, ctx):
    if not isinstance(schema['enum'], (list, tuple)):
        raise SchemaError("enum expects an array", schema)
    result = ValidationResult(instance, schema, ctx)
    if _is_blank(instance, schema):
        return result
    if not any(deep_equal(instance, value) for value in schema['enum']):
        result.add_error("is not one of enum values: " + join_values(schema['enum']))
    return result


def validate_properties(validator, instance, schema, ctx):
    result = ValidationResult(instance, schema, ctx)
    if not is_object(instance):
        return result
    properties = schema.get('properties') or {}
    for name, subschema in properties.items():
        value = instance.get(name, UNDEFINED)
        child = validator.validate_schema(value, subschema, ctx.make_child(subschema, name, value))
        _store(instance, name, value, child.instance)
        result.import_errors(child)
    return result


def _test_additional_property(validator, instance, schema, ctx, name, result):
    """Checks one key that no properties entry or pattern claimed."""
    properties = schema.get('properties') or {}
    if name in properties:
        return
    additional = schema.get('additionalProperties', {})
    if additional is False:
        result.add_error("does not exist in the schema", join_path(ctx.property_path, name))
        return
    if not isinstance(additional, Mapping):
        additional = {}
    value = instance[name]
    child = validator.validate_schema(value, additional, ctx.make_child(additional, name, value))
    _store(instance, name, value, child.instance)
    result.import_errors(child)


def validate_pattern_properties(validator, instance, schema, ctx):
    result = ValidationResult(instance, schema, ctx)
    if not is_object(instance):
        return result
    patterns = schema.get('patternProperties') or {}
    for name in list(instance.keys()):
        matched = False
        for pattern, subschema in patterns.items():
            if not re.search(pattern, name):
                continue
            matched = True
            value = instance[name]
            child = validator.validate_schema(value, subschema, ctx.make_child(subschema, name, value))
            _store(instance, name, value, child.instance)
            result.import_errors(child)
        if not matched:
            _test_additional_property(validator, instance, schema, ctx, name, result)
    return result


def validate_additional_properties(validator, instance, schema, ctx):
    result = ValidationResult(instance, schema, ctx)
    if not is_object(instance):
        return result
    # patternProperties runs the additional property test for unmatched keys
    if 'patternProperties' in schema:
        return result
    for name in list(instance.keys()):
        _test_additional_property(validator, instance, schema, ctx, name, result)
    return result


def validate_required(validator, instance, schema, ctx):
    result = ValidationResult(instance, schema, ctx)
    required = schema['required']
    if required is True and _is_absent(instance):
        result.add_error("is required")
    elif isinstance(required, list) and is_object(instance):
        for name in required:
            if _is_absent(instance.get(name, UNDEFINED)):
                result.add_error("is required", join_path(ctx.property_path, name))
    return result


def validate_dependencies(validator, instance, schema, ctx):
    """Checks property and schema dependencies of an object instance.

    A schema dependency is validated against the whole instance; its errors are
    kept at their own paths and preceded by one summary error.
    """
    result = ValidationResult(instance, schema, ctx)
    if not is_object(instance):
        return result
    for name, dependency in (schema.get('dependencies') or {}).items():
        if instance.get(name, UNDEFINED) is UNDEFINED:
            continue
        required_by = join_path(ctx.property_path, name)
        if isinstance(dependency, str):
            dependency = [dependency]
        if isinstance(dependency, (list, tuple)):
            for prop in dependency:
                if instance.get(prop, UNDEFINED) is UNDEFINED:
                    result.add_error(f"property {prop} not found, required by {required_by}")
            continue
        child = validator.validate_schema(instance, dependency, ctx.make_child(dependency, None, instance))
        if not child.valid:
            error = result.add_error(f"does not meet dependency required by {required_by}")
            error.nested_errors = list(child.errors)
            result.import_errors(child)
    return result


def validate_min_properties(validator, instance, schema, ctx):
    result = ValidationResult(instance, schema, ctx)
    if is_object(instance) and not len(instance) >= _number(schema, 'minProperties'):
        result.add_error(f"does not meet minimum property length of {to_text(schema['minProperties'])}")
    return result


def validate_max_properties(validator, instance, schema, ctx):
    result = ValidationResult(instance, schema, ctx)
    if is_object(instance) and not len(instance) <= _number(schema, 'maxProperties'):
        result.add_error(f"does not meet maximum property length of {to_text(schema['maxProperties'])}")
    return result


def validate_items(validator, instance, schema, ctx):
    """Validates array elements against ``items`` and ``additionalItems``.

    With positional items, the first element beyond them that
    ``additionalItems: false`` forbids ends the scan.
    """
    result = ValidationResult(instance, schema, ctx)
    items = schema.get('items')
    if not is_array(instance) or items is None or isinstance(items, bool):
        return result
    for index, value in enumerate(instance):
        if isinstance(items, (list, tuple)):
            subschema = items[index] if index < len(items) else schema.get('additionalItems', UNDEFINED)
        else:
            subschema = items
        if subschema is UNDEFINED or subschema is True or subschema is None:
            continue
        if subschema is False:
            result.add_error("additionalItems not permitted")
            break
        child = validator.validate_schema(value, subschema, ctx.make_child(subschema, index, value))
        _store(instance, index, value, child.instance)
        result.import_errors(child)
    return result


def validate_min_items(validator, instance, schema, ctx):
    result = ValidationResult(instance, schema, ctx)
    if is_array(instance) and not len(instance) >= _number(schema, 'minItems'):
        result.add_error(f"must contain at least {to_text(schema['minItems'])}")
    return result


def validate_max_items(validator, instance, schema, ctx):
    result = ValidationResult(instance, schema, ctx)
    if is_array(instance) and not len(instance) <= _number(schema, 'maxItems'):
        result.add_error(f"does not meet maximum length of {to_text(schema['maxItems'])}")
    return result


def validate_unique_items(validator, instance, schema, ctx):
    result = ValidationResult(instance, schema, ctx)
    if not schema.get('uniqueItems') or not is_array(instance):
        return result
    for i, value in enumerate(instance):
        if any(deep_equal(value, other) for other in instance[i + 1:]):
            result.add_error("contains duplicate item")
            break
    return result


def validate_minimum(validator, instance, schema, ctx):
    result = ValidationResult(instance, schema, ctx)
    if not is_number(instance):
        return result
    minimum = _number(schema, 'minimum')
    if schema.get('exclusiveMinimum') is True:
        valid = instance > minimum
    else:
        valid = instance >= minimum
    if not valid:
        result.add_error(f"must have a minimum value of {to_text(schema['minimum'])}")
    return result


def validate_maximum(validator, instance, schema, ctx):
    result = ValidationResult(instance, schema, ctx)
    if not is_number(instance):
        return result
    maximum = _number(schema, 'maximum')
    if schema.get('exclusiveMaximum') is True:
        valid = instance < maximum
    else:
        valid = instance <= maximum
    if not valid:
        result.add_error(f"must have a maximum value of {to_text(schema['maximum'])}")
    return result


def _is_multiple(instance, divisor) -> bool:
    if isinstance(instance, int) and isinstance(divisor, int):
        return instance % divisor == 0
    # decimal arithmetic keeps 0.3 / 0.1 exact
    try:
        return Decimal(str(instance)) % Decimal(str(divisor)) == 0
    except InvalidOperation:
        return (instance / divisor).is_integer()


def validate_multiple_of(validator, instance, schema, ctx, keyword='multipleOf'):
    divisor = _number(schema, keyword)
    if divisor == 0:
        raise SchemaError(f"{keyword} cannot be zero", schema)
    result = ValidationResult(instance, schema, ctx)
    if is_number(instance) and not _is_multiple(instance, divisor):
        result.add_error(f"is not a multiple of (divisible by) {to_text(schema[keyword])}")
    return result


def validate_divisible_by(validator, instance, schema, ctx):
    return validate_multiple_of(validator, instance, schema, ctx, keyword='divisibleBy')


def validate_min_length(validator, instance, schema, ctx):
    result = ValidationResult(instance, schema, ctx)
    if isinstance(instance, str) and not len(instance) >= _number(schema, 'minLength'):
        result.add_error(f"does not meet minimum length of {to_text(schema['minLength'])}")
    return result


def validate_max_length(validator, instance, schema, ctx):
    result = ValidationResult(instance, schema, ctx)
    if isinstance(instance, str) and not len(instance) <= _number(schema, 'maxLength'):
        result.add_error(f"does not meet maximum length of {to_text(schema['maxLength'])}")
    return result


def validate_pattern(validator, instance, schema, ctx):
    result = ValidationResult(instance, schema, ctx)
    if _is_blank(instance, schema) or is_object(instance) or is_array(instance):
        return result
    pattern = schema['pattern']
    try:
        regex = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)
    except (re.error, TypeError) as e:
        raise SchemaError(f"pattern is not a valid regular expression: {pattern}", schema) from e
    if not regex.search(to_text(instance)):
        result.add_error(f"does not match pattern {regex.pattern}")
    return result


def validate_format(validator, instance, schema, ctx):
    """Checks the stringified instance against a registered format."""
    name = schema['format']
    if not validator.formats.has_format(name):
        raise SchemaError(f"Unknown format '{name}'", schema)
    result = ValidationResult(instance, schema, ctx)
    if _is_blank(instance, schema) or is_object(instance) or is_array(instance):
        return result
    outcome = validator.formats.is_format(to_text(instance), name)
    if outcome is True:
        return result
    message = f"does not conform to the '{name}' format"
    if isinstance(outcome, re.Pattern):
        message += f", based on pattern: /{outcome.pattern}/"
    elif isinstance(outcome, str):
        message = outcome
    result.add_error(message)
    return result


def validate_all_of(validator, instance, schema, ctx):
    members = _list_keyword(schema, 'allOf')
    result = ValidationResult(instance, schema, ctx)
    if instance is UNDEFINED:
        return result
    for member in members:
        child = validator.validate_schema(instance, member, ctx.make_child(member, None, instance))
        if child.valid:
            continue
        error = result.add_error(
            f"does not match allOf schema {schema_label(member)} with {len(child.errors)} error[s]:")
        error.nested_errors = list(child.errors)
        result.import_errors(child)
    return result


def validate_any_of(validator, instance, schema, ctx):
    members = _list_keyword(schema, 'anyOf')
    result = ValidationResult(instance, schema, ctx)
    if instance is UNDEFINED:
        return result
    errors = []
    for member in members:
        child = validator.validate_schema(instance, member, ctx.make_child(member, None, instance))
        if child.valid:
            return result
        errors.extend(child.errors)
    result.errors.extend(errors)
    return result


def _remove_not(schema: Any) -> bool:
    """Strips the first ``not`` found in a schema, hoisting its keywords.

    Works in place, so callers pass a copy. Returns True if a ``not`` was
    removed.
    """
    if isinstance(schema, MutableMapping):
        if 'not' in schema:
            negated = schema.pop('not')
            if isinstance(negated, Mapping):
                schema.update(negated)
            return True
        return any(_remove_not(value) for value in schema.values())
    if isinstance(schema, list):
        return any(_remove_not(value) for value in schema)
    return False


def has_mutually_exclusive_dependencies(members: List[Any]) -> bool:
    """Detects the two-branch "if A then B" / "if A then not B" oneOf shape.

    Both branches must declare dependencies, and every dependency of the first
    branch must match the second's once a single ``not`` is stripped from at
    least one side.
    """
    if len(members) != 2 or not all(isinstance(member, Mapping) for member in members):
        return False
    first = members[0].get('dependencies')
    second = members[1].get('dependencies')
    if not isinstance(first, Mapping) or not isinstance(second, Mapping) or not first or not second:
        return False

    def is_exclusive(name: str) -> bool:
        if not second.get(name):
            return False
        left = copy.deepcopy(first[name])
        right = copy.deepcopy(second[name])
        left_had_not = _remove_not(left)
        right_had_not = _remove_not(right)
        if not left_had_not and not right_had_not:
            return False
        return deep_equal(left, right)

    return all(is_exclusive(name) for name in first)


def has_no_dependencies(members: List[Any]) -> bool:
    return not any(isinstance(member, Mapping) and isinstance(member.get('dependencies'), Mapping)
                   for member in members)


def _is_dependency_error(error) -> bool:
    return 'dependency' in error.message


def validate_one_of(validator, instance, schema, ctx):
    """Requires exactly one branch to match.

    Branch selection depends on the branches' dependencies:
    - two branches whose dependencies are mutually exclusive: a branch failing
      only through its dependency guard does not count against the instance,
      and the last branch failing for another reason is reported;
    - no branch with dependencies: when nothing matches, every branch's errors
      are reported;
    - otherwise branches are simply counted.
    """
    members = _list_keyword(schema, 'oneOf')
    result = ValidationResult(instance, schema, ctx)
    if instance is UNDEFINED:
        return result

    def run(member):
        return validator.validate_schema(instance, member, ctx.make_child(member, None, instance))

    report = None
    valid_count = 0
    if has_mutually_exclusive_dependencies(members):
        for member in members:
            child = run(member)
            if child.valid:
                valid_count += 1
            elif not any(_is_dependency_error(error) for error in child.errors):
                report = child.errors
    elif has_no_dependencies(members):
        children = [run(member) for member in members]
        valid_count = sum(1 for child in children if child.valid)
        if valid_count == 0:
            report = [error for child in children for error in child.errors]
    else:
        valid_count = sum(1 for member in members if run(member).valid)

    if valid_count != 1:
        if report:
            result.errors.extend(report)
        else:
            labels = ','.join(schema_label(member, f"[subschema {i}]") for i, member in enumerate(members))
            result.add_error("is not exactly one from " + labels)
    return result


VALIDATORS: Dict[str, KeywordValidator] = {
    'type': validate_type,
    'disallow': validate_disallow,
    'not': validate_not,
    'enum': validate_enum,
    'properties': validate_properties,
    'patternProperties': validate_pattern_properties,
    'additionalProperties': validate_additional_properties,
    'required': validate_required,
    'dependencies': validate_dependencies,
    'minProperties': validate_min_properties,
    'maxProperties': validate_max_properties,
    'items': validate_items,
    'minItems': validate_min_items,
    'maxItems': validate_max_items,
    'uniqueItems': validate_unique_items,
    'minimum': validate_minimum,
    'maximum': validate_maximum,
    'divisibleBy': validate_divisible_by,
    'multipleOf': validate_multiple_of,
    'minLength': validate_min_length,
    'maxLength': validate_max_length,
    'pattern': validate_pattern,
    'format': validate_format,
    'allOf': validate_all_of,
    'anyOf': validate_any_of,
    'oneOf': validate_one_of,
}

KEYWORD_VALIDATORS: Tuple[Tuple[str, KeywordValidator], ...] = tuple(
    (keyword, VALIDATORS[keyword]) for keyword in KEYWORD_ORDER)

"""Tests for the validator, its options and schema references."""

import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

import jsonvalidator
from jsonvalidator.helpers import SchemaContext, SchemaError, ValidationError, ValidationResult
from jsonvalidator.typeregistry import UNDEFINED
from jsonvalidator.validator import Validator, ValidatorOptions, get_default_validator, validate


class TestValidatorOptions(unittest.TestCase):
    """Test option parsing."""

    def test_defaults(self):
        options = ValidatorOptions.coerce(None)
        self.assertTrue(options.allow_unknown_attributes)
        self.assertFalse(options.skip_defaults)
        self.assertEqual(options.property_name, '')
        self.assertEqual(options.skip_attributes, frozenset())
        self.assertFalse(options.throw_error)

    def test_camel_case_mapping(self):
        options = ValidatorOptions.coerce({'skipDefaults': True, 'propertyName': 'body', 'throwError': True})
        self.assertTrue(options.skip_defaults)
        self.assertEqual(options.property_name, 'body')
        self.assertTrue(options.throw_error)

    def test_unknown_option(self):
        with self.assertRaises(ValueError):
            ValidatorOptions.coerce({'noSuchOption': True})

    def test_invalid_options_type(self):
        with self.assertRaises(TypeError):
            ValidatorOptions.coerce(['skipDefaults'])


class TestValidate(unittest.TestCase):
    """Test the validate entry points."""

    def test_module_level_validate(self):
        result = validate({'a': 1}, {'properties': {'a': {'type': 'string'}}})
        self.assertIsInstance(result, ValidationResult)
        self.assertFalse(result.valid)
        self.assertEqual(result.errors[0].stack, 'a is not a string')

    def test_package_exports(self):
        self.assertIs(jsonvalidator.Validator, Validator)
        self.assertIs(jsonvalidator.UNDEFINED, UNDEFINED)
        self.assertTrue(jsonvalidator.validate(1, {'type': 'number'}).valid)

    def test_default_validator_is_shared(self):
        self.assertIs(get_default_validator(), get_default_validator())

    def test_none_schema_raises(self):
        with self.assertRaises(SchemaError):
            Validator().validate(1, None)

    def test_non_object_schema_raises(self):
        with self.assertRaises(SchemaError):
            Validator().validate(1, 42)

    def test_context_mapping_seeds_path(self):
        schema = {'properties': {'a': {'type': 'string'}}}
        result = Validator().validate({'a': 1}, schema, context={'propertyPath': 'request.body'})
        self.assertEqual(result.errors[0].property, 'request.body.a')

    def test_context_object(self):
        schema = {'type': 'string'}
        ctx = SchemaContext(schema, ValidatorOptions(), 'payload')
        result = Validator().validate(1, schema, context=ctx)
        self.assertEqual(result.errors[0].stack, 'payload is not a string')

    def test_context_without_options_takes_call_options(self):
        schema = {'properties': {'a': {'default': 1}}}
        instance = {}
        ctx = SchemaContext(schema, property_path='payload')
        Validator().validate(instance, schema, {'skipDefaults': True}, context=ctx)
        self.assertEqual(instance, {})
        with self.assertRaises(SchemaError):
            Validator().validate(1, {'x-custom': True}, {'allowUnknownAttributes': False},
                                 context=SchemaContext({'x-custom': True}))

    def test_throw_error(self):
        validator = Validator({'throw_error': True})
        with self.assertRaises(ValidationError) as cm:
            validator.validate({'a': 1}, {'properties': {'a': {'type': 'string'}}})
        self.assertEqual(cm.exception.property, 'a')
        self.assertTrue(validator.validate({'a': 'x'}, {'properties': {'a': {'type': 'string'}}}).valid)

    def test_skip_attributes(self):
        schema = {'type': 'string', 'minLength': 3}
        result = Validator().validate('a', schema, {'skip_attributes': ['minLength']})
        self.assertTrue(result.valid)


class TestUnknownAttributes(unittest.TestCase):
    """Test the allow_unknown_attributes option."""

    def test_allowed_by_default(self):
        self.assertTrue(Validator().validate(1, {'x-custom': True}).valid)

    def test_rejected_when_strict(self):
        with self.assertRaises(SchemaError):
            Validator().validate(1, {'x-custom': True}, {'allowUnknownAttributes': False})

    def test_informative_keywords_accepted_when_strict(self):
        schema = {'title': 'T', 'description': 'D', 'default': 1, 'type': 'number',
                  'minimum': 0, 'exclusiveMinimum': True}
        self.assertTrue(Validator().validate(1, schema, {'allowUnknownAttributes': False}).valid)


class TestDefaults(unittest.TestCase):
    """Test default values and their write-back into instances."""

    SCHEMA = {
        'type': 'object',
        'properties': {
            'name': {'type': 'string', 'default': 'anonymous'},
            'tags': {'type': 'array', 'default': ['a']},
            'nested': {'type': 'object', 'properties': {'level': {'type': 'integer', 'default': 1}}},
        },
    }

    def test_defaults_are_written_back(self):
        instance = {'nested': {}}
        result = Validator().validate(instance, self.SCHEMA)
        self.assertTrue(result.valid)
        self.assertEqual(instance, {'nested': {'level': 1}, 'name': 'anonymous', 'tags': ['a']})

    def test_defaults_are_copied(self):
        instance = {}
        Validator().validate(instance, self.SCHEMA)
        instance['tags'].append('b')
        self.assertEqual(self.SCHEMA['properties']['tags']['default'], ['a'])

    def test_present_values_are_kept(self):
        instance = {'name': 'x'}
        Validator().validate(instance, self.SCHEMA)
        self.assertEqual(instance['name'], 'x')

    def test_skip_defaults(self):
        instance = {}
        Validator().validate(instance, self.SCHEMA, {'skipDefaults': True})
        self.assertEqual(instance, {})

    def test_array_defaults(self):
        schema = {'items': [{'type': 'string'}, {'type': 'number', 'default': 0}]}
        instance = ['a', UNDEFINED]
        self.assertTrue(Validator().validate(instance, schema).valid)
        self.assertEqual(instance, ['a', 0])

    def test_defaults_conform_to_their_schema(self):
        schemas = [
            {'type': 'string', 'default': 'abc', 'minLength': 2},
            {'type': 'number', 'default': 5, 'minimum': 1, 'maximum': 10},
            {'enum': ['a', 'b'], 'default': 'b'},
            {'type': 'array', 'default': [1, 2], 'uniqueItems': True, 'items': {'type': 'integer'}},
            {'type': 'object', 'default': {'a': 1}, 'required': ['a']},
        ]
        for schema in schemas:
            self.assertTrue(Validator().validate(schema['default'], schema).valid, schema)
            self.assertTrue(Validator().validate(UNDEFINED, schema).valid, schema)

    def test_invalid_default_is_logged(self):
        with self.assertLogs('jsonvalidator.validator', level='WARNING'):
            result = Validator().validate({}, {'properties': {'a': {'type': 'string', 'default': 1}}})
        self.assertFalse(result.valid)


class TestReferences(unittest.TestCase):
    """Test $ref, string schemas and extends."""

    def test_local_definitions(self):
        schema = {
            'definitions': {'name': {'type': 'string'}},
            'properties': {'first': {'$ref': '#/definitions/name'}},
        }
        validator = Validator()
        self.assertTrue(validator.validate({'first': 'a'}, schema).valid)
        result = validator.validate({'first': 1}, schema)
        self.assertEqual(result.errors[0].stack, 'first is not a string')

    def test_recursive_reference(self):
        schema = {
            'type': 'object',
            'properties': {'child': {'$ref': '#'}, 'value': {'type': 'number'}},
        }
        result = Validator().validate({'child': {'child': {'value': 'x'}}}, schema)
        self.assertEqual(result.errors[0].property, 'child.child.value')

    def test_registered_schema(self):
        validator = Validator()
        validator.add_schema({'id': 'http://example.com/address', 'type': 'object', 'required': ['city']})
        schema = {'properties': {'home': {'$ref': 'http://example.com/address'}}}
        self.assertErrors(validator, {'home': {}}, schema, [('home.city', 'is required')])

    def test_string_schema_is_reference(self):
        validator = Validator()
        validator.add_schema({'type': 'string'}, 'urn:string')
        self.assertTrue(validator.validate('a', 'urn:string').valid)
        self.assertFalse(validator.validate([1], {'items': 'urn:string'}).valid)

    def test_relative_reference_uses_id(self):
        validator = Validator()
        validator.add_schema({'id': 'http://example.com/schemas/name', 'type': 'string'})
        schema = {'id': 'http://example.com/schemas/person', 'properties': {'name': {'$ref': 'name'}}}
        self.assertFalse(validator.validate({'name': 1}, schema).valid)

    def test_unresolvable_reference(self):
        with self.assertRaises(SchemaError):
            Validator().validate(1, {'$ref': '#/definitions/missing'})
        with self.assertRaises(SchemaError):
            Validator().validate(1, {'$ref': 'http://example.com/missing'})

    def test_extends(self):
        base = {'properties': {'id': {'type': 'integer', 'required': True}}}
        schema = {'extends': base, 'properties': {'name': {'type': 'string'}}}
        validator = Validator()
        self.assertTrue(validator.validate({'id': 1, 'name': 'a'}, schema).valid)
        self.assertErrors(validator, {'name': 'a'}, schema, [('id', 'is required')])
        self.assertErrors(validator, {'id': 1, 'name': 1}, {'extends': [base, schema]}, [('name', 'is not a string')])

    def assertErrors(self, validator, instance, schema, expected):
        result = validator.validate(instance, schema)
        self.assertEqual([(e.property, e.message) for e in result.errors], expected)


if __name__ == '__main__':
    unittest.main()

"""Tests for the schema registry."""

import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from jsonvalidator.helpers import SchemaError
from jsonvalidator.resolver import SchemaRegistry, schema_id


class TestSchemaId(unittest.TestCase):
    """Test id lookup."""

    def test_ids(self):
        self.assertEqual(schema_id({'$id': 'urn:a'}), 'urn:a')
        self.assertEqual(schema_id({'id': 'urn:b'}), 'urn:b')
        self.assertIsNone(schema_id({'id': ''}))
        self.assertIsNone(schema_id('urn:c'))


class TestSchemaRegistry(unittest.TestCase):
    """Test registration and $ref resolution."""

    DOCUMENT = {
        'id': 'http://example.com/root.json',
        'definitions': {
            'name': {'type': 'string'},
            'with~tilde': {'type': 'number'},
            'address': {'id': 'address.json', 'type': 'object'},
        },
        'enum': [{'id': 'http://example.com/not-a-schema'}],
    }

    def setUp(self):
        self.registry = SchemaRegistry()
        self.uri = self.registry.add_schema(self.DOCUMENT)

    def test_registers_under_id(self):
        self.assertEqual(self.uri, 'http://example.com/root.json')
        self.assertIs(self.registry.get_schema('http://example.com/root.json#'), self.DOCUMENT)

    def test_indexes_nested_ids(self):
        self.assertIs(self.registry.get_schema('http://example.com/address.json'),
                      self.DOCUMENT['definitions']['address'])

    def test_skips_enum_values(self):
        self.assertIsNone(self.registry.get_schema('http://example.com/not-a-schema'))

    def test_resolve_pointer(self):
        target, document_uri, document = self.registry.resolve('#/definitions/name', 'http://example.com/root.json')
        self.assertEqual(target, {'type': 'string'})
        self.assertEqual(document_uri, 'http://example.com/root.json')
        self.assertIs(document, self.DOCUMENT)

    def test_resolve_escaped_pointer(self):
        target, _, _ = self.registry.resolve('root.json#/definitions/with~0tilde', 'http://example.com/other.json')
        self.assertEqual(target, {'type': 'number'})

    def test_resolve_against_unregistered_root(self):
        root = {'definitions': {'a': {'type': 'null'}}}
        target, _, document = self.registry.resolve('#/definitions/a', '', root)
        self.assertEqual(target, {'type': 'null'})
        self.assertIs(document, root)

    def test_unknown_document(self):
        with self.assertRaises(SchemaError):
            self.registry.resolve('http://example.com/missing.json#/a')

    def test_unknown_fragment(self):
        with self.assertRaises(SchemaError):
            self.registry.resolve('#/definitions/missing', 'http://example.com/root.json')

    def test_add_schema_requires_uri(self):
        with self.assertRaises(SchemaError):
            self.registry.add_schema({'type': 'string'})


if __name__ == '__main__':
    unittest.main()

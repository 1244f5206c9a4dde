"""Tests for request/response modes, sparse validation, defaults and empty values."""

import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from schemacoerce.exceptions import ValidationError
from schemacoerce.reflookup import ArrayRefLookup
from schemacoerce.schema import Schema

USER_SCHEMA = {
    'type': 'object',
    'properties': {
        'id': {'type': 'integer', 'readOnly': True},
        'name': {'type': 'string'},
        'password': {'type': 'string', 'writeOnly': True},
    },
    'required': ['id', 'name', 'password'],
}


class TestReadWriteModes(unittest.TestCase):
    """Test readOnly and writeOnly properties."""

    def setUp(self):
        self.schema = Schema(USER_SCHEMA)

    def test_default_mode(self):
        data = {'id': 1, 'name': 'Frank', 'password': 'secret'}
        self.assertEqual(self.schema.validate(data), data)
        with self.assertRaisesRegex(ValidationError, 'id: id is required.'):
            self.schema.validate({'name': 'Frank', 'password': 'secret'})

    def test_request(self):
        """Test that readOnly properties are dropped and never required in a request."""
        options = {'request': True, 'extraProperties': 'fail'}
        self.assertEqual(self.schema.validate({'name': 'Frank', 'password': 'secret'}, options),
                         {'name': 'Frank', 'password': 'secret'})
        self.assertEqual(self.schema.validate({'id': 1, 'name': 'Frank', 'password': 'secret'}, options),
                         {'name': 'Frank', 'password': 'secret'})

    def test_response(self):
        options = {'response': True, 'extraProperties': 'fail'}
        self.assertEqual(self.schema.validate({'id': '1', 'name': 'Frank', 'password': 'secret'}, options),
                         {'id': 1, 'name': 'Frank'})
        self.assertFalse(self.schema.is_valid({'name': 'Frank'}, options))

    def test_read_only_through_ref(self):
        document = {'components': {'schemas': {'Id': {'type': 'integer', 'readOnly': True}}}}
        schema = Schema({
            'type': 'object',
            'properties': {'id': {'$ref': '#/components/schemas/Id'}, 'name': {'type': 'string'}},
            'required': ['id'],
        }, ArrayRefLookup(document))
        self.assertEqual(schema.validate({'id': 1, 'name': 'x'}, {'request': True}), {'name': 'x'})


class TestSparse(unittest.TestCase):
    """Test sparse validation."""

    def test_no_missing_errors_and_no_defaults(self):
        schema = Schema({
            'type': 'object',
            'properties': {
                'id': {'type': 'integer'},
                'status': {'type': 'string', 'default': 'new'},
            },
            'required': ['id'],
        })
        self.assertEqual(schema.validate({}, True), {})
        self.assertEqual(schema.validate({'id': '2'}, {'sparse': True}), {'id': 2})
        self.assertEqual(schema.validate({'id': 2}), {'id': 2, 'status': 'new'})

    def test_values_are_still_checked(self):
        schema = Schema({'type': 'object', 'properties': {'id': {'type': 'integer'}}, 'required': ['id']})
        self.assertFalse(schema.is_valid({'id': 'x'}, True))


class TestDefaults(unittest.TestCase):
    """Test default values of missing properties."""

    def test_default_is_copied(self):
        schema = Schema({'type': 'object', 'properties': {'tags': {'type': 'array', 'default': []}}})
        first = schema.validate({})
        first['tags'].append('x')
        self.assertEqual(schema.validate({}), {'tags': []})

    def test_default_satisfies_required(self):
        schema = Schema({
            'type': 'object',
            'properties': {'count': {'type': 'integer', 'default': 0}},
            'required': ['count'],
        })
        self.assertEqual(schema.validate({}), {'count': 0})

    def test_default_through_ref(self):
        document = {'components': {'schemas': {'Flag': {'type': 'boolean', 'default': True}}}}
        schema = Schema({'type': 'object', 'properties': {'flag': {'$ref': '#/components/schemas/Flag'}}},
                        ArrayRefLookup(document))
        self.assertEqual(schema.validate({}), {'flag': True})


class TestEmptyValues(unittest.TestCase):
    """Test null and empty string property values."""

    def setUp(self):
        self.schema = Schema({
            'type': 'object',
            'properties': {
                'count': {'type': 'integer'},
                'label': {'type': 'string'},
                'note': {'type': 'string', 'nullable': True},
                'size': {'type': 'integer', 'nullable': True},
                'name': {'type': 'string'},
                'age': {'type': 'integer'},
            },
            'required': ['name', 'age'],
        })

    def test_optional_empty_values_are_dropped(self):
        valid = self.schema.validate({'count': None, 'label': None, 'name': 'x', 'age': 1})
        self.assertEqual(valid, {'name': 'x', 'age': 1})
        valid = self.schema.validate({'count': '', 'name': 'x', 'age': 1})
        self.assertEqual(valid, {'name': 'x', 'age': 1})

    def test_optional_empty_string_is_kept_for_strings(self):
        valid = self.schema.validate({'label': '', 'name': 'x', 'age': 1})
        self.assertEqual(valid, {'label': '', 'name': 'x', 'age': 1})

    def test_nullable_values_are_kept(self):
        valid = self.schema.validate({'note': None, 'size': '', 'name': 'x', 'age': 1})
        self.assertEqual(valid, {'note': None, 'size': None, 'name': 'x', 'age': 1})

    def test_required_null(self):
        with self.assertRaisesRegex(ValidationError, 'name: name cannot be null.'):
            self.schema.validate({'name': None, 'age': 1})

    def test_required_empty_string(self):
        self.assertEqual(self.schema.validate({'name': '', 'age': 1}), {'name': '', 'age': 1})
        with self.assertRaises(ValidationError) as info:
            self.schema.validate({'name': 'x', 'age': ''})
        self.assertEqual(info.exception.validation.get_field_errors('age')[0]['error'], 'type')


class TestFixedPoint(unittest.TestCase):
    """Test that valid data and cleaned output validate to themselves."""

    def test_output_revalidates(self):
        schema = Schema({
            'type': 'object',
            'properties': {
                'id': {'type': 'integer'},
                'price': {'type': 'number'},
                'tags': {'type': 'array', 'items': {'type': 'string'}},
                'active': {'type': 'boolean', 'default': True},
            },
        })
        inputs = [
            {'id': '1', 'price': '2.5', 'tags': [1, 'a']},
            {'id': 2, 'price': 3, 'tags': ()},
            {},
        ]
        for data in inputs:
            with self.subTest(data=data):
                clean = schema.validate(data)
                self.assertEqual(schema.validate(clean), clean)


if __name__ == '__main__':
    unittest.main()

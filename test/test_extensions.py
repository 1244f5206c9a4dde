"""Tests for filters, validators and the INVALID sentinel."""

import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from schemacoerce.common import parse_field_selector
from schemacoerce.exceptions import ValidationError
from schemacoerce.extensions import INVALID, Invalid, is_invalid
from schemacoerce.schema import Schema


def product_schema():
    return Schema({
        'type': 'object',
        'properties': {
            'name': {'type': 'string'},
            'sku': {'type': 'string', 'format': 'sku'},
            'rows': {
                'type': 'array',
                'items': {'type': 'object', 'properties': {'id': {'type': 'integer'}}},
            },
        },
    })


class TestSelectors(unittest.TestCase):
    """Test normalization of extension selectors."""

    def test_parse_field_selector(self):
        grid = [
            ('', ''),
            ('/properties/name', 'properties/name'),
            ('properties/name', 'properties/name'),
            ('name', 'properties/name'),
            ('a.b', 'properties/a/properties/b'),
            ('tags[]', 'properties/tags/items'),
            ('rows[].id', 'properties/rows/items/properties/id'),
            ('[]', 'items'),
            ('items', 'items'),
            ('#/components/schemas/Pet', '#/components/schemas/Pet'),
        ]
        for selector, expected in grid:
            with self.subTest(selector=selector):
                self.assertEqual(parse_field_selector(selector), expected)


class TestInvalidSentinel(unittest.TestCase):
    """Test the INVALID sentinel."""

    def test_singleton(self):
        self.assertIs(Invalid(), INVALID)
        self.assertTrue(is_invalid(INVALID))
        self.assertFalse(is_invalid(None))
        self.assertFalse(is_invalid(False))
        self.assertFalse(INVALID)


class TestFilters(unittest.TestCase):
    """Test filters running before coercion."""

    def test_path_filter(self):
        schema = product_schema().add_filter('properties/name', lambda value, field: value.strip())
        self.assertEqual(schema.validate({'name': '  widget '}), {'name': 'widget'})

    def test_legacy_selector(self):
        schema = product_schema().add_filter('rows[].id', lambda value, field: value * 2)
        self.assertEqual(schema.validate({'rows': [{'id': 1}, {'id': 2}]}), {'rows': [{'id': 2}, {'id': 4}]})

    def test_root_filter(self):
        schema = product_schema().add_filter('', lambda value, field: {'name': value})
        self.assertEqual(schema.validate('widget'), {'name': 'widget'})

    def test_filter_runs_before_coercion(self):
        schema = Schema({'type': 'integer'}).add_filter('', lambda value, field: value.replace(',', ''))
        self.assertEqual(schema.validate('1,000'), 1000)

    def test_filter_returns_invalid(self):
        schema = product_schema().add_filter('name', lambda value, field: INVALID)
        with self.assertRaisesRegex(ValidationError, 'name: name is invalid.'):
            schema.validate({'name': 'widget'})

    def test_validating_filter(self):
        """Test that the output of a validating filter skips the built-in checks."""
        schema = Schema({'type': 'integer', 'minimum': 10})
        schema.add_filter('', lambda value, field: f"#{value}", validate=True)
        self.assertEqual(schema.validate(5), '#5')

    def test_filter_sees_field(self):
        seen = []
        schema = product_schema().add_filter('name', lambda value, field: seen.append(
            (field.get_name(), field.get_schema_path(), field.val('type'))) or value)
        schema.validate({'name': 'x'})
        self.assertEqual(seen, [('name', 'properties/name', 'string')])

    def test_format_filter(self):
        schema = product_schema().add_format_filter('sku', lambda value, field: value.upper())
        self.assertEqual(schema.validate({'sku': 'ab-1'}), {'sku': 'AB-1'})

    def test_filters_are_chained(self):
        schema = product_schema()
        schema.add_filter('name', lambda value, field: value + 'a')
        schema.add_filter('name', lambda value, field: value + 'b')
        self.assertEqual(schema.validate({'name': 'x'}), {'name': 'xab'})


class TestValidators(unittest.TestCase):
    """Test validators running after coercion."""

    def test_validator_sees_coerced_value(self):
        seen = []
        schema = Schema({'type': 'integer'}).add_validator('', lambda value, field: seen.append(value))
        schema.validate('5')
        self.assertEqual(seen, [5])

    def test_validator_returns_false(self):
        schema = product_schema().add_validator('name', lambda value, field: value != 'bad')
        self.assertEqual(schema.validate({'name': 'good'}), {'name': 'good'})
        with self.assertRaises(ValidationError) as info:
            schema.validate({'name': 'bad'})
        self.assertEqual(info.exception.validation.get_field_errors('name')[0]['error'], 'invalid')

    def test_validator_returns_invalid(self):
        schema = product_schema().add_validator('name', lambda value, field: INVALID)
        self.assertFalse(schema.is_valid({'name': 'x'}))

    def test_validator_adds_own_error(self):
        def check(value, field):
            if value.startswith('x'):
                field.add_error('prefix', '{field} cannot start with {prefix}.', prefix='x')

        schema = product_schema().add_validator('name', check)
        with self.assertRaises(ValidationError) as info:
            schema.validate({'name': 'xyz'})
        self.assertEqual(str(info.exception), 'name: name cannot start with x.')
        self.assertEqual(info.exception.code, 400)

    def test_validator_skipped_after_error(self):
        calls = []
        schema = Schema({'type': 'integer'}).add_validator('', lambda value, field: calls.append(value))
        self.assertFalse(schema.is_valid('abc'))
        self.assertEqual(calls, [])

    def test_format_validator(self):
        schema = product_schema().add_format_validator('sku', lambda value, field: '-' in value)
        self.assertTrue(schema.is_valid({'sku': 'ab-1'}))
        self.assertFalse(schema.is_valid({'sku': 'ab1'}))

    def test_validator_exceptions_propagate(self):
        def explode(value, field):
            raise RuntimeError('boom')

        schema = product_schema().add_validator('name', explode)
        with self.assertRaises(RuntimeError):
            schema.validate({'name': 'x'})


class TestRequireOneOf(unittest.TestCase):
    """Test the require_one_of validator."""

    def setUp(self):
        self.schema = Schema({
            'type': 'object',
            'properties': {
                'email': {'type': 'string'},
                'phone': {'type': 'string'},
                'first': {'type': 'string'},
                'last': {'type': 'string'},
            },
        })

    def test_one_of(self):
        self.schema.require_one_of(['email', 'phone'])
        self.assertTrue(self.schema.is_valid({'email': 'a@b.c'}))
        self.assertTrue(self.schema.is_valid({'phone': '123'}))
        with self.assertRaisesRegex(ValidationError, 'One of email, phone are required.'):
            self.schema.validate({'email': ''})

    def test_nested_group(self):
        self.schema.require_one_of([['first', 'last'], 'email'])
        self.assertTrue(self.schema.is_valid({'first': 'a', 'last': 'b'}))
        self.assertTrue(self.schema.is_valid({'email': 'a@b.c'}))
        self.assertFalse(self.schema.is_valid({'first': 'a'}))

    def test_count(self):
        self.schema.require_one_of(['email', 'phone', 'first'], count=2)
        self.assertTrue(self.schema.is_valid({'email': 'a', 'first': 'b'}))
        with self.assertRaisesRegex(ValidationError, '2 of email, phone, first are required.'):
            self.schema.validate({'email': 'a'})

    def test_nested_object(self):
        schema = Schema({
            'type': 'object',
            'properties': {
                'contact': {'type': 'object', 'properties': {'email': {'type': 'string'},
                                                             'phone': {'type': 'string'}}},
            },
        })
        schema.require_one_of(['email', 'phone'], 'contact')
        self.assertTrue(schema.is_valid({'contact': {'phone': '1'}}))
        with self.assertRaises(ValidationError) as info:
            schema.validate({'contact': {}})
        self.assertEqual(info.exception.validation.get_field_errors('contact')[0]['error'], 'missingField')


if __name__ == '__main__':
    unittest.main()

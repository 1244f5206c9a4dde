"""Tests for schemas declaring several types or none."""

import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from schemacoerce.exceptions import ValidationError
from schemacoerce.schema import Schema


class TestMultipleTypes(unittest.TestCase):
    """Test that a value keeps its own kind when declared and otherwise follows the declared order."""

    def assert_grid(self, types, grid):
        schema = Schema({'type': types})
        for value, expected in grid:
            with self.subTest(types=types, value=value):
                actual = schema.validate(value)
                self.assertEqual(actual, expected)
                self.assertIs(type(actual), type(expected))

    def test_integer_string(self):
        self.assert_grid(['integer', 'string'], [
            (12, 12), ('12', '12'), ('abc', 'abc'), (1.5, '1.5'),
        ])

    def test_string_integer(self):
        self.assert_grid(['string', 'integer'], [(12, 12), ('12', '12')])

    def test_boolean_integer(self):
        self.assert_grid(['boolean', 'integer'], [
            (True, True), (5, 5), ('1', True), ('7', 7),
        ])

    def test_integer_prefers_number(self):
        self.assert_grid(['number', 'string'], [(5, 5.0), ('5', '5'), (1.5, 1.5)])

    def test_array_object(self):
        self.assert_grid(['array', 'object'], [([1], [1]), ({'a': 1}, {'a': 1})])

    def test_no_kind_matches(self):
        with self.assertRaisesRegex(ValidationError, 'The value is not a valid integer or string.'):
            Schema({'type': ['integer', 'string']}).validate([1])
        with self.assertRaisesRegex(ValidationError, 'true is not a valid integer or string.'):
            Schema({'type': ['integer', 'string']}).validate(True)

    def test_null_in_types(self):
        schema = Schema({'type': ['integer', 'string', 'null']})
        self.assertIsNone(schema.validate(None))
        self.assertEqual(schema.validate('a'), 'a')


class TestUntyped(unittest.TestCase):
    """Test schemas without a type keyword."""

    def test_any_value(self):
        schema = Schema({})
        for value in (1, 'a', True, None, [1, 'a'], {'a': [1]}):
            with self.subTest(value=value):
                self.assertEqual(schema.validate(value), value)

    def test_constraints_of_the_natural_kind(self):
        schema = Schema({'minimum': 5, 'minLength': 2})
        self.assertTrue(schema.is_valid(6))
        self.assertFalse(schema.is_valid(4))
        self.assertTrue(schema.is_valid('ab'))
        self.assertFalse(schema.is_valid('a'))

    def test_untyped_properties(self):
        schema = Schema({'properties': {'id': {'type': 'integer'}}})
        self.assertEqual(schema.validate({'id': '1', 'x': 1}), {'id': 1})
        self.assertEqual(schema.validate('x'), 'x')

    def test_untyped_items(self):
        schema = Schema({'items': {'type': 'integer'}})
        self.assertEqual(schema.validate(['1']), [1])


if __name__ == '__main__':
    unittest.main()

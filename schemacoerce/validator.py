"""The recursive coercion and validation algorithm.

A SchemaValidator is created for every top-level call. It walks the data and
the schema together, resolving references and composition lazily, coercing
each value to one of its declared kinds, checking constraints and recording
every violation in the call's Validation. It never stops at the first error:
a failing value only stops the descent into its own subtree.
"""

# pylint: disable=too-many-branches, too-many-locals, too-many-statements

import copy
import logging
import re
from collections.abc import Mapping
from decimal import Decimal, localcontext
from typing import Any, Dict, List, Optional, Tuple

from jsonpointer import escape

from schemacoerce.coercion import FAILED, check_format, coerce
from schemacoerce.common import (join_path, join_schema_path, natural_kind,
                                 strict_contains)
from schemacoerce.composition import flatten_all_of, select_discriminated
from schemacoerce.constants import (ARRAY, COERCED_FORMATS,
                                    ERROR_ENUM, ERROR_FORMAT,
                                    ERROR_MAX_BYTE_LENGTH, ERROR_MISSING_FIELD,
                                    ERROR_MAX_ITEMS, ERROR_MAX_LENGTH,
                                    ERROR_MAX_PROPERTIES, ERROR_MAXIMUM,
                                    ERROR_MIN_ITEMS, ERROR_MIN_LENGTH,
                                    ERROR_MIN_PROPERTIES, ERROR_MINIMUM,
                                    ERROR_MULTIPLE_OF, ERROR_PATTERN,
                                    ERROR_UNEXPECTED_PROPERTIES,
                                    ERROR_UNIQUE_ITEMS, FORMAT_LABELS, INTEGER,
                                    KINDS, NULL, NUMBER, OBJECT, STRING)
from schemacoerce.exceptions import ParseError
from schemacoerce.extensions import is_invalid
from schemacoerce.options import ExtraProperties, ValidationOptions
from schemacoerce.resolver import RefResolver
from schemacoerce.schemanode import SchemaNode
from schemacoerce.validation import Validation
from schemacoerce.validationfield import ValidationField

logger = logging.getLogger(__name__)


class SchemaValidator:
    """Validates one value against a Schema for a single call."""

    def __init__(self, schema, options: ValidationOptions, validation: Validation):
        """
        Args:
            schema (Schema): The schema facade providing the root node, the ref lookup and the extensions.
            options (ValidationOptions): The options of this call.
            validation (Validation): The accumulator errors are recorded in.
        """
        self.schema = schema
        self.options = options
        self.validation = validation
        self.resolver = RefResolver(schema.get_ref_lookup())

    def validate(self, value: Any) -> Any:
        """Validates the value against the root node and returns the cleaned value."""
        field = ValidationField(self.validation, self.schema.node, '', '', self.options)
        return self.validate_field(value, field)

    def validate_field(self, value: Any, field: ValidationField) -> Any:
        """
        Validates one value at one location.

        Args:
            value (Any): The raw value.
            field (ValidationField): Its location and schema node.

        Returns:
            Any: The cleaned value. Meaningless when an error was recorded for the field.
        """
        if not self._resolve(value, field):
            return value

        value, validated = self.schema.filters.apply(value, field)
        if is_invalid(value):
            field.add_invalid_error(value)
            return value
        if validated:
            return value

        if value is None and field.allows_null():
            return None
        if value == '' and isinstance(value, str) and field.allows_null() \
                and (not field.has_type(STRING) or field.val('format') in COERCED_FORMATS):
            return None

        kinds = [kind for kind in field.types if kind != NULL]
        for kind in kinds:
            if kind not in KINDS:
                raise ParseError(f"Unrecognized schema type: {kind}")
        if kinds:
            kind, value = self._coerce(value, field, kinds)
            if kind is None:
                field.add_type_error(value)
                return value
        else:
            kind = natural_kind(value)
            if kind == OBJECT and 'properties' not in field.node \
                    and 'additionalProperties' not in field.node:
                kind = None
            elif kind == ARRAY and 'items' not in field.node:
                kind = None

        value = self._check(kind, value, field)
        if field.is_valid():
            self.schema.validators.apply(value, field)
        return value

    def _resolve(self, value: Any, field: ValidationField) -> bool:
        """Replaces the field's node by the concrete node, following refs, allOf and discriminators."""
        chain: List[str] = []
        node, path = field.node, field.schema_path
        while True:
            node, path = self.resolver.resolve_refs(node, path, chain)
            if 'allOf' in node:
                node = flatten_all_of(node, self.resolver, chain)
            if 'discriminator' not in node or value is None:
                break
            selected = select_discriminated(node, path, value, field, self.resolver, chain)
            if selected is None:
                return False
            node, path = selected
        field.node = node
        field.schema_path = path
        return True

    def peek(self, node: SchemaNode, schema_path: str) -> SchemaNode:
        """Resolves refs and allOf of a node without looking at data."""
        chain: List[str] = []
        node, _ = self.resolver.resolve_refs(node, schema_path, chain)
        if 'allOf' in node:
            node = flatten_all_of(node, self.resolver, chain)
        return node

    def _coerce(self, value: Any, field: ValidationField, kinds: List[str]) -> Tuple[Optional[str], Any]:
        natural = natural_kind(value)
        candidates = []
        if natural in kinds:
            candidates.append(natural)
        if natural == INTEGER and NUMBER in kinds:
            candidates.append(NUMBER)
        candidates.extend(kind for kind in kinds if kind not in candidates)
        for kind in candidates:
            result = coerce(kind, value, field.node)
            if result is not FAILED:
                return kind, result
        return None, value

    def _check(self, kind: Optional[str], value: Any, field: ValidationField) -> Any:
        if kind in (INTEGER, NUMBER):
            self._check_number(value, field)
        elif kind == STRING and isinstance(value, str):
            self._check_string(value, field)
        elif kind == ARRAY:
            value = self._validate_array(value, field)
        elif kind == OBJECT:
            value = self._validate_object(value, field)

        enum = field.val('enum')
        if isinstance(enum, list) and not strict_contains(enum, value):
            field.add_error(ERROR_ENUM, '{field} must be one of: {enum}.', value=value, enum=enum)
        return value

    def _check_number(self, value: Any, field: ValidationField) -> None:
        minimum = field.val('minimum')
        exclusive = field.val('exclusiveMinimum')
        if _is_number(exclusive) and value <= exclusive:
            field.add_error(ERROR_MINIMUM, '{field} should be greater than {minimum}.', minimum=exclusive)
        elif _is_number(minimum):
            if exclusive is True and value <= minimum:
                field.add_error(ERROR_MINIMUM, '{field} should be greater than {minimum}.', minimum=minimum)
            elif value < minimum:
                field.add_error(ERROR_MINIMUM, '{field} should be at least {minimum}.', minimum=minimum)

        maximum = field.val('maximum')
        exclusive = field.val('exclusiveMaximum')
        if _is_number(exclusive) and value >= exclusive:
            field.add_error(ERROR_MAXIMUM, '{field} should be less than {maximum}.', maximum=exclusive)
        elif _is_number(maximum):
            if exclusive is True and value >= maximum:
                field.add_error(ERROR_MAXIMUM, '{field} should be less than {maximum}.', maximum=maximum)
            elif value > maximum:
                field.add_error(ERROR_MAXIMUM, '{field} should be at most {maximum}.', maximum=maximum)

        multiple_of = field.val('multipleOf')
        if multiple_of is not None:
            if not _is_number(multiple_of) or multiple_of <= 0:
                raise ParseError(f"multipleOf must be a positive number, got {multiple_of!r}")
            if _remainder(value, multiple_of) != 0:
                field.add_error(ERROR_MULTIPLE_OF, '{field} is not a multiple of {multipleOf}.',
                                multipleOf=multiple_of)

    def _check_string(self, value: str, field: ValidationField) -> None:
        byte_mode = self.options.byte_length and not field.has_val('maxByteLength')
        if byte_mode:
            length, unit = len(value.encode('utf-8')), 'byte'
        else:
            length, unit = len(value), 'character'

        min_length = field.val('minLength')
        if min_length is not None and length < min_length:
            field.add_error(ERROR_MIN_LENGTH,
                            f"{{field}} should be at least {{minLength}} {{minLength,plural,{unit}}} long.",
                            minLength=min_length)
        max_length = field.val('maxLength')
        if max_length is not None and length > max_length:
            field.add_error(ERROR_MAX_LENGTH,
                            f"{{field}} is {{overflow}} {{overflow,plural,{unit}}} too long.",
                            maxLength=max_length, overflow=length - max_length)
        max_bytes = field.val('maxByteLength')
        if max_bytes is not None:
            byte_length = len(value.encode('utf-8'))
            if byte_length > max_bytes:
                field.add_error(ERROR_MAX_BYTE_LENGTH, '{field} is {overflow} {overflow,plural,byte} too long.',
                                maxByteLength=max_bytes, overflow=byte_length - max_bytes)

        pattern = field.val('pattern')
        if pattern is not None:
            try:
                matched = re.search(pattern, value)
            except re.error as e:
                raise ParseError(f"Invalid pattern {pattern!r}: {e}") from e
            if not matched:
                field.add_error(ERROR_PATTERN, '{field} is in the incorrect format.', value=value, pattern=pattern)

        fmt = field.val('format')
        if isinstance(fmt, str) and not check_format(fmt, value):
            field.add_error(ERROR_FORMAT, '{value} is not a valid {format}.',
                            value=value, format=FORMAT_LABELS.get(fmt, fmt))

    def _validate_array(self, items: List[Any], field: ValidationField) -> List[Any]:
        item_node = field.node.items
        if item_node is not None:
            result = [self.validate_field(item, field.child(index, item_node, 'items'))
                      for index, item in enumerate(items)]
        else:
            result = list(items)

        min_items = field.val('minItems')
        if min_items is not None and len(result) < min_items:
            field.add_error(ERROR_MIN_ITEMS, '{field} must contain at least {minItems} {minItems,plural,item}.',
                            minItems=min_items)
        max_items = field.val('maxItems')
        if max_items is not None and len(result) > max_items:
            field.add_error(ERROR_MAX_ITEMS, '{field} must contain no more than {maxItems} {maxItems,plural,item}.',
                            maxItems=max_items)
        if field.val('uniqueItems') and not _all_unique(result):
            field.add_error(ERROR_UNIQUE_ITEMS, '{field} must contain unique items.')
        return result

    def _validate_object(self, data: Dict[Any, Any], field: ValidationField) -> Dict[Any, Any]:
        node = field.node
        options = self.options
        required = node.required
        clean: Dict[Any, Any] = {}
        remaining = {key: key for key in data}
        lowered = {}
        for key in data:
            if isinstance(key, str):
                lowered.setdefault(key.lower(), key)

        for name, prop_node in node.properties.items():
            key = name if name in data else lowered.get(name.lower())
            if key is not None and key not in remaining:
                key = None
            prop_path = join_schema_path(field.schema_path, 'properties', escape(name))
            child = field.child(name, prop_node, 'properties', escape(name))
            effective = None
            if options.request or options.response:
                effective = self.peek(prop_node, prop_path)
                if (options.request and effective.get('readOnly')) \
                        or (options.response and effective.get('writeOnly')):
                    if key is not None:
                        remaining.pop(key)
                    continue

            if key is None:
                if options.sparse:
                    continue
                if effective is None:
                    effective = self.peek(prop_node, prop_path)
                if 'default' in effective:
                    clean[name] = copy.deepcopy(effective['default'])
                elif name in required:
                    child.add_missing_error()
                continue

            remaining.pop(key)
            value = data[key]
            if value is None or (isinstance(value, str) and value == ''):
                if effective is None:
                    effective = self.peek(prop_node, prop_path)
                if not effective.is_nullable:
                    if name not in required and (value is None or STRING not in effective.types):
                        continue
                    if value is None and name in required and effective.types:
                        child.add_missing_error('{field} cannot be null.')
                        continue
            clean[name] = self.validate_field(value, child)

        if not options.sparse:
            for name in required:
                if name in node.properties:
                    continue
                if name not in data and name.lower() not in lowered:
                    field.validation.add_error(join_path(field.name, name), ERROR_MISSING_FIELD,
                                               '{field} is required.')

        if remaining:
            self._handle_extra(data, list(remaining), clean, field)

        min_properties = field.val('minProperties')
        if min_properties is not None and len(data) < min_properties:
            field.add_error(ERROR_MIN_PROPERTIES,
                            '{field} must contain at least {minProperties} {minProperties,plural,property,properties}.',
                            minProperties=min_properties)
        max_properties = field.val('maxProperties')
        if max_properties is not None and len(data) > max_properties:
            field.add_error(ERROR_MAX_PROPERTIES,
                            '{field} must contain no more than {maxProperties} '
                            '{maxProperties,plural,property,properties}.',
                            maxProperties=max_properties)
        return clean

    def _handle_extra(self, data: Dict[Any, Any], keys: List[Any], clean: Dict[Any, Any],
                      field: ValidationField) -> None:
        additional = field.val('additionalProperties')
        if isinstance(additional, SchemaNode):
            for key in keys:
                child = field.child(str(key), additional, 'additionalProperties')
                clean[key] = self.validate_field(data[key], child)
        elif additional is True or not (field.has_val('properties') or field.has_val('additionalProperties')):
            # An object without declared properties is free-form
            for key in keys:
                clean[key] = data[key]
        elif self.options.extra_properties == ExtraProperties.WARN:
            logger.warning("%s has unexpected field(s): %s.", field.name or 'value',
                           ', '.join(str(key) for key in keys))
        elif self.options.extra_properties == ExtraProperties.FAIL:
            field.add_error(ERROR_UNEXPECTED_PROPERTIES, 'Unexpected {extra,plural,property,properties}: {extra}.',
                            extra=[str(key) for key in keys])


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _remainder(value: Any, divisor: Any) -> Decimal:
    """Returns value modulo divisor, with enough precision for the integer part of the quotient."""
    dividend, modulus = Decimal(str(value)), Decimal(str(divisor))
    quotient_digits = dividend.adjusted() - modulus.adjusted() + len(modulus.as_tuple().digits) + 2
    with localcontext() as context:
        context.prec = max(context.prec, quotient_digits)
        return dividend % modulus


def _all_unique(items: List[Any]) -> bool:
    seen = set()
    for item in items:
        key = _unique_key(item)
        if key in seen:
            return False
        seen.add(key)
    return True


def _unique_key(value: Any) -> Tuple:
    """
    Builds a hashable key under which equal JSON values collide.

    Integral floats count as integers, mapping key order is ignored and
    values outside the JSON model are keyed by their type as well as their text.
    """
    if value is None:
        return ('null',)
    if isinstance(value, bool):
        return ('boolean', value)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return ('number', value)
    if isinstance(value, str):
        return ('string', value)
    if isinstance(value, (list, tuple)):
        return ('array', tuple(_unique_key(item) for item in value))
    if isinstance(value, Mapping):
        pairs = ((str(key), _unique_key(item)) for key, item in value.items())
        return ('object', tuple(sorted(pairs, key=lambda pair: pair[0])))
    return (type(value).__name__, str(value))

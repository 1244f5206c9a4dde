"""The view of one value being validated.

A ValidationField ties a data location to the schema node that governs it
and to the Validation collecting errors. The validation core passes it around
internally and hands it to filters and validators so they can inspect the
schema and report errors at the right path.
"""

from typing import Any, List, Optional

from schemacoerce.common import is_scalar, join_path, join_schema_path
from schemacoerce.constants import (ERROR_INVALID, ERROR_MISSING_FIELD,
                                    ERROR_TYPE, FORMAT_KEY_PREFIX, NULL, STRING,
                                    TYPE_LABELS)
from schemacoerce.options import ValidationOptions
from schemacoerce.schemanode import SchemaNode
from schemacoerce.validation import Validation


class ValidationField:
    """A value's location, its schema node and the shared Validation."""

    def __init__(self, validation: Validation, node: SchemaNode, name: str,
                 schema_path: str, options: ValidationOptions):
        self.validation = validation
        self.node = node
        self.name = name
        self.schema_path = schema_path
        self.origin_path = schema_path
        self.options = options

    def child(self, segment, node: SchemaNode, *schema_segments: str) -> 'ValidationField':
        """Returns the field of a property or array element."""
        return ValidationField(self.validation, node, join_path(self.name, segment),
                               join_schema_path(self.schema_path, *schema_segments), self.options)

    def get_name(self) -> str:
        return self.name

    def get_schema_path(self) -> str:
        return self.schema_path

    def extension_keys(self) -> List[str]:
        """The registry keys of this field: its declared path, its resolved path and its format."""
        keys = [self.origin_path]
        if self.schema_path != self.origin_path:
            keys.append(self.schema_path)
        fmt = self.node.get('format')
        if isinstance(fmt, str):
            keys.append(FORMAT_KEY_PREFIX + fmt)
        return keys

    def get_validation(self) -> Validation:
        return self.validation

    def get_options(self) -> ValidationOptions:
        return self.options

    def val(self, key: str, default: Any = None) -> Any:
        """Returns a keyword of the field's schema node."""
        return self.node.get(key, default)

    def has_val(self, key: str) -> bool:
        return key in self.node

    @property
    def types(self) -> List[str]:
        return self.node.types

    def has_type(self, kind: str) -> bool:
        return kind in self.node.types

    def allows_null(self) -> bool:
        return self.node.is_nullable

    def is_sparse(self) -> bool:
        return self.options.sparse

    def is_request(self) -> bool:
        return self.options.request

    def is_response(self) -> bool:
        return self.options.response

    def is_valid(self) -> bool:
        """Tells whether no error has been recorded at this field's path."""
        return self.validation.is_valid_field(self.name)

    def add_error(self, error: str, message_code: Optional[str] = None,
                  code: Optional[int] = None, **context) -> 'ValidationField':
        self.validation.add_error(self.name, error, message_code, code, **context)
        return self

    def add_type_error(self, value: Any, kind: Optional[str] = None) -> 'ValidationField':
        """
        Records that the value is not of the expected kind.

        Args:
            value (Any): The offending value.
            kind (Optional[str]): The expected kind. Defaults to the node's declared kinds.
        """
        if kind is None:
            kind = self.type_label()
        if is_scalar(value):
            message = '{value} is not a valid {type}.'
        else:
            message = 'The value is not a valid {type}.'
        return self.add_error(ERROR_TYPE, message, value=value, type=kind)

    def add_invalid_error(self, value: Any) -> 'ValidationField':
        return self.add_error(ERROR_INVALID, '{field} is invalid.', value=value)

    def add_missing_error(self, message: str = '{field} is required.') -> 'ValidationField':
        return self.add_error(ERROR_MISSING_FIELD, message)

    def type_label(self) -> str:
        """Describes the declared kinds for messages, using the format name where it is more precise."""
        fmt = self.node.get('format')
        labels = []
        for kind in self.types:
            if kind == NULL:
                continue
            if fmt in TYPE_LABELS and (kind == STRING or TYPE_LABELS[fmt] == fmt):
                labels.append(TYPE_LABELS[fmt])
            else:
                labels.append(kind)
        return ' or '.join(labels) if labels else 'value'

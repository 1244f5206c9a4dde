"""Collects validation errors and renders them as messages or JSON.

A Validation is an ordered, append-only list of FieldError records. Messages
are kept as templates until they are read so that translate() can be
overridden in a subclass to localize them. Templates use {name} placeholders
filled from the error's context, plus the special {field} and {value}
placeholders and a plural form {name,plural,singular[,plural]}.
"""

import datetime
import json
import re
import unicodedata
from dataclasses import dataclass, field as dataclass_field
from typing import Any, Dict, List, Optional

from schemacoerce.common import is_scalar, last_segment
from schemacoerce.constants import (ERROR_STATUSES, MAX_VALUE_DISPLAY,
                                    STATUS_BAD_REQUEST, STATUS_OK)

PLACEHOLDER_PATTERN = re.compile(r'\{([^{}]+)\}')


@dataclass
class FieldError:
    """A single violation.

    Attributes:
        path: Location of the offending value ('' for the root).
        error: Machine readable error code such as 'minLength'.
        message_code: Message template; the error code itself when empty.
        status: Explicit numeric status, if any.
        context: Values for the template placeholders.
    """
    path: str
    error: str
    message_code: str = ''
    status: Optional[int] = None
    context: Dict[str, Any] = dataclass_field(default_factory=dict)


class Validation:
    """Accumulates errors for one validation call."""

    def __init__(self, translate_field_names: bool = False):
        self.errors: List[FieldError] = []
        self.main_message = ''
        self.main_status = 0
        self.translate_field_names = translate_field_names

    def add_error(self, field: str, error: str, message_code: Optional[str] = None,
                  code: Optional[int] = None, **context) -> 'Validation':
        """
        Records an error.

        Args:
            field (str): The path of the invalid value, '' for the root or a general error.
            error (str): The error code.
            message_code (Optional[str]): A message template. Defaults to the error code.
            code (Optional[int]): A numeric status. Known engine codes get a default.
            **context: Values for the message placeholders.

        Returns:
            Validation: self, for chaining.

        Raises:
            ValueError: If the error code is empty.
        """
        if not error:
            raise ValueError('The error code cannot be empty.')
        if code is None:
            code = ERROR_STATUSES.get(error)
        self.errors.append(FieldError(field, error, message_code or error, code, context))
        return self

    def merge(self, validation: 'Validation', name: str = '') -> 'Validation':
        """
        Copies the errors of another validation under a path prefix.

        Args:
            validation (Validation): The validation to copy from.
            name (str): The path the other validation's root corresponds to.
        """
        for error in validation.errors:
            path = error.path
            if name:
                path = f"{name}/{path}" if path else name
            self.errors.append(FieldError(path, error.error, error.message_code,
                                          error.status, dict(error.context)))
        return self

    def is_valid(self) -> bool:
        return not self.errors

    def is_valid_field(self, field: str) -> bool:
        return not any(error.path == field for error in self.errors)

    def get_error_count(self, field: Optional[str] = None) -> int:
        """Counts all errors or only those of one field."""
        if field is None:
            return len(self.errors)
        return sum(1 for error in self.errors if error.path == field)

    def get_main_message(self) -> str:
        """Returns the main message, or the field-less errors joined together."""
        if self.main_message:
            return self.translate(self.main_message)
        messages = [self._format_message(error) for error in self.errors if error.path == '']
        return ' '.join(messages)

    def set_main_message(self, message: str) -> 'Validation':
        self.main_message = message
        return self

    def get_main_status(self) -> int:
        return self.main_status

    def set_main_status(self, status: int) -> 'Validation':
        self.main_status = status
        return self

    def get_status(self) -> int:
        """
        Returns the overall numeric status.

        The main status wins when set. Otherwise 200 when there are no errors,
        else the highest error status where errors without one count as 400.
        """
        if self.main_status:
            return self.main_status
        if not self.errors:
            return STATUS_OK
        return max(error.status or STATUS_BAD_REQUEST for error in self.errors)

    def get_errors(self) -> List[Dict[str, Any]]:
        """Returns every error as a dict with field, error, message and code."""
        return [self._error_dict(error) for error in self.errors]

    def get_field_errors(self, field: str) -> List[Dict[str, Any]]:
        return [self._error_dict(error) for error in self.errors if error.path == field]

    def get_message(self) -> str:
        """Returns the main message when set, otherwise every error as a sentence."""
        if self.main_message:
            return self.translate(self.main_message)
        return self.get_concat_message()

    def get_concat_message(self, field: Optional[str] = None) -> str:
        """
        Joins error messages into sentences.

        Args:
            field (Optional[str]): Only include errors of this field. All errors when None.

        Returns:
            str: 'field: message.' sentences separated by spaces.
        """
        sentences = []
        for error in self.errors:
            if field is not None and error.path != field:
                continue
            message = self._format_message(error)
            if message and not _ends_with_punctuation(message):
                message += '.'
            if error.path and field is None:
                message = f"{error.path}: {message}"
            sentences.append(message)
        return ' '.join(sentences)

    def get_full_message(self) -> str:
        """
        Returns a multi-line message: the main message, then one block per field.

        A field with one error renders as '[field]: message', several errors as
        '[field]:' followed by indented messages.
        """
        parts = []
        main = self.get_main_message()
        if main:
            parts.append(main)
        by_field: Dict[str, List[str]] = {}
        for error in self.errors:
            if error.path:
                by_field.setdefault(error.path, []).append(self._format_message(error))
        for path, messages in by_field.items():
            label = self.translate(path) if self.translate_field_names else self.translate(f"[{path}]")
            if len(messages) == 1:
                parts.append(f"{label}: {messages[0]}")
            else:
                parts.append(f"{label}:\n  " + "\n  ".join(messages))
        return "\n\n".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """
        Returns the JSON form {"message", "code", "errors"}.

        errors maps each path to a list of {"error", "message"} entries, with
        "code" only on errors that carry a status.
        """
        if self.main_message:
            message = self.translate(self.main_message)
        elif self.errors:
            message = self.translate('Validation failed.')
        else:
            message = self.translate('Validation succeeded.')
        errors: Dict[str, List[Dict[str, Any]]] = {}
        for error in self.errors:
            entry: Dict[str, Any] = {'error': error.error, 'message': self._format_message(error)}
            if error.status:
                entry['code'] = error.status
            errors.setdefault(error.path, []).append(entry)
        return {'message': message, 'code': self.get_status(), 'errors': errors}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def translate(self, text: str) -> str:
        """
        Hook for localizing messages. Strings starting with '@' are literal.

        Override in a subclass to plug in a translation catalog.
        """
        if text.startswith('@'):
            return text[1:]
        return text

    def _error_dict(self, error: FieldError) -> Dict[str, Any]:
        return {
            'field': error.path,
            'error': error.error,
            'message': self._format_message(error),
            'code': error.status or STATUS_BAD_REQUEST,
        }

    def _format_message(self, error: FieldError) -> str:
        template = self.translate(error.message_code)

        def replace(match: re.Match) -> str:
            args = [arg.strip() for arg in match.group(1).split(',')]
            args = [arg for arg in args if arg]
            if not args:
                return match.group(0)
            name = args[0]
            if name == 'field':
                return self._field_name(error.path)
            if name == 'value':
                return self._format_value(error.context.get('value'))
            if name not in error.context:
                return match.group(0)
            return self._format_field(error.context[name], args)

        return PLACEHOLDER_PATTERN.sub(replace, template)

    def _field_name(self, path: str) -> str:
        name = last_segment(path) or 'value'
        if self.translate_field_names:
            return self.translate(name)
        return name

    def _format_value(self, value: Any) -> str:
        if isinstance(value, str) and len(value) > MAX_VALUE_DISPLAY:
            value = value[:MAX_VALUE_DISPLAY] + '…'
        if is_scalar(value):
            return json.dumps(value, ensure_ascii=False)
        return self.translate('value')

    def _format_field(self, value: Any, args: List[str]) -> str:
        if len(args) > 2 and args[1] == 'plural':
            count = len(value) if isinstance(value, (list, tuple, dict)) else value
            singular = args[2]
            plural = args[3] if len(args) > 3 else singular + 's'
            return singular if count == 1 else plural
        if value is None:
            return self.translate('null')
        if value is True:
            return self.translate('true')
        if value is False:
            return self.translate('false')
        if isinstance(value, str):
            return self.translate(value)
        if isinstance(value, (list, tuple)):
            return ', '.join(self._format_field(item, args[:1]) for item in value)
        if isinstance(value, datetime.datetime):
            return value.isoformat()
        return str(value)


def _ends_with_punctuation(message: str) -> bool:
    return unicodedata.category(message[-1]).startswith('P')

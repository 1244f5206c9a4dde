"""
Common path and value helpers used across schemacoerce
"""

import datetime
import uuid
from collections.abc import Mapping
from typing import Any, List, Optional, Union

from jsonpointer import JsonPointer, escape

from schemacoerce.constants import (ARRAY, BOOLEAN, INTEGER, NULL, NUMBER,
                                    OBJECT, STRING)


def join_path(base: str, segment: Union[str, int]) -> str:
    """
    Appends one segment to a '/'-delimited path, escaping '~' and '/' in names.

    Args:
        base (str): The parent path. '' is the root.
        segment (Union[str, int]): A property name or array index.

    Returns:
        str: The child path.
    """
    part = str(segment) if isinstance(segment, int) else escape(segment)
    if base == '':
        return part
    return f"{base}/{part}"


def join_schema_path(base: str, *segments: str) -> str:
    """Appends raw (already escaped) segments to a schema path."""
    path = base
    for segment in segments:
        path = segment if path == '' else f"{path}/{segment}"
    return path


def split_path(path: str) -> List[str]:
    """
    Splits a path into unescaped segments.

    A leading '#' and a leading '/' are both optional, so '#/a/b', '/a/b' and
    'a/b' all produce ['a', 'b'].
    """
    if path.startswith('#'):
        path = path[1:]
    if path in ('', '/'):
        return []
    if not path.startswith('/'):
        path = '/' + path
    return JsonPointer(path).parts


def last_segment(path: str) -> str:
    """Returns the unescaped final segment of a path, or '' for the root."""
    parts = split_path(path)
    return parts[-1] if parts else ''


def parse_field_selector(field: str) -> str:
    """
    Normalizes a selector used to register filters and validators.

    Selectors are schema paths such as 'properties/id' or refs such as
    '#/components/schemas/Pet'. Older selectors are converted:
    'a.b' becomes 'properties/a/properties/b', 'a[]' becomes
    'properties/a/items' and a bare property name becomes 'properties/<name>'.

    Args:
        field (str): The selector to normalize.

    Returns:
        str: The schema path the selector designates.
    """
    if field == '' or field.startswith('#'):
        return field
    if '.' in field and '/' not in field:
        field = '/'.join(parse_field_selector(part) for part in field.split('.'))
    elif field == '[]':
        field = 'items'
    elif '/' not in field and field not in ('items', 'additionalProperties'):
        if field.endswith('[]'):
            field = f"properties/{field[:-2]}/items"
        else:
            field = f"properties/{field}"
    if '[]' in field:
        field = field.replace('[]', '/items')
    return field.lstrip('/')


def natural_kind(value: Any) -> Optional[str]:
    """
    Returns the schema kind a native value already is, without any coercion.

    Args:
        value (Any): The value to classify.

    Returns:
        Optional[str]: One of the schema kinds, or None for values with no natural kind.
    """
    if value is None:
        return NULL
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, int):
        return INTEGER
    if isinstance(value, float):
        return NUMBER
    if isinstance(value, (str, datetime.datetime, uuid.UUID)):
        return STRING
    if isinstance(value, (list, tuple)):
        return ARRAY
    if isinstance(value, Mapping):
        return OBJECT
    return None


def as_mapping(value: Any) -> Optional[Mapping]:
    """
    Views a value as a mapping when it is one or exposes keys() and get().

    Returns:
        Optional[Mapping]: The mapping view, or None when the value is not indexable by name.
    """
    if isinstance(value, Mapping):
        return value
    keys = getattr(value, 'keys', None)
    getter = getattr(value, 'get', None)
    if callable(keys) and callable(getter) and not isinstance(value, (str, bytes)):
        return {key: getter(key) for key in keys()}
    return None


def is_scalar(value: Any) -> bool:
    """Tells whether a value is a string, number or boolean."""
    return isinstance(value, (str, int, float, bool))


def strict_contains(options: List[Any], value: Any) -> bool:
    """
    Membership test that never treats booleans and numbers as equal.

    Args:
        options (List[Any]): The allowed values.
        value (Any): The value to look for.

    Returns:
        bool: True when an option has the same kind and compares equal.
    """
    for option in options:
        if isinstance(option, bool) != isinstance(value, bool):
            continue
        if (option is None) != (value is None):
            continue
        if option == value:
            return True
    return False

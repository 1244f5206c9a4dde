"""Coerces raw values to schema kinds and checks string formats.

Every coercer returns the coerced value or FAILED when the value cannot be
read as that kind. Coercion is lossless: a float with a fractional part never
becomes an integer and a boolean is never read as a number.
"""

import datetime
import email.utils
import ipaddress
import math
import re
import uuid
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse

from schemacoerce.common import as_mapping
from schemacoerce.constants import (ARRAY, ARRAY_STYLE_SEPARATORS, BOOLEAN,
                                    BOOLEAN_FALSE_STRINGS,
                                    BOOLEAN_TRUE_STRINGS, INTEGER, NUMBER,
                                    OBJECT, STRING)
from schemacoerce.exceptions import ParseError


class _Failed:
    def __repr__(self) -> str:
        return 'FAILED'


FAILED = _Failed()

NUMERIC_PATTERN = re.compile(r'^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$')
EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s.]+$')

# Formats tried in order after ISO 8601 and RFC 2822 parsing fail
DATETIME_FORMATS = (
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d %H:%M',
    '%Y-%m-%d',
    '%A, %d-%b-%y %H:%M:%S %Z',
    '%A, %d-%b-%Y %H:%M:%S %Z',
    '%a, %d %b %Y %H:%M:%S',
    '%d %b %Y',
    '%d %B %Y',
    '%b %d %Y',
    '%B %d %Y',
    '%B %d, %Y',
    '%m/%d/%Y',
)


def coerce_boolean(value: Any, node=None) -> Any:
    """Reads booleans, the strings true/false/yes/no/on/off/1/0/'' and the integers 0 and 1."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in BOOLEAN_TRUE_STRINGS:
            return True
        if lowered in BOOLEAN_FALSE_STRINGS:
            return False
    return FAILED


def coerce_number(value: Any, node=None) -> Any:
    """Reads ints, finite floats and numeric strings as a float."""
    if isinstance(value, bool):
        return FAILED
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str) and NUMERIC_PATTERN.match(value):
        result = float(value)
    else:
        return FAILED
    return result if math.isfinite(result) else FAILED


def coerce_integer(value: Any, node=None) -> Any:
    """
    Reads ints, integral floats and integral numeric strings as an int.

    With format 'timestamp' a date string or datetime is converted to epoch seconds.
    """
    if isinstance(value, bool):
        return FAILED
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value.is_integer() else FAILED
    if isinstance(value, str) and re.match(r'^\s*[+-]?\d+\s*$', value):
        return int(value)
    if isinstance(value, str) and NUMERIC_PATTERN.match(value):
        number = float(value)
        return int(number) if math.isfinite(number) and number.is_integer() else FAILED
    if node is not None and node.get('format') == 'timestamp':
        moment = value if isinstance(value, datetime.datetime) else parse_datetime(value)
        if moment is not None:
            # Naive moments are read as UTC
            if moment.tzinfo is None:
                moment = moment.replace(tzinfo=datetime.timezone.utc)
            try:
                return int(moment.timestamp())
            except (OverflowError, OSError, ValueError):
                return FAILED
    return FAILED


def coerce_string(value: Any, node=None) -> Any:
    """
    Reads strings and stringifies numbers; booleans and containers are rejected.

    With format 'date-time' the result is a datetime, with format 'uuid' a UUID.
    """
    fmt = node.get('format') if node is not None else None
    if fmt == 'date-time':
        if isinstance(value, datetime.datetime):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
            try:
                return datetime.datetime.fromtimestamp(value, tz=datetime.timezone.utc)
            except (OverflowError, OSError, ValueError):
                return FAILED
        moment = parse_datetime(value) if isinstance(value, str) else None
        return moment if moment is not None else FAILED
    if fmt == 'uuid':
        return coerce_uuid(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return FAILED


def coerce_array(value: Any, node=None) -> Any:
    """Reads lists and tuples; with a style keyword a delimited string is split."""
    if isinstance(value, (list, tuple)):
        return list(value)
    style = node.get('style') if node is not None else None
    if isinstance(value, str) and style is not None:
        if style not in ARRAY_STYLE_SEPARATORS:
            raise ParseError(f"Unsupported array style: {style}")
        if value == '':
            return []
        return value.split(ARRAY_STYLE_SEPARATORS[style])
    return FAILED


def coerce_object(value: Any, node=None) -> Any:
    """Reads mappings and any value exposing keys() and get()."""
    data = as_mapping(value)
    return FAILED if data is None else data


def coerce_uuid(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return value
    try:
        if isinstance(value, bytes) and len(value) == 16:
            return uuid.UUID(bytes=value)
        if isinstance(value, str):
            return uuid.UUID(value.strip())
    except ValueError:
        return FAILED
    return FAILED


COERCERS: Dict[str, Callable[[Any, Any], Any]] = {
    BOOLEAN: coerce_boolean,
    INTEGER: coerce_integer,
    NUMBER: coerce_number,
    STRING: coerce_string,
    ARRAY: coerce_array,
    OBJECT: coerce_object,
}


def coerce(kind: str, value: Any, node=None) -> Any:
    """
    Coerces a value to one schema kind.

    Args:
        kind (str): The target kind.
        value (Any): The raw value.
        node (SchemaNode): The governing node, consulted for format and style.

    Returns:
        Any: The coerced value or FAILED.

    Raises:
        ParseError: If the kind is not a known schema type.
    """
    coercer = COERCERS.get(kind)
    if coercer is None:
        raise ParseError(f"Unrecognized schema type: {kind}")
    return coercer(value, node)


def parse_datetime(text: Any) -> Optional[datetime.datetime]:
    """
    Parses ISO 8601, RFC 2822/822, RFC 850, cookie style and a few common textual dates.

    Returns:
        Optional[datetime.datetime]: The parsed moment, or None when the text is not a date.
    """
    if not isinstance(text, str):
        return None
    text = text.strip()
    if not text:
        return None
    iso = text[:-1] + '+00:00' if text.endswith(('Z', 'z')) else text
    try:
        return datetime.datetime.fromisoformat(iso)
    except ValueError:
        pass
    try:
        return email.utils.parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        pass
    for pattern in DATETIME_FORMATS:
        try:
            moment = datetime.datetime.strptime(text, pattern)
        except ValueError:
            continue
        if pattern.endswith('%Z'):
            moment = moment.replace(tzinfo=datetime.timezone.utc)
        return moment
    return None


def check_format(fmt: str, value: str) -> bool:
    """
    Tells whether a string satisfies one of the checked formats.

    Unknown formats always pass.
    """
    checker = FORMAT_CHECKS.get(fmt)
    return checker(value) if checker else True


def _is_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value))


def _is_ip(value: str, version: Optional[int] = None) -> bool:
    try:
        address = ipaddress.ip_address(value)
    except ValueError:
        return False
    return version is None or address.version == version


def _is_uri(value: str) -> bool:
    url = urlparse(value)
    return bool(url.scheme) and bool(url.netloc or url.path)


FORMAT_CHECKS: Dict[str, Callable[[str], bool]] = {
    'email': _is_email,
    'ipv4': lambda value: _is_ip(value, 4),
    'ipv6': lambda value: _is_ip(value, 6),
    'ip': _is_ip,
    'uri': _is_uri,
}

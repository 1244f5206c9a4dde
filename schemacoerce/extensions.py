"""Filters and validators registered against schema paths or formats.

Filters run on the raw value before the built-in coercion and may replace it.
A filter registered with validate=True takes over validation entirely, so its
output is final. Validators run once the value has been coerced and the field
has no errors; returning False or INVALID marks the field invalid.

Both registries are keyed by schema path ('' for the root,
'properties/name', 'items', or a ref such as '#/components/schemas/Pet') and,
for format-scoped entries, by '/format/<name>'.
"""

from collections import defaultdict
from typing import Any, Callable, Dict, List, Tuple

from schemacoerce.common import parse_field_selector
from schemacoerce.constants import ERROR_MISSING_FIELD, FORMAT_KEY_PREFIX

FilterCallback = Callable[[Any, Any], Any]
ValidatorCallback = Callable[[Any, Any], Any]


class Invalid:
    """Sentinel type returned by filters and validators to reject a value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'INVALID'

    def __bool__(self) -> bool:
        return False


INVALID = Invalid()


def is_invalid(value: Any) -> bool:
    return value is INVALID


def format_key(fmt: str) -> str:
    return FORMAT_KEY_PREFIX + fmt


class FilterRegistry:
    """Path and format scoped filters."""

    def __init__(self):
        self.filters: Dict[str, List[Tuple[FilterCallback, bool]]] = defaultdict(list)

    def add(self, selector: str, callback: FilterCallback, validate: bool = False) -> None:
        self.filters[parse_field_selector(selector)].append((callback, validate))

    def add_format(self, fmt: str, callback: FilterCallback, validate: bool = False) -> None:
        self.filters[format_key(fmt)].append((callback, validate))

    def apply(self, value: Any, field) -> Tuple[Any, bool]:
        """
        Runs the filters of the field's schema path, then those of its format.

        Args:
            value (Any): The raw value.
            field (ValidationField): The field being validated.

        Returns:
            Tuple[Any, bool]: The filtered value and whether a validating filter ran.
        """
        validated = False
        for key in field.extension_keys():
            for callback, validate in self.filters.get(key, ()):
                value = callback(value, field)
                validated = validated or validate
                if is_invalid(value):
                    return value, validated
        return value, validated

    def copy(self) -> 'FilterRegistry':
        registry = FilterRegistry()
        for key, entries in self.filters.items():
            registry.filters[key] = list(entries)
        return registry


class ValidatorRegistry:
    """Path and format scoped validators."""

    def __init__(self):
        self.validators: Dict[str, List[ValidatorCallback]] = defaultdict(list)

    def add(self, selector: str, callback: ValidatorCallback) -> None:
        self.validators[parse_field_selector(selector)].append(callback)

    def add_format(self, fmt: str, callback: ValidatorCallback) -> None:
        self.validators[format_key(fmt)].append(callback)

    def apply(self, value: Any, field) -> None:
        """
        Runs the validators of the field's schema path, then those of its format.

        A validator that returns False or INVALID records an 'invalid' error
        on the field; any other return value is ignored. Validators may also
        add errors through the field directly.
        """
        for key in field.extension_keys():
            for callback in self.validators.get(key, ()):
                result = callback(value, field)
                if result is False or is_invalid(result):
                    field.add_invalid_error(value)

    def copy(self) -> 'ValidatorRegistry':
        registry = ValidatorRegistry()
        for key, entries in self.validators.items():
            registry.validators[key] = list(entries)
        return registry


def require_one_of(required: List[Any], count: int = 1) -> ValidatorCallback:
    """
    Builds a validator requiring that some of the given properties are present.

    Args:
        required (List[Any]): Property names. A nested list means all of its names together.
        count (int): How many entries must be satisfied.

    Returns:
        ValidatorCallback: A validator for an object field.
    """
    def validate(data: Any, field) -> bool:
        if not hasattr(data, 'get'):
            return True
        found = 0
        for entry in required:
            names = entry if isinstance(entry, list) else [entry]
            if all(data.get(name) not in (None, '') for name in names):
                found += 1
        if found >= count:
            return True
        if count == 1:
            message = 'One of {required} are required.'
        else:
            message = '{count} of {required} are required.'
        field.add_error(ERROR_MISSING_FIELD, message, required=required, count=count)
        return True

    return validate

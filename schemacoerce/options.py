"""Per-call validation options."""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union


class ExtraProperties(str, Enum):
    """What to do with object keys the schema does not declare."""
    STRIP = 'strip'
    WARN = 'warn'
    FAIL = 'fail'


# Option names accepted in mappings, with their field names
OPTION_ALIASES = {
    'sparse': 'sparse',
    'request': 'request',
    'response': 'response',
    'extraProperties': 'extra_properties',
    'extra_properties': 'extra_properties',
    'byteLength': 'byte_length',
    'byte_length': 'byte_length',
}


@dataclass(frozen=True)
class ValidationOptions:
    """
    Options that change how one validation call treats its data.

    Attributes:
        sparse (bool): Missing required properties are not errors and defaults are not filled.
        request (bool): Validate a request; readOnly properties are dropped and never required.
        response (bool): Validate a response; writeOnly properties are dropped and never required.
        extra_properties (ExtraProperties): Policy for undeclared object keys.
        byte_length (bool): Measure minLength and maxLength in UTF-8 bytes instead of code points.
    """
    sparse: bool = False
    request: bool = False
    response: bool = False
    extra_properties: ExtraProperties = ExtraProperties.STRIP
    byte_length: bool = False

    def __post_init__(self):
        if not isinstance(self.extra_properties, ExtraProperties):
            object.__setattr__(self, 'extra_properties', ExtraProperties(self.extra_properties))

    @classmethod
    def create(cls, value: Union[None, bool, Mapping[str, Any], 'ValidationOptions'],
               base: Optional['ValidationOptions'] = None) -> 'ValidationOptions':
        """
        Builds options from the forms accepted by Schema.validate.

        Args:
            value: None (use base), a bool (the sparse flag), a mapping of option names, or options.
            base (Optional[ValidationOptions]): The defaults the value is applied on top of.

        Returns:
            ValidationOptions: The resulting options.

        Raises:
            ValueError: If a mapping contains an unknown option name.
            TypeError: If the value has an unsupported type.
        """
        base = base or cls()
        if value is None:
            return base
        if isinstance(value, ValidationOptions):
            return value
        if isinstance(value, bool):
            return dataclasses.replace(base, sparse=value)
        if isinstance(value, Mapping):
            changes = {}
            for key, option in value.items():
                if key not in OPTION_ALIASES:
                    raise ValueError(f"Unknown validation option: {key}")
                changes[OPTION_ALIASES[key]] = option
            return dataclasses.replace(base, **changes)
        raise TypeError(f"Unsupported validation options: {type(value).__name__}")

    def replace(self, **changes) -> 'ValidationOptions':
        return dataclasses.replace(self, **changes)

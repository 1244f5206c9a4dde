"""Exceptions raised by schemacoerce.

Schema authoring problems and reference failures abort a call immediately.
Data problems are collected in a Validation and surface as a single
ValidationError at the end of the call.
"""

from typing import Any, Dict

from schemacoerce.constants import (STATUS_BAD_REQUEST, STATUS_LOOP_DETECTED,
                                    STATUS_NOT_FOUND, STATUS_SERVER_ERROR)


class SchemaError(Exception):
    """Base class of every exception raised by this package."""

    def __init__(self, message: str, code: int = STATUS_SERVER_ERROR):
        self.message = message
        self.code = code
        super().__init__(message)


class ParseError(SchemaError):
    """Raised when a schema is malformed, for example an unknown type or a non-map allOf entry."""


class RefResolutionError(SchemaError):
    """Raised when a $ref cannot be turned into a schema node.

    Attributes:
        ref: The reference string that failed.
        code: 404 when nothing was found, 400 when the lookup raised, 508 on a cycle.
    """

    default_code = STATUS_NOT_FOUND

    def __init__(self, message: str, ref: str = '', code: int = 0):
        self.ref = ref
        super().__init__(message, code or self.default_code)


class RefNotFoundError(RefResolutionError):
    """The lookup returned nothing for the reference."""

    default_code = STATUS_NOT_FOUND


class RefLookupError(RefResolutionError):
    """The lookup itself raised while resolving the reference."""

    default_code = STATUS_BAD_REQUEST


class RefCycleError(RefResolutionError):
    """The reference re-entered itself before any data was consumed."""

    default_code = STATUS_LOOP_DETECTED


class ValidationError(SchemaError):
    """Raised when data does not satisfy a schema.

    Carries the Validation that collected every violation; its status becomes
    the exception code and its message the exception message.
    """

    def __init__(self, validation):
        self.validation = validation
        super().__init__(validation.get_message(), validation.get_status())

    def get_validation(self):
        return self.validation

    def to_dict(self) -> Dict[str, Any]:
        """Returns the JSON-serializable error document."""
        return self.validation.to_dict()

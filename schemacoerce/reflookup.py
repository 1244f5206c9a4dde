"""Reference lookups.

A ref lookup is any callable taking a $ref string and returning the schema it
designates (a SchemaNode, a raw map or a Schema) or None when nothing exists
at that location.
"""

from typing import Any, Mapping, Optional
from urllib.parse import unquote, urlparse

import jsonpointer
from jsonpointer import JsonPointerException


class ArrayRefLookup:
    """Resolves local '#/...' references against an in-memory document.

    Only fragment references are supported. A reference with a host or a
    path, a relative fragment such as '#foo', or the empty fragment '#' is a
    configuration error and raises ValueError.
    """

    def __init__(self, document: Mapping[str, Any]):
        self.document = document

    def get_document(self) -> Mapping[str, Any]:
        return self.document

    def set_document(self, document: Mapping[str, Any]) -> 'ArrayRefLookup':
        self.document = document
        return self

    def __call__(self, ref: str) -> Optional[Any]:
        """
        Looks up a reference in the document.

        Args:
            ref (str): A reference such as '#/components/schemas/Pet'.

        Returns:
            Optional[Any]: The value at the location, or None when it does not exist.

        Raises:
            ValueError: If the reference is not a local absolute fragment.
        """
        url = urlparse(ref)
        if url.scheme or url.netloc or url.path:
            raise ValueError(f"Only local schema references are supported: {ref}")
        fragment = unquote(url.fragment)
        if not fragment:
            raise ValueError(f"Empty schema references are not supported: {ref}")
        if not fragment.startswith('/'):
            raise ValueError(f"Relative schema references are not supported: {ref}")
        if fragment == '/':
            return self.document
        try:
            return jsonpointer.resolve_pointer(self.document, fragment, None)
        except JsonPointerException:
            return None


class NullRefLookup:
    """A lookup that finds nothing; every reference is reported as not found."""

    def __call__(self, ref: str) -> None:
        return None

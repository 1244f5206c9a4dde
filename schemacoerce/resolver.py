"""Lazy $ref resolution with cycle detection.

References are followed only when the validation core reaches them. The
chain of refs being dereferenced is kept per data level: it starts empty for
every value the core visits, so a recursive schema can validate data of any
depth, while a ref that re-enters itself before any data is consumed is
reported as a cycle.
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional, Tuple

from schemacoerce.constants import MAX_REF_DEPTH
from schemacoerce.exceptions import (ParseError, RefCycleError, RefLookupError,
                                     RefNotFoundError)
from schemacoerce.schemanode import SchemaNode

logger = logging.getLogger(__name__)

RefLookup = Callable[[str], Any]


class RefResolver:
    """Turns $ref strings into schema nodes for one validation call."""

    def __init__(self, lookup: RefLookup):
        self.lookup_function = lookup
        self._memo: Dict[int, SchemaNode] = {}

    def lookup(self, ref: Any) -> SchemaNode:
        """
        Looks up a reference and converts the result to a node.

        Args:
            ref (Any): The reference string.

        Returns:
            SchemaNode: The node the reference designates.

        Raises:
            ParseError: If the reference is not a non-empty string or the lookup returns a non-schema.
            RefLookupError: If the lookup raised.
            RefNotFoundError: If the lookup found nothing.
        """
        if not isinstance(ref, str) or not ref:
            raise ParseError(f"Invalid schema reference: {ref!r}")
        try:
            result = self.lookup_function(ref)
        except Exception as e:
            raise RefLookupError(f"Error resolving schema reference {ref}: {e}", ref) from e
        if result is None:
            raise RefNotFoundError(f"Schema reference could not be found: {ref}", ref)
        if isinstance(result, SchemaNode):
            return result
        if isinstance(result, Mapping) or isinstance(getattr(result, 'node', None), SchemaNode):
            return SchemaNode.from_dict(result, self._memo)
        raise ParseError(f"Schema reference {ref} does not designate a schema.")

    def resolve_refs(self, node: SchemaNode, schema_path: str,
                     chain: List[str]) -> Tuple[SchemaNode, str]:
        """
        Follows $ref hops until a concrete node is reached.

        Args:
            node (SchemaNode): The node to start from.
            schema_path (str): The node's schema path.
            chain (List[str]): The refs dereferenced so far for this data level. Extended in place.

        Returns:
            Tuple[SchemaNode, str]: The concrete node and its schema path (the last ref followed).

        Raises:
            RefCycleError: If a ref re-enters the chain or the chain grows beyond MAX_REF_DEPTH.
        """
        while node.ref is not None:
            ref = node.ref
            if ref in chain:
                raise RefCycleError(
                    f"Cyclical reference cannot be resolved: {' -> '.join(chain + [ref])}", ref)
            if len(chain) >= MAX_REF_DEPTH:
                raise RefCycleError(f"Maximum reference depth {MAX_REF_DEPTH} exceeded at {ref}", ref)
            chain.append(ref)
            logger.debug("Resolving schema reference %s", ref)
            node = self.lookup(ref)
            schema_path = ref
        return node, schema_path

    def try_lookup(self, ref: str) -> Optional[SchemaNode]:
        """Looks up a reference, returning None instead of raising when nothing is found."""
        try:
            return self.lookup(ref)
        except RefNotFoundError:
            logger.debug("Schema reference %s not found", ref)
            return None

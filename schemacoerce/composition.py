"""
allOf flattening and discriminator-driven polymorphism.
"""

from typing import Any, List, Optional, Tuple

from jsonpointer import escape

from schemacoerce.common import as_mapping, join_path
from schemacoerce.constants import (COMPONENTS_SCHEMAS, ERROR_ENUM,
                                    ERROR_MISSING_FIELD, ERROR_TYPE, OBJECT,
                                    STRING)
from schemacoerce.exceptions import ParseError
from schemacoerce.resolver import RefResolver
from schemacoerce.schemanode import SchemaNode
from schemacoerce.validationfield import ValidationField


def flatten_all_of(node: SchemaNode, resolver: RefResolver, chain: List[str]) -> SchemaNode:
    """
    Folds the allOf members of a node into one effective node.

    Members are resolved with their own copy of the ref chain and merged left
    to right, then the declaring node's own keywords are merged last. Only the
    declaring node's discriminator is kept.

    Args:
        node (SchemaNode): A node with an allOf keyword.
        resolver (RefResolver): The call's resolver.
        chain (List[str]): The ref chain of the current data level.

    Returns:
        SchemaNode: A new node; the members are left untouched.

    Raises:
        ParseError: If allOf is not a list of schemas.
    """
    members = node.get('allOf')
    if not isinstance(members, list):
        raise ParseError("The allOf keyword must be a list of schemas.")
    result = SchemaNode()
    for member in members:
        if not isinstance(member, SchemaNode):
            raise ParseError(f"Invalid allOf member: {member!r}")
        member_chain = list(chain)
        resolved = _polymorphic_base(member, resolver, chain)
        if resolved is None:
            resolved, _ = resolver.resolve_refs(member, '', member_chain)
        if 'allOf' in resolved:
            resolved = flatten_all_of(resolved, resolver, member_chain)
        contribution = resolved.copy()
        contribution.fields.pop('discriminator', None)
        result.merge(contribution)
    own = node.copy()
    del own['allOf']
    result.merge(own)
    return result


def _polymorphic_base(member: SchemaNode, resolver: RefResolver,
                      chain: List[str]) -> Optional[SchemaNode]:
    """Returns the discriminating base a selected subtype extends, which is already on the chain."""
    if member.ref is None or member.ref not in chain:
        return None
    base = resolver.lookup(member.ref)
    if 'discriminator' in base and 'allOf' not in base and base.ref is None:
        return base
    return None


def select_discriminated(node: SchemaNode, schema_path: str, value: Any, field: ValidationField,
                         resolver: RefResolver, chain: List[str]) -> Optional[Tuple[SchemaNode, str]]:
    """
    Picks the concrete schema named by the value's discriminator property.

    Args:
        node (SchemaNode): The node declaring the discriminator.
        schema_path (str): The node's schema path; a ref when it was reached through one.
        value (Any): The data being validated.
        field (ValidationField): The field errors are reported on.
        resolver (RefResolver): The call's resolver.
        chain (List[str]): The ref chain of the current data level.

    Returns:
        Optional[Tuple[SchemaNode, str]]: A $ref node for the selected schema and its path,
        or None when an error was recorded.

    Raises:
        ParseError: If the discriminator has no string propertyName.
    """
    discriminator = node.get('discriminator')
    property_name = discriminator.get('propertyName') if isinstance(discriminator, dict) else None
    if not isinstance(property_name, str):
        raise ParseError("A discriminator must declare a string propertyName.")

    data = as_mapping(value)
    if data is None:
        field.add_type_error(value, OBJECT)
        return None

    key = _find_key(data, property_name)
    property_path = join_path(field.name, property_name)
    if key is None:
        field.validation.add_error(property_path, ERROR_MISSING_FIELD, '{field} is required.')
        return None
    type_name = data[key]
    if not isinstance(type_name, str):
        message = '{value} is not a valid {type}.' if isinstance(type_name, (int, float, bool)) \
            else 'The value is not a valid {type}.'
        field.validation.add_error(property_path, ERROR_TYPE, message, value=type_name, type=STRING)
        return None

    ref = _mapped_ref(discriminator.get('mapping') or {}, type_name, schema_path)
    if ref == schema_path or ref in chain or not _in_one_of(node, ref) \
            or resolver.try_lookup(ref) is None:
        field.validation.add_error(property_path, ERROR_ENUM, '{value} is not a valid option.',
                                   value=type_name)
        return None
    return SchemaNode({'$ref': ref}), ref


def _find_key(data, name: str) -> Optional[str]:
    if name in data:
        return name
    lowered = name.lower()
    for key in data:
        if isinstance(key, str) and key.lower() == lowered:
            return key
    return None


def _mapped_ref(mapping: dict, type_name: str, schema_path: str) -> str:
    target = mapping.get(type_name, type_name)
    if not isinstance(target, str):
        raise ParseError(f"Invalid discriminator mapping for {type_name}: {target!r}")
    if target.startswith('#'):
        return target
    return _sibling_ref(schema_path, target)


def _sibling_ref(schema_path: str, name: str) -> str:
    if schema_path.startswith('#') and '/' in schema_path:
        return schema_path[:schema_path.rindex('/') + 1] + escape(name)
    return COMPONENTS_SCHEMAS + escape(name)


def _in_one_of(node: SchemaNode, ref: str) -> bool:
    members = node.get('oneOf')
    if not isinstance(members, list):
        return True
    return any(isinstance(member, SchemaNode) and member.ref == ref for member in members)

"""The canonical schema tree.

A SchemaNode wraps the keyword map of one OpenAPI 3.0 schema object. Child
positions (properties, items, additionalProperties, allOf and oneOf entries)
hold SchemaNode instances, which may be shared between parents or refer back
to an ancestor. Nodes are never copied implicitly.
"""

# pylint: disable=too-many-branches

import copy
from collections.abc import Mapping
from typing import Any, Dict, Iterator, List, Optional

from jsonpointer import escape

from schemacoerce.common import split_path
from schemacoerce.constants import COMPONENTS_SCHEMAS, NULL
from schemacoerce.exceptions import ParseError

# Keywords whose list values are combined without duplicates by merge()
LIST_KEYWORDS = ('required', 'enum', 'type', 'allOf', 'oneOf')
# Keywords holding a single child schema
NODE_KEYWORDS = ('items', 'additionalProperties')
# Keywords holding a list of child schemas
NODE_LIST_KEYWORDS = ('allOf', 'oneOf')


class SchemaNode:
    """One node of the schema tree."""

    def __init__(self, fields: Optional[Dict[str, Any]] = None):
        self.fields: Dict[str, Any] = fields if fields is not None else {}

    @classmethod
    def from_dict(cls, raw: Any, memo: Optional[Dict[int, 'SchemaNode']] = None) -> 'SchemaNode':
        """
        Builds a node tree from a raw JSON-like map.

        The same raw map always yields the same node, so shared sub-schemas stay shared.

        Args:
            raw (Any): A mapping, a SchemaNode, or an object exposing a SchemaNode as `node`.
            memo (Optional[Dict[int, SchemaNode]]): Conversion cache keyed by id(raw).

        Returns:
            SchemaNode: The converted node.

        Raises:
            ParseError: If raw is not a map.
        """
        if isinstance(raw, SchemaNode):
            return raw
        wrapped = getattr(raw, 'node', None)
        if isinstance(wrapped, SchemaNode):
            return wrapped
        if not isinstance(raw, Mapping):
            raise ParseError(f"A schema must be a map, got {type(raw).__name__}.")
        if memo is None:
            memo = {}
        if id(raw) in memo:
            return memo[id(raw)]
        node = cls()
        memo[id(raw)] = node
        for key, value in raw.items():
            if key == 'properties':
                if not isinstance(value, Mapping):
                    raise ParseError("The properties keyword must be a map.")
                node.fields[key] = {name: cls.from_dict(child, memo) for name, child in value.items()}
            elif key in NODE_KEYWORDS and not isinstance(value, bool):
                node.fields[key] = cls.from_dict(value, memo)
            elif key in NODE_LIST_KEYWORDS and isinstance(value, list):
                node.fields[key] = [cls.from_dict(entry, memo) if _is_schema_like(entry) else entry
                                    for entry in value]
            elif key == 'allowNull':
                continue
            else:
                node.fields[key] = copy.deepcopy(value) if isinstance(value, (dict, list)) else value
        if raw.get('allowNull'):
            if 'type' in node.fields:
                node.fields['type'] = _with_null(node.fields['type'])
            else:
                node.fields['nullable'] = True
        return node

    # Mapping-style access
    def __getitem__(self, key: str) -> Any:
        return self.fields[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.fields[key] = value

    def __delitem__(self, key: str) -> None:
        del self.fields[key]

    def __contains__(self, key: object) -> bool:
        return key in self.fields

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __repr__(self) -> str:
        return f"SchemaNode({sorted(self.fields)})"

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    @property
    def types(self) -> List[str]:
        """The declared kinds as a list; [] means any kind."""
        declared = self.fields.get('type')
        if declared is None:
            return []
        if isinstance(declared, str):
            return [declared]
        return list(declared)

    @property
    def ref(self) -> Optional[str]:
        return self.fields.get('$ref')

    @property
    def is_nullable(self) -> bool:
        return bool(self.fields.get('nullable')) or NULL in self.types

    @property
    def properties(self) -> Dict[str, 'SchemaNode']:
        return self.fields.get('properties') or {}

    @property
    def required(self) -> List[str]:
        return list(self.fields.get('required') or [])

    @property
    def items(self) -> Optional['SchemaNode']:
        items = self.fields.get('items')
        return items if isinstance(items, SchemaNode) else None

    def copy(self) -> 'SchemaNode':
        """Returns a shallow copy whose keyword map and properties map are its own."""
        fields = dict(self.fields)
        if isinstance(fields.get('properties'), dict):
            fields['properties'] = dict(fields['properties'])
        for key in LIST_KEYWORDS:
            if isinstance(fields.get(key), list):
                fields[key] = list(fields[key])
        return SchemaNode(fields)

    def merge(self, other: 'SchemaNode') -> 'SchemaNode':
        """
        Deep-merges another node into this one.

        Lists such as required and enum are combined without duplicates,
        properties and other maps are merged recursively, and remaining
        keywords are overwritten by the other node. Child nodes present in
        both are replaced by merged copies, so shared subtrees are left alone.

        Args:
            other (SchemaNode): The node to merge in.

        Returns:
            SchemaNode: self.
        """
        for key, value in other.fields.items():
            mine = self.fields.get(key)
            if key == 'properties' and isinstance(mine, dict) and isinstance(value, dict):
                merged = dict(mine)
                for name, child in value.items():
                    if isinstance(merged.get(name), SchemaNode) and isinstance(child, SchemaNode):
                        merged[name] = merged[name].copy().merge(child)
                    else:
                        merged[name] = child
                self.fields[key] = merged
            elif key in LIST_KEYWORDS and mine is not None:
                self.fields[key] = _union(_as_list(mine), _as_list(value))
            elif isinstance(mine, SchemaNode) and isinstance(value, SchemaNode):
                self.fields[key] = mine.copy().merge(value)
            elif isinstance(mine, dict) and isinstance(value, dict):
                self.fields[key] = _merge_maps(mine, value)
            else:
                self.fields[key] = value
        return self

    def add(self, other: 'SchemaNode', add_properties: bool = False) -> 'SchemaNode':
        """
        Fills in keywords this node does not define yet.

        Existing properties are extended recursively. New properties, with
        their required status, are only taken over when add_properties is True.

        Args:
            other (SchemaNode): The node to take missing keywords from.
            add_properties (bool): Also add properties this node does not declare.

        Returns:
            SchemaNode: self.
        """
        for key, value in other.fields.items():
            if key == 'required':
                continue
            if key == 'properties':
                self._add_properties(value, other.required, add_properties)
            elif key not in self.fields:
                self.fields[key] = value
            elif isinstance(self.fields[key], SchemaNode) and isinstance(value, SchemaNode):
                self.fields[key] = self.fields[key].copy().add(value, add_properties)
        return self

    def _add_properties(self, others: Dict[str, 'SchemaNode'], other_required: List[str],
                        add_properties: bool) -> None:
        if 'properties' not in self.fields:
            if not add_properties:
                return
            self.fields['properties'] = {}
        properties = dict(self.fields['properties'])
        required = self.required
        for name, child in others.items():
            if name in properties:
                if isinstance(properties[name], SchemaNode) and isinstance(child, SchemaNode):
                    properties[name] = properties[name].copy().add(child, add_properties)
            elif add_properties:
                properties[name] = child
                if name in other_required and name not in required:
                    required.append(name)
        self.fields['properties'] = properties
        if required:
            self.fields['required'] = required

    def get_field(self, path: str, default: Any = None) -> Any:
        """
        Reads a value at a '/'-delimited path such as 'properties/id/type'.

        Args:
            path (str): The path. '~0' and '~1' escapes are honored; a dotted path is also accepted.
            default (Any): Returned when the path does not exist.
        """
        current: Any = self
        for part in _path_parts(path):
            if isinstance(current, (SchemaNode, Mapping)) and part in current:
                current = current[part]
            elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
                current = current[int(part)]
            else:
                return default
        return current

    def set_field(self, path: str, value: Any) -> 'SchemaNode':
        """
        Writes a value at a '/'-delimited path, creating intermediate maps.

        Raw maps written to a child schema position are converted to nodes.
        """
        parts = _path_parts(path)
        if not parts:
            raise ValueError('Cannot replace the root of a schema node.')
        current: Any = self
        for index, part in enumerate(parts[:-1]):
            if isinstance(current, list):
                current = current[int(part)]
                continue
            if part not in current:
                current[part] = SchemaNode() if _is_schema_position(parts[:index + 1]) else {}
            current = current[part]
        last = parts[-1]
        if _is_schema_position(parts) and _is_schema_like(value):
            value = SchemaNode.from_dict(value)
        if isinstance(current, list):
            current[int(last)] = value
        else:
            current[last] = value
        return self

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializes the tree to plain JSON-compatible maps.

        A node that contains itself is written as a $ref to
        #/components/schemas/<id>, using '$no-id' when the node has no id.
        """
        return self._to_dict([])

    def _to_dict(self, stack: List['SchemaNode']) -> Dict[str, Any]:
        stack.append(self)
        try:
            result: Dict[str, Any] = {}
            for key, value in self.fields.items():
                result[key] = _serialize(value, stack)
            return result
        finally:
            stack.pop()


def _serialize(value: Any, stack: List[SchemaNode]) -> Any:
    if isinstance(value, SchemaNode):
        if any(value is item for item in stack):
            return {'$ref': COMPONENTS_SCHEMAS + escape(str(value.get('id') or '$no-id'))}
        return value._to_dict(stack)  # pylint: disable=protected-access
    if isinstance(value, dict):
        return {key: _serialize(item, stack) for key, item in value.items()}
    if isinstance(value, list):
        return [_serialize(item, stack) for item in value]
    return value


def _path_parts(path: str) -> List[str]:
    if '/' not in path and '.' in path and not path.startswith('#'):
        return path.split('.')
    return split_path(path)


def _is_schema_position(parts: List[str]) -> bool:
    last = parts[-1]
    parent = parts[-2] if len(parts) > 1 else None
    return (parent == 'properties' or last in NODE_KEYWORDS
            or (parent in NODE_LIST_KEYWORDS and last.isdigit()))


def _is_schema_like(value: Any) -> bool:
    return isinstance(value, (Mapping, SchemaNode)) or isinstance(getattr(value, 'node', None), SchemaNode)


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else [value]


def _union(first: List[Any], second: List[Any]) -> List[Any]:
    result = list(first)
    for item in second:
        if not any(item is existing or (type(item) is type(existing) and item == existing)
                   for existing in result):
            result.append(item)
    return result


def _merge_maps(first: Dict[str, Any], second: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(first)
    for key, value in second.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = _merge_maps(result[key], value)
        else:
            result[key] = value
    return result


def _with_null(declared: Any) -> Any:
    types = [declared] if isinstance(declared, str) else list(declared)
    if NULL not in types:
        types.append(NULL)
    return types

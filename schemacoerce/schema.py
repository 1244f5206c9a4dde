"""The public entry point for validating data against a schema.

Example:

    schema = Schema({
        'type': 'object',
        'properties': {'id': {'type': 'integer'}, 'name': {'type': 'string'}},
        'required': ['id'],
    })
    clean = schema.validate({'id': '12', 'name': 'Widget'})
    # {'id': 12, 'name': 'Widget'}
"""

from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional, Union

from schemacoerce.exceptions import ValidationError
from schemacoerce.extensions import (FilterCallback, FilterRegistry,
                                     ValidatorCallback, ValidatorRegistry,
                                     require_one_of)
from schemacoerce.options import ValidationOptions
from schemacoerce.reflookup import NullRefLookup
from schemacoerce.schemanode import SchemaNode
from schemacoerce.validation import Validation
from schemacoerce.validator import SchemaValidator

OptionsArg = Union[None, bool, Mapping, ValidationOptions]


class Schema:
    """A schema node together with its ref lookup, extensions and default options."""

    def __init__(self, schema: Union[None, Mapping, SchemaNode, 'Schema'] = None,
                 ref_lookup: Optional[Callable[[str], Any]] = None,
                 options: OptionsArg = None):
        """
        Initializes the schema.

        Args:
            schema: A raw schema map, a SchemaNode or another Schema whose node is shared.
            ref_lookup: A callable resolving $ref strings. Defaults to a lookup that finds nothing.
            options: Default options for every validate() call.
        """
        self.node = SchemaNode() if schema is None else SchemaNode.from_dict(schema)
        self.ref_lookup = ref_lookup if ref_lookup is not None else NullRefLookup()
        self.options = ValidationOptions.create(options)
        self.filters = FilterRegistry()
        self.validators = ValidatorRegistry()
        self.validation_factory: Callable[[], Validation] = Validation

    def __getitem__(self, key: str) -> Any:
        return self.node[key]

    def __contains__(self, key: object) -> bool:
        return key in self.node

    def get_node(self) -> SchemaNode:
        return self.node

    def get_field(self, path: str, default: Any = None) -> Any:
        return self.node.get_field(path, default)

    def set_field(self, path: str, value: Any) -> 'Schema':
        self.node.set_field(path, value)
        return self

    def get_id(self) -> str:
        return self.node.get('id', '')

    def set_id(self, schema_id: str) -> 'Schema':
        self.node['id'] = schema_id
        return self

    def get_title(self) -> str:
        return self.node.get('title', '')

    def set_title(self, title: str) -> 'Schema':
        self.node['title'] = title
        return self

    def get_description(self) -> str:
        return self.node.get('description', '')

    def set_description(self, description: str) -> 'Schema':
        self.node['description'] = description
        return self

    def get_ref_lookup(self) -> Callable[[str], Any]:
        return self.ref_lookup

    def set_ref_lookup(self, ref_lookup: Callable[[str], Any]) -> 'Schema':
        self.ref_lookup = ref_lookup
        return self

    def get_options(self) -> ValidationOptions:
        return self.options

    def set_options(self, options: OptionsArg) -> 'Schema':
        """Changes the default options; mappings and booleans are applied on top of the current ones."""
        self.options = ValidationOptions.create(options, self.options)
        return self

    def set_validation_factory(self, factory: Callable[[], Validation]) -> 'Schema':
        """Sets the callable creating the Validation of each call, for example a translating subclass."""
        self.validation_factory = factory
        return self

    def merge(self, other: Union['Schema', Mapping, SchemaNode]) -> 'Schema':
        """Deep-merges another schema into this one. See SchemaNode.merge."""
        self.node.merge(SchemaNode.from_dict(other))
        return self

    def add(self, other: Union['Schema', Mapping, SchemaNode], add_properties: bool = False) -> 'Schema':
        """Fills in what this schema does not define yet. See SchemaNode.add."""
        self.node.add(SchemaNode.from_dict(other), add_properties)
        return self

    def add_filter(self, selector: str, callback: FilterCallback, validate: bool = False) -> 'Schema':
        """
        Registers a filter for a schema path.

        Args:
            selector (str): A schema path such as 'properties/id', '' for the root or a $ref string.
            callback (FilterCallback): Called as callback(value, field); returns the new value or INVALID.
            validate (bool): The filter's output is final and skips the built-in validation.
        """
        self.filters.add(selector, callback, validate)
        return self

    def add_format_filter(self, fmt: str, callback: FilterCallback, validate: bool = False) -> 'Schema':
        """Registers a filter for every node with the given format."""
        self.filters.add_format(fmt, callback, validate)
        return self

    def add_validator(self, selector: str, callback: ValidatorCallback) -> 'Schema':
        """
        Registers a validator for a schema path.

        Args:
            selector (str): A schema path such as 'properties/id', '' for the root or a $ref string.
            callback (ValidatorCallback): Called as callback(value, field) once the value is coerced.
                Returning False or INVALID marks the field invalid.
        """
        self.validators.add(selector, callback)
        return self

    def add_format_validator(self, fmt: str, callback: ValidatorCallback) -> 'Schema':
        self.validators.add_format(fmt, callback)
        return self

    def require_one_of(self, required: List[Any], fieldname: str = '', count: int = 1) -> 'Schema':
        """
        Requires that at least count of the given properties are present.

        Args:
            required (List[Any]): Property names; a nested list means all of its names together.
            fieldname (str): The object to check, as a schema path. The root by default.
            count (int): How many entries must be present.
        """
        return self.add_validator(fieldname, require_one_of(required, count))

    def with_sparse(self) -> 'Schema':
        """Returns a schema sharing this node and extensions that validates in sparse mode by default."""
        return self.derive(options=self.options.replace(sparse=True))

    def derive(self, ref_lookup: Optional[Callable[[str], Any]] = None,
               options: Optional[ValidationOptions] = None) -> 'Schema':
        """Returns a schema sharing this node with copies of the extensions and other settings."""
        derived = Schema(self.node, ref_lookup or self.ref_lookup, options or self.options)
        derived.filters = self.filters.copy()
        derived.validators = self.validators.copy()
        derived.validation_factory = self.validation_factory
        return derived

    def create_validation(self) -> Validation:
        return self.validation_factory()

    def validate(self, data: Any, options: OptionsArg = None) -> Any:
        """
        Validates data and returns the cleaned, coerced copy.

        Args:
            data (Any): The value to validate.
            options: Per-call options applied on top of the schema's defaults.

        Returns:
            Any: The cleaned value.

        Raises:
            ValidationError: If the data is invalid.
            RefResolutionError: If a $ref cannot be resolved.
            ParseError: If the schema is malformed.
        """
        clean, validation = self._run(data, options)
        if not validation.is_valid():
            raise ValidationError(validation)
        return clean

    def is_valid(self, data: Any, options: OptionsArg = None) -> bool:
        """Tells whether data is valid without raising ValidationError."""
        _, validation = self._run(data, options)
        return validation.is_valid()

    def _run(self, data: Any, options: OptionsArg):
        call_options = ValidationOptions.create(options, self.options)
        validation = self.create_validation()
        validator = SchemaValidator(self, call_options, validation)
        clean = validator.validate(data)
        return clean, validation

    def to_dict(self) -> Dict[str, Any]:
        return self.node.to_dict()

    def __repr__(self) -> str:
        return f"Schema({self.node!r})"


def validate(schema: Union[Schema, Mapping, SchemaNode], data: Any, options: OptionsArg = None,
             ref_lookup: Optional[Callable[[str], Any]] = None) -> Any:
    """Validates data against a schema given as a Schema, SchemaNode or raw map."""
    return _as_schema(schema, ref_lookup).validate(data, options)


def is_valid(schema: Union[Schema, Mapping, SchemaNode], data: Any, options: OptionsArg = None,
             ref_lookup: Optional[Callable[[str], Any]] = None) -> bool:
    return _as_schema(schema, ref_lookup).is_valid(data, options)


def _as_schema(schema, ref_lookup) -> Schema:
    if isinstance(schema, Schema):
        return schema if ref_lookup is None else schema.derive(ref_lookup=ref_lookup)
    return Schema(schema, ref_lookup)

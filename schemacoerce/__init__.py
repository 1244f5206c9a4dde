"""schemacoerce: validate and coerce runtime data against OpenAPI 3.0 schema objects."""

import importlib

mod = "schemacoerce"


class LazyLoader:
    """
    Resolves the public names of schemacoerce on first access.
    """
    def __init__(self, mappings):
        self._modules = {}
        self._mappings = mappings

    def _load_module(self, module_name):
        if module_name not in self._modules:
            self._modules[module_name] = importlib.import_module(module_name)
        return self._modules[module_name]

    def __getattr__(self, item):
        if item in self._mappings:
            module_name, attr_name = self._mappings[item]
            return getattr(self._load_module(module_name), attr_name)
        try:
            return self._load_module(f"{mod}.{item}")
        except ModuleNotFoundError as e:
            raise AttributeError(f"module {mod!r} has no attribute {item!r}") from e


# Public names and the modules defining them
_mappings = {
    "Schema": (f"{mod}.schema", "Schema"),
    "validate": (f"{mod}.schema", "validate"),
    "is_valid": (f"{mod}.schema", "is_valid"),
    "SchemaNode": (f"{mod}.schemanode", "SchemaNode"),
    "ArrayRefLookup": (f"{mod}.reflookup", "ArrayRefLookup"),
    "NullRefLookup": (f"{mod}.reflookup", "NullRefLookup"),
    "Validation": (f"{mod}.validation", "Validation"),
    "FieldError": (f"{mod}.validation", "FieldError"),
    "ValidationField": (f"{mod}.validationfield", "ValidationField"),
    "ValidationOptions": (f"{mod}.options", "ValidationOptions"),
    "ExtraProperties": (f"{mod}.options", "ExtraProperties"),
    "INVALID": (f"{mod}.extensions", "INVALID"),
    "Invalid": (f"{mod}.extensions", "Invalid"),
    "is_invalid": (f"{mod}.extensions", "is_invalid"),
    "SchemaError": (f"{mod}.exceptions", "SchemaError"),
    "ParseError": (f"{mod}.exceptions", "ParseError"),
    "ValidationError": (f"{mod}.exceptions", "ValidationError"),
    "RefResolutionError": (f"{mod}.exceptions", "RefResolutionError"),
    "RefNotFoundError": (f"{mod}.exceptions", "RefNotFoundError"),
    "RefLookupError": (f"{mod}.exceptions", "RefLookupError"),
    "RefCycleError": (f"{mod}.exceptions", "RefCycleError"),
}

_lazy_loader = LazyLoader(_mappings)


def __getattr__(name):
    return getattr(_lazy_loader, name)


__all__ = list(_mappings.keys())

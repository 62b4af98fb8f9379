import importlib

mod = "schemaprobe"
class LazyLoader:
    """
    Lazy loader for the schemaprobe functions to keep import time low.
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
            module = self._load_module(module_name)
            return getattr(module, attr_name)
        raise AttributeError(f"module {mod!r} has no attribute {item!r}")

# Define the public names and their corresponding module paths
_mappings = {
    "validate_schema": (f"{mod}.validate", "validate_schema"),
    "validate_file": (f"{mod}.validate", "validate_file"),
    "SchemaValidator": (f"{mod}.validate", "SchemaValidator"),
    "ValidationResult": (f"{mod}.validate", "ValidationResult"),
    "DisplayOptions": (f"{mod}.config", "DisplayOptions"),
    "Violation": (f"{mod}.aggregator", "Violation"),
    "ViolationKind": (f"{mod}.aggregator", "ViolationKind"),
    "SchemaProbeError": (f"{mod}.common", "SchemaProbeError"),
    "InvalidDocumentError": (f"{mod}.common", "InvalidDocumentError"),
    "DefinitionNotFoundError": (f"{mod}.definitions", "DefinitionNotFoundError"),
    "CyclicReferenceError": (f"{mod}.definitions", "CyclicReferenceError"),
    "UnhandledSchemaError": (f"{mod}.walker", "UnhandledSchemaError"),
}

_lazy_loader = LazyLoader(_mappings)

def __getattr__(name):
    return getattr(_lazy_loader, name)

import importlib

mod = "jsonvalidator"
class LazyLoader:
    """
    Lazy loader for the jsonvalidator API so that importing the package stays cheap.
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
        else:
            return self._load_module(f"{mod}.{item}")

# Define the public names and their corresponding module paths
_mappings = {
    "validate": (f"{mod}.validator", "validate"),
    "add_format": (f"{mod}.validator", "add_format"),
    "add_type": (f"{mod}.validator", "add_type"),
    "Validator": (f"{mod}.validator", "Validator"),
    "ValidatorOptions": (f"{mod}.validator", "ValidatorOptions"),
    "ValidationResult": (f"{mod}.helpers", "ValidationResult"),
    "ValidationError": (f"{mod}.helpers", "ValidationError"),
    "SchemaError": (f"{mod}.helpers", "SchemaError"),
    "SchemaContext": (f"{mod}.helpers", "SchemaContext"),
    "JsonValidatorError": (f"{mod}.helpers", "JsonValidatorError"),
    "FormatRegistry": (f"{mod}.formats", "FormatRegistry"),
    "TypeRegistry": (f"{mod}.typeregistry", "TypeRegistry"),
    "SchemaRegistry": (f"{mod}.resolver", "SchemaRegistry"),
    "UNDEFINED": (f"{mod}.typeregistry", "UNDEFINED"),
    "validate_file": (f"{mod}.validatefile", "validate_file"),
}

__version__ = "0.4.0"

_lazy_loader = LazyLoader(_mappings)

def __getattr__(name):
    if name.startswith("__"):
        raise AttributeError(name)
    return getattr(_lazy_loader, name)

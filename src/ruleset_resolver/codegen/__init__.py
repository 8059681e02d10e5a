"""Reference resolution into generated modules and their in-memory loader."""

from .generator import GeneratedModule, module_key, reference_resolve
from .ir import ArrayLiteral, Module, ObjectLiteral, Primitive, ReferenceLink
from .loader import (
    CircularModuleError,
    ModuleExports,
    ModuleLoader,
    ModuleLoaderError,
    VirtualModuleNotFoundError,
)
from .pointer import UnresolvablePointerError

__all__ = [
    "ArrayLiteral",
    "CircularModuleError",
    "GeneratedModule",
    "Module",
    "ModuleExports",
    "ModuleLoader",
    "ModuleLoaderError",
    "ObjectLiteral",
    "Primitive",
    "ReferenceLink",
    "UnresolvablePointerError",
    "VirtualModuleNotFoundError",
    "module_key",
    "reference_resolve",
]

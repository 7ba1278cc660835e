"""Module registry, resolution and the built-in core module."""

from .core import CoreModule  # noqa: F401
from .registry import (  # noqa: F401
    CORE_MODULE,
    ModuleEntry,
    ModuleRegistry,
    discover_hooks,
)
from .resolver import DirectoryResolver, ModuleResolver  # noqa: F401

__all__ = [
    "CORE_MODULE",
    "CoreModule",
    "DirectoryResolver",
    "ModuleEntry",
    "ModuleRegistry",
    "ModuleResolver",
    "discover_hooks",
]

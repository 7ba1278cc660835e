"""Resolve a module name to a freshly executed plugin object."""

from __future__ import annotations

import importlib.util
import itertools
import logging
import os
import sys
from pathlib import Path
from types import ModuleType
from typing import Protocol, runtime_checkable

from ..errors import ModuleLoadError
from ..logs.logger import logger

_MODULE_NAMESPACE = "modbot_plugins"
_load_counter = itertools.count(1)


@runtime_checkable
class ModuleResolver(Protocol):
    def resolve(self, name: str) -> object: ...  # noqa: D401,E701


class DirectoryResolver:
    """Loads ``<directory>/<name>.py`` as a new module object on every call.

    Each call executes the file again under a unique module name, so a
    reload always picks up the current source. The previous module object
    for the same name is dropped from ``sys.modules``.
    """

    def __init__(self, directory: str | os.PathLike[str]):
        self.directory = Path(directory)
        self._module_names: dict[str, str] = {}

    def path_for(self, name: str) -> Path:
        return self.directory / f"{name}.py"

    def resolve(self, name: str) -> ModuleType:
        if not name.isidentifier():
            raise ModuleLoadError(name, f"Invalid module name: {name!r}")
        path = self.path_for(name)
        if not path.is_file():
            raise ModuleLoadError(name, f"No such module: {path}")

        module_name = f"{_MODULE_NAMESPACE}.{name}_{next(_load_counter)}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ModuleLoadError(name, f"Cannot load module from {path}")
        module = importlib.util.module_from_spec(spec)
        # Registered before exec so dataclasses and pickling can find the module.
        sys.modules[module_name] = module
        try:
            # Compiled from source every time; cached bytecode can lag an edit
            # made within the same second.
            code = compile(path.read_bytes(), str(path), "exec")
            exec(code, module.__dict__)  # noqa: S102
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise ModuleLoadError(name, f"{type(e).__name__}: {e}") from e

        previous = self._module_names.pop(name, None)
        if previous is not None:
            sys.modules.pop(previous, None)
        self._module_names[name] = module_name
        logger.log_event(
            "module", "resolved", level=logging.DEBUG, module=name, path=str(path)
        )
        return module

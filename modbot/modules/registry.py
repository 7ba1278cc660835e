"""Connection-scoped module registry."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..errors import DuplicateModuleError, ModuleLoadError, log_error
from ..logs.logger import logger
from .resolver import ModuleResolver

if TYPE_CHECKING:  # pragma: no cover
    from ..irc.connection import Connection

CORE_MODULE = "core"
LIFECYCLE_HOOKS = ("init", "on_msg", "raw_line")
COMMAND_HOOK_PREFIX = "cmd_"


def discover_hooks(handle: object) -> frozenset[str]:
    """Names of the recognised callables present on ``handle``."""
    hooks = set()
    for attr in dir(handle):
        if attr in LIFECYCLE_HOOKS or attr.startswith(COMMAND_HOOK_PREFIX):
            if callable(getattr(handle, attr, None)):
                hooks.add(attr)
    return frozenset(hooks)


@dataclass(frozen=True, slots=True)
class ModuleEntry:
    name: str
    handle: object
    hooks: frozenset[str]


class ModuleRegistry:
    """Modules by name, in insertion order.

    The ``core`` entry is created with the registry and cannot be loaded
    over or unregistered. Dispatch iterates ``dispatch_entries()``, a
    snapshot that leaves ``core`` out.
    """

    def __init__(
        self, connection: Connection, resolver: ModuleResolver, core_handle: object
    ):
        self.connection = connection
        self.resolver = resolver
        self._entries: dict[str, ModuleEntry] = {
            CORE_MODULE: ModuleEntry(CORE_MODULE, core_handle, discover_hooks(core_handle))
        }

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def names(self) -> list[str]:
        return list(self._entries)

    def get(self, name: str) -> ModuleEntry | None:
        return self._entries.get(name)

    @property
    def core(self) -> ModuleEntry:
        return self._entries[CORE_MODULE]

    def dispatch_entries(self) -> list[ModuleEntry]:
        return [entry for name, entry in self._entries.items() if name != CORE_MODULE]

    async def register(self, name: str, handle: object) -> ModuleEntry:
        """Add a module and run its ``init`` hook once.

        The entry stays registered when ``init`` fails.

        Raises:
            DuplicateModuleError: If ``name`` is already registered.
            ModuleLoadError: If ``init`` raised.
        """
        if name in self._entries:
            raise DuplicateModuleError(name)
        entry = ModuleEntry(name, handle, discover_hooks(handle))
        self._entries[name] = entry
        logger.log_event("module", "registered", level=logging.DEBUG, module=name)

        if "init" in entry.hooks:
            try:
                result = handle.init(self.connection)  # type: ignore[attr-defined]
                if inspect.isawaitable(result):
                    await result
            except Exception as e:  # noqa: BLE001
                logger.log_event(
                    "module", "init_failed", level=logging.ERROR, module=name, error=str(e)
                )
                raise ModuleLoadError(name, f"{type(e).__name__}: {e}") from e
        return entry

    def unregister(self, name: str) -> bool:
        """Remove a module. Returns False when absent or when asked for ``core``."""
        if name == CORE_MODULE:
            logger.log_event(
                "module", "unregister_core_refused", level=logging.WARNING, module=name
            )
            return False
        if self._entries.pop(name, None) is None:
            return False
        logger.log_event("module", "unregistered", level=logging.DEBUG, module=name)
        return True

    async def load(self, name: str) -> ModuleLoadError | None:
        """Resolve ``name`` and install it, replacing any registered version.

        Never raises for resolution or ``init`` problems; the error is
        logged and returned instead.
        """
        if name == CORE_MODULE:
            return ModuleLoadError(name, "The core module is built in")
        try:
            handle = self.resolver.resolve(name)
            self.unregister(name)
            await self.register(name, handle)
        except ModuleLoadError as e:
            log_error(f"Error loading module {name!r}", e)
            return e
        except Exception as e:  # noqa: BLE001
            error = ModuleLoadError(name, f"{type(e).__name__}: {e}")
            error.__cause__ = e
            log_error(f"Error loading module {name!r}", e, context={"module": name})
            return error
        return None

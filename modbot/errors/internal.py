"""Centralized internal error hierarchy.

None of these are fatal to a connection: each is raised at a component
boundary and handled one level up (line dropped, load reported, callback
outcome turned into a reply).

Classes:
  InternalError        – Base for all internal errors.
  NetworkError         – Transport open/read failures.
  MalformedLineError   – A protocol line that does not match the grammar.
  ModuleLoadError      – Plugin resolution or ``init`` failure.
  DuplicateModuleError – Registration under a name that is already taken.
  CallbackFailure      – A module hook raised during a dispatch phase.
  CallbackTimeoutError – A module hook exceeded its execution budget.
  StateTransitionError – Attempt to move the registration state backwards.
  ConfigError          – Configuration file missing or invalid.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal application errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class NetworkError(InternalError):
    """Exception raised when the transport cannot be opened or read."""


class MalformedLineError(InternalError):
    """Exception raised for an inbound line the parser cannot match.

    Args:
        line: The offending raw line.
    """

    def __init__(self, line: str) -> None:
        super().__init__(f"Malformed line: {line!r}", data={"line": line})
        self.line = line


class ModuleLoadError(InternalError):
    """Exception raised when a module cannot be resolved or initialized.

    Args:
        name: Module name.
        message: Descriptive error message.
    """

    def __init__(self, name: str, message: str) -> None:
        super().__init__(message, data={"module": name})
        self.name = name


class DuplicateModuleError(ModuleLoadError):
    """Exception raised when registering a name that is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(name, f"Trying to overwrite a module: {name}")


class CallbackFailure(InternalError):
    """Exception describing a module hook that raised during dispatch.

    The original exception is kept as ``__cause__``.
    """

    def __init__(self, module: str, hook: str, message: str) -> None:
        super().__init__(message, data={"module": module, "hook": hook})
        self.module = module
        self.hook = hook


class CallbackTimeoutError(CallbackFailure):
    """Exception raised when a module hook runs past its execution budget."""

    def __init__(self, module: str, hook: str, timeout: float) -> None:
        super().__init__(module, hook, f"{hook} timed out after {timeout}s")
        self.timeout = timeout


class StateTransitionError(InternalError):
    """Exception raised for a registration state regression."""


class ConfigError(InternalError):
    """Exception raised when configuration cannot be loaded or validated."""


__all__ = [
    "InternalError",
    "NetworkError",
    "MalformedLineError",
    "ModuleLoadError",
    "DuplicateModuleError",
    "CallbackFailure",
    "CallbackTimeoutError",
    "StateTransitionError",
    "ConfigError",
]

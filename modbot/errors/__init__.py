"""Error taxonomy and logging helpers."""

from .handling import log_error, retry_network_operation  # noqa: F401
from .internal import (  # noqa: F401
    CallbackFailure,
    CallbackTimeoutError,
    ConfigError,
    DuplicateModuleError,
    InternalError,
    MalformedLineError,
    ModuleLoadError,
    NetworkError,
    StateTransitionError,
)

__all__ = [
    "CallbackFailure",
    "CallbackTimeoutError",
    "ConfigError",
    "DuplicateModuleError",
    "InternalError",
    "MalformedLineError",
    "ModuleLoadError",
    "NetworkError",
    "StateTransitionError",
    "log_error",
    "retry_network_operation",
]

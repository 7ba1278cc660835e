"""
Configuration constants for modbot

Every constant can be overridden by setting an environment variable with the
same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The value used when the variable is unset or unparsable.

    Returns:
        The parsed integer value, or the default.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The value used when the variable is unset or unparsable.

    Returns:
        The parsed float value, or the default.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# Transport
READ_CHUNK_SIZE = _get_env_int("READ_CHUNK_SIZE", 4096)
CONNECT_TIMEOUT = _get_env_float("CONNECT_TIMEOUT", 30.0)
CONNECT_ATTEMPTS = _get_env_int("CONNECT_ATTEMPTS", 3)
READ_TIMEOUT = _get_env_float("READ_TIMEOUT", 300.0)  # no traffic at all for this long = dead link

# Dispatch
CALLBACK_TIMEOUT = _get_env_float("CALLBACK_TIMEOUT", 10.0)

# Config watcher
RELOAD_WATCH_DELAY = _get_env_float("RELOAD_WATCH_DELAY", 0.5)

# Protocol
LINE_TERMINATOR = "\r\n"
RPL_WELCOME = "001"
RPL_ENDOFMOTD = "376"
ERR_NOMOTD = "422"
WELCOME_BURST_END_CODES = frozenset({RPL_ENDOFMOTD, ERR_NOMOTD})
CHANNEL_PREFIXES = "#&+!"
PRIVILEGED_EXPRESSION_SENTINEL = "%"
DEFAULT_CONFIG_FILE = "modbot.conf"

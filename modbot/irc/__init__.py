"""IRC subsystem package.

Line framing, parsing, registration, the message wrapper handed to modules
and the connection that ties them together. Only the leaf modules are
re-exported here; import ``Connection`` from ``modbot.irc.connection``.
"""

from .framer import LineFramer  # noqa: F401
from .models import ConnectionState, HookOutcome, HookResult, ParsedRecord  # noqa: F401
from .parser import format_line, parse_line  # noqa: F401

__all__ = [
    "ConnectionState",
    "HookOutcome",
    "HookResult",
    "LineFramer",
    "ParsedRecord",
    "format_line",
    "parse_line",
]

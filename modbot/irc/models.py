"""Shared IRC data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ConnectionState(Enum):
    """Registration progress of one connection. Values order the transitions."""

    CONNECTING = 1
    REGISTERING = 2
    AWAITING_WELCOME = 3
    READY = 4

    def __lt__(self, other: ConnectionState) -> bool:
        if not isinstance(other, ConnectionState):
            return NotImplemented
        return self.value < other.value


@dataclass(frozen=True, slots=True)
class ParsedRecord:
    """One parsed protocol line.

    ``sender`` is the origin prefix without its leading ``:``, ``dest`` the
    middle parameters joined by single spaces and ``text`` the trimmed
    trailing parameter.
    """

    code: str
    sender: str | None = None
    dest: str | None = None
    text: str | None = None
    params: tuple[str, ...] = ()
    tags: dict[str, str] = field(default_factory=dict, compare=False)
    raw: str = field(default="", compare=False)


class HookOutcome(Enum):
    HANDLED = "handled"
    NOT_HANDLED = "not_handled"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class HookResult:
    outcome: HookOutcome
    module: str | None = None
    error: BaseException | None = None

    @property
    def stops(self) -> bool:
        return self.outcome is not HookOutcome.NOT_HANDLED


NOT_HANDLED = HookResult(HookOutcome.NOT_HANDLED)

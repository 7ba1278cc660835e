"""Connection registration workflow: handshake lines and the welcome burst."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..constants import RPL_WELCOME, WELCOME_BURST_END_CODES
from ..errors import StateTransitionError
from ..logs.logger import logger
from .models import ConnectionState, ParsedRecord
from .parser import format_line

if TYPE_CHECKING:  # pragma: no cover
    from .connection import Connection


class IRCRegistration:
    """Holds the connection state and gates inbound traffic until ready.

    Before ``READY`` only the welcome-burst codes move the state forward;
    everything else is dropped here and never reaches dispatch. A ``PING``
    is still answered so servers that require a ping cookie finish
    registering us.
    """

    def __init__(self, client: Connection, *, preauthenticated: bool = False):
        self.client = client
        self.state = (
            ConnectionState.READY if preauthenticated else ConnectionState.CONNECTING
        )

    @property
    def is_ready(self) -> bool:
        return self.state is ConnectionState.READY

    def _set_state(self, new_state: ConnectionState) -> None:
        if new_state is self.state:
            return
        if new_state < self.state:
            raise StateTransitionError(
                f"Cannot move from {self.state.name} back to {new_state.name}",
                data={"old_state": self.state.name, "new_state": new_state.name},
            )
        logger.log_event(
            "irc",
            "state_change",
            level=logging.DEBUG,
            nick=self.client.nick,
            old_state=self.state.name,
            new_state=new_state.name,
        )
        self.state = new_state

    def transport_opened(self) -> None:
        """Send the handshake lines; a ready connection sends nothing."""
        if self.is_ready:
            logger.log_event("irc", "preauthenticated", nick=self.client.nick)
            return
        config = self.client.config
        if config.password:
            self.client.writeln(format_line("PASS", config.password))
        self.client.writeln(format_line("NICK", self.client.nick))
        self.client.writeln(format_line("USER", config.user, "8", "*", text=config.realname))
        self._set_state(ConnectionState.REGISTERING)

    def handle(self, record: ParsedRecord) -> bool:
        """Inspect one pre-ready record. Returns True once the burst completes."""
        if record.code == "PING":
            self.client.writeln(format_line("PONG", text=record.text or record.dest or ""))
            return False
        if record.code == RPL_WELCOME:
            if record.params:
                # The server may have truncated or altered the requested nick.
                self.client.nick = record.params[0]
            self._set_state(ConnectionState.AWAITING_WELCOME)
            return False
        if record.code in WELCOME_BURST_END_CODES:
            channels = self.client.config.channels
            for channel in channels:
                self.client.writeln(format_line("JOIN", channel))
            self._set_state(ConnectionState.READY)
            logger.log_event(
                "irc", "ready", nick=self.client.nick, channels=len(channels)
            )
            return True
        return False

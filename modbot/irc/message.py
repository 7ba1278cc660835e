"""Event wrapper handed to module hooks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..constants import CHANNEL_PREFIXES
from ..logs.logger import logger
from .models import ParsedRecord
from .parser import format_line

if TYPE_CHECKING:  # pragma: no cover
    from .connection import Connection


class Message:
    """A parsed record bound to the connection it arrived on.

    Owned by one dispatch cycle. Hooks may read any attribute or call
    ``reply`` while they run but should copy what they want to keep.
    ``command`` and ``args`` stay unset until ``make_command`` is called.
    """

    def __init__(self, connection: Connection, record: ParsedRecord):
        self.connection = connection
        self.record = record
        self.command: str | None = None
        self.args: list[str] = []

    def __repr__(self) -> str:
        return f"Message({self.type} from {self.sender!r} to {self.dest!r}: {self.text!r})"

    @property
    def type(self) -> str:
        return self.record.code.upper()

    @property
    def sender(self) -> str:
        return self.record.sender or ""

    @property
    def dest(self) -> str:
        return self.record.dest or ""

    @property
    def text(self) -> str:
        return self.record.text or ""

    @property
    def sender_nick(self) -> str:
        """The origin with its ``!user@host`` suffix removed."""
        return self.sender.split("!", 1)[0].split("@", 1)[0]

    def is_superuser(self) -> bool:
        nick = self.sender_nick
        return bool(nick) and nick in self.connection.config.superusers

    @property
    def channel(self) -> str | None:
        """The destination channel, or None for a private message."""
        params = self.record.params
        if params and params[0][:1] in CHANNEL_PREFIXES:
            return params[0]
        return None

    @property
    def is_private(self) -> bool:
        return self.type == "PRIVMSG" and self.channel is None

    @property
    def is_self(self) -> bool:
        nick = self.sender_nick
        return bool(nick) and nick == self.connection.nick

    def apply_self_nick_change(self) -> bool:
        """Track our own nick change. Returns True if the event was consumed."""
        if self.type != "NICK" or not self.is_self:
            return False
        new_nick = self.text or self.dest
        if not new_nick:
            return False
        self.connection.nick = new_nick
        logger.log_event("irc", "nick_change", nick=new_nick, new_nick=new_nick)
        return True

    def make_command(self) -> None:
        """Split the text into ``command`` and ``args``. Safe to call repeatedly."""
        if self.command is not None:
            return
        body = self.text
        prefix = self.connection.config.prefix
        nick = self.connection.nick
        if body.startswith(prefix):
            body = body[len(prefix) :]
        elif nick and body.startswith(nick):
            body = body[len(nick) :].lstrip(":,")
        tokens = body.split()
        self.command = tokens[0].lower() if tokens else ""
        self.args = tokens[1:]

    @property
    def reply_target(self) -> str:
        return self.channel or self.sender_nick

    def reply(self, text: object) -> None:
        target = self.reply_target
        if not target:
            logger.log_event(
                "irc",
                "reply_dropped",
                level=logging.DEBUG,
                nick=self.connection.nick,
                reply=str(text),
            )
            return
        self.connection.writeln(format_line("PRIVMSG", target, text=str(text)))

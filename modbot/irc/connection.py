"""One IRC connection: transport, registration, modules and dispatch."""

from __future__ import annotations

import asyncio
import logging
import re

from ..config.model import BotConfig
from ..constants import (
    CONNECT_ATTEMPTS,
    CONNECT_TIMEOUT,
    LINE_TERMINATOR,
    READ_CHUNK_SIZE,
    READ_TIMEOUT,
)
from ..dispatch.engine import DispatchEngine
from ..errors import (
    MalformedLineError,
    ModuleLoadError,
    NetworkError,
    log_error,
    retry_network_operation,
)
from ..logs.logger import logger
from ..modules.core import CoreModule
from ..modules.registry import ModuleRegistry
from ..modules.resolver import DirectoryResolver, ModuleResolver
from .framer import LineFramer
from .message import Message
from .models import ConnectionState
from .parser import parse_line
from .registration import IRCRegistration

_LINE_BREAKS = re.compile(r"[\r\n]+")


class Connection:  # pylint: disable=too-many-instance-attributes
    """A single bot connection.

    Inbound chunks are framed, parsed and processed strictly one line at a
    time. Until the welcome burst ends, records only feed the registration
    workflow; afterwards each one becomes a ``Message`` for the dispatch
    engine.

    Passing an already-open ``writer`` (and ``reader``) skips registration:
    the transport is assumed to be logged in upstream, so the connection
    starts ``READY`` unless ``preauthenticated=False`` is given.
    """

    def __init__(
        self,
        config: BotConfig,
        *,
        reader: asyncio.StreamReader | None = None,
        writer: asyncio.StreamWriter | None = None,
        preauthenticated: bool | None = None,
        resolver: ModuleResolver | None = None,
    ):
        if preauthenticated is None:
            preauthenticated = writer is not None
        self.config = config
        self.nick = config.nick
        self.reader = reader
        self.writer = writer
        self.running = False
        self.framer = LineFramer()
        self.registration = IRCRegistration(self, preauthenticated=preauthenticated)
        self.registry = ModuleRegistry(
            self, resolver or DirectoryResolver(config.module_dir), CoreModule()
        )
        self.dispatcher = DispatchEngine(self)

    @property
    def state(self) -> ConnectionState:
        return self.registration.state

    @property
    def is_ready(self) -> bool:
        return self.registration.is_ready

    async def connect(self) -> None:
        """Open the transport unless one was supplied, then start registration.

        Raises:
            NetworkError: If the server cannot be reached after retries.
        """
        if self.writer is None:
            host, port = self.config.host, self.config.port
            logger.log_event("irc", "connect_start", nick=self.nick, host=host, port=port)

            async def _open() -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
                return await asyncio.wait_for(
                    asyncio.open_connection(host, port), timeout=CONNECT_TIMEOUT
                )

            self.reader, self.writer = await retry_network_operation(
                _open, f"connect to {host}:{port}", max_attempts=CONNECT_ATTEMPTS
            )
            logger.log_event("irc", "connected", nick=self.nick, host=host, port=port)
        self.registration.transport_opened()
        await self.drain()

    def writeln(self, line: str) -> None:
        """Queue one line on the transport; embedded line breaks become spaces."""
        line = _LINE_BREAKS.sub(" ", line)
        if self.writer is None:
            logger.log_event(
                "irc", "write_without_transport", level=logging.WARNING, nick=self.nick
            )
            return
        logger.log_event("irc", "raw_out", level=logging.DEBUG, nick=self.nick, raw=line)
        self.writer.write(f"{line}{LINE_TERMINATOR}".encode())

    async def drain(self) -> None:
        if self.writer is not None:
            await self.writer.drain()

    async def feed(self, data: bytes | str) -> int:
        """Process one inbound chunk. Returns the number of complete lines handled."""
        lines = self.framer.feed(data)
        for line in lines:
            await self.handle_line(line)
        return len(lines)

    async def handle_line(self, raw_line: str) -> None:
        logger.log_event(
            "irc", "raw_in", level=logging.DEBUG, nick=self.nick, raw=raw_line
        )
        try:
            record = parse_line(raw_line)
        except MalformedLineError:
            logger.log_event(
                "irc", "malformed_line", level=logging.WARNING, nick=self.nick, raw=raw_line
            )
            return

        if not self.registration.is_ready:
            self.registration.handle(record)
            return

        try:
            await self.dispatcher.dispatch(Message(self, record))
        except Exception as e:  # noqa: BLE001
            # A broken line must not take the connection down with it.
            log_error("Dispatch failed", e, context={"raw": raw_line})

    async def register_module(self, name: str, handle: object) -> ModuleLoadError | None:
        """Register an already constructed module object; errors are returned."""
        try:
            await self.registry.register(name, handle)
        except ModuleLoadError as e:
            log_error(f"Error registering module {name!r}", e)
            return e
        return None

    async def load_module(self, name: str) -> ModuleLoadError | None:
        return await self.registry.load(name)

    def unload_module(self, name: str) -> bool:
        return self.registry.unregister(name)

    async def load_startup_modules(self) -> int:
        logger.log_event("module", "loading", nick=self.nick)
        loaded = 0
        for name in self.config.modules:
            error = await self.registry.load(name)
            if error is None:
                loaded += 1
            else:
                logger.log_event(
                    "module",
                    "load_failed",
                    level=logging.ERROR,
                    nick=self.nick,
                    module=name,
                    error=str(error),
                )
        logger.log_event("module", "loaded_all", nick=self.nick, count=loaded)
        return loaded

    async def listen(self) -> None:
        """Read and process server traffic until EOF, a read timeout or ``close()``."""
        if self.reader is None:
            raise NetworkError("Cannot listen without an open transport")
        self.running = True
        logger.log_event("irc", "listener_start", nick=self.nick)
        try:
            while self.running:
                try:
                    data = await asyncio.wait_for(
                        self.reader.read(READ_CHUNK_SIZE), timeout=READ_TIMEOUT
                    )
                except TimeoutError:
                    logger.log_event(
                        "irc",
                        "read_timeout",
                        level=logging.WARNING,
                        nick=self.nick,
                        timeout=READ_TIMEOUT,
                    )
                    break
                if not data:
                    logger.log_event(
                        "irc", "connection_lost", level=logging.ERROR, nick=self.nick
                    )
                    break
                await self.feed(data)
                await self.drain()
        finally:
            self.running = False
            logger.log_event(
                "irc", "listener_stopped", level=logging.WARNING, nick=self.nick
            )

    async def run(self) -> None:
        await self.connect()
        try:
            await self.load_startup_modules()
            await self.listen()
        finally:
            await self.close()

    async def close(self) -> None:
        self.running = False
        writer = self.writer
        self.writer = None
        self.reader = None
        if writer is not None:
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError) as e:
                logger.log_event(
                    "irc", "close_error", level=logging.DEBUG, nick=self.nick, error=str(e)
                )
        self.framer.reset()
        logger.log_event("irc", "closed", nick=self.nick)

    def reload_config(self, config: BotConfig) -> None:
        """Swap in a new configuration.

        Prefix, superusers and module directory apply immediately. Server,
        nick and channel changes only take effect on the next connection.
        """
        old = self.config
        self.config = config
        if config.module_dir != old.module_dir and isinstance(
            self.registry.resolver, DirectoryResolver
        ):
            self.registry.resolver = DirectoryResolver(config.module_dir)
        for field in ("host", "port", "nick", "channels"):
            if getattr(old, field) != getattr(config, field):
                logger.log_event(
                    "irc", "config_deferred", level=logging.WARNING, nick=self.nick, field=field
                )
        logger.log_event("irc", "config_reloaded", nick=self.nick)

from __future__ import annotations

import asyncio

import pytest

from modbot.errors import NetworkError
from modbot.errors import handling as handling_mod
from modbot.irc import connection as connection_mod
from modbot.irc.connection import Connection
from modbot.irc.models import ConnectionState
from modbot.modules.resolver import DirectoryResolver

from tests.fixtures.irc_fakes import FakeWriter, make_config


def stream_with(*chunks: bytes, eof: bool = True) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    for chunk in chunks:
        reader.feed_data(chunk)
    if eof:
        reader.feed_eof()
    return reader


@pytest.fixture
def fast_retry(monkeypatch):
    """Keep the real retry policy but without backoff sleeps."""

    async def _retry(operation, context, max_attempts=3, max_wait=30.0):
        return await handling_mod.retry_network_operation(
            operation, context, max_attempts=max_attempts, max_wait=0
        )

    monkeypatch.setattr(connection_mod, "retry_network_operation", _retry)


def test_writer_supplied_defaults_to_preauthenticated(writer):
    conn = Connection(make_config(), writer=writer)
    assert conn.state is ConnectionState.READY
    assert Connection(make_config()).state is ConnectionState.CONNECTING


def test_default_resolver_uses_module_dir():
    conn = Connection(make_config(module_dir="plugins"))
    assert isinstance(conn.registry.resolver, DirectoryResolver)
    assert conn.registry.resolver.directory.name == "plugins"


def test_writeln_terminates_and_sanitises(connection, writer):
    connection.writeln("PRIVMSG #c :one\r\ntwo\nthree")
    assert writer.text == "PRIVMSG #c :one two three\r\n"


def test_writeln_without_transport_is_dropped():
    conn = Connection(make_config())
    conn.writeln("PRIVMSG #c :lost")  # must not raise


@pytest.mark.asyncio
async def test_preauthenticated_connect_sends_nothing(connection, writer):
    await connection.connect()
    assert writer.lines == []
    assert writer.drains == 1


@pytest.mark.asyncio
async def test_malformed_line_dropped_and_processing_continues(connection, writer):
    handled = await connection.feed(b":only-a-prefix\r\n\x01\x02\r\nPING :ok\r\n")
    assert handled == 3
    assert writer.lines == ["PONG :ok"]


@pytest.mark.asyncio
async def test_feed_keeps_partial_line_for_next_chunk(connection, writer):
    assert await connection.feed(b"PING :sp") == 0
    assert await connection.feed(b"lit\r\n") == 1
    assert writer.lines == ["PONG :split"]


@pytest.mark.asyncio
async def test_listen_processes_until_eof(connection, writer):
    connection.reader = stream_with(b"PING :a\r\nPI", b"NG :b\r\n")
    await connection.listen()
    assert writer.lines == ["PONG :a", "PONG :b"]
    assert connection.running is False
    assert writer.drains >= 1


@pytest.mark.asyncio
async def test_listen_requires_transport():
    with pytest.raises(NetworkError):
        await Connection(make_config()).listen()


@pytest.mark.asyncio
async def test_listen_stops_on_read_timeout(connection, monkeypatch):
    monkeypatch.setattr(connection_mod, "READ_TIMEOUT", 0.01)
    connection.reader = stream_with(eof=False)
    await asyncio.wait_for(connection.listen(), timeout=1)
    assert connection.running is False


@pytest.mark.asyncio
async def test_run_loads_modules_listens_and_closes(make_connection, resolver, writer):
    seen: list[str] = []

    class Tracker:
        def raw_line(self, event):
            seen.append(event.type)
            return False

    resolver.factories["tracker"] = Tracker
    conn = make_connection(modules=["tracker"])
    conn.reader = stream_with(b":bob!b@h JOIN #c\r\n")
    await conn.run()
    assert seen == ["JOIN"]
    assert writer.closed
    assert conn.writer is None


@pytest.mark.asyncio
async def test_full_registration_over_stream(monkeypatch, resolver):
    writer = FakeWriter()
    reader = stream_with(
        b":srv 001 modbot_ :Welcome\r\n",
        b":srv 376 modbot_ :End of MOTD\r\n",
    )

    async def fake_open(host, port):
        assert (host, port) == ("irc.example.net", 6667)
        return reader, writer

    monkeypatch.setattr(connection_mod.asyncio, "open_connection", fake_open)
    conn = Connection(make_config(channels=["#a", "b"]), resolver=resolver)
    await conn.run()
    assert writer.lines == [
        "NICK modbot",
        "USER modbot 8 * :modbot",
        "JOIN #a",
        "JOIN #b",
    ]
    assert conn.state is ConnectionState.READY
    assert conn.nick == "modbot_"


@pytest.mark.asyncio
async def test_connect_retries_then_succeeds(monkeypatch, fast_retry, resolver):
    writer = FakeWriter()
    attempts = {"n": 0}

    async def flaky_open(host, port):
        attempts["n"] += 1
        if attempts["n"] < 2:
            raise ConnectionRefusedError("refused")
        return stream_with(), writer

    monkeypatch.setattr(connection_mod.asyncio, "open_connection", flaky_open)
    conn = Connection(make_config(), resolver=resolver)
    await conn.connect()
    assert attempts["n"] == 2
    assert writer.lines[0] == "NICK modbot"


@pytest.mark.asyncio
async def test_connect_gives_up_with_network_error(monkeypatch, fast_retry, resolver):
    attempts = {"n": 0}

    async def refused(host, port):
        attempts["n"] += 1
        raise OSError("unreachable")

    monkeypatch.setattr(connection_mod.asyncio, "open_connection", refused)
    conn = Connection(make_config(), resolver=resolver)
    with pytest.raises(NetworkError) as exc:
        await conn.connect()
    assert attempts["n"] == connection_mod.CONNECT_ATTEMPTS
    assert isinstance(exc.value.__cause__, OSError)


@pytest.mark.asyncio
async def test_close_is_idempotent(connection, writer):
    connection.framer.feed(b"PARTIAL")
    await connection.close()
    await connection.close()
    assert writer.closed
    assert connection.framer.pending == ""


def test_reload_config_applies_live_settings(connection):
    connection.reload_config(make_config(prefix="?", superusers=["carol"], host="other.net"))
    assert connection.config.prefix == "?"
    assert connection.config.superusers == frozenset({"carol"})
    # Resolver supplied by the test is kept when module_dir is unchanged.
    assert not isinstance(connection.registry.resolver, DirectoryResolver)


def test_reload_config_rebuilds_directory_resolver():
    conn = Connection(make_config(module_dir="modules"))
    conn.reload_config(make_config(module_dir="other_modules"))
    assert conn.registry.resolver.directory.name == "other_modules"


@pytest.mark.asyncio
async def test_reloaded_prefix_used_for_next_command(connection, writer):
    class Pinger:
        def cmd_ping(self, event):
            event.reply("pong")
            return True

    await connection.register_module("pinger", Pinger())
    connection.reload_config(make_config(prefix="?"))
    await connection.handle_line(":bob!b@h PRIVMSG #c :!ping")
    await connection.handle_line(":bob!b@h PRIVMSG #c :?ping")
    assert writer.lines == ["PRIVMSG #c :pong"]

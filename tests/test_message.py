from __future__ import annotations

from modbot.irc.message import Message
from modbot.irc.parser import parse_line


def msg(connection, raw: str) -> Message:
    return Message(connection, parse_line(raw))


def test_sender_nick_strips_user_and_host(connection):
    assert msg(connection, ":bob!~u@host.example PRIVMSG #c :x").sender_nick == "bob"
    assert msg(connection, ":bob@host PRIVMSG #c :x").sender_nick == "bob"
    assert msg(connection, ":irc.example.net NOTICE * :x").sender_nick == "irc.example.net"
    assert msg(connection, "PING :x").sender_nick == ""


def test_superuser_lookup(connection):
    assert msg(connection, ":admin!u@h PRIVMSG #c :x").is_superuser()
    assert not msg(connection, ":bob!u@h PRIVMSG #c :x").is_superuser()
    assert not msg(connection, "PING :x").is_superuser()


def test_superuser_follows_live_config(connection):
    event = msg(connection, ":bob!u@h PRIVMSG #c :x")
    connection.config = connection.config.model_copy(update={"superusers": frozenset({"bob"})})
    assert event.is_superuser()


def test_make_command_with_prefix(connection):
    event = msg(connection, ":bob!u@h PRIVMSG #c :!PiNg  a   b")
    assert event.command is None
    event.make_command()
    assert event.command == "ping"
    assert event.args == ["a", "b"]


def test_make_command_addressed_by_nick(connection):
    event = msg(connection, ":bob!u@h PRIVMSG #c :modbot: Seen alice")
    event.make_command()
    assert event.command == "seen"
    assert event.args == ["alice"]


def test_make_command_is_idempotent(connection):
    event = msg(connection, ":bob!u@h PRIVMSG #c :!echo one")
    event.make_command()
    event.args.append("mutated")
    event.make_command()
    assert event.command == "echo"
    assert event.args == ["one", "mutated"]


def test_make_command_bare_prefix(connection):
    event = msg(connection, ":bob!u@h PRIVMSG #c :!")
    event.make_command()
    assert event.command == ""
    assert event.args == []


def test_reply_to_channel(connection, writer):
    msg(connection, ":bob!u@h PRIVMSG #c :hi").reply("hello")
    assert writer.lines == ["PRIVMSG #c :hello"]


def test_reply_to_private_message_goes_to_sender(connection, writer):
    event = msg(connection, ":bob!u@h PRIVMSG modbot :hi")
    assert event.is_private
    event.reply(42)
    assert writer.lines == ["PRIVMSG bob :42"]


def test_reply_without_any_target_is_dropped(connection, writer):
    msg(connection, "PING :x").reply("nobody")
    assert writer.lines == []


def test_self_nick_change_updates_tracked_nick(connection):
    event = msg(connection, ":modbot!u@h NICK :newbot")
    assert event.is_self
    assert event.apply_self_nick_change()
    assert connection.nick == "newbot"


def test_self_nick_change_without_colon(connection):
    assert msg(connection, ":modbot!u@h NICK newbot").apply_self_nick_change()
    assert connection.nick == "newbot"


def test_other_users_nick_change_is_not_ours(connection):
    event = msg(connection, ":bob!u@h NICK :robert")
    assert not event.apply_self_nick_change()
    assert connection.nick == "modbot"


def test_accessors(connection):
    event = msg(connection, ":bob!u@h privmsg #c :hi")
    assert event.type == "PRIVMSG"
    assert event.sender == "bob!u@h"
    assert event.dest == "#c"
    assert event.channel == "#c"
    assert event.text == "hi"
    assert "PRIVMSG" in repr(event)

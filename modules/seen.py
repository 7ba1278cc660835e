"""Remembers when each nick last spoke."""

import time

_last_seen: dict[str, tuple[float, str]] = {}
_bot = None


def init(connection):
    global _bot
    _bot = connection
    _last_seen.clear()


def on_msg(event):
    _last_seen[event.sender_nick.lower()] = (time.time(), event.text)
    return False


def cmd_seen(event):
    if not event.args:
        event.reply("Usage: seen <nick>")
        return True
    nick = event.args[0]
    if nick == _bot.nick:
        event.reply("I'm right here.")
        return True
    entry = _last_seen.get(nick.lower())
    if entry is None:
        event.reply(f"I haven't seen {nick}.")
        return True
    when, text = entry
    minutes = int((time.time() - when) // 60)
    event.reply(f"{nick} was last seen {minutes} minute(s) ago saying: {text}")
    return True

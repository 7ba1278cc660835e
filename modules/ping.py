"""Answers ``ping`` with ``pong``."""


def cmd_ping(event):
    event.reply(f"{event.sender_nick}: pong")
    return True

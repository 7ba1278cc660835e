"""Repeats its arguments back to the caller."""


def cmd_echo(event):
    if not event.args:
        event.reply("Usage: echo <text>")
    else:
        event.reply(" ".join(event.args))
    return True

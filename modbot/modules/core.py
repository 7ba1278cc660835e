"""Built-in commands served by the ``core`` registry entry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .registry import CORE_MODULE

if TYPE_CHECKING:  # pragma: no cover
    from ..irc.message import Message


class CoreModule:
    """Module administration commands. Superuser only, always handled."""

    async def cmd_loadmod(self, event: Message) -> bool:
        if not event.is_superuser():
            event.reply("Nope.")
            return True
        if not event.args:
            event.reply("Usage: loadmod <name>")
            return True
        error = await event.connection.registry.load(event.args[0])
        if error is not None:
            event.reply(f"An error occurred: {error}")
            return True
        event.reply("Success.")
        return True

    def cmd_unloadmod(self, event: Message) -> bool:
        if not event.is_superuser():
            event.reply("Nope.")
            return True
        if not event.args:
            event.reply("Usage: unloadmod <name>")
            return True
        name = event.args[0]
        if name == CORE_MODULE:
            event.reply("The core module cannot be unloaded.")
        elif event.connection.registry.unregister(name):
            event.reply("Success.")
        else:
            event.reply(f"No module named {name}.")
        return True

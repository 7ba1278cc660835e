"""Routes ready-state events through the module hook phases."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING

from ..constants import CALLBACK_TIMEOUT, PRIVILEGED_EXPRESSION_SENTINEL
from ..errors import CallbackFailure, CallbackTimeoutError, log_error
from ..irc.models import NOT_HANDLED, HookOutcome, HookResult
from ..irc.parser import format_line
from ..logs.logger import logger
from ..modules.registry import CORE_MODULE, ModuleEntry

if TYPE_CHECKING:  # pragma: no cover
    from ..irc.connection import Connection
    from ..irc.message import Message

_HANDLED_BY_CORE = HookResult(HookOutcome.HANDLED, CORE_MODULE)


class DispatchEngine:
    """Runs one event through the dispatch phases, stopping at the first that ends it.

    Phase order: own traffic, PING, privileged expressions, commands,
    ``on_msg``, ``raw_line``. In each hook phase modules run in registry
    order; the first to return truthy or to raise ends the phase. A raise
    is reported to the event's reply target as ``An error occurred: ...``.
    """

    def __init__(self, connection: Connection, callback_timeout: float = CALLBACK_TIMEOUT):
        self.connection = connection
        self.callback_timeout = callback_timeout

    async def dispatch(self, event: Message) -> HookResult:
        if event.is_self:
            event.apply_self_nick_change()
            return NOT_HANDLED

        if event.type == "PING":
            self.connection.writeln(format_line("PONG", text=event.text or event.dest))
            return _HANDLED_BY_CORE

        if self._is_privileged_expression(event):
            await self._evaluate_privileged_expression(event)
            return _HANDLED_BY_CORE

        if event.type == "PRIVMSG":
            if self._is_command_candidate(event):
                event.make_command()
                hook = f"cmd_{event.command}"
                if hook in self.connection.registry.core.hooks:
                    return await self._run_core_command(hook, event)
                if event.command:
                    result = await self.run_phase(hook, event)
                    if result.stops:
                        return result

            result = await self.run_phase("on_msg", event)
            if result.stops:
                return result

        return await self.run_phase("raw_line", event)

    async def run_phase(self, hook: str, event: Message) -> HookResult:
        """Offer ``event`` to every module exposing ``hook`` until one ends the phase."""
        for entry in self.connection.registry.dispatch_entries():
            if hook not in entry.hooks:
                continue
            result = await self._invoke(entry, hook, event)
            if result.outcome is HookOutcome.HANDLED:
                logger.log_event(
                    "dispatch",
                    "handled",
                    level=logging.DEBUG,
                    nick=self.connection.nick,
                    hook=hook,
                    module=entry.name,
                )
                return result
            if result.outcome is HookOutcome.FAILED:
                self._report_failure(event, hook, result)
                return result
        return NOT_HANDLED

    async def _run_core_command(self, hook: str, event: Message) -> HookResult:
        result = await self._invoke(self.connection.registry.core, hook, event)
        if result.outcome is HookOutcome.FAILED:
            self._report_failure(event, hook, result)
            return result
        return _HANDLED_BY_CORE

    async def _invoke(self, entry: ModuleEntry, hook: str, event: Message) -> HookResult:
        handler = getattr(entry.handle, hook)
        try:
            value = handler(event)
            if inspect.isawaitable(value):
                try:
                    value = await asyncio.wait_for(value, timeout=self.callback_timeout)
                except TimeoutError:
                    return HookResult(
                        HookOutcome.FAILED,
                        entry.name,
                        CallbackTimeoutError(entry.name, hook, self.callback_timeout),
                    )
        except Exception as e:  # noqa: BLE001
            failure = CallbackFailure(entry.name, hook, str(e) or type(e).__name__)
            failure.__cause__ = e
            return HookResult(HookOutcome.FAILED, entry.name, failure)
        if value:
            return HookResult(HookOutcome.HANDLED, entry.name)
        return NOT_HANDLED

    def _report_failure(self, event: Message, hook: str, result: HookResult) -> None:
        error = result.error
        event.reply(f"An error occurred: {error}")
        log_error(
            f"Module hook {hook} failed",
            error.__cause__ or error,  # type: ignore[union-attr]
            context={"module": result.module, "hook": hook},
        )

    def _is_command_candidate(self, event: Message) -> bool:
        text = event.text
        nick = self.connection.nick
        return text.startswith(self.connection.config.prefix) or bool(
            nick and text.startswith(nick)
        )

    @staticmethod
    def _is_privileged_expression(event: Message) -> bool:
        return (
            event.type == "PRIVMSG"
            and event.text.startswith(PRIVILEGED_EXPRESSION_SENTINEL)
            and event.is_superuser()
        )

    async def _evaluate_privileged_expression(self, event: Message) -> None:
        """Evaluate operator-supplied Python and reply with the result or error.

        Trusts the superuser completely; this is arbitrary code execution.
        """
        logger.log_event(
            "dispatch",
            "privileged_eval",
            level=logging.WARNING,
            nick=self.connection.nick,
            sender=event.sender_nick,
        )
        namespace = {
            "asyncio": asyncio,
            "bot": self.connection,
            "connection": self.connection,
            "event": event,
            "registry": self.connection.registry,
        }
        try:
            result = eval(event.text[len(PRIVILEGED_EXPRESSION_SENTINEL) :], namespace)  # noqa: S307
            if inspect.isawaitable(result):
                result = await asyncio.wait_for(result, timeout=self.callback_timeout)
        except Exception as e:  # noqa: BLE001
            event.reply(f"{type(e).__name__}: {e}")
            return
        event.reply(result)

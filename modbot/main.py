#!/usr/bin/env python3
"""
Main entry point for modbot
"""

import asyncio
import logging
import signal
import sys

from .config import ConfigWatcher, default_config_path, load_config
from .errors import ConfigError, NetworkError, log_error
from .irc.connection import Connection
from .logging_config import LoggerConfigurator
from .logs.logger import logger


async def main(config_file: str | None = None) -> None:
    """Load the configuration, connect and serve until the link drops.

    Raises:
        ConfigError: If the configuration cannot be loaded.
        NetworkError: If the server cannot be reached.
    """
    config_file = config_file or default_config_path()
    config = load_config(config_file)
    logger.log_event("app", "start", nick=config.nick)

    connection = Connection(config)
    loop = asyncio.get_running_loop()

    def _on_config_change(new_config):
        loop.call_soon_threadsafe(connection.reload_config, new_config)

    def _on_signal(signum: int) -> None:
        logger.log_event("app", "signal", level=logging.WARNING, signal=signum)
        loop.create_task(connection.close())

    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, _on_signal, signum)
        except NotImplementedError:  # pragma: no cover - Windows event loops
            pass

    watcher = ConfigWatcher(config_file, _on_config_change)
    watcher.start()
    try:
        await connection.run()
    finally:
        watcher.stop()
        logger.log_event("app", "shutdown")


def run() -> None:
    """Synchronous entry point for the application."""
    LoggerConfigurator().configure()
    config_file = sys.argv[1] if len(sys.argv) > 1 else None
    try:
        asyncio.run(main(config_file))
    except KeyboardInterrupt:
        sys.exit(0)
    except (ConfigError, NetworkError) as e:
        log_error("Startup failed", e)
        sys.exit(1)


if __name__ == "__main__":
    run()

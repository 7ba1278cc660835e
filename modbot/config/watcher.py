"""
Configuration file watcher for runtime config changes
"""

import logging
import os
import threading
from collections.abc import Callable
from typing import Any

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from ..constants import RELOAD_WATCH_DELAY
from ..errors import ConfigError
from ..logs.logger import logger
from .loader import load_config
from .model import BotConfig


class ConfigFileHandler(FileSystemEventHandler):
    """File system event handler for config file changes"""

    last_modified: float

    def __init__(self, config_file: str, watcher_instance: "ConfigWatcher"):
        super().__init__()
        self.config_file = os.path.abspath(config_file)
        self.watcher = watcher_instance
        self.last_modified = 0.0

    def _should_process(self) -> bool:
        """Check if the config file's mtime advanced since last processed."""
        try:
            mtime = os.path.getmtime(self.config_file)
        except FileNotFoundError:
            return False
        if mtime <= self.last_modified:
            return False
        self.last_modified = mtime
        return True

    def _handle_event(self, src_path: str) -> None:
        if os.path.abspath(src_path) != self.config_file:
            return
        if self._should_process():
            self.watcher.schedule_reload()

    def on_modified(self, event):
        self._handle_event(getattr(event, "src_path", ""))

    def on_created(self, event):
        self._handle_event(getattr(event, "src_path", ""))

    def on_moved(self, event):
        # Editors that save atomically rename a temp file over the target.
        dest = getattr(event, "dest_path", None) or getattr(event, "src_path", "")
        self._handle_event(dest)


class ConfigWatcher:
    """Watches the config file and hands each valid reload to ``callback``.

    Reloads are debounced by ``RELOAD_WATCH_DELAY`` so a burst of write
    events produces one reload. The callback runs on the watcher thread.
    """

    observer: Any | None
    running: bool

    def __init__(
        self,
        config_file: str,
        callback: Callable[[BotConfig], Any],
        delay: float = RELOAD_WATCH_DELAY,
    ):
        self.config_file = config_file
        self.callback = callback
        self.delay = delay
        self.observer = None
        self.running = False
        self._timer: threading.Timer | None = None
        self._timer_lock = threading.Lock()

    def start(self) -> None:
        """Start watching the config file"""
        if self.running:
            return

        config_dir = os.path.dirname(os.path.abspath(self.config_file))
        if not os.path.exists(config_dir):
            logger.log_event(
                "config_watch", "dir_missing", level=logging.WARNING, path=config_dir
            )
            return

        try:
            observer = Observer()
            observer.schedule(
                ConfigFileHandler(self.config_file, self), config_dir, recursive=False
            )
            observer.start()
        except OSError as e:
            logger.log_event(
                "config_watch", "start_failed", level=logging.ERROR, error=str(e)
            )
            return
        self.observer = observer
        self.running = True
        logger.log_event("config_watch", "start", path=self.config_file)

    def stop(self) -> None:
        """Stop watching the config file"""
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        obs = self.observer
        if self.running and obs is not None:
            try:
                obs.stop()
                obs.join()
            finally:
                self.running = False
                self.observer = None
                logger.log_event("config_watch", "stopped")

    def schedule_reload(self) -> None:
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self.reload)
            self._timer.daemon = True
            self._timer.start()

    def reload(self) -> BotConfig | None:
        """Load the file now; invalid content is logged and ignored."""
        try:
            config = load_config(self.config_file)
        except ConfigError as e:
            logger.log_event(
                "config_watch", "reload_failed", level=logging.ERROR, error=str(e)
            )
            return None
        logger.log_event("config_watch", "reloaded", path=self.config_file)
        self.callback(config)
        return config

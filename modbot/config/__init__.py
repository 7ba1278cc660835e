from .loader import default_config_path, load_config
from .model import BotConfig
from .watcher import ConfigFileHandler, ConfigWatcher

__all__ = [
    "BotConfig",
    "ConfigFileHandler",
    "ConfigWatcher",
    "default_config_path",
    "load_config",
]

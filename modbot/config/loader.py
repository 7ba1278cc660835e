"""Configuration loading utilities."""

from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import ValidationError

from ..constants import DEFAULT_CONFIG_FILE
from ..errors import ConfigError
from .model import BotConfig


def default_config_path() -> str:
    return os.environ.get("MODBOT_CONF_FILE", DEFAULT_CONFIG_FILE)


def load_config(path: str | os.PathLike[str] | None = None) -> BotConfig:
    """Load and validate the bot configuration from a JSON file.

    Args:
        path: Config file path. Defaults to ``$MODBOT_CONF_FILE`` or ``modbot.conf``.

    Returns:
        The validated BotConfig.

    Raises:
        ConfigError: If the file is missing, not JSON, or fails validation.
    """
    config_path = Path(path if path is not None else default_config_path())
    try:
        with config_path.open(encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(
            f"Configuration file not found: {config_path}", data={"path": str(config_path)}
        ) from e
    except (OSError, ValueError) as e:
        raise ConfigError(
            f"Cannot read configuration file {config_path}: {e}",
            data={"path": str(config_path)},
        ) from e

    if not isinstance(data, dict):
        raise ConfigError(
            f"Configuration file {config_path} must contain a JSON object",
            data={"path": str(config_path)},
        )
    data.setdefault("config_path", str(config_path))
    try:
        return BotConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid configuration in {config_path}: {e}", data={"path": str(config_path)}
        ) from e

"""Configuration service for the devban CLI.

ConfigService is the single source of truth for configuration. It handles:

- Loading and saving config.json
- Dotted-key get/set for the ``config`` commands
- Resetting to defaults
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir
from pydantic import BaseModel, ValidationError

from devban_board.models.config_models import AppConfig

_APP_NAME = "devban_board"


class ConfigService:
    """Service for loading, saving and editing the application configuration."""

    def __init__(self):
        """Initialize the config service."""

        self.config_dir = Path(user_config_dir(_APP_NAME))
        self.config_path = self.config_dir / "config.json"
        self.data_dir = Path(user_data_dir(_APP_NAME))

        # Ensure directories exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from storage, creating defaults on first run."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # Expected on first run
            self._config = AppConfig()
            self.save_config()
        except Exception as e:
            raise RuntimeError(f"Failed to load config: {e}") from e

        return self._config

    def save_config(self) -> None:
        """Save the current configuration to storage.

        The file is written next to the target and swapped in atomically.
        """
        config = self.config
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.config_path.with_suffix(".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(config.model_dump_json(indent=4))

            # Holds the session token
            tmp_path.chmod(0o600)
            tmp_path.replace(self.config_path)
        except Exception as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def reset_config(self) -> None:
        """Reset configuration to defaults."""
        self._config = AppConfig()
        self.save_config()

    def get(self, key: str) -> Any:
        """Get a configuration value by dot-separated key.

        Returns None for unknown keys.
        """
        value: Any = self.config
        for part in key.split("."):
            if not isinstance(value, BaseModel) or part not in type(value).model_fields:
                return None
            value = getattr(value, part)
        return value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dot-separated key and persist it.

        Strings are parsed as JSON first so ``"3"`` becomes an int and
        ``"true"`` a bool; anything that is not valid JSON stays a string.

        Raises:
            KeyError: If the key does not exist
            ValueError: If the value fails validation
        """
        raw = value
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError:
                pass

        *parents, leaf = key.split(".")
        data = self.config.model_dump()
        target = data
        for part in parents:
            if not isinstance(target.get(part), dict):
                raise KeyError(f"Unknown config key: {key}")
            target = target[part]
        if leaf not in target:
            raise KeyError(f"Unknown config key: {key}")
        target[leaf] = value

        try:
            self._config = AppConfig.model_validate(data)
        except ValidationError as e:
            if value is raw:
                raise ValueError(f"Invalid value for {key}: {e}") from e
            # "1234" for a string field such as session.uid
            target[leaf] = raw
            try:
                self._config = AppConfig.model_validate(data)
            except ValidationError:
                raise ValueError(f"Invalid value for {key}: {e}") from e
        self.save_config()


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Return the process-wide ConfigService."""
    return ConfigService()

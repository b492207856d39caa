"""Configuration file discovery and persistence.

Configuration lives in a YAML file, found in this order:
1. An explicit path (``ser --config``)
2. The SER_CONFIG environment variable
3. ~/.ser/config.yaml
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ser.exceptions import ConfigError
from ser.models.config import SerConfig


class ConfigService:
    """Service for reading and writing the ser configuration."""

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize the config service.

        Args:
            config_path: Optional explicit path to the config file.
        """
        self._config_path = config_path

    @property
    def config_path(self) -> Path:
        """Get the config file path."""
        if self._config_path is not None:
            return self._config_path
        env_path = os.environ.get("SER_CONFIG")
        if env_path:
            return Path(env_path).expanduser()
        return Path.home() / ".ser" / "config.yaml"

    def get_config(self) -> dict[str, Any]:
        """Read the raw configuration.

        Returns:
            Configuration dictionary; empty if the file does not exist.

        Raises:
            ConfigError: If the file is not valid YAML or not a mapping.
        """
        if not self.config_path.exists():
            return {}
        try:
            with open(self.config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping: {self.config_path}")
        return data

    def set_config(self, config: dict[str, Any]) -> None:
        """Validate and write the raw configuration.

        Args:
            config: Configuration dictionary to write.

        Raises:
            ConfigError: If the configuration is invalid.
        """
        self.validate(config)
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump(config, f, default_flow_style=False)

    def validate(self, config: dict[str, Any]) -> SerConfig:
        """Build a SerConfig from a raw dictionary.

        Raises:
            ConfigError: If the configuration is invalid.
        """
        try:
            return SerConfig.model_validate(config)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {self.config_path}:\n{e}") from e

    def load(self) -> SerConfig:
        """Load the effective configuration.

        The SER_SCOPE environment variable overrides the ``scope`` key.

        Returns:
            The configuration, with defaults for anything not set.
        """
        data = self.get_config()
        env_scope = os.environ.get("SER_SCOPE")
        if env_scope:
            data = {**data, "scope": env_scope}
        return self.validate(data)

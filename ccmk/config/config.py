"""Configuration management for ccmk.

Provides centralized configuration with TOML support, validation and
hierarchical loading from defaults → config file → environment.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import toml

from ccmk.models import Config
from ccmk.utils.exceptions import ConfigurationError
from ccmk.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

# Global configuration instance
_config_manager: ConfigManager | None = None

ENV_MAPPINGS: dict[str, str] = {
    # Builder
    "CCMK_ANNOUNCE": "builder.announce",
    "CCMK_SOURCE": "builder.source",
    "CCMK_CREATED_BY": "builder.created_by",
    "CCMK_PIECE_LENGTH": "builder.piece_length",
    "CCMK_HASH_WORKERS": "builder.hash_workers",
    # Observability
    "CCMK_LOG_LEVEL": "observability.log_level",
    "CCMK_LOG_FILE": "observability.log_file",
    "CCMK_STRUCTURED_LOGGING": "observability.structured_logging",
    "CCMK_LOG_CORRELATION_ID": "observability.log_correlation_id",
}

# Values that stay strings even when they look numeric or boolean
_STRING_PATHS = frozenset(
    {
        "builder.announce",
        "builder.source",
        "builder.created_by",
        "observability.log_file",
    }
)


def _parse_env_value(raw: str, path: str) -> bool | int | float | str:
    if path in _STRING_PATHS:
        return raw
    low = raw.lower()
    if low in {"true", "yes", "on"}:
        return True
    if low in {"false", "no", "off"}:
        return False
    try:
        if "." in raw:
            return float(raw)
        return int(raw)
    except ValueError:
        return raw


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_file: str | Path | None = None, configure_logging: bool = True):
        """Initialize configuration manager.

        Args:
            config_file: Path to TOML config file. If None, searches for ccmk.toml
            configure_logging: Apply the observability section to the logging tree

        """
        self.config_file = self._find_config_file(config_file)
        self.config = self._load_config()
        if configure_logging:
            self._setup_logging()

    def _find_config_file(
        self,
        config_file: str | Path | None,
    ) -> Path | None:
        """Find configuration file in standard locations."""
        if config_file:
            return Path(config_file)

        search_paths = [
            Path.cwd() / "ccmk.toml",
            Path.home() / ".config" / "ccmk" / "ccmk.toml",
            Path.home() / ".ccmk.toml",
        ]

        for path in search_paths:
            if path.exists():
                return path

        return None

    def _load_config(self) -> Config:
        """Load configuration from file and environment."""
        config_data: dict[str, Any] = {}

        if self.config_file and self.config_file.exists():
            try:
                with open(self.config_file, encoding="utf-8") as f:
                    config_data.update(toml.load(f))
            except (OSError, toml.TomlDecodeError) as e:
                logger.warning("Failed to load config file %s: %s", self.config_file, e)

        config_data = self._merge_config(config_data, self._get_env_config())

        try:
            return Config(**config_data)
        except Exception as e:
            msg = f"Invalid configuration: {e}"
            raise ConfigurationError(msg) from e

    def _get_env_config(self) -> dict[str, Any]:
        """Get configuration from environment variables."""
        env_config: dict[str, Any] = {}

        def _set_nested(d: dict[str, Any], path: str, value: Any) -> None:
            parts = path.split(".")
            cur = d
            for p in parts[:-1]:
                cur = cur.setdefault(p, {})
            cur[parts[-1]] = value

        for env_name, cfg_path in ENV_MAPPINGS.items():
            raw = os.getenv(env_name)
            if raw is None:
                continue
            _set_nested(env_config, cfg_path, _parse_env_value(raw, cfg_path))

        return env_config

    def _merge_config(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Merge configuration dictionaries recursively."""
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value

        return result

    def _setup_logging(self) -> None:
        setup_logging(self.config.observability)

    def export(self) -> str:
        """Export current configuration as TOML."""
        return toml.dumps(self.config.model_dump(mode="json", exclude_none=True))


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager.config


def init_config(
    config_file: str | Path | None = None,
    configure_logging: bool = True,
) -> ConfigManager:
    """Initialize the global configuration manager."""
    global _config_manager
    _config_manager = ConfigManager(config_file, configure_logging=configure_logging)
    return _config_manager


def reset_config() -> None:
    """Drop the global configuration so the next access reloads it."""
    global _config_manager
    _config_manager = None

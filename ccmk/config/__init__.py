"""Configuration package for ccmk."""

from __future__ import annotations

from ccmk.config.config import (
    ConfigManager,
    get_config,
    init_config,
)

__all__ = [
    "ConfigManager",
    "get_config",
    "init_config",
]

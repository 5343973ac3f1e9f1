"""Configuration model and file loading."""
from __future__ import annotations

from hippocampus.config.loader import CONFIG_FILENAME, load_config, load_config_file
from hippocampus.config.settings import (
    DEFAULT_DECAY_RATES,
    DEFAULT_RETENTION_FLOOR,
    ConfigError,
    HippocampusConfig,
)

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_DECAY_RATES",
    "DEFAULT_RETENTION_FLOOR",
    "ConfigError",
    "HippocampusConfig",
    "load_config",
    "load_config_file",
]

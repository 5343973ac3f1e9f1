"""Configuration file loading.

The host decides where configuration lives; this module only turns a file
into a validated ``HippocampusConfig``.  JSON is the default format; files
ending in ``.yaml`` or ``.yml`` are parsed with PyYAML.  Partial files are
deep-merged over the defaults.

``load_config`` is the lenient entry point: any failure is logged and the
defaults are returned.  ``load_config_file`` raises ``ConfigError`` instead,
for callers (such as the CLI) that want to surface the problem.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path

import yaml

from hippocampus.config.settings import ConfigError, HippocampusConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "hippocampus.config.json"


def _parse(raw: str, path: Path) -> dict[str, object]:
    if path.suffix.lower() in (".yaml", ".yml"):
        data = yaml.safe_load(raw)
    else:
        data = json.loads(raw)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping, got {type(data).__name__}")
    return data


def load_config_file(
    path: str | Path,
    base: HippocampusConfig | None = None,
) -> HippocampusConfig:
    """Load ``path`` and merge it over ``base`` (defaults when omitted).

    Raises
    ------
    ConfigError
        If the file cannot be read, parsed, or holds invalid values.
    """
    path = Path(path)
    base = base if base is not None else HippocampusConfig()
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read configuration file {path}: {exc}") from exc
    try:
        data = _parse(raw, path)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot parse configuration file {path}: {exc}") from exc
    config = base.with_overrides(data)
    logger.debug("Loaded configuration from %s", path)
    return config


def load_config(
    workspace: str | Path,
    filename: str = CONFIG_FILENAME,
) -> HippocampusConfig:
    """Load ``<workspace>/<filename>``, falling back to the defaults.

    A missing file is not an error.  An unreadable, unparseable or invalid
    file is logged as a warning and the defaults are returned.
    """
    path = Path(workspace) / filename
    if not path.exists():
        logger.debug("No configuration file at %s, using defaults", path)
        return HippocampusConfig()
    try:
        return load_config_file(path)
    except ConfigError as exc:
        logger.warning("Ignoring configuration file %s: %s", path, exc)
        return HippocampusConfig()

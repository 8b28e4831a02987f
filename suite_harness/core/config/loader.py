"""
Configuration loader — build.yml → BuildSettings → Config.

build.yml marks the top of the source tree: its directory becomes the
source root that every path in the build graph is relative to.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from suite_harness.core.engine.config import Config
from suite_harness.core.models.config import BuildSettings

logger = logging.getLogger(__name__)

BUILD_CONFIG_FILE = "build.yml"


class ConfigError(Exception):
    """build.yml or a Blueprints.yml cannot be read or is malformed."""


def read_yaml(path: Path, label: str | None = None) -> Any:
    """Parse one YAML file, turning I/O and syntax problems into ConfigError.

    ``label`` is how the file is named in messages (default: ``path``).
    """
    label = label or str(path)
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {label}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {label}: {e}") from e


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """The nearest build.yml in ``start_dir`` (default: cwd) or above it."""
    start = (start_dir or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / BUILD_CONFIG_FILE
        if candidate.is_file():
            return candidate
    return None


def load_settings(path: Path) -> BuildSettings:
    """Read and validate build.yml.  An empty file means all defaults.

    Raises:
        ConfigError: missing file, bad YAML, or invalid values.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    logger.debug("Reading build settings from %s", path)

    data = read_yaml(path) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        return BuildSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid build configuration in {path}: {e}") from e


def load_config(path: Path | None = None) -> Config:
    """Config for the tree rooted at ``path``'s directory.

    Without ``path``, build.yml is searched for from the cwd upward.

    Raises:
        ConfigError: no build.yml found, or it is invalid.
    """
    path = path or find_config_file()
    if path is None:
        raise ConfigError(f"No {BUILD_CONFIG_FILE} found. Create one or pass --config.")

    settings = load_settings(path)
    root = path.parent.resolve()
    logger.info("Source root %s (from %s)", root, path.name)
    return Config(settings, root)

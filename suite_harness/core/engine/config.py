"""
Global configuration accessors used by modules during their phases.
"""

from __future__ import annotations

import sys
from pathlib import Path

from suite_harness.core.engine.errors import MissingConfigError
from suite_harness.core.models.config import ArchType, BuildSettings


class Config:
    """Read-only view over ``BuildSettings`` for one source tree."""

    def __init__(self, settings: BuildSettings, source_root: Path):
        self._settings = settings
        self._source_root = source_root

    @property
    def settings(self) -> BuildSettings:
        return self._settings

    @property
    def source_root(self) -> Path:
        """Absolute directory every graph path is relative to."""
        return self._source_root

    def platform_version_name(self) -> str:
        if self._settings.platform_version_name is None:
            raise MissingConfigError("platform_version_name is not set")
        return self._settings.platform_version_name

    def build_number_file(self) -> Path:
        if not self._settings.build_number_file:
            raise MissingConfigError("build_number_file is not set")
        return Path(self._settings.build_number_file)

    def primary_device_arch(self) -> ArchType:
        if self._settings.device_primary_arch is None:
            raise MissingConfigError("device_primary_arch is not set")
        return self._settings.device_primary_arch

    def out_dir(self) -> Path:
        return Path(self._settings.out_dir)

    def host_python(self) -> str:
        """Interpreter used by rules that run Python tools."""
        return self._settings.host_python or sys.executable

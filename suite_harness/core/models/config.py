"""
Build settings model — the global configuration read from build.yml.

Every field is optional at load time.  Modules that need a value ask
for it through ``Config`` during their phase, and an unset value is
reported against the module that asked.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ArchType(str, Enum):
    """Device architectures a suite can target."""

    ARM = "arm"
    ARM64 = "arm64"
    X86 = "x86"
    X86_64 = "x86_64"
    RISCV64 = "riscv64"

    def __str__(self) -> str:
        return self.value


class BuildSettings(BaseModel):
    """Global build configuration.

    Paths are relative to the source root (the directory holding build.yml).
    """

    # YAML reads `platform_version_name: 12` as an int
    model_config = ConfigDict(coerce_numbers_to_str=True)

    platform_version_name: str | None = None
    build_number_file: str | None = None
    device_primary_arch: ArchType | None = None
    out_dir: str = "out"
    host_python: str | None = None

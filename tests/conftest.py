"""
Shared test fixtures and configuration.
"""

import textwrap
from pathlib import Path

import pytest

from suite_harness.core.engine.config import Config
from suite_harness.core.engine.registry import ModuleTypeRegistry, default_registry
from suite_harness.core.models.config import ArchType, BuildSettings


@pytest.fixture
def settings() -> BuildSettings:
    """Settings with every value the tradefed modules ask for."""
    return BuildSettings(
        platform_version_name="12",
        build_number_file="out/build_number.txt",
        device_primary_arch=ArchType.ARM64,
    )


@pytest.fixture
def config(tmp_path: Path, settings: BuildSettings) -> Config:
    """A Config rooted at a fresh temporary source tree."""
    return Config(settings, tmp_path)


@pytest.fixture
def registry() -> ModuleTypeRegistry:
    return default_registry()


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    """A source tree with build.yml, a build number and one launcher."""
    (tmp_path / "build.yml").write_text(
        textwrap.dedent("""\
            platform_version_name: "12"
            build_number_file: out/build_number.txt
            device_primary_arch: arm64
        """)
    )
    (tmp_path / "out").mkdir()
    (tmp_path / "out" / "build_number.txt").write_text("4242\n")

    suite_dir = tmp_path / "test" / "suite_harness" / "cts"
    suite_dir.mkdir(parents=True)
    (suite_dir / "Blueprints.yml").write_text(
        textwrap.dedent("""\
            modules:
              - type: tradefed_binary_host
                name: cts-tradefed
                short_name: cts
                full_name: Compat Test Suite
                version: 11_r3
        """)
    )
    return tmp_path

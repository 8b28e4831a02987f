"""
End-to-end tests — declarations in, files on disk out.

These run the real rule commands through /bin/sh.
"""

import os
import re
import zipfile
from pathlib import Path

from suite_harness.adapters.registry import AdapterRegistry
from suite_harness.adapters.shell.command import ShellCommandAdapter
from suite_harness.core.config.loader import load_config
from suite_harness.core.engine.executor import build_actions, execute_plan
from suite_harness.core.persistence.build_log import BuildLog
from suite_harness.core.use_cases.build import run_build
from suite_harness.core.use_cases.generate import generate_graph

PROPERTIES_RE = re.compile(
    r"# .*\nbuild_number = .*\ntarget_arch = .*\nname = .*\nfullname = .*\nversion = .*\n"
)

SUITE_DIR = Path("test/suite_harness/cts")
PROPERTIES = Path("out/.intermediates") / SUITE_DIR / "cts-tradefed-gen" / "test-suite-info.properties"
DYNAMIC = Path("out/.intermediates") / SUITE_DIR / "cts-tradefed-gen" / "cts-tradefed.dynamic"
JAR = Path("out/.intermediates") / SUITE_DIR / "cts-tradefed" / "cts-tradefed.jar"


def _shell_registry() -> AdapterRegistry:
    registry = AdapterRegistry()
    registry.register(ShellCommandAdapter())
    return registry


def _bump_mtime(path: Path) -> None:
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 5_000_000_000))


class TestSuiteInfoProperties:
    def test_properties_file_contents(self, source_tree: Path):
        result = run_build(config_path=source_tree / "build.yml")
        assert result.error is None
        assert result.report.all_ok

        text = (source_tree / PROPERTIES).read_text()
        assert PROPERTIES_RE.fullmatch(text)
        assert text == (
            "# This file is auto generated by Android.mk. Do not modify.\n"
            "build_number = 4242\n"
            "target_arch = arm64\n"
            "name = cts\n"
            "fullname = Compat Test Suite\n"
            "version = 11_r3\n"
        )

    def test_platform_version_prepended(self, source_tree: Path):
        blueprint = source_tree / SUITE_DIR / "Blueprints.yml"
        blueprint.write_text(blueprint.read_text() + "    prepend_platform_version_name: true\n")

        result = run_build(config_path=source_tree / "build.yml")
        assert result.report.all_ok
        assert "version = 1211_r3\n" in (source_tree / PROPERTIES).read_text()

    def test_unquoted_numbers_in_yaml(self, source_tree: Path):
        (source_tree / "build.yml").write_text(
            "platform_version_name: 12\n"
            "build_number_file: out/build_number.txt\n"
            "device_primary_arch: arm64\n"
        )
        blueprint = source_tree / SUITE_DIR / "Blueprints.yml"
        blueprint.write_text(
            blueprint.read_text().replace("version: 11_r3", "version: 11")
            + "    prepend_platform_version_name: true\n"
        )

        result = run_build(config_path=source_tree / "build.yml")
        assert result.error is None
        assert result.report.all_ok
        assert "version = 1211\n" in (source_tree / PROPERTIES).read_text()

    def test_dynamic_config_copied(self, source_tree: Path):
        payload = b'<dynamicConfig>\n  <entry key="x"><value>1</value></entry>\n</dynamicConfig>\n'
        (source_tree / SUITE_DIR / "DynamicConfig.xml").write_bytes(payload)

        result = run_build(config_path=source_tree / "build.yml")
        assert result.report.all_ok

        assert (source_tree / DYNAMIC).read_bytes() == payload
        with zipfile.ZipFile(source_tree / JAR) as jar:
            assert sorted(jar.namelist()) == ["cts-tradefed.dynamic", "test-suite-info.properties"]

    def test_binary_jar_holds_properties(self, source_tree: Path):
        run_build(config_path=source_tree / "build.yml")
        with zipfile.ZipFile(source_tree / JAR) as jar:
            assert jar.namelist() == ["test-suite-info.properties"]
            assert b"name = cts\n" in jar.read("test-suite-info.properties")


class TestIncrementalBuilds:
    def _plan(self, source_tree: Path):
        generated = generate_graph(config_path=source_tree / "build.yml")
        assert generated.error is None
        return build_actions(generated.graph.edges, "op-test")

    def test_second_build_is_a_no_op(self, source_tree: Path):
        plan = self._plan(source_tree)
        log = BuildLog()
        first = execute_plan(plan, _shell_registry(), source_tree, log)
        second = execute_plan(plan, _shell_registry(), source_tree, log)
        assert first.built == 2
        assert second.built == 0
        assert second.up_to_date == 2

    def test_build_number_change_rebuilds_without_regenerating(self, source_tree: Path):
        plan = self._plan(source_tree)
        log = BuildLog()
        execute_plan(plan, _shell_registry(), source_tree, log)
        jar_before = (source_tree / JAR).read_bytes()

        (source_tree / "out" / "build_number.txt").write_text("4243\n")
        report = execute_plan(plan, _shell_registry(), source_tree, log)

        assert report.built == 2
        assert "build_number = 4243\n" in (source_tree / PROPERTIES).read_text()
        with zipfile.ZipFile(source_tree / JAR) as jar:
            assert b"build_number = 4243\n" in jar.read("test-suite-info.properties")
        assert (source_tree / JAR).read_bytes() != jar_before

    def test_touching_build_number_rebuilds_nothing(self, source_tree: Path):
        plan = self._plan(source_tree)
        log = BuildLog()
        execute_plan(plan, _shell_registry(), source_tree, log)

        _bump_mtime(source_tree / "out" / "build_number.txt")
        report = execute_plan(plan, _shell_registry(), source_tree, log)
        assert report.built == 0

    def test_missing_build_number_file_fails(self, source_tree: Path):
        (source_tree / "out" / "build_number.txt").unlink()
        result = run_build(config_path=source_tree / "build.yml")
        assert not result.report.all_ok
        assert "build_number.txt" in result.report.receipts[0].error

    def test_build_log_persisted(self, source_tree: Path):
        run_build(config_path=source_tree / "build.yml")
        second = run_build(config_path=source_tree / "build.yml")
        assert second.report.built == 0


class TestLoadedConfig:
    def test_source_root_is_config_dir(self, source_tree: Path):
        config = load_config(source_tree / "build.yml")
        assert config.source_root == source_tree.resolve()

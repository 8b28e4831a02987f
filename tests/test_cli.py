"""
Tests for CLI commands — modules, graph, build, and global options.
"""

import json
from pathlib import Path

from click.testing import CliRunner

from suite_harness.main import cli


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "suite-harness" in result.output

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestModulesCommand:
    def test_lists_expanded_modules(self, source_tree: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(source_tree / "build.yml"), "modules"])
        assert result.exit_code == 0
        assert "cts-tradefed [JavaBinaryHost]" in result.output
        assert "cts-tradefed-gen [TradefedBinaryGen] (from cts-tradefed)" in result.output
        assert "test-suite-info.properties" in result.output

    def test_json(self, source_tree: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(source_tree / "build.yml"), "modules", "--json"])
        assert result.exit_code == 0
        rows = {row["name"]: row for row in json.loads(result.output)}
        assert rows["cts-tradefed-gen"]["created_by"] == "cts-tradefed"
        assert rows["cts-tradefed-gen"]["dir"] == "test/suite_harness/cts"

    def test_missing_config(self, tmp_path: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(tmp_path / "build.yml"), "modules"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestGraphCommand:
    def test_prints_edges(self, source_tree: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(source_tree / "build.yml"), "graph"])
        assert result.exit_code == 0
        assert "cts-tradefed-gen: suite_harness.tradefedBinaryGenRule" in result.output
        assert "cts-tradefed: java.resourceJar" in result.output

    def test_json(self, source_tree: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(source_tree / "build.yml"), "graph", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["modules"] == ["cts-tradefed", "cts-tradefed-gen"]
        assert len(data["edges"]) == 2

    def test_writes_ninja(self, source_tree: Path):
        ninja = source_tree / "out" / "build.ninja"
        runner = CliRunner()
        result = runner.invoke(
            cli, ["--config", str(source_tree / "build.yml"), "graph", "--ninja", str(ninja)]
        )
        assert result.exit_code == 0
        assert "rule suite_harness.tradefedBinaryGenRule" in ninja.read_text()

    def test_declaration_errors_reported(self, source_tree: Path):
        blueprint = source_tree / "test" / "suite_harness" / "cts" / "Blueprints.yml"
        blueprint.write_text(blueprint.read_text().replace("    version: 11_r3\n", ""))
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(source_tree / "build.yml"), "graph", "--json"])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert "1 error(s)" in data["error"]
        assert "cts-tradefed" in data["errors"][0]


class TestBuildCommand:
    def test_build_then_up_to_date(self, source_tree: Path):
        runner = CliRunner()
        args = ["--config", str(source_tree / "build.yml"), "build"]

        first = runner.invoke(cli, args)
        assert first.exit_code == 0
        assert "2 built, 0 up to date, 0 failed" in first.output

        second = runner.invoke(cli, args)
        assert second.exit_code == 0
        assert "0 built, 2 up to date, 0 failed" in second.output

    def test_dry_run_writes_nothing(self, source_tree: Path):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["--config", str(source_tree / "build.yml"), "build", "--dry-run", "--json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["actions_planned"] == 2
        assert data["report"]["built"] == 0
        assert not (source_tree / "out" / ".intermediates").exists()

    def test_failure_exit_code(self, source_tree: Path):
        (source_tree / "out" / "build_number.txt").unlink()
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(source_tree / "build.yml"), "build"])
        assert result.exit_code == 1
        assert "missing and no known rule to make it" in result.output

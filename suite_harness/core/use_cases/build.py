"""
Build use case — generate the graph and run it incrementally.

The vertical slice from declarations to build outputs: generate the
graph, plan actions, execute stale ones, persist the build log.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from suite_harness.adapters.registry import AdapterRegistry
from suite_harness.core.engine.errors import BuildError
from suite_harness.core.engine.executor import (
    ExecutionReport,
    build_actions,
    execute_plan,
    generate_operation_id,
)
from suite_harness.core.engine.registry import ModuleTypeRegistry
from suite_harness.core.persistence.build_log import (
    default_build_log_path,
    load_build_log,
    save_build_log,
)
from suite_harness.core.use_cases.generate import generate_graph

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Result of a build."""

    report: ExecutionReport | None = None
    source_root: Path | None = None
    actions_planned: int = 0
    error: str | None = None
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            if self.errors:
                result["errors"] = self.errors
            return result

        result["source_root"] = str(self.source_root)
        result["actions_planned"] = self.actions_planned
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def run_build(
    config_path: Path | None = None,
    dry_run: bool = False,
    registry: AdapterRegistry | None = None,
    module_types: ModuleTypeRegistry | None = None,
) -> BuildResult:
    """Generate the graph and execute every stale edge.

    Args:
        config_path: Optional explicit path to build.yml.
        dry_run: If True, report what would run without running it.
        registry: Optional pre-configured adapter registry.
        module_types: Optional module-type registry.
    """
    result = BuildResult()

    generated = generate_graph(config_path, registry=module_types)
    if generated.error:
        result.error = generated.error
        result.errors = generated.errors
        return result

    config = generated.config
    graph = generated.graph
    assert config is not None and graph is not None
    result.source_root = config.source_root

    try:
        plan = build_actions(graph.edges, generate_operation_id())
    except BuildError as e:
        result.error = str(e)
        return result
    result.actions_planned = plan.total_actions

    if registry is None:
        from suite_harness.adapters.shell.command import ShellCommandAdapter

        registry = AdapterRegistry()
        registry.register(ShellCommandAdapter())

    log_path = default_build_log_path(config.source_root, config.out_dir())
    build_log = load_build_log(log_path)

    report = execute_plan(plan, registry, config.source_root, build_log, dry_run=dry_run)
    result.report = report

    if not dry_run:
        save_build_log(build_log, log_path)

    return result

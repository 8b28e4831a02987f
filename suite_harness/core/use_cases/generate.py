"""
Generate use case — load config and declarations, produce the build graph.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from suite_harness.core.config.blueprint_loader import discover_blueprints
from suite_harness.core.config.loader import ConfigError, load_config
from suite_harness.core.engine.build_context import BuildGraph, generate_build_graph
from suite_harness.core.engine.config import Config
from suite_harness.core.engine.errors import BuildFailure
from suite_harness.core.engine.ninja_writer import write_ninja
from suite_harness.core.engine.registry import ModuleTypeRegistry, default_registry

logger = logging.getLogger(__name__)


@dataclass
class GraphResult:
    """Result of generating the build graph."""

    config: Config | None = None
    graph: BuildGraph | None = None
    ninja_path: Path | None = None
    error: str | None = None
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            if self.errors:
                result["errors"] = self.errors
            return result

        if self.config:
            result["source_root"] = str(self.config.source_root)
        if self.graph:
            result.update(self.graph.to_dict())
        if self.ninja_path:
            result["ninja"] = str(self.ninja_path)
        return result


def generate_graph(
    config_path: Path | None = None,
    registry: ModuleTypeRegistry | None = None,
    ninja_path: Path | None = None,
) -> GraphResult:
    """Load build.yml and every Blueprints.yml, then run all phases.

    Args:
        config_path: Optional explicit path to build.yml.
        registry: Optional module-type registry (default: all shipped types).
        ninja_path: If given, also write the graph as a ninja file there.
    """
    result = GraphResult()

    try:
        config = load_config(config_path)
        result.config = config
        declarations = discover_blueprints(config.source_root, config.out_dir())
    except ConfigError as e:
        result.error = str(e)
        return result

    try:
        graph = generate_build_graph(declarations, config, registry or default_registry())
    except BuildFailure as e:
        result.error = f"{len(e.errors)} error(s) while generating the build graph"
        result.errors = [str(err) for err in e.errors]
        return result
    result.graph = graph

    if ninja_path is not None:
        write_ninja(graph, ninja_path)
        result.ninja_path = ninja_path

    return result

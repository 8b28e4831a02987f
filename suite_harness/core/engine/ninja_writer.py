"""
Ninja writer — serialise a build graph as a build.ninja file.

Rules are written once each, then one ``build`` statement per edge with
``|`` implicit and ``||`` order-only inputs and the edge's args as
indented variables.
"""

from __future__ import annotations

import logging
from pathlib import Path

from suite_harness.core.engine.build_context import BuildGraph
from suite_harness.core.models.build import BuildEdge, Rule

logger = logging.getLogger(__name__)

_HEADER = "# Generated by suite-harness. Do not edit.\n\nninja_required_version = 1.7.0\n"


def escape_path(path: Path | str) -> str:
    """Escape a path for a build statement."""
    return str(path).replace("$", "$$").replace(" ", "$ ").replace(":", "$:")


def escape_value(value: str) -> str:
    """Escape a variable value so ninja reads it back literally."""
    return value.replace("$", "$$").replace("\n", "$\n")


def _rule_block(rule: Rule) -> str:
    lines = [f"rule {rule.qualified_name}", f"    command = {rule.command}"]
    if rule.description:
        lines.append(f"    description = {rule.description}")
    return "\n".join(lines) + "\n"


def _build_block(edge: BuildEdge) -> str:
    parts = ["build", " ".join(escape_path(p) for p in edge.outputs) + ":", edge.rule.qualified_name]
    parts.extend(escape_path(p) for p in edge.inputs)
    if edge.implicits:
        parts.append("|")
        parts.extend(escape_path(p) for p in edge.implicits)
    if edge.order_only:
        parts.append("||")
        parts.extend(escape_path(p) for p in edge.order_only)

    lines = [" ".join(parts)]
    for key in sorted(edge.args):
        lines.append(f"    {key} = {escape_value(edge.args[key])}")
    return "\n".join(lines) + "\n"


def render_ninja(graph: BuildGraph) -> str:
    sections = [_HEADER]
    sections.extend(_rule_block(rule) for rule in graph.rules)

    current_module = None
    for edge in graph.edges:
        if edge.module != current_module:
            sections.append(f"# Module: {edge.module}\n")
            current_module = edge.module
        sections.append(_build_block(edge))
    return "\n".join(sections)


def write_ninja(graph: BuildGraph, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_ninja(graph), encoding="utf-8")
    logger.info("Wrote %d edges to %s", len(graph.edges), path)

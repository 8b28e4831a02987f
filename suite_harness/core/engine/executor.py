"""
Engine executor — runs the build graph incrementally.

Flow:
    edges → order by file dependencies → actions → dirty check
          → execute through the adapter registry → receipts → build log

An edge is rebuilt when:
    - one of its outputs is missing
    - its expanded command differs from the one recorded in the build log
    - the contents of its order-only inputs changed
    - an explicit or implicit input was rebuilt in this run, or is newer
      than the oldest output

Order-only inputs take part by content only.  Touching one without
changing it rebuilds nothing, and because they are never compared by
timestamp they do not ripple into downstream edges on their own.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from graphlib import CycleError, TopologicalSorter
from pathlib import Path

from suite_harness.adapters.registry import AdapterRegistry
from suite_harness.core.engine.errors import BuildError
from suite_harness.core.models.action import Action, Receipt
from suite_harness.core.models.build import BuildEdge
from suite_harness.core.persistence.build_log import (
    BuildLog,
    BuildLogEntry,
    hash_command,
    hash_contents,
)

logger = logging.getLogger(__name__)


@dataclass
class ExecutionPlan:
    """Actions to run, one per edge, in dependency order."""

    operation_id: str = ""
    actions: list[Action] = field(default_factory=list)
    edges: dict[str, BuildEdge] = field(default_factory=dict)

    @property
    def total_actions(self) -> int:
        return len(self.actions)


@dataclass
class ExecutionReport:
    """Result of executing a plan."""

    operation_id: str = ""
    receipts: list[Receipt] = field(default_factory=list)
    module_receipts: dict[str, list[Receipt]] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.receipts)

    @property
    def built(self) -> int:
        return sum(1 for r in self.receipts if r.ok)

    @property
    def up_to_date(self) -> int:
        return sum(1 for r in self.receipts if r.metadata.get("up_to_date"))

    @property
    def failed(self) -> int:
        return sum(1 for r in self.receipts if r.failed)

    @property
    def all_ok(self) -> bool:
        return self.failed == 0

    @property
    def status(self) -> str:
        return "ok" if self.failed == 0 else "failed"

    def to_dict(self) -> dict:
        return {
            "operation_id": self.operation_id,
            "status": self.status,
            "total": self.total,
            "built": self.built,
            "up_to_date": self.up_to_date,
            "failed": self.failed,
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }


def order_edges(edges: list[BuildEdge]) -> list[BuildEdge]:
    """Sort edges so every producer runs before its consumers.

    Raises:
        BuildError: if the edges form a cycle.
    """
    producer: dict[Path, int] = {}
    for index, edge in enumerate(edges):
        for output in edge.outputs:
            producer[output] = index

    graph: dict[int, list[int]] = {}
    for index, edge in enumerate(edges):
        needs = edge.dependencies + edge.order_only
        graph[index] = [producer[p] for p in needs if p in producer]

    try:
        order = list(TopologicalSorter(graph).static_order())
    except CycleError as e:
        cycle = " -> ".join(str(edges[i].outputs[0]) for i in e.args[1])
        raise BuildError(f"dependency cycle between outputs: {cycle}") from e
    return [edges[i] for i in order]


def build_actions(edges: list[BuildEdge], operation_id: str) -> ExecutionPlan:
    """Turn build edges into shell actions."""
    plan = ExecutionPlan(operation_id=operation_id)

    for index, edge in enumerate(order_edges(edges)):
        action = Action(
            id=f"{operation_id}:{index}",
            name=edge.description or f"{edge.rule.name} {edge.outputs[0]}",
            adapter="shell",
            for_module=edge.module,
            params={
                "command": edge.command(),
                "outputs": [str(p) for p in edge.outputs],
                "_rule": edge.rule.qualified_name,
            },
        )
        plan.actions.append(action)
        plan.edges[action.id] = edge

    return plan


def _dirty_reason(
    edge: BuildEdge,
    command: str,
    source_root: Path,
    build_log: BuildLog,
    rebuilt: set[Path],
) -> str | None:
    """Why ``edge`` must run, or None if it is up to date."""
    targets = [source_root / p for p in edge.outputs]
    if not all(t.exists() for t in targets):
        return "output missing"

    entry = build_log.get(edge.outputs[0])
    if entry is None:
        return "not in build log"
    if entry.command_hash != hash_command(command):
        return "command changed"
    if edge.order_only and entry.order_only_hash != hash_contents(source_root, edge.order_only):
        return "order-only input changed"

    if any(dep in rebuilt for dep in edge.dependencies):
        return "input rebuilt"
    oldest = min(t.stat().st_mtime_ns for t in targets)
    for dep in edge.dependencies:
        target = source_root / dep
        if target.exists() and target.stat().st_mtime_ns > oldest:
            return f"input {dep} is newer"
    return None


def execute_plan(
    plan: ExecutionPlan,
    registry: AdapterRegistry,
    source_root: Path,
    build_log: BuildLog,
    dry_run: bool = False,
) -> ExecutionReport:
    """Run every stale action in order, stopping at the first failure.

    ``build_log`` is updated in place for every edge that succeeds; the
    caller decides when to persist it.
    """
    report = ExecutionReport(operation_id=plan.operation_id)
    produced = {p for edge in plan.edges.values() for p in edge.outputs}
    rebuilt: set[Path] = set()
    stopped = False

    for action in plan.actions:
        edge = plan.edges[action.id]
        receipt = _run_edge(
            action, edge, registry, source_root, build_log, produced, rebuilt, dry_run, stopped
        )
        if receipt.failed:
            stopped = True

        report.receipts.append(receipt)
        report.module_receipts.setdefault(edge.module, []).append(receipt)

        status_marker = "✓" if receipt.ok else "✗" if receipt.failed else "⊘"
        logger.info("%s %s → %s", status_marker, action.name, receipt.status)

    return report


def _run_edge(
    action: Action,
    edge: BuildEdge,
    registry: AdapterRegistry,
    source_root: Path,
    build_log: BuildLog,
    produced: set[Path],
    rebuilt: set[Path],
    dry_run: bool,
    stopped: bool,
) -> Receipt:
    if stopped:
        return Receipt.skip(
            adapter=action.adapter, action_id=action.id, reason="not run: an earlier edge failed"
        )

    for needed in edge.dependencies + edge.order_only:
        if needed not in produced and not (source_root / needed).exists():
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"'{needed}', needed by '{edge.outputs[0]}', missing and no known rule to make it",
            )

    command = action.params["command"]
    reason = _dirty_reason(edge, command, source_root, build_log, rebuilt)
    if reason is None:
        return Receipt.skip(
            adapter=action.adapter,
            action_id=action.id,
            reason="up to date",
            metadata={"up_to_date": True},
        )

    logger.debug("Rebuilding %s: %s", edge.outputs[0], reason)
    if not dry_run:
        for output in edge.outputs:
            (source_root / output).parent.mkdir(parents=True, exist_ok=True)
    order_only_hash = hash_contents(source_root, edge.order_only) if edge.order_only else ""

    receipt = registry.execute_action(action, source_root=str(source_root), dry_run=dry_run)
    receipt.metadata["reason"] = reason

    if receipt.ok or dry_run:
        rebuilt.update(edge.outputs)
    if receipt.ok and not dry_run:
        build_log.record(
            edge.outputs,
            BuildLogEntry(command_hash=hash_command(command), order_only_hash=order_only_hash),
        )
    return receipt


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"build-{now}-{short}"

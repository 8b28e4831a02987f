"""
Adapter registry — the executor's only way to run an action.

For every action: find the adapter and validate. A dry run then reports
what would run; otherwise the adapter must be available on this host,
and the action is run and timed.  Problems at any step come back as a
failed Receipt.
"""

from __future__ import annotations

import logging
import time

from suite_harness.adapters.base import Adapter, ExecutionContext
from suite_harness.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Adapters by name.

    With ``mock_mode`` every action succeeds without reaching an adapter.
    """

    def __init__(self, mock_mode: bool = False):
        self._adapters: dict[str, Adapter] = {}
        self._mock_mode = mock_mode

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.warning("Replacing adapter %r", adapter.name)
        self._adapters[adapter.name] = adapter

    def unregister(self, name: str) -> None:
        self._adapters.pop(name, None)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def list_adapters(self) -> list[str]:
        return list(self._adapters)

    def execute_action(
        self,
        action: Action,
        source_root: str = ".",
        dry_run: bool = False,
    ) -> Receipt:
        """Run ``action`` through its adapter.  Never raises."""
        if self._mock_mode:
            return Receipt.success(
                adapter=action.adapter,
                action_id=action.id,
                output=f"[mock] {action.command or action.id}",
                metadata={"mock": True, "dry_run": dry_run},
            )

        adapter = self._adapters.get(action.adapter)
        if adapter is None:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"No adapter registered for '{action.adapter}'",
            )

        context = ExecutionContext(
            action=action, source_root=source_root, dry_run=dry_run, params=action.params
        )
        valid, reason = adapter.validate(context)
        if not valid:
            return Receipt.failure(
                adapter=adapter.name, action_id=action.id, error=f"Validation failed: {reason}"
            )

        if dry_run:
            return Receipt.skip(
                adapter=adapter.name,
                action_id=action.id,
                reason=f"[dry-run] {action.command or action.id}",
                metadata={"dry_run": True},
            )

        if not adapter.is_available():
            return Receipt.failure(
                adapter=adapter.name,
                action_id=action.id,
                error=f"Adapter '{adapter.name}' is not available on this host",
            )

        start = time.monotonic()
        receipt = adapter.execute(context)
        receipt.duration_ms = int((time.monotonic() - start) * 1000)
        return receipt

"""
Mock adapter — stands in for the shell in tests.

Every action is recorded.  With ``touch_outputs`` the mock also creates
the action's declared outputs, so the executor's up-to-date checks see
the same files a real build would leave behind.
"""

from __future__ import annotations

from pathlib import Path

from suite_harness.adapters.base import Adapter, ExecutionContext
from suite_harness.core.models.action import Receipt


class MockAdapter(Adapter):
    def __init__(
        self,
        adapter_name: str = "shell",
        available: bool = True,
        touch_outputs: bool = False,
    ):
        self._name = adapter_name
        self._available = available
        self._touch_outputs = touch_outputs
        self._responses: dict[str, Receipt] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def commands(self) -> list[str]:
        """Commands received, in execution order."""
        return [c.action.command for c in self._call_log]

    def is_available(self) -> bool:
        return self._available

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._responses[action_id] = receipt

    def set_failure(self, action_id: str, error: str = "Mock failure") -> None:
        self.set_response(action_id, Receipt.failure(adapter=self._name, action_id=action_id, error=error))

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)
        receipt = self._responses.get(context.action.id)
        if receipt is not None:
            return receipt

        if self._touch_outputs:
            for output in context.action.outputs:
                target = Path(context.working_dir) / output
                target.parent.mkdir(parents=True, exist_ok=True)
                target.touch()
        return Receipt.success(adapter=self._name, action_id=context.action.id, metadata={"mock": True})

    def reset(self) -> None:
        self._call_log.clear()
        self._responses.clear()

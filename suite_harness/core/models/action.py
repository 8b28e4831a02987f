"""
Action and Receipt — what the executor asks for and what comes back.

One Action per build edge: its ``params`` hold the expanded ``command``
and the edge's ``outputs``.  Whatever happens while running it, the
answer is a Receipt, never an exception.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

ReceiptStatus = Literal["ok", "skipped", "failed"]


class Action(BaseModel):
    """One edge, ready to hand to an adapter."""

    id: str
    name: str = ""
    adapter: str
    params: dict[str, Any] = Field(default_factory=dict)
    for_module: str | None = None

    @property
    def command(self) -> str:
        return self.params.get("command", "")

    @property
    def outputs(self) -> list[str]:
        return list(self.params.get("outputs", []))


class Receipt(BaseModel):
    """Outcome of one action.

    ``skipped`` covers both up-to-date edges and edges never attempted;
    ``metadata`` says which.
    """

    adapter: str
    action_id: str
    status: ReceiptStatus = "ok"
    duration_ms: int = 0
    output: str = ""
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="ok", output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        """A receipt for an action that was not run; ``reason`` goes in ``output``."""
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **kwargs)

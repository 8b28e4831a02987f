"""
Adapter protocol — how a rule command leaves the process.

The executor hands every action to the AdapterRegistry, which picks the
adapter named by ``action.adapter``.  Rule commands only ever use paths
relative to the source root, so that is the default working directory.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from suite_harness.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """One action plus where and how to run it."""

    action: Action
    source_root: str = "."
    dry_run: bool = False
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def working_dir(self) -> str:
        """``params['cwd']`` when given, else the source root."""
        return self.params.get("cwd") or self.source_root


class Adapter(ABC):
    """Runs actions of one kind.

    ``execute`` reports every failure through the returned Receipt and
    does not raise.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Value of ``action.adapter`` this adapter serves."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the tool behind the adapter can be used on this host."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check an action before running it; returns (ok, reason)."""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Run the action."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"

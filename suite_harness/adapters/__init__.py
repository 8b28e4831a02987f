"""Adapters — how rule commands reach the outside world.

Public re-exports for convenient access.
"""

from suite_harness.adapters.base import Adapter, ExecutionContext
from suite_harness.adapters.mock import MockAdapter
from suite_harness.adapters.registry import AdapterRegistry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
]

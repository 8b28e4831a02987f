"""
Module-type registry — maps public type names to module factories.

Declarations name a type; the framework looks the factory up here.
Each package contributes its types through a ``register_module_types``
function so no registration happens at import time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from suite_harness.core.engine.module import ModuleBase

logger = logging.getLogger(__name__)

ModuleFactory = Callable[[], ModuleBase]


class ModuleTypeRegistry:
    """Registry of module types by name."""

    def __init__(self) -> None:
        self._factories: dict[str, ModuleFactory] = {}

    def register(self, name: str, factory: ModuleFactory) -> None:
        if name in self._factories:
            logger.warning("Overwriting existing module type: %s", name)
        self._factories[name] = factory
        logger.debug("Registered module type: %s", name)

    def get(self, name: str) -> ModuleFactory | None:
        return self._factories.get(name)

    def list_types(self) -> list[str]:
        return list(self._factories.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._factories


def default_registry() -> ModuleTypeRegistry:
    """A registry with every module type this project ships."""
    from suite_harness.java import register_module_types as register_java
    from suite_harness.tradefed import register_module_types as register_tradefed

    registry = ModuleTypeRegistry()
    register_java(registry)
    register_tradefed(registry)
    return registry

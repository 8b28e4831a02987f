"""Test-suite harness module types."""

from suite_harness.core.engine.registry import ModuleTypeRegistry
from suite_harness.tradefed.binary import (
    TradefedBinaryGen,
    tradefed_binary_factory,
    tradefed_binary_gen_factory,
)

MODULE_TYPE = "tradefed_binary_host"


def register_module_types(registry: ModuleTypeRegistry) -> None:
    registry.register(MODULE_TYPE, tradefed_binary_factory)


__all__ = [
    "MODULE_TYPE",
    "TradefedBinaryGen",
    "register_module_types",
    "tradefed_binary_factory",
    "tradefed_binary_gen_factory",
]

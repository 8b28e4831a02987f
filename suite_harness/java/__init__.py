"""Java host module types."""

from suite_harness.core.engine.registry import ModuleTypeRegistry
from suite_harness.java.binary import JavaBinaryHost, java_binary_host_factory


def register_module_types(registry: ModuleTypeRegistry) -> None:
    registry.register("java_binary_host", java_binary_host_factory)


__all__ = [
    "JavaBinaryHost",
    "java_binary_host_factory",
    "register_module_types",
]

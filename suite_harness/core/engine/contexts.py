"""
Phase contexts — each module's view of the framework during one phase.

A context only offers the operations of its own phase, and it is closed
when that phase ends.  Using a closed context raises ``PhaseError``.

    LoadHookContext         load phase      create_module, append_properties
    BottomUpMutatorContext  dependency      add_dependency
    ModuleContext           action phase    build, get_direct_dep
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel

from suite_harness.core.engine.config import Config
from suite_harness.core.engine.errors import ModuleError, PhaseError
from suite_harness.core.engine.module import ModuleBase
from suite_harness.core.models.build import BuildEdge, BuildParams

if TYPE_CHECKING:
    from suite_harness.core.engine.build_context import BuildContext

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=BaseModel)


class BaseContext:
    phase = ""

    def __init__(self, module: ModuleBase, config: Config):
        self._module = module
        self._config = config
        self._open = True

    def close(self) -> None:
        self._open = False

    def _check_open(self) -> None:
        if not self._open:
            raise PhaseError(
                f"{self.phase} context of module {self._module.name!r} "
                f"used after the {self.phase} phase ended"
            )

    def module_name(self) -> str:
        self._check_open()
        return self._module.name

    def module_dir(self) -> Path:
        """Directory of the declaration, relative to the source root."""
        self._check_open()
        return self._module.directory

    def config(self) -> Config:
        self._check_open()
        return self._config


class LoadHookContext(BaseContext):
    """Handed to load hooks right after a declaration has been read."""

    phase = "load"

    def __init__(self, module: ModuleBase, config: Config, framework: BuildContext):
        super().__init__(module, config)
        self._framework = framework

    def properties(self, prop_type: type[P]) -> P:
        """The module's filled property struct of ``prop_type``."""
        self._check_open()
        return self._module.properties(prop_type)

    def create_module(
        self,
        factory: Callable[[], ModuleBase],
        props: BaseModel | Mapping[str, Any],
    ) -> ModuleBase:
        """Declare a new module next to the one being loaded."""
        self._check_open()
        if isinstance(props, BaseModel):
            props = props.model_dump()
        return self._framework.create_module(factory, props, parent=self._module)

    def append_properties(self, extension: BaseModel | Mapping[str, Any]) -> None:
        """Append values onto the module being loaded."""
        self._check_open()
        self._module.append_properties(extension)


class BottomUpMutatorContext(BaseContext):
    """Handed to ``deps_mutator`` during the dependency phase."""

    phase = "dependency"

    def add_dependency(self, *names: str) -> None:
        self._check_open()
        for name in names:
            if name not in self._module.dependencies:
                self._module.dependencies.append(name)


class ModuleContext(BaseContext):
    """Handed to ``generate_build_actions`` during the action phase."""

    phase = "action"

    def __init__(self, module: ModuleBase, config: Config, framework: BuildContext):
        super().__init__(module, config)
        self._framework = framework
        self._edges: list[BuildEdge] = []

    @property
    def edges(self) -> list[BuildEdge]:
        return list(self._edges)

    def build(self, params: BuildParams) -> None:
        """Declare one build edge.

        Raises:
            ModuleError: if the edge has no output or its args do not
                match the parameters its rule declares.
        """
        self._check_open()
        rule = params.rule
        outputs = params.all_outputs()
        if not outputs:
            raise ModuleError(
                self._module.name, f"rule {rule.qualified_name} has no output", self._module.source
            )
        given, wanted = set(params.args), set(rule.args)
        if given != wanted:
            raise ModuleError(
                self._module.name,
                f"rule {rule.qualified_name} takes args {sorted(wanted)}, got {sorted(given)}",
                self._module.source,
            )

        edge = BuildEdge(
            module=self._module.name,
            rule=rule,
            outputs=outputs,
            inputs=params.all_inputs(),
            implicits=list(params.implicits),
            order_only=list(params.order_only),
            args=dict(params.args),
            description=params.description,
        )
        logger.debug("%s: %s -> %s", self._module.name, rule.qualified_name, edge.outputs)
        self._edges.append(edge)

    def get_direct_dep(self, name: str) -> ModuleBase:
        """Look up a module this one declared a dependency on."""
        self._check_open()
        if name not in self._module.dependencies:
            raise ModuleError(
                self._module.name, f"no dependency on module {name!r}", self._module.source
            )
        dep = self._framework.module(name)
        if dep is None:
            raise ModuleError(
                self._module.name, f"depends on undefined module {name!r}", self._module.source
            )
        return dep

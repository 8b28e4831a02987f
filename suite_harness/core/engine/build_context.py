"""
Build context — drives declarations through the framework's phases.

Flow:
    declarations → load phase (factories, properties, load hooks)
                 → dependency phase (deps_mutator)
                 → action phase (generate_build_actions, in dependency order)
                 → BuildGraph

The load phase completes for every module before any dependency is
resolved, so a module created by a load hook always exists by the time
another module refers to it.  Errors are collected per module and
raised together as a ``BuildFailure`` at the end of the phase.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from graphlib import CycleError, TopologicalSorter
from pathlib import Path
from typing import Any

from suite_harness.core.engine.config import Config
from suite_harness.core.engine.contexts import (
    BottomUpMutatorContext,
    LoadHookContext,
    ModuleContext,
)
from suite_harness.core.engine.errors import (
    BuildError,
    BuildFailure,
    DeclarationError,
    ModuleError,
    PhaseError,
)
from suite_harness.core.engine.module import ModuleBase
from suite_harness.core.engine.registry import ModuleFactory, ModuleTypeRegistry
from suite_harness.core.models.build import BuildEdge, Rule
from suite_harness.core.models.declaration import ModuleDeclaration

logger = logging.getLogger(__name__)

_PHASES = ("load", "dependency", "action", "done")


@dataclass
class BuildGraph:
    """Every module and every edge of one generated build."""

    modules: dict[str, ModuleBase] = field(default_factory=dict)
    edges: list[BuildEdge] = field(default_factory=list)

    @property
    def rules(self) -> list[Rule]:
        """Rules used by the edges, in first-use order."""
        seen: dict[str, Rule] = {}
        for edge in self.edges:
            seen.setdefault(edge.rule.qualified_name, edge.rule)
        return list(seen.values())

    def edges_for(self, module_name: str) -> list[BuildEdge]:
        return [e for e in self.edges if e.module == module_name]

    def to_dict(self) -> dict:
        return {
            "modules": list(self.modules.keys()),
            "edges": [e.model_dump(mode="json") for e in self.edges],
        }


class BuildContext:
    """One run of the framework over a source tree."""

    def __init__(self, config: Config, registry: ModuleTypeRegistry):
        self._config = config
        self._registry = registry
        self._modules: dict[str, ModuleBase] = {}
        self._phase = "load"

    @property
    def config(self) -> Config:
        return self._config

    @property
    def modules(self) -> dict[str, ModuleBase]:
        return dict(self._modules)

    def module(self, name: str) -> ModuleBase | None:
        return self._modules.get(name)

    def _require_phase(self, phase: str) -> None:
        if self._phase != phase:
            raise PhaseError(f"{phase} phase requested while in the {self._phase} phase")

    def _advance(self) -> None:
        self._phase = _PHASES[_PHASES.index(self._phase) + 1]

    # ── Load phase ──────────────────────────────────────────────

    def parse(self, declarations: Iterable[ModuleDeclaration]) -> None:
        """Instantiate every declaration and run its load hooks.

        Raises:
            BuildFailure: if any declaration failed.
        """
        self._require_phase("load")
        errors: list[BuildError] = []
        for decl in declarations:
            try:
                self._declare(decl)
            except DeclarationError as e:
                errors.append(e)
        self._advance()
        if errors:
            raise BuildFailure(errors)
        logger.info("Loaded %d modules", len(self._modules))

    def _declare(self, decl: ModuleDeclaration) -> ModuleBase:
        factory = self._registry.get(decl.type)
        if factory is None:
            raise DeclarationError(
                decl.name or "<unnamed>", f"unrecognized module type {decl.type!r}", decl.source
            )
        return self._instantiate(factory, decl.properties, Path(decl.directory), decl.source)

    def create_module(
        self,
        factory: ModuleFactory,
        props: Mapping[str, Any],
        parent: ModuleBase,
    ) -> ModuleBase:
        """Declare a module on behalf of ``parent``'s load hook."""
        self._require_phase("load")
        module = self._instantiate(factory, props, parent.directory, parent.source, parent.name)
        logger.debug("Module %r created by %r", module.name, parent.name)
        return module

    def _instantiate(
        self,
        factory: ModuleFactory,
        props: Mapping[str, Any],
        directory: Path,
        source: str,
        created_by: str | None = None,
    ) -> ModuleBase:
        module = factory()
        module.directory = directory
        module.source = source
        module.created_by = created_by
        module.init_properties(props)
        self._register(module)
        self._run_load_hooks(module)
        return module

    def _register(self, module: ModuleBase) -> None:
        existing = self._modules.get(module.name)
        if existing is not None:
            origin = f'created by "{existing.created_by}"' if existing.created_by else "declared"
            where = f" in {existing.source}" if existing.source else ""
            raise DeclarationError(
                module.name,
                f'module "{module.name}" already defined ({origin}{where})',
                module.source,
            )
        self._modules[module.name] = module

    def _run_load_hooks(self, module: ModuleBase) -> None:
        for hook in module.load_hooks:
            ctx = LoadHookContext(module, self._config, self)
            try:
                hook(ctx)
            except DeclarationError:
                raise
            except BuildError as e:
                raise DeclarationError(module.name, str(e), module.source) from e
            finally:
                ctx.close()

    # ── Dependency phase ────────────────────────────────────────

    def resolve_dependencies(self) -> None:
        """Let every module declare its dependencies and check they exist.

        Raises:
            BuildFailure: on undefined dependencies or a dependency cycle.
        """
        self._require_phase("dependency")
        errors: list[BuildError] = []
        for module in self._modules.values():
            ctx = BottomUpMutatorContext(module, self._config)
            try:
                module.deps_mutator(ctx)
            except BuildError as e:
                errors.append(self._as_module_error(module, e))
                continue
            finally:
                ctx.close()
            for dep in module.dependencies:
                if dep not in self._modules:
                    errors.append(
                        ModuleError(module.name, f"depends on undefined module {dep!r}", module.source)
                    )
        self._advance()
        if errors:
            raise BuildFailure(errors)

    def _action_order(self) -> list[ModuleBase]:
        sorter = TopologicalSorter({m.name: m.dependencies for m in self._modules.values()})
        try:
            order = list(sorter.static_order())
        except CycleError as e:
            raise BuildFailure([BuildError("dependency cycle: " + " -> ".join(e.args[1]))]) from e
        return [self._modules[name] for name in order]

    # ── Action phase ────────────────────────────────────────────

    def prepare_build_actions(self) -> BuildGraph:
        """Have every module declare its build edges.

        Raises:
            BuildFailure: if any module failed or two edges share an output.
        """
        self._require_phase("action")
        graph = BuildGraph(modules=dict(self._modules))
        errors: list[BuildError] = []
        failed: set[str] = set()
        producers: dict[Path, str] = {}

        for module in self._action_order():
            if any(dep in failed for dep in module.dependencies):
                failed.add(module.name)
                continue

            ctx = ModuleContext(module, self._config, self)
            try:
                module.generate_build_actions(ctx)
            except BuildError as e:
                errors.append(self._as_module_error(module, e))
                failed.add(module.name)
                continue
            finally:
                ctx.close()

            for edge in ctx.edges:
                for output in edge.outputs:
                    other = producers.setdefault(output, module.name)
                    if other != module.name:
                        errors.append(
                            ModuleError(
                                module.name,
                                f'output "{output}" is also produced by module "{other}"',
                                module.source,
                            )
                        )
                graph.edges.append(edge)

        self._advance()
        if errors:
            raise BuildFailure(errors)
        logger.info("Generated %d build edges for %d modules", len(graph.edges), len(graph.modules))
        return graph

    @staticmethod
    def _as_module_error(module: ModuleBase, error: BuildError) -> BuildError:
        if isinstance(error, (ModuleError, DeclarationError, BuildFailure)):
            return error
        return ModuleError(module.name, str(error), module.source)


def generate_build_graph(
    declarations: Iterable[ModuleDeclaration],
    config: Config,
    registry: ModuleTypeRegistry,
) -> BuildGraph:
    """Run all three phases over ``declarations``."""
    ctx = BuildContext(config, registry)
    ctx.parse(declarations)
    ctx.resolve_dependencies()
    return ctx.prepare_build_actions()

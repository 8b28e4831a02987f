"""
Module base — what every module type builds on.

A module owns a list of property structs (pydantic models).  Its
factory creates it empty, declares which structs it accepts and
registers load hooks; the framework then fills the structs from the
declaration and drives the module through its phases.

To create a new module type:
    1. Subclass ModuleBase (or wrap an existing factory)
    2. Declare property structs with add_properties()
    3. Implement generate_build_actions()
    4. Register the factory in a ModuleTypeRegistry
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ValidationError

from suite_harness.core.engine.errors import DeclarationError
from suite_harness.core.engine.proptools import accepted_keys, append_matching

if TYPE_CHECKING:
    from suite_harness.core.engine.contexts import (
        BottomUpMutatorContext,
        LoadHookContext,
        ModuleContext,
    )

P = TypeVar("P", bound=BaseModel)

LoadHook = Callable[["LoadHookContext"], None]


class CommonProperties(BaseModel):
    """Properties every module accepts."""

    name: str


class ModuleBase(ABC):
    """Abstract base class for all modules."""

    def __init__(self) -> None:
        self._property_types: list[type[BaseModel]] = [CommonProperties]
        self._properties: dict[type[BaseModel], BaseModel] = {}
        self._load_hooks: list[LoadHook] = []
        self.directory = Path()
        self.source = ""
        self.created_by: str | None = None
        self.dependencies: list[str] = []

    # ── Declaration ─────────────────────────────────────────────

    def add_properties(self, *types: type[BaseModel]) -> None:
        """Declare property structs this module accepts."""
        self._property_types.extend(types)

    def add_load_hook(self, hook: LoadHook) -> None:
        self._load_hooks.append(hook)

    @property
    def load_hooks(self) -> list[LoadHook]:
        return list(self._load_hooks)

    def init_properties(self, raw: Mapping[str, Any]) -> None:
        """Fill every property struct from a declaration's mapping.

        Each key goes to every struct that accepts it.

        Raises:
            DeclarationError: on unknown keys or invalid values.
        """
        name = str(raw.get("name", "<unnamed>"))
        routed: dict[type[BaseModel], dict[str, Any]] = {t: {} for t in self._property_types}
        unknown = []
        for key, value in raw.items():
            matched = False
            for prop_type in self._property_types:
                if key in accepted_keys(prop_type):
                    routed[prop_type][key] = value
                    matched = True
            if not matched:
                unknown.append(key)

        if unknown:
            listed = ", ".join(repr(k) for k in sorted(unknown))
            raise DeclarationError(name, f"unrecognized property {listed}", self.source)

        for prop_type, data in routed.items():
            try:
                self._properties[prop_type] = prop_type.model_validate(data)
            except ValidationError as e:
                problems = "; ".join(
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                    for err in e.errors()
                )
                raise DeclarationError(name, f"invalid properties: {problems}", self.source) from e

    def properties(self, prop_type: type[P]) -> P:
        """Return the filled struct of the given type."""
        struct = self._properties.get(prop_type)
        if struct is None:
            raise LookupError(f"{type(self).__name__} has no {prop_type.__name__} properties")
        return struct  # type: ignore[return-value]

    def append_properties(self, extension: BaseModel | Mapping[str, Any]) -> None:
        """Append values onto the matching fields of this module's structs.

        Raises:
            DeclarationError: on keys no struct has, or mismatched types.
        """
        if isinstance(extension, BaseModel):
            extension = extension.model_dump(exclude_unset=True)
        try:
            append_matching(self._properties.values(), extension)
        except KeyError as e:
            raise DeclarationError(
                self.name, f"failed to find property to extend: {e.args[0]!r}", self.source
            ) from e
        except TypeError as e:
            raise DeclarationError(self.name, str(e), self.source) from e

    @property
    def name(self) -> str:
        return self.properties(CommonProperties).name

    # ── Phases ──────────────────────────────────────────────────

    def deps_mutator(self, ctx: BottomUpMutatorContext) -> None:
        """Declare dependencies on other modules.  Default: none."""

    @abstractmethod
    def generate_build_actions(self, ctx: ModuleContext) -> None:
        """Declare the build edges that produce this module's outputs."""

    def __repr__(self) -> str:
        name = self._properties.get(CommonProperties)
        label = name.name if name is not None else "?"  # type: ignore[attr-defined]
        return f"<{self.__class__.__name__} name={label!r}>"


class SourceFileProducer(ABC):
    """Capability of modules whose outputs others consume via ``:name``."""

    @abstractmethod
    def srcs(self) -> list[Path]:
        """Output paths this module produces, in a stable order."""


def add_load_hook(module: ModuleBase, hook: LoadHook) -> None:
    """Run ``hook`` on ``module`` once its declaration has been read."""
    module.add_load_hook(hook)

"""
Build graph models — static rules and the edges that instantiate them.

A ``Rule`` is a parameterised shell command registered once per package.
Modules describe an edge with ``BuildParams``; the framework normalises
it into a ``BuildEdge`` that records the owning module.
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# $$, "$ ", "$:", ${name}, $name
_VAR_RE = re.compile(r"\$(\$| |:|\{([a-zA-Z0-9_.-]+)\}|([a-zA-Z0-9_-]+))")


class Rule(BaseModel):
    """A named, parameterised shell-command template."""

    model_config = ConfigDict(frozen=True)

    package: str
    name: str
    command: str
    args: tuple[str, ...] = ()
    description: str = ""

    @property
    def qualified_name(self) -> str:
        """Rule name as written into build files (``<package>.<name>``)."""
        return f"{self.package}.{self.name}"

    def expand(self, variables: dict[str, str]) -> str:
        """Substitute ninja-style variables into the command.

        Unknown variables expand to the empty string, as ninja does.
        """

        def _sub(match: re.Match[str]) -> str:
            token = match.group(1)
            if token in ("$", " ", ":"):
                return token
            name = match.group(2) or match.group(3)
            return variables.get(name, "")

        return _VAR_RE.sub(_sub, self.command)


class BuildParams(BaseModel):
    """What a module hands to ``ctx.build()`` to declare one edge."""

    rule: Rule
    output: Path | None = None
    outputs: list[Path] = Field(default_factory=list)
    input: Path | None = None
    inputs: list[Path] = Field(default_factory=list)
    implicits: list[Path] = Field(default_factory=list)
    order_only: list[Path] = Field(default_factory=list)
    args: dict[str, str] = Field(default_factory=dict)
    description: str = ""

    def all_outputs(self) -> list[Path]:
        return ([self.output] if self.output else []) + list(self.outputs)

    def all_inputs(self) -> list[Path]:
        return ([self.input] if self.input else []) + list(self.inputs)


class BuildEdge(BaseModel):
    """A normalised edge in the build graph."""

    module: str
    rule: Rule
    outputs: list[Path]
    inputs: list[Path] = Field(default_factory=list)
    implicits: list[Path] = Field(default_factory=list)
    order_only: list[Path] = Field(default_factory=list)
    args: dict[str, str] = Field(default_factory=dict)
    description: str = ""

    def variables(self) -> dict[str, str]:
        """Variables visible to the rule command for this edge."""
        return {
            **self.args,
            "in": " ".join(str(p) for p in self.inputs),
            "out": " ".join(str(p) for p in self.outputs),
        }

    def command(self) -> str:
        return self.rule.expand(self.variables())

    @property
    def dependencies(self) -> list[Path]:
        """Inputs whose timestamps make this edge stale."""
        return list(self.inputs) + list(self.implicits)

"""
Path API — where sources are read from and where outputs go.

Every path handed out is relative to the source root, so a graph
generated in two checkouts of the same tree is identical.

    <out_dir>/.intermediates/<module_dir>/<module_name>/...   module outputs
    <module_dir>/...                                          sources
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from suite_harness.core.engine.contexts import (
    BottomUpMutatorContext,
    ModuleContext,
    BaseContext,
)
from suite_harness.core.engine.errors import ModuleError
from suite_harness.core.engine.module import SourceFileProducer

INTERMEDIATES_DIR = ".intermediates"

# Prefix that turns a source entry into a reference to another module.
MODULE_REF_PREFIX = ":"


def _relative(ctx: BaseContext, parts: tuple[str | Path, ...]) -> Path:
    path = Path(*parts) if parts else Path()
    if path.is_absolute() or ".." in path.parts:
        raise ModuleError(ctx.module_name(), f"path {str(path)!r} escapes the source tree")
    return path


def path_for_output(ctx: BaseContext, *parts: str | Path) -> Path:
    """A path under the output directory."""
    return ctx.config().out_dir() / _relative(ctx, parts)


def path_for_module_out(ctx: BaseContext, *parts: str | Path) -> Path:
    """A path under the calling module's private output directory."""
    return path_for_output(
        ctx, INTERMEDIATES_DIR, ctx.module_dir(), ctx.module_name(), _relative(ctx, parts)
    )


def path_for_source(ctx: BaseContext, *parts: str | Path) -> Path:
    """A path in the source tree.  Existence is not checked."""
    return _relative(ctx, parts)


def existent_path_for_source(ctx: BaseContext, *parts: str | Path) -> Path | None:
    """A source path if that file exists, else None."""
    path = path_for_source(ctx, *parts)
    if (ctx.config().source_root / path).is_file():
        return path
    return None


def module_refs(srcs: Iterable[str]) -> list[str]:
    """Module names referenced as ``:name`` in a list of sources."""
    return [s[len(MODULE_REF_PREFIX):] for s in srcs if s.startswith(MODULE_REF_PREFIX)]


def extract_source_deps(ctx: BottomUpMutatorContext, srcs: Iterable[str]) -> None:
    """Add a dependency on every module referenced from ``srcs``."""
    ctx.add_dependency(*module_refs(srcs))


def expand_sources(ctx: ModuleContext, srcs: Iterable[str]) -> list[Path]:
    """Resolve source entries to paths.

    ``:name`` entries expand to the outputs of that module, which must be
    a source-file producer.  Plain entries are files in the module's
    directory and must exist.
    """
    paths: list[Path] = []
    for src in srcs:
        if src.startswith(MODULE_REF_PREFIX):
            dep_name = src[len(MODULE_REF_PREFIX):]
            dep = ctx.get_direct_dep(dep_name)
            if not isinstance(dep, SourceFileProducer):
                raise ModuleError(
                    ctx.module_name(), f"module {dep_name!r} does not produce source files"
                )
            paths.extend(dep.srcs())
            continue

        path = path_for_source(ctx, ctx.module_dir(), src)
        if not (ctx.config().source_root / path).is_file():
            raise ModuleError(ctx.module_name(), f"missing source file {str(path)!r}")
        paths.append(path)
    return paths

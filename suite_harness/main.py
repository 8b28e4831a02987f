"""
suite-harness — CLI entrypoint.

Usage:
    python -m suite_harness.main --help
    python -m suite_harness.main modules
    python -m suite_harness.main graph --ninja out/build.ninja
    python -m suite_harness.main build
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from suite_harness import __version__
from suite_harness.core.observability.logging_config import configure_from_env


@click.group()
@click.version_option(version=__version__, prog_name="suite-harness")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to build.yml (default: search upward from the current directory).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """suite-harness — expand and build test-suite host launchers."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    level = None
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    configure_from_env(level)


def _fail(error: str, errors: list[str]) -> None:
    click.secho(f"❌ {error}", fg="red", err=True)
    for line in errors:
        click.echo(f"   {line}", err=True)
    sys.exit(1)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def modules(ctx: click.Context, as_json: bool) -> None:
    """List every module after expansion, with its outputs."""
    from suite_harness.core.engine.module import SourceFileProducer
    from suite_harness.core.use_cases.generate import generate_graph

    result = generate_graph(config_path=ctx.obj.get("config_path"))
    if result.error:
        if as_json:
            click.echo(json.dumps(result.to_dict(), indent=2))
            sys.exit(1)
        _fail(result.error, result.errors)

    graph = result.graph
    assert graph is not None

    rows = []
    for name, module in graph.modules.items():
        outputs = [str(p) for p in module.srcs()] if isinstance(module, SourceFileProducer) else []
        rows.append(
            {
                "name": name,
                "type": type(module).__name__,
                "dir": module.directory.as_posix(),
                "created_by": module.created_by,
                "outputs": outputs,
            }
        )

    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return

    for row in rows:
        origin = f" (from {row['created_by']})" if row["created_by"] else ""
        click.echo(f"• {row['name']} [{row['type']}]{origin}")
        for output in row["outputs"]:
            click.echo(f"    → {output}")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option(
    "--ninja",
    "ninja_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write the graph as a ninja file.",
)
@click.pass_context
def graph(ctx: click.Context, as_json: bool, ninja_file: str | None) -> None:
    """Print the build edges generated from the declarations."""
    from suite_harness.core.use_cases.generate import generate_graph

    result = generate_graph(
        config_path=ctx.obj.get("config_path"),
        ninja_path=Path(ninja_file) if ninja_file else None,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error:
            sys.exit(1)
        return

    if result.error:
        _fail(result.error, result.errors)

    assert result.graph is not None
    for edge in result.graph.edges:
        outputs = " ".join(str(p) for p in edge.outputs)
        click.echo(f"{edge.module}: {edge.rule.qualified_name} → {outputs}")
    if result.ninja_path and not ctx.obj.get("quiet"):
        click.secho(f"Wrote {result.ninja_path}", fg="green")


@cli.command()
@click.option("--dry-run", is_flag=True, help="Show what would run without running it.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def build(ctx: click.Context, dry_run: bool, as_json: bool) -> None:
    """Run every out-of-date build edge."""
    from suite_harness.core.use_cases.build import run_build

    result = run_build(config_path=ctx.obj.get("config_path"), dry_run=dry_run)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error or (result.report and not result.report.all_ok):
            sys.exit(1)
        return

    if result.error:
        _fail(result.error, result.errors)

    report = result.report
    assert report is not None
    for receipt in report.receipts:
        if receipt.failed:
            click.secho(f"✗ {receipt.action_id}: {receipt.error}", fg="red")

    if not ctx.obj.get("quiet"):
        click.echo(
            f"{report.built} built, {report.up_to_date} up to date, "
            f"{report.failed} failed ({report.total} edges)"
        )
    if not report.all_ok:
        sys.exit(1)


if __name__ == "__main__":
    cli()

"""Main CLI for docindex."""

import sys
from pathlib import Path
from typing import Any, Iterable, Sequence

import click
from rich.console import Console
from rich.table import Table

from ..core.config import DocIndexConfig, config_summary, load_config
from ..errors import DocIndexError, ErrorTranslator
from ..indexing.builder import BuildReport, IndexBuilder
from ..indexing.collector import EntryCollector
from ..indexing.models import CollectionWarning, EntryOrdering
from ..indexing.query import SidebarQuery
from ..indexing.serializer import OUTPUT_FORMATS
from ..indexing.sources import load_input
from ..indexing.store import IndexStore
from ..utils.rich_logging import setup_logging


console = Console()
err_console = Console(stderr=True)


def _fail(error: Exception) -> None:
    translator = ErrorTranslator()
    err_console.print(translator.format_for_cli(translator.translate(error)))
    sys.exit(2)


def _load_inputs(inputs: Iterable[str]) -> list[Any]:
    declarations: list[Any] = []
    for path in inputs:
        declarations.extend(load_input(Path(path)))
    return declarations


def _print_warnings(warnings: Sequence[CollectionWarning]) -> None:
    if not warnings:
        return
    table = Table(title=f"Skipped declarations ({len(warnings)})")
    table.add_column("Module")
    table.add_column("#", justify="right")
    table.add_column("Reason")
    table.add_column("Message")
    for warning in warnings:
        table.add_row(warning.module or "-", str(warning.index), warning.code, warning.message)
    console.print(table)


def _print_report(report: BuildReport) -> None:
    summary = report.summary()
    table = Table(title="Sidebar index build")
    table.add_column("Modules", justify="right")
    table.add_column("Entries", justify="right")
    table.add_column("Warnings", justify="right")
    table.add_column("Failures", justify="right")
    table.add_row(
        str(summary["modules"]),
        str(summary["entries"]),
        str(summary["warnings"]),
        str(summary["failures"]),
    )
    console.print(table)
    _print_warnings(report.warnings)
    for key, reason in sorted(report.failures.items()):
        console.print(f"[red]✗ {key}[/]: {reason}")


@click.group()
@click.option("--config", "-c", "config_path", default="docindex.yaml", help="Config file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_path, verbose):
    """docindex - build documentation sidebar indexes."""
    ctx.ensure_object(dict)
    try:
        config = load_config(Path(config_path))
    except ValueError as e:
        _fail(e)
    setup_logging("DEBUG" if verbose else config.log_level)
    ctx.obj["config"] = config


@cli.command()
@click.argument("inputs", nargs=-1, required=True, type=click.Path(exists=True))
@click.option("--output", "-o", type=click.Path(file_okay=False), help="Output directory")
@click.option("--format", "-f", "output_format", type=click.Choice(OUTPUT_FORMATS), help="Artifact format")
@click.option(
    "--ordering",
    type=click.Choice([o.value for o in EntryOrdering]),
    help="Entry order within each kind",
)
@click.option("--strict", is_flag=True, help="Exit non-zero when any declaration was skipped")
@click.pass_context
def build(ctx, inputs, output, output_format, ordering, strict):
    """Build sidebar artifacts from declaration files or sidebar directories."""
    config: DocIndexConfig = ctx.obj["config"]
    output_dir = Path(output) if output else config.output_dir

    builder = IndexBuilder(
        ordering=EntryOrdering(ordering) if ordering else config.ordering,
        kind_order=config.kind_order,
        output_format=output_format or config.output_format,
    )
    store = IndexStore(output_dir, config.combined_file_name)

    try:
        report = builder.build(_load_inputs(inputs))
        written = builder.write(report, store)
    except (DocIndexError, OSError) as e:
        _fail(e)

    _print_report(report)
    console.print(f"[green]✓ Wrote {len(written)} files to {output_dir}[/]")

    if not report.ok:
        sys.exit(1)
    if strict and report.warnings:
        sys.exit(1)


@cli.command()
@click.argument("inputs", nargs=-1, required=True, type=click.Path(exists=True))
@click.pass_context
def check(ctx, inputs):
    """Validate declarations without writing anything."""
    config: DocIndexConfig = ctx.obj["config"]
    try:
        declarations = _load_inputs(inputs)
    except DocIndexError as e:
        _fail(e)

    results = EntryCollector(config.ordering).collect_all(declarations)
    warnings = [w for result in results.values() for w in result.warnings]
    modules = [key for key in results if key]
    entries = sum(results[key].index.entry_count() for key in modules)

    console.print(f"[bold]{len(modules)} modules, {entries} entries[/]")
    if warnings:
        _print_warnings(warnings)
        sys.exit(1)
    console.print("[green]✓ No problems found[/]")


@cli.command()
@click.argument("index_dir", type=click.Path(exists=True, file_okay=False))
@click.argument("module", required=False)
@click.option("--raw-links", is_flag=True, help="Keep [`xref`] markup in summaries")
@click.pass_context
def show(ctx, index_dir, module, raw_links):
    """Print the sidebar of MODULE, or list modules when omitted."""
    config: DocIndexConfig = ctx.obj["config"]
    store = IndexStore(Path(index_dir), config.combined_file_name)
    query = SidebarQuery.from_store(store)
    if query is None:
        console.print(f"[red]No sidebar index found at {store.combined_path}[/]")
        sys.exit(1)

    if module is None:
        for key in query.modules():
            console.print(key, markup=False, highlight=False)
        return

    text = query.render_text(module, plain_xrefs=not raw_links)
    if not text:
        console.print(f"[red]Unknown module: {module}[/]")
        sys.exit(1)
    console.print(text, markup=False, highlight=False)


@cli.command(name="config")
@click.pass_context
def show_config(ctx):
    """Show the effective configuration."""
    config: DocIndexConfig = ctx.obj["config"]
    table = Table()
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in config_summary(config).items():
        table.add_row(key, value)
    console.print(table)


if __name__ == "__main__":
    cli()

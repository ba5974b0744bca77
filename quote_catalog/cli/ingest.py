"""
Ingestion CLI Commands
======================

Load quote CSV files into the catalog, either from a named source in
config/sources.yaml or from files given on the command line.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from quote_catalog.core.enums import RunStatus, SkipReason
from quote_catalog.core.errors import SourceReadError
from quote_catalog.db.engine import init_db
from quote_catalog.ingestion.pipeline import IngestionResult, ingest_files, ingest_source
from quote_catalog.ingestion.registry import SourceRegistry, get_default_registry

console = Console()
ingest_app = typer.Typer(help="Load quote datasets into the catalog")
sources_app = typer.Typer(help="Inspect configured ingestion sources")

ingest_app.add_typer(sources_app, name="sources")

STATUS_STYLES = {
    RunStatus.COMPLETED: "green",
    RunStatus.RUNNING: "blue",
    RunStatus.FAILED: "red",
}

# Summary rows: label, IngestionResult attribute
SUMMARY_ROWS = [
    ("Records read", "records_read"),
    ("Quotes created", "quotes_created"),
    ("Authors created", "authors_created"),
    ("Authors reused", "authors_reused"),
    ("Categories created", "categories_created"),
    ("Categories reused", "categories_reused"),
]

MAX_ERRORS_SHOWN = 10


@ingest_app.command("run")
def run_ingestion(
    source: Optional[str] = typer.Option(None, "--source", "-s", help="Configured source name"),
    files: Optional[list[Path]] = typer.Option(
        None, "--file", "-f", help="CSV file to ingest (repeatable)"
    ),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-l", help="Stop after creating this many quotes"
    ),
) -> None:
    """
    Ingest quote records from a configured source or explicit CSV files.

    Examples:
        quote-catalog ingest run --source quotes-dataset --limit 100
        quote-catalog ingest run -f quotes.1of5.csv -f quotes.2of5.csv
    """
    if (source is None) == (not files):
        console.print("[red]Error:[/red] Give either --source or --file, not both")
        raise typer.Exit(1)

    registry = get_default_registry()
    paths = _confirm_source(registry, source) if source else list(files)

    console.print(f"\n[bold]Ingesting {len(paths)} file(s)[/bold]")
    for path in paths:
        console.print(f"  {path}")
    if limit is not None:
        console.print(f"  Limit: {limit} quotes")

    init_db()
    try:
        with console.status("[bold blue]Ingesting...[/bold blue]"):
            if source:
                result = ingest_source(source, limit=limit, allow_disabled=True)
            else:
                result = ingest_files(paths, limit=limit, config=registry.ingestion)
    except SourceReadError as e:
        console.print(f"\n[red]Error:[/red] {e}")
        raise typer.Exit(1)

    _print_summary(result)
    if result.status == RunStatus.FAILED:
        raise typer.Exit(1)


@sources_app.command("list")
def list_sources() -> None:
    """Show the sources defined in the sources config."""
    registry = get_default_registry()
    sources = registry.list_sources()

    if not sources:
        console.print("[yellow]No ingestion sources configured[/yellow]")
        console.print("Define them in config/sources.yaml or point SOURCES_CONFIG_PATH at a file")
        return

    table = Table(title="Ingestion Sources")
    table.add_column("Name", style="bold")
    table.add_column("Files", justify="right")
    table.add_column("Enabled")
    table.add_column("Description")

    for s in sources:
        enabled = "yes" if s.enabled else "[yellow]no[/yellow]"
        table.add_row(s.name, str(len(s.files)), enabled, s.description)

    console.print(table)


def _confirm_source(registry: SourceRegistry, name: str) -> list[Path]:
    """Files of a named source; exits when it is unknown or a disabled one is declined."""
    source_config = registry.get_source(name)

    if source_config is None:
        console.print(f"[red]Error:[/red] Source '{name}' not found")
        known = ", ".join(s.name for s in registry.list_sources()) or "none"
        console.print(f"Configured sources: {known}")
        raise typer.Exit(1)

    if not source_config.enabled and not typer.confirm(
        f"Source '{name}' is disabled. Ingest it anyway?"
    ):
        raise typer.Exit(0)

    return source_config.files


def _print_summary(result: IngestionResult) -> None:
    """Print run status, counters and the first persistence errors."""
    style = STATUS_STYLES.get(result.status, "white")
    console.print(f"\nStatus: [{style}]{result.status.value}[/{style}]")
    if result.duration_seconds is not None:
        console.print(f"Duration: {result.duration_seconds:.1f}s")
    if result.limit_reached:
        console.print("[dim]Stopped early: limit reached[/dim]")

    table = Table(title="Ingestion Summary")
    table.add_column("Metric", style="bold")
    table.add_column("Count", justify="right")
    for label, attr in SUMMARY_ROWS:
        table.add_row(label, str(getattr(result, attr)))
    for reason in SkipReason:
        table.add_row(f"Skipped: {reason.value}", str(result.skipped[reason]))
    console.print(table)

    if result.errors:
        console.print(f"\n[bold red]{len(result.errors)} record(s) failed to save[/bold red]")
        for error in result.errors[:MAX_ERRORS_SHOWN]:
            console.print(f"  {error}")
        hidden = len(result.errors) - MAX_ERRORS_SHOWN
        if hidden > 0:
            console.print(f"  ... {hidden} more")

"""
Quote CLI Commands
==================

CLI commands for browsing the quote catalog.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from quote_catalog.core.enums import QuoteSortField, SortDirection
from quote_catalog.core.errors import CatalogError
from quote_catalog.core.schema import Quote
from quote_catalog.db.engine import get_session
from quote_catalog.services.catalog_service import get_catalog_service

console = Console()
quotes_app = typer.Typer(help="Quote catalog queries")


@quotes_app.command("list")
def list_quotes(
    page: int = typer.Option(1, "--page", "-p", help="Page number"),
    limit: int = typer.Option(10, "--limit", "-l", help="Quotes per page (max 20)"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="Author name contains"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Category contains"),
    sort_field: QuoteSortField = typer.Option(QuoteSortField.ID, "--sort", help="Sort field"),
    sort_direction: SortDirection = typer.Option(
        SortDirection.ASC, "--direction", "-d", help="Sort direction"
    ),
) -> None:
    """
    List quotes one page at a time.

    Examples:
        quote-catalog quotes list --author=twain --limit=5
        quote-catalog quotes list --category=love --sort=AUTHOR --direction=DESC
    """
    with get_session() as session:
        service = get_catalog_service(session)
        try:
            result = service.list_quotes(
                page=page,
                limit=limit,
                author=author,
                category=category,
                sort_field=sort_field,
                sort_direction=sort_direction,
            )
        except CatalogError as e:
            rprint(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)

    if not result.items:
        rprint("[yellow]No quotes found[/yellow]")
        return

    table = Table(title=f"Quotes (page {result.page} of {result.total_pages}, {result.total} total)")
    table.add_column("ID", justify="right")
    table.add_column("Quote")
    table.add_column("Author", style="bold")
    table.add_column("Categories")

    for quote in result.items:
        table.add_row(
            str(quote.id),
            _truncate(quote.quote, 80),
            quote.author.name if quote.author else "",
            ", ".join(c.name for c in quote.categories),
        )

    console.print(table)


@quotes_app.command("show")
def show_quote(
    quote_id: int = typer.Argument(..., help="Quote ID"),
) -> None:
    """
    Show a single quote.

    Examples:
        quote-catalog quotes show 42
    """
    with get_session() as session:
        quote = get_catalog_service(session).get_by_id(quote_id)

    if quote is None:
        rprint(f"[red]Error:[/red] Quote {quote_id} not found")
        raise typer.Exit(1)

    _display_quote(quote)


@quotes_app.command("random")
def random_quote() -> None:
    """Show a random quote."""
    with get_session() as session:
        quote = get_catalog_service(session).get_random()

    if quote is None:
        rprint("[yellow]The catalog is empty[/yellow]")
        raise typer.Exit(1)

    _display_quote(quote)


@quotes_app.command("next")
def next_quote(
    quote_id: int = typer.Argument(..., help="Quote ID"),
) -> None:
    """Show the quote after the given one, wrapping around at the end."""
    with get_session() as session:
        try:
            quote = get_catalog_service(session).next_quote(quote_id)
        except CatalogError as e:
            rprint(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)

    _display_quote(quote)


@quotes_app.command("prev")
def prev_quote(
    quote_id: int = typer.Argument(..., help="Quote ID"),
) -> None:
    """Show the quote before the given one, wrapping around at the start."""
    with get_session() as session:
        try:
            quote = get_catalog_service(session).prev_quote(quote_id)
        except CatalogError as e:
            rprint(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)

    _display_quote(quote)


def _truncate(text: str, length: int) -> str:
    return text if len(text) <= length else text[: length - 3] + "..."


def _display_quote(quote: Quote) -> None:
    """Display one quote with its author and categories."""
    rprint(f"\n[bold]Quote {quote.id}[/bold]")
    rprint(f"  {quote.quote}")
    if quote.author:
        rprint(f"  - {quote.author.name} [dim]({quote.author.permalink})[/dim]")
    rprint(f"  Permalink: {quote.permalink}")
    if quote.categories:
        rprint(f"  Categories: {', '.join(c.name for c in quote.categories)}")

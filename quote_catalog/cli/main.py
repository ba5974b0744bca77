"""Quote Catalog command line entry point."""

import logging
import os
from pathlib import Path

import typer
from dotenv import find_dotenv, load_dotenv

from quote_catalog import __version__
from quote_catalog.cli.ingest import ingest_app
from quote_catalog.cli.quotes import quotes_app

PROJECT_ROOT = Path(__file__).resolve().parents[2]

# The working directory's .env wins over the one in the project root
_env_file = find_dotenv(usecwd=True) or str(PROJECT_ROOT / ".env")
if Path(_env_file).is_file():
    load_dotenv(_env_file)

app = typer.Typer(
    name="quote-catalog",
    help="Ingest quote datasets into a normalized catalog and browse them",
    add_completion=False,
    no_args_is_help=True,
)
app.add_typer(ingest_app, name="ingest")
app.add_typer(quotes_app, name="quotes")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    """Set up logging before any command runs."""
    level_name = "DEBUG" if verbose else os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def run(
    host: str = typer.Option("127.0.0.1", "--host", "-h", help="Interface to listen on"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to listen on"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Restart on code changes"),
) -> None:
    """Serve the JSON API with uvicorn."""
    import uvicorn

    typer.echo(f"Quote Catalog API on http://{host}:{port} (Ctrl+C to stop)")
    uvicorn.run(
        "quote_catalog.web.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


@app.command()
def init_db(
    migrate: bool = typer.Option(
        False, "--migrate", help="Apply Alembic migrations instead of create_all"
    ),
) -> None:
    """Create the catalog tables in the configured database."""
    from quote_catalog.db import engine

    if migrate:
        engine.run_migrations()
    else:
        engine.init_db()
    typer.echo(f"Catalog database ready: {engine.get_database_url()}")


@app.command()
def version() -> None:
    """Print the installed version."""
    typer.echo(f"Quote Catalog v{__version__}")


@app.command()
def check_config() -> None:
    """Show which database, .env and sources config are in effect."""
    from quote_catalog.db.engine import get_database_url
    from quote_catalog.ingestion.registry import get_default_registry

    registry = get_default_registry()
    seed_limit = registry.ingestion.seed_limit

    lines = [
        f".env file: {_env_file if Path(_env_file).is_file() else 'not found'}",
        f"Database: {get_database_url()}",
        f"Sources config: {registry.config_path or 'not found'}",
        f"Sources: {len(registry.list_sources())}",
        f"Seed limit: {seed_limit if seed_limit is not None else 'none'}",
        f"Log level: {os.environ.get('LOG_LEVEL', 'INFO')}",
    ]
    typer.echo("Quote Catalog configuration")
    for line in lines:
        typer.echo(f"  {line}")


if __name__ == "__main__":
    app()

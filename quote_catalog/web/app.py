"""FastAPI application factory for Quote Catalog."""

import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from quote_catalog import __version__
from quote_catalog.core.errors import CatalogValidationError, QuoteNotFoundError
from quote_catalog.db.engine import init_db

# Load .env file from project root
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

logger = logging.getLogger(__name__)


async def _validation_error_handler(request: Request, exc: CatalogValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": exc.message, "field": exc.field},
    )


async def _not_found_handler(request: Request, exc: QuoteNotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"detail": str(exc), "quote_id": exc.quote_id},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Quote Catalog",
        description="Browse quotes by author, category and permalink",
        version=__version__,
    )

    # Initialize database tables
    init_db()

    app.add_exception_handler(CatalogValidationError, _validation_error_handler)
    app.add_exception_handler(QuoteNotFoundError, _not_found_handler)

    # Include routers (import here to avoid circular imports)
    from quote_catalog.web.routes import quotes

    app.include_router(quotes.router)
    app.include_router(quotes.authors_router)

    logger.info("Quote Catalog API ready")
    return app

"""JSON routes for browsing the quote catalog."""

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from quote_catalog.core.enums import QuoteSortField, SortDirection
from quote_catalog.core.schema import Quote
from quote_catalog.db.engine import get_session
from quote_catalog.services.catalog_service import get_catalog_service

router = APIRouter(prefix="/quotes", tags=["quotes"])
authors_router = APIRouter(prefix="/authors", tags=["quotes"])


def _quote_response(quote: Quote | None) -> JSONResponse:
    """Serialize a quote, or raise 404 when it is absent."""
    if quote is None:
        raise HTTPException(status_code=404, detail="Quote not found")
    return JSONResponse({"quote": quote.model_dump(mode="json")})


@router.get("")
async def api_list_quotes(
    page: int = 1,
    limit: int = 10,
    author: str | None = None,
    category: str | None = None,
    sort_field: QuoteSortField = QuoteSortField.ID,
    sort_direction: SortDirection = SortDirection.ASC,
) -> JSONResponse:
    """
    List quotes with pagination, filters and sorting.

    author and category are case-insensitive substring filters.
    """
    with get_session() as session:
        service = get_catalog_service(session)
        result = service.list_quotes(
            page=page,
            limit=limit,
            author=author,
            category=category,
            sort_field=sort_field,
            sort_direction=sort_direction,
        )

    return JSONResponse(result.model_dump(mode="json"))


@router.get("/random")
async def api_random_quote() -> JSONResponse:
    """Get a random quote."""
    with get_session() as session:
        quote = get_catalog_service(session).get_random()
    return _quote_response(quote)


@router.get("/permalink/{permalink}")
async def api_get_quote_by_permalink(permalink: str) -> JSONResponse:
    """Get the first quote with a permalink."""
    with get_session() as session:
        quote = get_catalog_service(session).get_by_permalink(permalink)
    return _quote_response(quote)


@router.get("/{quote_id}")
async def api_get_quote(quote_id: int) -> JSONResponse:
    """Get a quote by ID."""
    with get_session() as session:
        quote = get_catalog_service(session).get_by_id(quote_id)
    return _quote_response(quote)


@router.get("/{quote_id}/next")
async def api_next_quote(quote_id: int) -> JSONResponse:
    """Get the quote after quote_id, wrapping to the first."""
    with get_session() as session:
        quote = get_catalog_service(session).next_quote(quote_id)
    return _quote_response(quote)


@router.get("/{quote_id}/prev")
async def api_prev_quote(quote_id: int) -> JSONResponse:
    """Get the quote before quote_id, wrapping to the last."""
    with get_session() as session:
        quote = get_catalog_service(session).prev_quote(quote_id)
    return _quote_response(quote)


@authors_router.get("/{author_permalink}/quotes/{quote_permalink}")
async def api_get_quote_by_author(author_permalink: str, quote_permalink: str) -> JSONResponse:
    """Get a quote by its author's permalink and its own permalink."""
    with get_session() as session:
        quote = get_catalog_service(session).get_by_author_and_permalink(
            author_permalink, quote_permalink
        )
    return _quote_response(quote)

"""Catalog service for querying quotes.

This service provides read-only business logic for:
- Paginated, filtered and sorted quote listings
- Point lookups by id and permalink
- Random quotes and next/previous navigation by id
"""

import logging
import math

from sqlalchemy.orm import Session

from quote_catalog.core.enums import QuoteSortField, SortDirection
from quote_catalog.core.errors import CatalogValidationError, QuoteNotFoundError
from quote_catalog.core.schema import MAX_PAGE_LIMIT, Quote, QuoteListRequest, QuotePage
from quote_catalog.db.engine import get_session_factory
from quote_catalog.db.repositories import (
    AuthorRepository,
    CategoryRepository,
    QuoteFilter,
    QuoteRepository,
    QuoteSort,
)

logger = logging.getLogger(__name__)


class CatalogService:
    """Service for reading the quote catalog."""

    def __init__(self, session: Session | None = None):
        """
        Initialize the catalog service.

        Args:
            session: SQLAlchemy session (optional, will create one if not provided)
        """
        self._session = session

    @property
    def session(self) -> Session:
        """Get or create a database session."""
        if self._session is None:
            self._session = get_session_factory()()
        return self._session

    @property
    def quotes(self) -> QuoteRepository:
        return QuoteRepository(self.session)

    # =========================================================================
    # Listing
    # =========================================================================

    def list_quotes(
        self,
        page: int = 1,
        limit: int = 10,
        author: str | None = None,
        category: str | None = None,
        sort_field: QuoteSortField = QuoteSortField.ID,
        sort_direction: SortDirection = SortDirection.ASC,
    ) -> QuotePage:
        """
        List quotes one page at a time.

        Args:
            page: 1-based page number
            limit: Page size, at most MAX_PAGE_LIMIT
            author: Case-insensitive substring of the author's name
            category: Case-insensitive substring of any category name
            sort_field: Field to sort by
            sort_direction: Ascending or descending

        Returns:
            QuotePage; pages past the end have no items

        Raises:
            CatalogValidationError: If page or limit is out of range
        """
        request = QuoteListRequest(
            page=page,
            limit=limit,
            author=author,
            category=category,
            sort_field=sort_field,
            sort_direction=sort_direction,
        )
        return self.search(request)

    def search(self, request: QuoteListRequest) -> QuotePage:
        """Run a quote listing request. See list_quotes."""
        if request.limit > MAX_PAGE_LIMIT:
            raise CatalogValidationError(f"limit cannot exceed {MAX_PAGE_LIMIT}", field="limit")
        if request.limit < 1:
            raise CatalogValidationError("limit must be at least 1", field="limit")
        if request.page < 1:
            raise CatalogValidationError("page must be at least 1", field="page")

        filters = QuoteFilter(author=request.author or None, category=request.category or None)
        sort = QuoteSort(field=request.sort_field, direction=request.sort_direction)

        repo = self.quotes
        total = repo.count(filters)
        items = repo.query_page(filters, sort, skip=request.skip, take=request.limit)

        total_pages = math.ceil(total / request.limit)
        logger.debug(f"Quote search {filters} page {request.page}: {len(items)} of {total}")
        return QuotePage(
            items=items,
            total=total,
            page=request.page,
            limit=request.limit,
            has_more=request.page < total_pages,
            total_pages=total_pages,
        )

    # =========================================================================
    # Point lookups
    # =========================================================================

    def get_by_id(self, quote_id: int) -> Quote | None:
        """Get a quote by ID."""
        return self.quotes.get_by_id(quote_id)

    def get_by_permalink(self, permalink: str) -> Quote | None:
        """Get the first quote with the given permalink."""
        return self.quotes.get_by_permalink(permalink)

    def get_by_author_and_permalink(self, author_permalink: str, quote_permalink: str) -> Quote | None:
        """
        Get a quote by its author's permalink and its own permalink.

        Returns:
            The quote, or None if the author or the quote does not exist
        """
        author = AuthorRepository(self.session).get_by_permalink(author_permalink)
        if author is None:
            return None
        return self.quotes.get_by_author_and_permalink(author.id, quote_permalink)

    def get_random(self) -> Quote | None:
        """Get a random quote, or None if the catalog is empty."""
        return self.quotes.random()

    # =========================================================================
    # Navigation
    # =========================================================================

    def next_quote(self, quote_id: int) -> Quote:
        """
        Get the quote after quote_id in id order, wrapping to the first.

        Raises:
            QuoteNotFoundError: If no quote has quote_id
        """
        repo = self.quotes
        if not repo.exists(quote_id):
            raise QuoteNotFoundError(quote_id)
        return repo.first_after(quote_id) or repo.first()

    def prev_quote(self, quote_id: int) -> Quote:
        """
        Get the quote before quote_id in id order, wrapping to the last.

        Raises:
            QuoteNotFoundError: If no quote has quote_id
        """
        repo = self.quotes
        if not repo.exists(quote_id):
            raise QuoteNotFoundError(quote_id)
        return repo.last_before(quote_id) or repo.last()

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_catalog_stats(self) -> dict[str, int]:
        """Get row counts for the catalog."""
        return {
            "quotes": self.quotes.count(),
            "authors": AuthorRepository(self.session).count(),
            "categories": CategoryRepository(self.session).count(),
        }


def get_catalog_service(session: Session | None = None) -> CatalogService:
    """Get a catalog service instance."""
    return CatalogService(session=session)

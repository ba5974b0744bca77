"""Pydantic v2 models for the quote catalog.

These models define the catalog entities and query payloads:
- Author, Category, Quote (catalog entities)
- RawQuoteRecord (unvalidated source row)
- QuoteListRequest, QuotePage (listing request and response)
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quote_catalog.core.enums import QuoteSortField, SortDirection

MAX_PAGE_LIMIT = 20


# ============================================================================
# Catalog Entities
# ============================================================================


class Author(BaseModel):
    """
    Author of one or more quotes.

    The name has already been normalized and title-cased.
    """

    id: int | None = None
    name: str
    permalink: str = ""

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name cannot be empty")
        return v.strip()


class Category(BaseModel):
    """Category label (lowercase, space-separated)."""

    id: int | None = None
    name: str

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name cannot be empty")
        return v.strip()


class Quote(BaseModel):
    """
    A single quote with its author and categories.

    Categories keep the order they were produced in during ingestion.
    """

    id: int | None = None
    quote: str
    permalink: str = ""
    author: Author | None = None
    categories: list[Category] = Field(default_factory=list)

    @property
    def author_id(self) -> int | None:
        return self.author.id if self.author else None


# ============================================================================
# Ingestion Payloads
# ============================================================================


class RawQuoteRecord(BaseModel):
    """One row from a record source, before any validation or cleaning."""

    model_config = ConfigDict(frozen=True)

    quote: str | None = None
    author: str | None = None
    category: str | None = None
    line: int | None = None
    # Set when the CSV parser rejected the row; the other fields are then None
    parse_error: str | None = None


# ============================================================================
# Query Payloads
# ============================================================================


class QuoteListRequest(BaseModel):
    """Arguments for a paginated, filtered, sorted quote listing."""

    page: int = 1
    limit: int = 10
    author: str | None = None
    category: str | None = None
    sort_field: QuoteSortField = QuoteSortField.ID
    sort_direction: SortDirection = SortDirection.ASC

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class QuotePage(BaseModel):
    """A page of quotes plus pagination metadata."""

    items: list[Quote] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10
    has_more: bool = False
    total_pages: int = 0

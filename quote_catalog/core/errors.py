"""Exceptions raised by the catalog and the ingestion pipeline."""

from pathlib import Path


class CatalogError(Exception):
    """Base class for Quote Catalog errors."""


class CatalogValidationError(CatalogError):
    """Raised when a catalog request has invalid arguments."""

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)


class QuoteNotFoundError(CatalogError):
    """Raised when navigation starts from a quote that does not exist."""

    def __init__(self, quote_id: int):
        self.quote_id = quote_id
        super().__init__(f"Quote with id {quote_id} not found")


class SourceReadError(CatalogError):
    """Raised when the record source cannot be opened or streamed."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to read {self.path}: {reason}")

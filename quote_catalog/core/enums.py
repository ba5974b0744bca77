"""Enums for catalog queries and ingestion outcomes."""

from enum import Enum


class QuoteSortField(str, Enum):
    """Fields available for sorting quotes."""

    ID = "ID"
    QUOTE = "QUOTE"
    AUTHOR = "AUTHOR"
    PERMALINK = "PERMALINK"


class SortDirection(str, Enum):
    """Sort direction for quote listings."""

    ASC = "ASC"
    DESC = "DESC"


class RecordStatus(str, Enum):
    """Outcome of ingesting a single source record."""

    CREATED = "created"
    SKIPPED = "skipped"


class SkipReason(str, Enum):
    """Why a source record was not ingested."""

    MISSING_FIELD = "missing_field"
    AUTHOR_TOO_LONG = "author_too_long"
    QUOTE_TOO_SHORT = "quote_too_short"
    UNPARSEABLE_ROW = "unparseable_row"
    PERSISTENCE_ERROR = "persistence_error"


class RunStatus(str, Enum):
    """Status of an ingestion run."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

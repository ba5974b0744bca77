"""
Ingestion Pipeline Module
=========================

Turns raw quote records into catalog rows:

1. Validate - skip unparseable rows and records with missing fields,
   oversized authors or short quotes
2. Normalize - clean quote text, author names and category labels
3. Resolve - get-or-create the author and categories (cache, database, create)
4. Persist - save the quote, one transaction per record

Records run strictly one after another. A bad record is skipped and counted;
only a failure of the record source itself aborts the run.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from quote_catalog.core.enums import RecordStatus, RunStatus, SkipReason
from quote_catalog.core.errors import SourceReadError
from quote_catalog.core.schema import Quote, RawQuoteRecord
from quote_catalog.db.engine import get_session
from quote_catalog.db.repositories import QuoteRepository
from quote_catalog.ingestion.normalizer import Normalizer
from quote_catalog.ingestion.permalink import generate_permalink
from quote_catalog.ingestion.registry import IngestionConfig, get_default_registry
from quote_catalog.ingestion.resolver import EntityResolver, ResolutionOrigin
from quote_catalog.ingestion.source import CsvRecordSource

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


@dataclass
class RecordOutcome:
    """Result of ingesting one source record."""

    status: RecordStatus
    line: int | None = None
    reason: SkipReason | None = None
    quote_id: int | None = None
    detail: str | None = None
    author_origin: ResolutionOrigin | None = None
    category_origins: list[ResolutionOrigin] = field(default_factory=list)

    @classmethod
    def skipped(cls, line: int | None, reason: SkipReason, detail: str | None = None) -> RecordOutcome:
        return cls(status=RecordStatus.SKIPPED, line=line, reason=reason, detail=detail)


@dataclass
class IngestionResult:
    """Summary of an ingestion run."""

    run_id: str
    status: RunStatus = RunStatus.RUNNING
    started_at: datetime | None = None
    completed_at: datetime | None = None
    records_read: int = 0
    quotes_created: int = 0
    authors_created: int = 0
    authors_reused: int = 0
    categories_created: int = 0
    categories_reused: int = 0
    skipped: Counter[SkipReason] = field(default_factory=Counter)
    limit_reached: bool = False
    errors: list[str] = field(default_factory=list)
    duration_seconds: float | None = None

    @property
    def skipped_total(self) -> int:
        return sum(self.skipped.values())

    def record(self, outcome: RecordOutcome) -> None:
        """Fold one record outcome into the totals."""
        if outcome.status == RecordStatus.SKIPPED:
            self.skipped[outcome.reason] += 1
            if outcome.reason == SkipReason.PERSISTENCE_ERROR:
                self.errors.append(f"line {outcome.line}: {outcome.detail}")
            return

        self.quotes_created += 1
        if outcome.author_origin == ResolutionOrigin.CREATED:
            self.authors_created += 1
        elif outcome.author_origin is not None:
            self.authors_reused += 1
        for origin in outcome.category_origins:
            if origin == ResolutionOrigin.CREATED:
                self.categories_created += 1
            else:
                self.categories_reused += 1

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "run_id": self.run_id,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "records_read": self.records_read,
            "quotes_created": self.quotes_created,
            "authors_created": self.authors_created,
            "authors_reused": self.authors_reused,
            "categories_created": self.categories_created,
            "categories_reused": self.categories_reused,
            "skipped": {reason.value: count for reason, count in self.skipped.items()},
            "skipped_total": self.skipped_total,
            "limit_reached": self.limit_reached,
            "errors": self.errors,
            "duration_seconds": self.duration_seconds,
        }


class IngestionPipeline:
    """
    Sequential ingestion of raw quote records into the catalog.

    Not safe to run concurrently with another pipeline against the same
    database: the author and category caches are per run.
    """

    def __init__(
        self,
        session: Session,
        config: IngestionConfig | None = None,
        normalizer: Normalizer | None = None,
    ) -> None:
        self.session = session
        self.config = config or IngestionConfig()
        self.normalizer = normalizer or Normalizer()
        self.quotes = QuoteRepository(session)

    def run(
        self,
        records: Iterable[RawQuoteRecord],
        limit: int | None = None,
    ) -> IngestionResult:
        """
        Ingest records until the source is exhausted or the limit is hit.

        Args:
            records: Lazy sequence of raw records
            limit: Maximum number of quotes to create; defaults to the
                   configured seed limit

        Returns:
            IngestionResult with per-reason skip counts

        Raises:
            SourceReadError: If the record source cannot be read
        """
        if limit is None:
            limit = self.config.seed_limit

        resolver = EntityResolver(self.session, self.config.author_permalink_words)
        result = IngestionResult(run_id=str(uuid4()), started_at=_utc_now())
        logger.info(f"Starting ingestion run {result.run_id}" + (f" (limit {limit})" if limit else ""))

        try:
            if limit is not None and limit <= 0:
                result.limit_reached = True
            else:
                for record in records:
                    result.records_read += 1
                    result.record(self.process_record(record, resolver))

                    if limit is not None and result.quotes_created >= limit:
                        result.limit_reached = True
                        logger.info(f"Reached limit of {limit} quotes, stopping")
                        break
            result.status = RunStatus.COMPLETED
        except SourceReadError:
            result.status = RunStatus.FAILED
            logger.error(f"Ingestion run {result.run_id} aborted: record source failed")
            raise
        finally:
            result.completed_at = _utc_now()
            result.duration_seconds = (result.completed_at - result.started_at).total_seconds()

        logger.info(
            f"Ingestion run {result.run_id} finished: {result.quotes_created} quotes, "
            f"{result.authors_created} new authors, {result.categories_created} new categories, "
            f"{result.skipped_total} skipped"
        )
        return result

    def validate(self, record: RawQuoteRecord) -> SkipReason | None:
        """
        Check a raw record before any normalization.

        Returns:
            The reason to skip the record, or None if it is valid
        """
        if record.parse_error is not None:
            return SkipReason.UNPARSEABLE_ROW
        fields = (record.quote, record.author, record.category)
        if any(value is None or not value.strip() for value in fields):
            return SkipReason.MISSING_FIELD
        # Oversized authors usually mean the row's columns are shifted
        if len(record.author) > self.config.max_author_length:
            return SkipReason.AUTHOR_TOO_LONG
        if len(self.normalizer.clean_quote_body(record.quote)) < self.config.min_quote_length:
            return SkipReason.QUOTE_TOO_SHORT
        return None

    def process_record(self, record: RawQuoteRecord, resolver: EntityResolver) -> RecordOutcome:
        """
        Validate, normalize and persist one record in its own transaction.

        Args:
            record: Raw source record
            resolver: Run-scoped entity resolver

        Returns:
            RecordOutcome describing what happened
        """
        reason = self.validate(record)
        if reason is not None:
            # Missing fields are routine; unparseable rows were logged by the source
            if reason not in (SkipReason.MISSING_FIELD, SkipReason.UNPARSEABLE_ROW):
                logger.warning(
                    f"Skipping malformed record at line {record.line} ({reason.value}): "
                    f"author={(record.author or '')[:50]!r}"
                )
            return RecordOutcome.skipped(record.line, reason, record.parse_error)

        normalized = self.normalizer.normalize_record(record)

        try:
            author = resolver.resolve_author(normalized.author_name, normalized.author_key)
            categories = [resolver.resolve_category(label) for label in normalized.categories]

            quote = self.quotes.save(
                Quote(
                    quote=normalized.quote,
                    permalink=generate_permalink(
                        normalized.quote, self.config.quote_permalink_words
                    ),
                    author=author.entity,
                    categories=[c.entity for c in categories],
                )
            )
            self.session.commit()
        except (SQLAlchemyError, ValueError) as e:
            self.session.rollback()
            resolver.discard()
            logger.exception(f"Error saving record at line {record.line}, skipping")
            return RecordOutcome.skipped(record.line, SkipReason.PERSISTENCE_ERROR, str(e))

        resolver.commit()
        return RecordOutcome(
            status=RecordStatus.CREATED,
            line=record.line,
            quote_id=quote.id,
            author_origin=author.origin,
            category_origins=[c.origin for c in categories],
        )


def ingest_files(
    paths: Iterable[Path | str],
    limit: int | None = None,
    config: IngestionConfig | None = None,
    session: Session | None = None,
) -> IngestionResult:
    """
    Ingest one or more CSV files into the catalog database.

    Args:
        paths: CSV files, read in order
        limit: Optional cap on quotes created
        config: Ingestion settings; defaults to the registry's
        session: Database session; a new one is opened if not given

    Returns:
        IngestionResult
    """
    config = config or get_default_registry().ingestion
    source = CsvRecordSource(paths)

    if session is not None:
        return IngestionPipeline(session, config).run(source, limit)

    with get_session() as new_session:
        return IngestionPipeline(new_session, config).run(source, limit)


def ingest_source(
    source_name: str,
    limit: int | None = None,
    allow_disabled: bool = False,
) -> IngestionResult:
    """
    Ingest a named source from the source registry.

    Args:
        source_name: Name of the source in sources.yaml
        limit: Optional cap on quotes created
        allow_disabled: Ingest the source even when it is marked disabled

    Returns:
        IngestionResult; FAILED when the source is unknown, or disabled
        without allow_disabled

    Raises:
        SourceReadError: If one of the source's files cannot be read
    """
    registry = get_default_registry()
    source_config = registry.get_source(source_name)

    if source_config is None or not (source_config.enabled or allow_disabled):
        state = "not found" if source_config is None else "disabled"
        result = IngestionResult(run_id=str(uuid4()), status=RunStatus.FAILED)
        result.errors.append(f"Source '{source_name}' {state}")
        return result

    return ingest_files(source_config.files, limit=limit, config=registry.ingestion)

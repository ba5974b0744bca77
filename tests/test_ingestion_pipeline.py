"""End-to-end tests for the ingestion pipeline."""

import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from quote_catalog.core.enums import RunStatus, SkipReason
from quote_catalog.core.errors import SourceReadError
from quote_catalog.core.schema import RawQuoteRecord
from quote_catalog.db.engine import init_db, reset_engine
from quote_catalog.db.models import Base
from quote_catalog.db.repositories import AuthorRepository, CategoryRepository, QuoteRepository
from quote_catalog.ingestion.pipeline import IngestionPipeline, ingest_files, ingest_source
from quote_catalog.ingestion.registry import IngestionConfig, reset_default_registry


@pytest.fixture
def temp_db_path():
    """Create a temporary database file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def session(temp_db_path):
    """Create a database session for testing."""
    engine = create_engine(f"sqlite:///{temp_db_path}", echo=False)
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def pipeline(session: Session) -> IngestionPipeline:
    """Create a pipeline with default settings."""
    return IngestionPipeline(session, IngestionConfig())


def record(quote: str | None, author: str | None, category: str | None, line: int = 0):
    return RawQuoteRecord(quote=quote, author=author, category=category, line=line)


class TestIngestionPipeline:
    """Tests for IngestionPipeline.run."""

    def test_ingests_and_deduplicates_entities(
        self, session: Session, pipeline: IngestionPipeline
    ) -> None:
        """Test author variants and repeated categories map to single rows."""
        records = [
            record("Don't cry because it's over, smile because it happened.", "Dr. Seuss", "life, happiness"),
            record("You're off to Great Places! Today is your day!", "dr seuss", "Life"),
            record("Be yourself; everyone else is already taken.", "Oscar Wilde, De Profundis", "self-love"),
        ]

        result = pipeline.run(records)

        assert result.status == RunStatus.COMPLETED
        assert result.records_read == 3
        assert result.quotes_created == 3
        assert result.authors_created == 2
        assert result.authors_reused == 1
        assert result.categories_created == 3
        assert result.categories_reused == 1
        assert result.skipped_total == 0
        assert result.limit_reached is False
        assert result.duration_seconds is not None

        assert AuthorRepository(session).count() == 2
        assert CategoryRepository(session).count() == 3

        quote = QuoteRepository(session).get_by_permalink("dont-cry-because-its-over")
        assert quote is not None
        assert quote.author.name == "Dr. Seuss"
        assert quote.author.permalink == "dr-seuss"
        assert [c.name for c in quote.categories] == ["life", "happiness"]

        wilde = QuoteRepository(session).get_by_permalink("be-yourself-everyone-else-is")
        assert wilde.author.name == "Oscar Wilde"
        assert [c.name for c in wilde.categories] == ["self love"]

    def test_reuses_entities_from_earlier_runs(self, session: Session) -> None:
        """Test a second run finds authors and categories in the database."""
        IngestionPipeline(session).run([record("The first quote of the day.", "Mark Twain", "humor")])

        result = IngestionPipeline(session).run(
            [record("The second quote of the day.", "MARK TWAIN", "Humor")]
        )

        assert result.authors_created == 0
        assert result.authors_reused == 1
        assert result.categories_reused == 1
        assert AuthorRepository(session).count() == 1

    def test_quotes_are_not_deduplicated(self, session: Session, pipeline: IngestionPipeline) -> None:
        """Test identical quotes each get their own row."""
        same = record("Identical quote text here.", "Someone", "dupes")
        result = pipeline.run([same, same])

        assert result.quotes_created == 2
        assert QuoteRepository(session).count() == 2

    @pytest.mark.parametrize(
        "raw, reason",
        [
            (record(None, "Someone", "life"), SkipReason.MISSING_FIELD),
            (record("A perfectly fine quote", "", "life"), SkipReason.MISSING_FIELD),
            (record("A perfectly fine quote", "Someone", "   "), SkipReason.MISSING_FIELD),
            (record("A perfectly fine quote", "x" * 501, "life"), SkipReason.AUTHOR_TOO_LONG),
            (record("  Too   short  ", "Someone", "life"), SkipReason.QUOTE_TOO_SHORT),
        ],
    )
    def test_skips_invalid_records(
        self, session: Session, pipeline: IngestionPipeline, raw: RawQuoteRecord, reason: SkipReason
    ) -> None:
        """Test each validation failure is counted under its reason."""
        result = pipeline.run([raw])

        assert result.status == RunStatus.COMPLETED
        assert result.records_read == 1
        assert result.quotes_created == 0
        assert result.skipped[reason] == 1
        assert QuoteRepository(session).count() == 0

    def test_validation_boundaries(self, pipeline: IngestionPipeline) -> None:
        """Test records exactly at the length limits are accepted."""
        result = pipeline.run([record("0123456789", "x" * 500, "edge")])
        assert result.quotes_created == 1

    def test_persistence_failure_is_isolated(
        self, session: Session, pipeline: IngestionPipeline, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test a failed save rolls back only its record and is not cached."""
        original_save = pipeline.quotes.save
        calls = {"count": 0}

        def flaky_save(quote):
            calls["count"] += 1
            if calls["count"] == 1:
                raise SQLAlchemyError("disk full")
            return original_save(quote)

        monkeypatch.setattr(pipeline.quotes, "save", flaky_save)

        result = pipeline.run(
            [
                record("The first attempt at saving.", "New Author", "fresh", line=2),
                record("The second attempt at saving.", "New Author", "fresh", line=3),
            ]
        )

        assert result.skipped[SkipReason.PERSISTENCE_ERROR] == 1
        assert result.errors == ["line 2: disk full"]
        assert result.quotes_created == 1
        # The rolled-back author and category are created again, not reused
        assert result.authors_created == 1
        assert result.categories_created == 1
        assert AuthorRepository(session).count() == 1
        assert CategoryRepository(session).count() == 1

    def test_invalid_author_name_is_persistence_error(self, pipeline: IngestionPipeline) -> None:
        """Test an author that normalizes to nothing is skipped, not fatal."""
        result = pipeline.run(
            [
                record("A quote with an odd author.", ", The Book Title", "odd"),
                record("A quote with a normal author.", "Normal Person", "fine"),
            ]
        )

        assert result.skipped[SkipReason.PERSISTENCE_ERROR] == 1
        assert result.quotes_created == 1

    def test_limit_stops_run(self, session: Session, pipeline: IngestionPipeline) -> None:
        """Test the run halts once the limit of created quotes is reached."""
        consumed = []

        def records() -> Iterator[RawQuoteRecord]:
            for i in range(10):
                consumed.append(i)
                yield record(f"Quote number {i} is long enough", "Counter", "numbers")

        result = pipeline.run(records(), limit=3)

        assert result.status == RunStatus.COMPLETED
        assert result.limit_reached is True
        assert result.quotes_created == 3
        assert consumed == [0, 1, 2]
        assert QuoteRepository(session).count() == 3

    def test_limit_counts_only_created_quotes(self, pipeline: IngestionPipeline) -> None:
        """Test skipped records do not count toward the limit."""
        records = [
            record("short", "A", "x"),
            record("A long enough quote", "A", "x"),
            record("short", "A", "x"),
            record("Another long enough quote", "A", "x"),
            record("Never reached quote", "A", "x"),
        ]

        result = pipeline.run(records, limit=2)

        assert result.quotes_created == 2
        assert result.records_read == 4
        assert result.skipped[SkipReason.QUOTE_TOO_SHORT] == 2

    def test_zero_limit(self, pipeline: IngestionPipeline) -> None:
        """Test a zero limit reads nothing."""
        result = pipeline.run([record("A long enough quote", "A", "x")], limit=0)
        assert result.records_read == 0
        assert result.limit_reached is True

    def test_seed_limit_from_config(self, session: Session) -> None:
        """Test the configured seed limit applies when no limit is passed."""
        pipeline = IngestionPipeline(session, IngestionConfig(seed_limit=1))
        result = pipeline.run(
            [record("A long enough quote", "A", "x"), record("Another long enough quote", "A", "x")]
        )
        assert result.quotes_created == 1
        assert result.limit_reached is True

    def test_source_error_aborts_run(self, session: Session, pipeline: IngestionPipeline) -> None:
        """Test a failing record source propagates and keeps earlier records."""

        def records() -> Iterator[RawQuoteRecord]:
            yield record("A quote saved before failure", "Early Bird", "x")
            raise SourceReadError("quotes.2of5.csv", "No such file or directory")

        with pytest.raises(SourceReadError):
            pipeline.run(records())

        assert QuoteRepository(session).count() == 1

    def test_result_to_dict(self, pipeline: IngestionPipeline) -> None:
        """Test the run summary serializes with string keys."""
        result = pipeline.run([record("A long enough quote", "A", "x"), record(None, "A", "x")])
        data = result.to_dict()

        assert data["status"] == "completed"
        assert data["quotes_created"] == 1
        assert data["skipped"] == {"missing_field": 1}
        assert data["skipped_total"] == 1
        assert data["started_at"] is not None


class TestIngestFiles:
    """Tests for ingesting CSV files."""

    def test_ingest_csv(self, session: Session, tmp_path: Path) -> None:
        """Test a CSV file is read, validated and stored."""
        path = tmp_path / "quotes.1of5.csv"
        path.write_text(
            "quote,author,category\n"
            '"\u201cSo many books, so little time.\u201d",Frank Zappa,"books, humor"\n'
            ",Missing Quote,empty\n"
            "Tiny,Short Quote,empty\n",
            encoding="utf-8",
        )

        result = ingest_files([path], config=IngestionConfig(), session=session)

        assert result.records_read == 3
        assert result.quotes_created == 1
        assert result.skipped[SkipReason.MISSING_FIELD] == 1
        assert result.skipped[SkipReason.QUOTE_TOO_SHORT] == 1

        quote = QuoteRepository(session).get_by_permalink("so-many-books-so-little")
        assert quote.quote == '"So many books, so little time."'
        assert [c.name for c in quote.categories] == ["books", "humor"]

    def test_unparseable_rows_are_counted(self, session: Session, tmp_path: Path) -> None:
        """Test rows the CSV parser rejects are read and skipped, not dropped."""
        path = tmp_path / "quotes.csv"
        path.write_text(
            "quote,author,category\n"
            "A first quote that is fine,Someone,life\n"
            f"{'x' * 200_000},Someone,life\n"
            "A second quote that is fine,Someone,life\n"
        )

        result = ingest_files([path], config=IngestionConfig(), session=session)

        assert result.records_read == 3
        assert result.quotes_created == 2
        assert result.skipped[SkipReason.UNPARSEABLE_ROW] == 1
        assert result.skipped_total == 1
        assert result.to_dict()["skipped"] == {"unparseable_row": 1}
        assert result.errors == []

    def test_missing_file(self, session: Session, tmp_path: Path) -> None:
        """Test a missing file aborts the run."""
        with pytest.raises(SourceReadError):
            ingest_files([tmp_path / "missing.csv"], config=IngestionConfig(), session=session)


class TestIngestSource:
    """Tests for ingesting a named source from the registry."""

    @pytest.fixture
    def registry_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
        (tmp_path / "quotes.csv").write_text(
            "quote,author,category\n"
            "Whatever you are, be a good one.,Abraham Lincoln,inspirational\n"
        )
        config_path = tmp_path / "sources.yaml"
        config_path.write_text(
            "sources:\n"
            "  - name: sample\n"
            "    files: [quotes.csv]\n"
            "  - name: parked\n"
            "    files: [quotes.csv]\n"
            "    enabled: false\n"
        )
        monkeypatch.setenv("DATABASE_URL", str(tmp_path / "quotes.db"))
        monkeypatch.setenv("SOURCES_CONFIG_PATH", str(config_path))
        monkeypatch.delenv("SEED_LIMIT", raising=False)
        reset_engine()
        reset_default_registry()
        init_db()
        yield tmp_path
        reset_engine()
        reset_default_registry()

    def test_ingest_named_source(self, registry_env: Path) -> None:
        """Test files are resolved relative to the config file."""
        result = ingest_source("sample")

        assert result.status == RunStatus.COMPLETED
        assert result.quotes_created == 1

    @pytest.mark.parametrize("name, state", [("missing", "not found"), ("parked", "disabled")])
    def test_unusable_source_fails(self, registry_env: Path, name: str, state: str) -> None:
        """Test unknown and disabled sources return a failed result."""
        result = ingest_source(name)

        assert result.status == RunStatus.FAILED
        assert result.records_read == 0
        assert result.errors == [f"Source '{name}' {state}"]

    def test_disabled_source_allowed(self, registry_env: Path) -> None:
        """Test allow_disabled ingests a disabled source."""
        result = ingest_source("parked", allow_disabled=True)

        assert result.status == RunStatus.COMPLETED
        assert result.quotes_created == 1

    def test_zero_seed_limit_ingests_everything(
        self, registry_env: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test SEED_LIMIT=0 leaves the run unlimited."""
        monkeypatch.setenv("SEED_LIMIT", "0")
        result = ingest_source("sample")

        assert result.quotes_created == 1
        assert result.limit_reached is False

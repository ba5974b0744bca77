"""Tests for the CSV record source."""

from pathlib import Path

import pytest

from quote_catalog.core.errors import SourceReadError
from quote_catalog.core.schema import RawQuoteRecord
from quote_catalog.ingestion.source import CsvRecordSource


def _write_csv(path: Path, content: str, encoding: str = "utf-8") -> Path:
    path.write_text(content, encoding=encoding)
    return path


class TestCsvRecordSource:
    """Tests for CsvRecordSource."""

    def test_reads_records(self, tmp_path: Path) -> None:
        """Test rows become trimmed raw records with line numbers."""
        path = _write_csv(
            tmp_path / "quotes.csv",
            "quote,author,category\n"
            '"  Be yourself; everyone else is already taken.  ", Oscar Wilde ,"attributed, honesty"\n'
            "So many books so little time,Frank Zappa,books\n",
        )

        records = list(CsvRecordSource([path]))

        assert records == [
            RawQuoteRecord(
                quote="Be yourself; everyone else is already taken.",
                author="Oscar Wilde",
                category="attributed, honesty",
                line=2,
            ),
            RawQuoteRecord(
                quote="So many books so little time",
                author="Frank Zappa",
                category="books",
                line=3,
            ),
        ]

    def test_extra_columns_and_column_order(self, tmp_path: Path) -> None:
        """Test columns are matched by header name and extras are ignored."""
        path = _write_csv(
            tmp_path / "quotes.csv",
            "author,likes,category,quote\n"
            "Mark Twain,12,humor,The secret of getting ahead is getting started\n",
        )

        (record,) = CsvRecordSource([path])

        assert record.author == "Mark Twain"
        assert record.category == "humor"
        assert record.quote == "The secret of getting ahead is getting started"

    def test_short_row_yields_missing_fields(self, tmp_path: Path) -> None:
        """Test a row with too few values gives None for the missing fields."""
        path = _write_csv(tmp_path / "quotes.csv", "quote,author,category\nOnly a quote here\n")

        (record,) = CsvRecordSource([path])

        assert record.quote == "Only a quote here"
        assert record.author is None
        assert record.category is None

    def test_skips_blank_lines(self, tmp_path: Path) -> None:
        """Test blank lines produce no records."""
        path = _write_csv(
            tmp_path / "quotes.csv",
            "quote,author,category\n\nA quote of some length,Someone,life\n\n",
        )

        records = list(CsvRecordSource([path]))

        assert len(records) == 1
        assert records[0].line == 3

    def test_byte_order_mark_header(self, tmp_path: Path) -> None:
        """Test a UTF-8 BOM does not break the first column name."""
        path = _write_csv(
            tmp_path / "quotes.csv",
            "quote,author,category\nA quote of some length,Someone,life\n",
            encoding="utf-8-sig",
        )

        (record,) = CsvRecordSource([path])

        assert record.quote == "A quote of some length"

    def test_reads_files_in_order(self, tmp_path: Path) -> None:
        """Test multiple files are streamed one after another."""
        first = _write_csv(tmp_path / "a.csv", "quote,author,category\nFirst quote text,A,x\n")
        second = _write_csv(tmp_path / "b.csv", "quote,author,category\nSecond quote text,B,y\n")

        records = list(CsvRecordSource([first, str(second)]))

        assert [r.author for r in records] == ["A", "B"]

    def test_is_lazy(self, tmp_path: Path) -> None:
        """Test files are not opened until iteration reaches them."""
        present = _write_csv(tmp_path / "a.csv", "quote,author,category\nFirst quote text,A,x\n")
        source = CsvRecordSource([present, tmp_path / "missing.csv"])

        iterator = iter(source)
        assert next(iterator).author == "A"
        with pytest.raises(SourceReadError):
            next(iterator)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file raises SourceReadError with its path."""
        missing = tmp_path / "missing.csv"

        with pytest.raises(SourceReadError) as exc_info:
            list(CsvRecordSource([missing]))

        assert exc_info.value.path == missing

    def test_missing_columns(self, tmp_path: Path) -> None:
        """Test a header without the required columns is fatal."""
        path = _write_csv(tmp_path / "quotes.csv", "text,who\nSomething,Someone\n")

        with pytest.raises(SourceReadError, match="missing columns: quote, author, category"):
            list(CsvRecordSource([path]))

    def test_undecodable_file(self, tmp_path: Path) -> None:
        """Test bytes that are not valid UTF-8 raise SourceReadError."""
        path = tmp_path / "quotes.csv"
        path.write_bytes(b"quote,author,category\n\xff\xfe\xfa broken,Someone,life\n")

        with pytest.raises(SourceReadError):
            list(CsvRecordSource([path]))

    def test_unparseable_row_is_reported(self, tmp_path: Path) -> None:
        """Test a row the CSV parser rejects is yielded as a parse failure."""
        huge = "x" * 200_000
        path = _write_csv(
            tmp_path / "quotes.csv",
            "quote,author,category\n"
            "First quote text,A,x\n"
            f"{huge},B,y\n"
            "Third quote text,C,z\n",
        )

        records = list(CsvRecordSource([path]))

        assert [r.author for r in records] == ["A", None, "C"]
        rejected = records[1]
        assert rejected.line == 3
        assert rejected.quote is None
        assert "field larger than field limit" in rejected.parse_error
        assert records[0].parse_error is None

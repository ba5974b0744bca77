"""
Record Source Module
====================

Streams raw quote records out of CSV files without loading them into memory.
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from quote_catalog.core.errors import SourceReadError
from quote_catalog.core.schema import RawQuoteRecord

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("quote", "author", "category")


class CsvRecordSource:
    """
    Lazy reader for quote CSV files.

    Each file must have a header row containing ``quote``, ``author`` and
    ``category`` columns; other columns are ignored. Values are trimmed and
    short rows produce ``None`` for the missing fields. Rows the CSV parser
    rejects are logged and yielded with ``parse_error`` set so the pipeline
    can count them; failing to open or decode a file raises
    SourceReadError.
    """

    def __init__(self, paths: Iterable[Path | str], encoding: str = "utf-8-sig") -> None:
        self.paths = [Path(p) for p in paths]
        self.encoding = encoding

    def __iter__(self) -> Iterator[RawQuoteRecord]:
        for path in self.paths:
            yield from self._read_file(path)

    def _read_file(self, path: Path) -> Iterator[RawQuoteRecord]:
        logger.info(f"Reading quote records from {path}")
        try:
            f = open(path, newline="", encoding=self.encoding)
        except OSError as e:
            raise SourceReadError(path, e.strerror or str(e)) from e

        with f:
            reader = csv.DictReader(f, restval=None)
            try:
                fieldnames = reader.fieldnames or []
            except (csv.Error, UnicodeDecodeError) as e:
                raise SourceReadError(path, f"invalid header: {e}") from e

            missing = [c for c in REQUIRED_COLUMNS if c not in fieldnames]
            if missing:
                raise SourceReadError(path, f"missing columns: {', '.join(missing)}")

            while True:
                try:
                    row = next(reader)
                except StopIteration:
                    break
                except csv.Error as e:
                    # DictReader.line_num only advances on success
                    line = reader.reader.line_num
                    logger.warning(f"{path}:{line}: unparseable row ({e})")
                    yield RawQuoteRecord(line=line, parse_error=str(e))
                    continue
                except UnicodeDecodeError as e:
                    raise SourceReadError(path, f"decoding failed near line {reader.line_num}: {e}") from e

                yield RawQuoteRecord(
                    quote=_clean_value(row.get("quote")),
                    author=_clean_value(row.get("author")),
                    category=_clean_value(row.get("category")),
                    line=reader.line_num,
                )


def _clean_value(value: str | list[str] | None) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip()

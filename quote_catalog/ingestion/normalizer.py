"""
Text Normalizer Module
======================

Cleans quote bodies, author names and category labels so that noisy,
duplicate-prone source text maps onto stable catalog entities.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from quote_catalog.core.schema import RawQuoteRecord


@dataclass
class NormalizedRecord:
    """
    A source record after text normalization.

    All fields are in canonical form ready for entity resolution.
    """

    quote: str
    author_name: str
    author_key: str
    categories: list[str] = field(default_factory=list)
    line: int | None = None


class Normalizer:
    """
    Normalizes quote, author and category text.

    Handles:
    - Invisible characters, curly quotes and ellipsis glyphs
    - Book titles appended to author names ("John Green, The Fault in Our Stars")
    - Title-casing that respects particles and mixed-case names
    - Punctuation-insensitive author keys for grouping name variants
    - Hyphen/underscore category labels
    """

    # Zero-width space/joiners and the byte order mark
    INVISIBLE_CHARS = re.compile("[\u200b-\u200d\ufeff]")
    DOUBLE_QUOTES = re.compile("[\u201c\u201d]")
    SINGLE_QUOTES = re.compile("[\u2018\u2019]")
    ELLIPSIS = "\u2026"
    WHITESPACE = re.compile(r"\s+")

    # Characters removed when building author keys
    KEY_PUNCTUATION = re.compile(r"""[.,/#!$%^&*;:{}=\-_`~()'"]""")
    CATEGORY_SEPARATORS = re.compile(r"[-_]")

    # A second comma-separated segment in this set is kept as part of the name
    PRESERVED_SUFFIXES: frozenset[str] = frozenset(
        {"jr", "jr.", "sr", "sr.", "phd", "ph.d", "md", "m.d", "esq", "esq.", "ii", "iii", "iv"}
    )

    # Name particles left lowercase when already written lowercase
    LOWERCASE_PARTICLES: frozenset[str] = frozenset({"de", "del", "la", "von", "van", "der"})

    def clean_quote_body(self, raw: str) -> str:
        """
        Clean quote text for storage and display.

        Args:
            raw: Quote text as read from the source

        Returns:
            Text with typographic characters replaced and whitespace collapsed
        """
        return self._clean_text(raw)

    def normalize_author_name(self, raw: str) -> str:
        """
        Normalize an author name for display.

        Drops a trailing book title after the first comma unless it is a
        suffix such as "Jr." or "PhD", then title-cases each word.

        Args:
            raw: Author text as read from the source

        Returns:
            Display name, e.g. "John Green" for "john green, The Fault in Our Stars"
        """
        normalized = self._clean_text(raw)

        parts = [part.strip() for part in normalized.split(",")]
        if len(parts) > 1 and parts[1].lower() not in self.PRESERVED_SUFFIXES:
            normalized = parts[0]

        return " ".join(self._title_case_word(word) for word in normalized.split(" "))

    def get_author_key(self, raw: str) -> str:
        """
        Build the key used to group spellings of the same author.

        "Dr. Seuss", "Dr Seuss" and "dr. seuss" all share one key. The key is
        never displayed.

        Args:
            raw: Author text as read from the source

        Returns:
            Lowercase, punctuation-free name
        """
        key = self.KEY_PUNCTUATION.sub("", self.normalize_author_name(raw))
        return self.WHITESPACE.sub(" ", key.lower()).strip()

    def normalize_category(self, raw: str) -> str:
        """Lowercase a category label and turn hyphens/underscores into spaces."""
        label = self.CATEGORY_SEPARATORS.sub(" ", raw.lower())
        return self.WHITESPACE.sub(" ", label).strip()

    def split_categories(self, raw: str) -> list[str]:
        """
        Split a comma-separated category field into normalized labels.

        Empty labels are dropped; duplicates are kept in source order.
        """
        labels = (self.normalize_category(piece) for piece in raw.split(","))
        return [label for label in labels if label]

    def normalize_record(self, record: RawQuoteRecord) -> NormalizedRecord:
        """
        Normalize every field of a source record.

        Args:
            record: Source record with all three fields present

        Returns:
            NormalizedRecord ready for entity resolution
        """
        return NormalizedRecord(
            quote=self.clean_quote_body(record.quote or ""),
            author_name=self.normalize_author_name(record.author or ""),
            author_key=self.get_author_key(record.author or ""),
            categories=self.split_categories(record.category or ""),
            line=record.line,
        )

    def _clean_text(self, value: str) -> str:
        text = self.INVISIBLE_CHARS.sub("", value)
        text = self.DOUBLE_QUOTES.sub('"', text)
        text = self.SINGLE_QUOTES.sub("'", text)
        text = text.replace(self.ELLIPSIS, "...")
        return self.WHITESPACE.sub(" ", text).strip()

    def _title_case_word(self, word: str) -> str:
        lowered = word.lower()
        if lowered in self.LOWERCASE_PARTICLES and word == lowered:
            return lowered

        # Already mixed case, e.g. "McDonald" or "PhD"
        if len(word) > 1 and word != word.upper() and word != lowered:
            return word

        return word[:1].upper() + word[1:].lower()

"""
Entity Resolver Module
======================

Resolves normalized author names and category labels to catalog entities
with a two-tier read-through lookup: an in-run cache, then the database,
then creation of a new row.

The cache only lives for one ingestion run. Two runs executing at the same
time can both miss and create duplicate authors or categories, so runs must
not overlap.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from quote_catalog.core.schema import Author, Category
from quote_catalog.db.repositories import AuthorRepository, CategoryRepository
from quote_catalog.ingestion.permalink import AUTHOR_PERMALINK_WORDS, generate_permalink

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", Author, Category)


class ResolutionOrigin(str, Enum):
    """Where a resolved entity came from."""

    CACHE = "cache"  # Seen earlier in this run
    STORE = "store"  # Already in the database
    CREATED = "created"  # Inserted by this run


@dataclass
class Resolution(Generic[EntityT]):
    """A resolved entity and where it came from."""

    entity: EntityT
    origin: ResolutionOrigin

    @property
    def created(self) -> bool:
        return self.origin == ResolutionOrigin.CREATED


class EntityResolver:
    """
    Get-or-create resolution of authors and categories for one run.

    Entities resolved while a record is being processed are held as pending
    until ``commit`` is called after that record's transaction commits. If the
    record fails, ``discard`` drops them so later records never reuse a row
    that was rolled back.
    """

    def __init__(
        self,
        session: Session,
        author_permalink_words: int = AUTHOR_PERMALINK_WORDS,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            session: SQLAlchemy database session
            author_permalink_words: Words kept in author permalinks
        """
        self.authors = AuthorRepository(session)
        self.categories = CategoryRepository(session)
        self.author_permalink_words = author_permalink_words

        self._author_cache: dict[str, Author] = {}
        self._category_cache: dict[str, Category] = {}
        self._pending_authors: dict[str, Author] = {}
        self._pending_categories: dict[str, Category] = {}

    @property
    def cached_authors(self) -> int:
        return len(self._author_cache)

    @property
    def cached_categories(self) -> int:
        return len(self._category_cache)

    def resolve_author(self, name: str, key: str) -> Resolution[Author]:
        """
        Resolve an author by dedup key.

        Args:
            name: Normalized display name
            key: Dedup key from Normalizer.get_author_key

        Returns:
            Resolution with the cached, stored or newly created author
        """
        cached = self._author_cache.get(key) or self._pending_authors.get(key)
        if cached is not None:
            return Resolution(cached, ResolutionOrigin.CACHE)

        permalink = generate_permalink(name, self.author_permalink_words)
        author = self.authors.get_by_permalink(permalink)
        if author is not None:
            origin = ResolutionOrigin.STORE
        else:
            author = self.authors.save(Author(name=name, permalink=permalink))
            origin = ResolutionOrigin.CREATED
            logger.debug(f"Created author: {author.name} ({author.id})")

        self._pending_authors[key] = author
        return Resolution(author, origin)

    def resolve_category(self, label: str) -> Resolution[Category]:
        """
        Resolve a category by its normalized label.

        Args:
            label: Output of Normalizer.normalize_category

        Returns:
            Resolution with the cached, stored or newly created category
        """
        cached = self._category_cache.get(label) or self._pending_categories.get(label)
        if cached is not None:
            return Resolution(cached, ResolutionOrigin.CACHE)

        category = self.categories.get_by_name(label)
        if category is not None:
            origin = ResolutionOrigin.STORE
        else:
            category = self.categories.save(Category(name=label))
            origin = ResolutionOrigin.CREATED
            logger.debug(f"Created category: {category.name} ({category.id})")

        self._pending_categories[label] = category
        return Resolution(category, origin)

    def commit(self) -> None:
        """Promote pending entities into the run cache."""
        self._author_cache.update(self._pending_authors)
        self._category_cache.update(self._pending_categories)
        self._pending_authors.clear()
        self._pending_categories.clear()

    def discard(self) -> None:
        """Forget entities resolved for a record that was rolled back."""
        self._pending_authors.clear()
        self._pending_categories.clear()

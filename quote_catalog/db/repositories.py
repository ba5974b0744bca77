"""Repository classes for catalog database operations.

Repositories are the only code that builds SQL. Services and the ingestion
pipeline talk to them in terms of the Pydantic domain models.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.orm.util import AliasedClass
from sqlalchemy.orm import (
    Session,
    aliased,
    contains_eager,
    joinedload,
    selectinload,
)

from quote_catalog.core.enums import QuoteSortField, SortDirection
from quote_catalog.core.schema import Author, Category, Quote
from quote_catalog.db.models import AuthorDB, CategoryDB, QuoteCategoryDB, QuoteDB


def _author_to_domain(db_item: AuthorDB) -> Author:
    return Author(id=db_item.id, name=db_item.name, permalink=db_item.permalink)


def _category_to_domain(db_item: CategoryDB) -> Category:
    return Category(id=db_item.id, name=db_item.name)


# ============================================================================
# Author and Category Repositories
# ============================================================================


class AuthorRepository:
    """Repository for Author persistence and lookups."""

    def __init__(self, session: Session):
        self.session = session

    def save(self, author: Author) -> Author:
        """Insert a new author and return it with its assigned id."""
        db_item = AuthorDB(name=author.name, permalink=author.permalink)
        self.session.add(db_item)
        self.session.flush()
        return _author_to_domain(db_item)

    def get_by_id(self, author_id: int) -> Author | None:
        """Get an author by ID."""
        db_item = self.session.get(AuthorDB, author_id)
        return _author_to_domain(db_item) if db_item else None

    def get_by_permalink(self, permalink: str) -> Author | None:
        """
        Get the oldest author with the given permalink.

        Permalinks are not unique, so the lowest id wins.
        """
        stmt = (
            select(AuthorDB)
            .where(AuthorDB.permalink == permalink)
            .order_by(AuthorDB.id)
            .limit(1)
        )
        db_item = self.session.execute(stmt).scalars().first()
        return _author_to_domain(db_item) if db_item else None

    def count(self) -> int:
        """Get total count of authors."""
        stmt = select(func.count()).select_from(AuthorDB)
        return self.session.execute(stmt).scalar() or 0


class CategoryRepository:
    """Repository for Category persistence and lookups."""

    def __init__(self, session: Session):
        self.session = session

    def save(self, category: Category) -> Category:
        """Insert a new category and return it with its assigned id."""
        db_item = CategoryDB(name=category.name)
        self.session.add(db_item)
        self.session.flush()
        return _category_to_domain(db_item)

    def get_by_name(self, name: str) -> Category | None:
        """Get the oldest category whose label matches exactly."""
        stmt = select(CategoryDB).where(CategoryDB.name == name).order_by(CategoryDB.id).limit(1)
        db_item = self.session.execute(stmt).scalars().first()
        return _category_to_domain(db_item) if db_item else None

    def count(self) -> int:
        """Get total count of categories."""
        stmt = select(func.count()).select_from(CategoryDB)
        return self.session.execute(stmt).scalar() or 0


# ============================================================================
# Quote Query Building
# ============================================================================


@dataclass(frozen=True)
class QuoteQueryAliases:
    """
    Table aliases used by a single quote listing query.

    The author alias is joined once and shared by the eager load, the author
    filter and the AUTHOR sort. The category aliases only live inside the
    correlated EXISTS used by the category filter.
    """

    author: AliasedClass[AuthorDB]
    category_link: AliasedClass[QuoteCategoryDB]
    category: AliasedClass[CategoryDB]

    @classmethod
    def create(cls) -> "QuoteQueryAliases":
        return cls(
            author=aliased(AuthorDB, name="author"),
            category_link=aliased(QuoteCategoryDB, name="filter_link"),
            category=aliased(CategoryDB, name="filter_category"),
        )


@dataclass(frozen=True)
class QuoteFilter:
    """Case-insensitive substring filters, combined with AND."""

    author: str | None = None
    category: str | None = None


@dataclass(frozen=True)
class QuoteSort:
    """Sort field and direction for a quote listing."""

    field: QuoteSortField = QuoteSortField.ID
    direction: SortDirection = SortDirection.ASC


# Maps each sort field to the column it orders by.
SORT_COLUMNS: dict[QuoteSortField, Callable[[QuoteQueryAliases], Any]] = {
    QuoteSortField.ID: lambda aliases: QuoteDB.id,
    QuoteSortField.QUOTE: lambda aliases: QuoteDB.quote,
    QuoteSortField.AUTHOR: lambda aliases: aliases.author.name,
    QuoteSortField.PERMALINK: lambda aliases: QuoteDB.permalink,
}


def _eager_options() -> list[Any]:
    """Loader options that attach author and categories to each quote."""
    return [
        joinedload(QuoteDB.author),
        selectinload(QuoteDB.category_links).joinedload(QuoteCategoryDB.category),
    ]


# ============================================================================
# Quote Repository
# ============================================================================


class QuoteRepository:
    """Repository for Quote persistence and catalog queries."""

    def __init__(self, session: Session):
        self.session = session

    def save(self, quote: Quote) -> Quote:
        """
        Insert a new quote with its category links.

        Args:
            quote: Quote whose author and categories are already persisted.

        Returns:
            The saved Quote with its assigned id.
        """
        if quote.author is None or quote.author.id is None:
            raise ValueError("Quote author must be saved before the quote")

        db_item = QuoteDB(
            quote=quote.quote,
            permalink=quote.permalink,
            author_id=quote.author.id,
        )
        for position, category in enumerate(quote.categories):
            if category.id is None:
                raise ValueError(f"Category '{category.name}' must be saved before the quote")
            db_item.category_links.append(
                QuoteCategoryDB(category_id=category.id, position=position)
            )

        self.session.add(db_item)
        self.session.flush()
        return self._to_domain(db_item)

    # ------------------------------------------------------------------
    # Point lookups
    # ------------------------------------------------------------------

    def get_by_id(self, quote_id: int) -> Quote | None:
        """Get a quote by ID with author and categories loaded."""
        stmt = select(QuoteDB).options(*_eager_options()).where(QuoteDB.id == quote_id)
        return self._first(stmt)

    def get_by_permalink(self, permalink: str) -> Quote | None:
        """Get the oldest quote with the given permalink."""
        stmt = (
            select(QuoteDB)
            .options(*_eager_options())
            .where(QuoteDB.permalink == permalink)
            .order_by(QuoteDB.id)
            .limit(1)
        )
        return self._first(stmt)

    def get_by_author_and_permalink(self, author_id: int, permalink: str) -> Quote | None:
        """Get the oldest quote by one author with the given permalink."""
        stmt = (
            select(QuoteDB)
            .options(*_eager_options())
            .where(QuoteDB.author_id == author_id, QuoteDB.permalink == permalink)
            .order_by(QuoteDB.id)
            .limit(1)
        )
        return self._first(stmt)

    def exists(self, quote_id: int) -> bool:
        """Check whether a quote with this id exists."""
        stmt = select(QuoteDB.id).where(QuoteDB.id == quote_id)
        return self.session.execute(stmt).first() is not None

    # ------------------------------------------------------------------
    # Identity navigation and sampling
    # ------------------------------------------------------------------

    def first_after(self, quote_id: int) -> Quote | None:
        """Quote with the smallest id strictly greater than quote_id."""
        stmt = (
            select(QuoteDB)
            .options(*_eager_options())
            .where(QuoteDB.id > quote_id)
            .order_by(QuoteDB.id.asc())
            .limit(1)
        )
        return self._first(stmt)

    def last_before(self, quote_id: int) -> Quote | None:
        """Quote with the largest id strictly less than quote_id."""
        stmt = (
            select(QuoteDB)
            .options(*_eager_options())
            .where(QuoteDB.id < quote_id)
            .order_by(QuoteDB.id.desc())
            .limit(1)
        )
        return self._first(stmt)

    def first(self) -> Quote | None:
        """Quote with the globally smallest id."""
        stmt = select(QuoteDB).options(*_eager_options()).order_by(QuoteDB.id.asc()).limit(1)
        return self._first(stmt)

    def last(self) -> Quote | None:
        """Quote with the globally largest id."""
        stmt = select(QuoteDB).options(*_eager_options()).order_by(QuoteDB.id.desc()).limit(1)
        return self._first(stmt)

    def random(self) -> Quote | None:
        """Pick one quote in random order without loading the table."""
        stmt = select(QuoteDB).options(*_eager_options()).order_by(func.random()).limit(1)
        return self._first(stmt)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def count(self, filters: QuoteFilter | None = None) -> int:
        """Count quotes matching the filters."""
        aliases = QuoteQueryAliases.create()
        stmt = (
            select(func.count(QuoteDB.id))
            .select_from(QuoteDB)
            .join(QuoteDB.author.of_type(aliases.author))
        )
        stmt = self._apply_filters(stmt, filters or QuoteFilter(), aliases)
        return self.session.execute(stmt).scalar() or 0

    def query_page(
        self,
        filters: QuoteFilter | None = None,
        sort: QuoteSort | None = None,
        skip: int = 0,
        take: int = 10,
    ) -> list[Quote]:
        """
        Fetch one page of quotes.

        Args:
            filters: Author/category substring filters
            sort: Sort field and direction; ties are broken by id
            skip: Number of matching rows to skip
            take: Maximum number of rows to return

        Returns:
            Quotes with author and categories loaded
        """
        aliases = QuoteQueryAliases.create()
        sort = sort or QuoteSort()

        stmt = (
            select(QuoteDB)
            .join(QuoteDB.author.of_type(aliases.author))
            .options(
                contains_eager(QuoteDB.author.of_type(aliases.author)),
                selectinload(QuoteDB.category_links).joinedload(QuoteCategoryDB.category),
            )
        )
        stmt = self._apply_filters(stmt, filters or QuoteFilter(), aliases)
        stmt = stmt.order_by(*self._order_by(sort, aliases)).offset(skip).limit(take)

        result = self.session.execute(stmt).unique().scalars().all()
        return [self._to_domain(q) for q in result]

    @staticmethod
    def _apply_filters(stmt: Select, filters: QuoteFilter, aliases: QuoteQueryAliases) -> Select:
        if filters.author:
            stmt = stmt.where(aliases.author.name.icontains(filters.author, autoescape=True))
        if filters.category:
            link, category = aliases.category_link, aliases.category
            category_match = (
                select(link.id)
                .join(category, category.id == link.category_id)
                .where(
                    link.quote_id == QuoteDB.id,
                    category.name.icontains(filters.category, autoescape=True),
                )
                .exists()
            )
            stmt = stmt.where(category_match)
        return stmt

    @staticmethod
    def _order_by(sort: QuoteSort, aliases: QuoteQueryAliases) -> list[ColumnElement]:
        column = SORT_COLUMNS[sort.field](aliases)
        descending = sort.direction == SortDirection.DESC
        clauses = [column.desc() if descending else column.asc()]
        if sort.field != QuoteSortField.ID:
            # Stable pagination across equal sort keys
            clauses.append(QuoteDB.id.desc() if descending else QuoteDB.id.asc())
        return clauses

    def _first(self, stmt: Select) -> Quote | None:
        db_item = self.session.execute(stmt).unique().scalars().first()
        return self._to_domain(db_item) if db_item else None

    def _to_domain(self, db_item: QuoteDB) -> Quote:
        """Convert DB model to domain model."""
        return Quote(
            id=db_item.id,
            quote=db_item.quote,
            permalink=db_item.permalink,
            author=_author_to_domain(db_item.author) if db_item.author else None,
            categories=[_category_to_domain(link.category) for link in db_item.category_links],
        )

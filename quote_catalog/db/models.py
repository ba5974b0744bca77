"""SQLAlchemy ORM models for the quote catalog.

These models define the database tables:
- AuthorDB, CategoryDB (shared reference entities)
- QuoteDB (one row per ingested record)
- QuoteCategoryDB (ordered quote/category links)
"""

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class AuthorDB(Base):
    """
    Database model for authors.

    Names are stored already normalized. Permalinks are not unique.
    """

    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    permalink: Mapped[str] = mapped_column(String(255), default="", index=True)

    quotes: Mapped[list["QuoteDB"]] = relationship("QuoteDB", back_populates="author")

    def __repr__(self) -> str:
        return f"<AuthorDB(id={self.id}, name='{self.name}')>"


class CategoryDB(Base):
    """Database model for category labels."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<CategoryDB(id={self.id}, name='{self.name}')>"


class QuoteDB(Base):
    """
    Database model for quotes.

    Quote text is never deduplicated: every valid source record gets a row.
    """

    __tablename__ = "quotes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    quote: Mapped[str] = mapped_column(Text, nullable=False)
    permalink: Mapped[str] = mapped_column(String(255), default="", index=True)
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("authors.id"), nullable=False, index=True
    )

    # Relationships
    author: Mapped["AuthorDB"] = relationship("AuthorDB", back_populates="quotes")
    category_links: Mapped[list["QuoteCategoryDB"]] = relationship(
        "QuoteCategoryDB",
        back_populates="quote",
        order_by="QuoteCategoryDB.position",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        preview = self.quote[:50] + "..." if len(self.quote) > 50 else self.quote
        return f"<QuoteDB(id={self.id}, preview='{preview}')>"


class QuoteCategoryDB(Base):
    """
    Link between a quote and one of its categories.

    Has its own key so the same category may appear twice on one quote.
    """

    __tablename__ = "quote_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    quote_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("quotes.id"), nullable=False, index=True
    )
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)

    quote: Mapped["QuoteDB"] = relationship("QuoteDB", back_populates="category_links")
    category: Mapped["CategoryDB"] = relationship("CategoryDB")

    def __repr__(self) -> str:
        return f"<QuoteCategoryDB(quote_id={self.quote_id}, category_id={self.category_id})>"

"""Database initialization and persistence layer."""

from quote_catalog.db.engine import (
    create_db_engine,
    get_database_url,
    get_engine,
    get_session,
    get_session_factory,
    init_db,
    reset_engine,
)
from quote_catalog.db.models import (
    AuthorDB,
    Base,
    CategoryDB,
    QuoteCategoryDB,
    QuoteDB,
)
from quote_catalog.db.repositories import (
    AuthorRepository,
    CategoryRepository,
    QuoteFilter,
    QuoteRepository,
    QuoteSort,
)

__all__ = [
    # Engine
    "create_db_engine",
    "get_database_url",
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_db",
    "reset_engine",
    # Models
    "Base",
    "AuthorDB",
    "CategoryDB",
    "QuoteDB",
    "QuoteCategoryDB",
    # Repositories
    "AuthorRepository",
    "CategoryRepository",
    "QuoteRepository",
    "QuoteFilter",
    "QuoteSort",
]

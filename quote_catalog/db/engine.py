"""Catalog database engine, sessions and schema setup.

The engine and session factory are created on first use and shared by the
whole process. ``DATABASE_URL`` selects the database; it may be a full
SQLAlchemy URL or a bare SQLite file path.
"""

import logging
import os
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".quote_catalog" / "quote_catalog.db"
ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"

_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def get_database_url(db_path: Path | str | None = None) -> str:
    """
    Work out which database to connect to.

    An explicit path wins over DATABASE_URL, which wins over the default
    file under the home directory. SQLite parent directories are created.

    Args:
        db_path: SQLite file to use instead of the environment setting.

    Returns:
        SQLAlchemy connection URL.
    """
    configured = os.environ.get("DATABASE_URL", "").strip()

    if db_path is None and "://" in configured:
        return configured

    if db_path is not None:
        sqlite_file = Path(db_path)
    elif configured:
        sqlite_file = Path(configured).expanduser()
    else:
        sqlite_file = DEFAULT_DB_PATH

    sqlite_file.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{sqlite_file}"


def create_db_engine(db_path: Path | str | None = None, echo: bool = False) -> Engine:
    """Build a new engine; SQLite connections may be shared across threads."""
    url = get_database_url(db_path)
    is_sqlite = make_url(url).get_backend_name() == "sqlite"
    return create_engine(
        url,
        echo=echo,
        connect_args={"check_same_thread": False} if is_sqlite else {},
    )


def get_engine(db_path: Path | str | None = None, echo: bool = False) -> Engine:
    """Return the shared engine, creating it on first call."""
    global _engine
    if _engine is None:
        _engine = create_db_engine(db_path, echo)
        logger.debug(f"Connected catalog engine to {_engine.url}")
    return _engine


def get_session_factory(db_path: Path | str | None = None) -> sessionmaker:
    """Return the shared session factory bound to the shared engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(db_path), autoflush=False)
    return _session_factory


def reset_engine() -> None:
    """Dispose of the shared engine so the next call reconnects (used by tests)."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine, _session_factory = None, None


@contextmanager
def get_session(db_path: Path | str | None = None) -> Generator[Session, None, None]:
    """
    Open a session for the duration of a ``with`` block.

    Callers commit their own work. Anything left uncommitted when the block
    raises is rolled back before the session closes.
    """
    session = get_session_factory(db_path)()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(db_path: Path | str | None = None) -> None:
    """Create any missing catalog tables directly from the ORM metadata."""
    from quote_catalog.db.models import Base

    Base.metadata.create_all(bind=get_engine(db_path))


def run_migrations(db_path: Path | str | None = None, revision: str = "head") -> None:
    """
    Upgrade the catalog schema with Alembic.

    Args:
        db_path: SQLite file to migrate instead of the configured database.
        revision: Target revision.

    Raises:
        FileNotFoundError: If alembic.ini is not next to the package.
    """
    if not ALEMBIC_INI.exists():
        raise FileNotFoundError(f"Alembic config not found: {ALEMBIC_INI}")

    alembic_config = Config(str(ALEMBIC_INI))
    alembic_config.set_main_option("sqlalchemy.url", get_database_url(db_path))
    logger.info(f"Upgrading catalog schema to {revision}")
    command.upgrade(alembic_config, revision)

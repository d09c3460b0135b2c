"""SQLAlchemy engine and session handling for portfolio storage.

The engine is created lazily from :attr:`Settings.db_url` (``DB_URL``) and the
portfolio tables are created on first use. SQLite connections get foreign keys
switched on so deleting a portfolio removes its iterations.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from portfolio_forge.config import Settings


class Base(DeclarativeBase):
    """Declarative base shared by users, portfolios and iterations."""


_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_database_url(settings: Settings | None = None) -> str:
    """Return the configured URL, or a SQLite file at the project root."""
    settings = settings or Settings.from_env()
    if settings.db_url:
        return settings.db_url
    db_file = Path(__file__).resolve().parents[3] / "database.db"
    return URL.create("sqlite", database=str(db_file)).render_as_string(hide_password=False)


def _sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _create_tables(engine: Engine) -> None:
    # Registers the mapped classes on Base.metadata.
    from portfolio_forge.data.models import (  # noqa: F401
        portfolio,
        portfolio_iteration,
        user,
    )

    Base.metadata.create_all(bind=engine)


def get_engine() -> Engine:
    global _engine
    if _engine is not None:
        return _engine

    url = get_database_url()
    engine = create_engine(url, echo=False, future=True)
    if url.startswith("sqlite"):
        event.listen(engine, "connect", _sqlite_foreign_keys)
    _create_tables(engine)
    _engine = engine
    return engine


def _factory() -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        # Rows handed back to callers stay readable after the session closes.
        _session_factory = sessionmaker(
            bind=get_engine(), autoflush=False, expire_on_commit=False
        )
    return _session_factory


def init_db() -> None:
    """Create the engine and the portfolio tables now rather than on first query."""
    get_engine()


def reset_engine() -> None:
    """Drop the cached engine; the next session re-reads ``DB_URL``."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


@contextmanager
def get_session() -> Iterator[Session]:
    """Yield a session that commits on success and rolls back on any error."""
    session = _factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

"""
SQLAlchemy engine and session factory.

No module-level engine: the store that owns the engine is built at server
start (see ``db.factory.open_store``), so tests can point it at a
temporary SQLite file.

SQLite specifics
----------------
Foreign keys are off by default in SQLite. Every new DBAPI connection gets
``PRAGMA foreign_keys=ON`` so that deleting a track cascades to its events.
Pool sizing only applies to server databases (PostgreSQL via ``psycopg``).
"""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker


def sqlite_url(db_path: Path) -> str:
    """SQLAlchemy URL for an on-disk SQLite file."""
    return f"sqlite:///{db_path}"


def make_engine(url: str, *, pool_size: int = 5, max_overflow: int = 10) -> Engine:
    """
    Create an engine for ``url``.

    Args:
        url: Any SQLAlchemy URL (``sqlite:///...``, ``postgresql+psycopg://...``)
        pool_size: Persistent connections for server databases
        max_overflow: Burst connections above ``pool_size``
    """
    if url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False})
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=pool_size,
        max_overflow=max_overflow,
    )


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """Yield a session that commits on success and rolls back on error."""
    session = factory()
    try:
        yield session
        session.commit()
    except BaseException:
        session.rollback()
        raise
    finally:
        session.close()

"""Build the configured ``TimelineStore`` backend.

Backends:
    sqlalchemy  SQLAlchemy engine; SQLite file under the workspace unless a
                ``database_url`` (e.g. ``postgresql+psycopg://...``) is given
    sqlite      stdlib sqlite3 on the workspace file
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal, get_args

from db.session import sqlite_url
from db.store import TimelineStore

logger = logging.getLogger(__name__)

StoreBackend = Literal["sqlalchemy", "sqlite"]
STORE_BACKENDS: frozenset[str] = frozenset(get_args(StoreBackend))

# Database location relative to the workspace root
DB_RELATIVE_PATH = Path(".timeline") / "workspace.db"


def workspace_db_path(workspace: Path) -> Path:
    return workspace / DB_RELATIVE_PATH


def open_store(
    backend: StoreBackend,
    *,
    workspace: Path,
    database_url: str | None = None,
    pool_size: int = 5,
    max_overflow: int = 10,
) -> TimelineStore:
    """
    Open the timeline store for ``workspace``.

    Args:
        backend: ``"sqlalchemy"`` or ``"sqlite"``
        workspace: Workspace root; the SQLite file lives at ``.timeline/workspace.db``
        database_url: Optional SQLAlchemy URL, only honoured by the sqlalchemy backend
        pool_size: Connection pool size for server databases
        max_overflow: Burst connections above ``pool_size``

    Raises:
        ValueError: Unknown backend, or a database_url given to the sqlite backend
    """
    db_path = workspace_db_path(workspace)

    if backend == "sqlite":
        if database_url:
            raise ValueError("database_url is only supported by the sqlalchemy backend")
        from db.sqlite_store import SqliteTimelineStore

        logger.info("Opening sqlite timeline store at %s", db_path)
        return SqliteTimelineStore(db_path)

    if backend == "sqlalchemy":
        from db.sqlalchemy_store import SqlAlchemyTimelineStore

        if database_url:
            logger.info("Opening SQLAlchemy timeline store (configured DATABASE_URL)")
            url = database_url
        else:
            db_path.parent.mkdir(parents=True, exist_ok=True)
            logger.info("Opening SQLAlchemy timeline store at %s", db_path)
            url = sqlite_url(db_path)
        return SqlAlchemyTimelineStore.from_url(
            url, pool_size=pool_size, max_overflow=max_overflow
        )

    raise ValueError(f"Unknown store backend {backend!r}, expected 'sqlalchemy' or 'sqlite'")

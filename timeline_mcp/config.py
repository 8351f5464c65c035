"""
Runtime configuration for the timeline server.

Immutable config object built from environment variables:

    TIMELINE_WORKSPACE  workspace root (default: current directory)
    TIMELINE_STORE      "sqlalchemy" (default) or "sqlite"
    DATABASE_URL        SQLAlchemy URL overriding {workspace}/.timeline/workspace.db
    MCP_TRANSPORT       "stdio" (default) or "sse"
    LOG_LEVEL           logging level name (default: INFO)
    DB_POOL_SIZE        connection pool size for server databases (default: 5)
    DB_MAX_OVERFLOW     pool overflow for server databases (default: 10)

A `.env` file in the working directory is read as well (python-dotenv).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from db.factory import STORE_BACKENDS, StoreBackend, workspace_db_path
from timeline_mcp.transport import TransportMode, get_transport_mode

_LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class TimelineConfig:
    """
    Configuration for one timeline server process.

    Attributes:
        workspace: Root for the default database file and the sidecar folders.
        store_backend: Storage backend implementation to open.
        database_url: Optional SQLAlchemy URL (sqlalchemy backend only).
        transport: MCP transport.
        log_level: Logging level name.
        pool_size: Pool size for non-SQLite databases.
        max_overflow: Pool overflow for non-SQLite databases.

    Example:
        >>> config = TimelineConfig(workspace=Path("/tmp/ws"), store_backend="sqlite")
        >>> config.db_path
        PosixPath('/tmp/ws/.timeline/workspace.db')
    """

    workspace: Path
    store_backend: StoreBackend = "sqlalchemy"
    database_url: str | None = None
    transport: TransportMode = "stdio"
    log_level: str = "INFO"
    pool_size: int = 5
    max_overflow: int = 10

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(
                f"Unknown store_backend {self.store_backend!r}, "
                f"valid options: {sorted(STORE_BACKENDS)}"
            )
        if self.database_url is not None and self.store_backend != "sqlalchemy":
            raise ValueError("database_url is only supported by the sqlalchemy store")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(
                f"Unknown log_level {self.log_level!r}, valid options: {sorted(_LOG_LEVELS)}"
            )
        if self.pool_size <= 0:
            raise ValueError(f"pool_size must be positive, got {self.pool_size}")
        if self.max_overflow < 0:
            raise ValueError(f"max_overflow must be non-negative, got {self.max_overflow}")

    @property
    def db_path(self) -> Path:
        """Embedded database file used when no DATABASE_URL is set."""
        return workspace_db_path(self.workspace)

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level.upper())

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> TimelineConfig:
        """
        Build a config from environment variables.

        Values from a ``.env`` file in the working directory are loaded into
        ``os.environ`` first; variables already set take precedence.

        Args:
            environ: Mapping to read instead of ``os.environ`` (tests)

        Raises:
            ValueError: If a variable holds an invalid value
        """
        if environ is None:
            load_dotenv()
        env = os.environ if environ is None else environ
        workspace = env.get("TIMELINE_WORKSPACE", "").strip()
        return cls(
            workspace=Path(workspace).expanduser() if workspace else Path.cwd(),
            store_backend=env.get("TIMELINE_STORE", "sqlalchemy").strip().lower(),  # type: ignore[arg-type]
            database_url=env.get("DATABASE_URL", "").strip() or None,
            transport=get_transport_mode(env),
            log_level=env.get("LOG_LEVEL", "INFO").strip().upper() or "INFO",
            pool_size=_env_int(env, "DB_POOL_SIZE", 5),
            max_overflow=_env_int(env, "DB_MAX_OVERFLOW", 10),
        )

"""
Process-wide state for the timeline server.

TimelineRuntime owns the store and the tool registry. It is constructed
once by server.py and handed to the handlers; the store is opened on the
first call that needs it and closed when the server exits.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from core.timeline.errors import StorageError, TimelineError
from db.factory import open_store
from db.store import TimelineStore
from timeline_mcp.config import TimelineConfig
from tools.base import ToolResult
from tools.context import TimelineContext, utc_now
from tools.registry import ToolRegistry, build_registry

logger = logging.getLogger(__name__)


class TimelineRuntime:
    """
    Lazily initialised store + registry for one server process.

    Args:
        config: Server configuration
        clock: Source of "now" for every operation (default: UTC wall clock)
        store: Pre-built store to use instead of opening one from config
    """

    def __init__(
        self,
        config: TimelineConfig,
        clock: Callable[[], datetime] = utc_now,
        store: TimelineStore | None = None,
    ) -> None:
        self._config = config
        self._clock = clock
        self._store = store
        self._registry: ToolRegistry | None = None

    @property
    def config(self) -> TimelineConfig:
        return self._config

    @property
    def is_open(self) -> bool:
        return self._store is not None

    @property
    def store(self) -> TimelineStore:
        """
        The store, opened on first access.

        Raises:
            StorageError: If the database cannot be opened
        """
        if self._store is None:
            try:
                self._store = open_store(
                    self._config.store_backend,
                    workspace=self._config.workspace,
                    database_url=self._config.database_url,
                    pool_size=self._config.pool_size,
                    max_overflow=self._config.max_overflow,
                )
            except OSError as exc:
                raise StorageError(f"Cannot open timeline store: {exc}") from exc
        return self._store

    @property
    def registry(self) -> ToolRegistry:
        if self._registry is None:
            context = TimelineContext(
                store=self.store,
                workspace=self._config.workspace,
                clock=self._clock,
            )
            self._registry = build_registry(context)
        return self._registry

    def now(self) -> datetime:
        return self._clock()

    def call(self, tool_name: str, **kwargs: Any) -> ToolResult:
        """
        Run one registered tool by name.

        Store-opening failures are returned as a failed ToolResult so the
        caller always gets a structured response.
        """
        try:
            tool = self.registry.require(tool_name)
        except TimelineError as exc:
            logger.error("Timeline store unavailable: %s", exc.message)
            return ToolResult.failure(exc)
        return tool(**kwargs)

    def close(self) -> None:
        """Close the store if it was opened. Safe to call more than once."""
        if self.is_open:
            self._store.close()
            logger.info("Timeline store closed")
        self._store = None
        self._registry = None

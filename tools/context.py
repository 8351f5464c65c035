"""Shared dependencies handed to every timeline tool."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from core.timeline.timing import ensure_utc
from db.store import TimelineStore


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class TimelineContext:
    """
    Store, workspace root and clock used by the operations.

    Attributes:
        store: Backend implementing ``db.store.TimelineStore``
        workspace: Root for sidecar folders (``tracks/...``)
        clock: Returns the current time; tests pass a frozen clock
    """

    store: TimelineStore
    workspace: Path
    clock: Callable[[], datetime] = field(default=utc_now)

    def now(self) -> datetime:
        return ensure_utc(self.clock())

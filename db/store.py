"""
Storage contract for the timeline.

The operation layer only talks to a ``TimelineStore``; the two backends
(``db.sqlalchemy_store`` and ``db.sqlite_store``) are interchangeable.

Contract notes:
    - ``insert_track`` raises ``TrackAlreadyExists`` when the (name, type)
      unique constraint rejects the row. Callers decide whether that means
      "duplicate" (add_track) or "someone else created it first"
      (find-or-create).
    - ``delete_track`` removes the track in a single transaction and lets
      the foreign-key cascade remove its events.
    - Any other backend failure is raised as ``core.timeline.errors.StorageError``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from core.timeline.types import ScheduledEvent, Track, TrackType

# Fields the update path may write; anything else is a programming error
UPDATABLE_EVENT_FIELDS: frozenset[str] = frozenset(
    {
        "name",
        "prompt",
        "platform",
        "scheduled_time",
        "generation_time",
        "approved",
        "content_generated",
        "updated_at",
    }
)


class TrackAlreadyExists(Exception):
    """The unique (name, type) constraint rejected a track insert."""

    def __init__(self, name: str, track_type: str) -> None:
        super().__init__(f"Track {name!r} ({track_type}) already exists")
        self.name = name
        self.track_type = track_type


def check_event_changes(changes: Mapping[str, Any]) -> None:
    """Reject update keys outside ``UPDATABLE_EVENT_FIELDS``."""
    unknown = set(changes) - UPDATABLE_EVENT_FIELDS
    if unknown:
        raise ValueError(f"Cannot update event fields: {sorted(unknown)}")


class TimelineStore(Protocol):
    """Transactional row store for tracks and events."""

    # -- tracks ---------------------------------------------------------

    def find_track(self, name: str, track_type: TrackType) -> Track | None: ...

    def get_track(self, track_id: str) -> Track | None: ...

    def max_track_order(self) -> int | None: ...

    def insert_track(self, track: Track) -> None: ...

    def list_tracks(self, track_type: TrackType, limit: int, offset: int) -> list[Track]: ...

    def count_tracks(self, track_type: TrackType) -> int: ...

    def delete_track(self, track_id: str) -> int:
        """Delete a track and return how many events the cascade removed."""
        ...

    # -- events ---------------------------------------------------------

    def insert_event(self, event: ScheduledEvent) -> None: ...

    def get_event(self, event_id: str) -> ScheduledEvent | None: ...

    def list_events(
        self,
        *,
        event_type: str = "scheduled",
        track_id: str | None = None,
        platform: str | None = None,
    ) -> list[tuple[ScheduledEvent, str]]:
        """Events joined with their track name, ascending by scheduled time."""
        ...

    def update_event(
        self, event_id: str, changes: Mapping[str, Any]
    ) -> ScheduledEvent | None: ...

    def delete_event(self, event_id: str) -> bool: ...

    def close(self) -> None: ...

"""
Helpers shared by the track and event operations.

Response payload builders live here so every tool renders tracks and
events with the same camelCase keys.
"""

import logging
import uuid
from datetime import datetime
from typing import Any

from core.timeline.errors import StorageError
from core.timeline.timing import to_iso
from core.timeline.types import ScheduledEvent, Track, TrackType
from db.store import TimelineStore, TrackAlreadyExists

logger = logging.getLogger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())


def next_track_order(store: TimelineStore) -> int:
    """``max(order) + 1`` across all tracks, or 1 for an empty store."""
    current = store.max_track_order()
    return 1 if current is None else current + 1


def find_or_create_track(
    store: TimelineStore, name: str, now: datetime, track_type: TrackType = "planned"
) -> tuple[Track, bool]:
    """
    Return the track named ``name`` (of ``track_type``), creating it if needed.

    A unique-constraint rejection on insert means a concurrent caller
    created the same track first; the row is re-read and used.

    Returns:
        (track, created) where created is False when the track already existed
    """
    existing = store.find_track(name, track_type)
    if existing is not None:
        return existing, False

    track = Track(
        id=new_id(),
        name=name,
        type=track_type,
        order=next_track_order(store),
        created_at=now,
        updated_at=now,
    )
    try:
        store.insert_track(track)
    except TrackAlreadyExists:
        winner = store.find_track(name, track_type)
        if winner is None:
            raise StorageError(
                f"Track {name!r} was reported as existing but could not be read back"
            ) from None
        logger.info("Track %r created concurrently, reusing %s", name, winner.id)
        return winner, False

    logger.info("Created track %r (%s) order=%d", name, track.id, track.order)
    return track, True


def track_payload(track: Track) -> dict[str, Any]:
    return {
        "id": track.id,
        "name": track.name,
        "type": track.type,
        "order": track.order,
        "createdAt": to_iso(track.created_at),
    }


def event_payload(event: ScheduledEvent, track_name: str) -> dict[str, Any]:
    """List-item view of an event, including its derived status."""
    return {
        "id": event.id,
        "trackId": event.track_id,
        "trackName": track_name,
        "name": event.name,
        "prompt": event.prompt,
        "platform": event.platform,
        "scheduledTime": to_iso(event.scheduled_time),
        "generationTime": to_iso(event.generation_time),
        "status": event.status,
        "approved": event.approved,
        "mediaPath": event.media_path,
        "metadata": event.metadata,
    }

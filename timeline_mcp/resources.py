"""
Timeline MCP — read-only resource implementations.

handlers.py registers the @mcp.resource() decorators; the functions here
build the JSON bodies.

Resource design principles:
    1. Always return valid JSON — never raise, never return partial data.
       Broken JSON silently kills the MCP client's ability to use the resource.
    2. Summary stats alongside data — saves a round-trip for common aggregations.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from typing import Any

from core.timeline.timing import is_future, to_iso
from core.timeline.types import EVENT_STATUSES
from timeline_mcp.runtime import TimelineRuntime
from timeline_mcp.schemas import UPCOMING_EVENTS_LIMIT
from tools.timeline.common import event_payload, track_payload

logger = logging.getLogger(__name__)

# Page size used to walk every planned track
_TRACK_PAGE = 100

# Statuses that still need work before the post goes out
_UPCOMING_STATUSES = frozenset({"pending", "generated"})


# ---------------------------------------------------------------------------
# tracks resource
# ---------------------------------------------------------------------------


def read_tracks(runtime: TimelineRuntime) -> str:
    """
    All planned tracks in timeline order, each with event counts by status.

    Returns:
        JSON string with keys: tracks, total
    """
    try:
        store = runtime.store
        tracks = []
        offset = 0
        while True:
            page = store.list_tracks("planned", _TRACK_PAGE, offset)
            tracks.extend(page)
            if len(page) < _TRACK_PAGE:
                break
            offset += _TRACK_PAGE

        counts: dict[str, Counter[str]] = {}
        for event, _track_name in store.list_events(event_type="scheduled"):
            counts.setdefault(event.track_id, Counter())[event.status] += 1
    except Exception as exc:
        logger.error("Failed to read tracks resource: %s", exc)
        return _error_response("tracks", str(exc))

    items: list[dict[str, Any]] = []
    for track in tracks:
        by_status = counts.get(track.id, Counter())
        item = track_payload(track)
        item["eventCounts"] = {status: by_status.get(status, 0) for status in sorted(EVENT_STATUSES)}
        item["totalEvents"] = sum(by_status.values())
        items.append(item)

    return json.dumps({"tracks": items, "total": len(items)}, indent=2)


# ---------------------------------------------------------------------------
# upcoming events resource
# ---------------------------------------------------------------------------


def read_upcoming_events(runtime: TimelineRuntime) -> str:
    """
    The next scheduled events that are not posted yet.

    Only events scheduled strictly after now with status pending or
    generated are included, earliest first, at most 20.

    Returns:
        JSON string with keys: events, total, asOf
    """
    try:
        now = runtime.now()
        rows = runtime.store.list_events(event_type="scheduled")
    except Exception as exc:
        logger.error("Failed to read upcoming events resource: %s", exc)
        return _error_response("events", str(exc))

    upcoming = [
        (event, track_name)
        for event, track_name in rows
        if event.status in _UPCOMING_STATUSES and is_future(event.scheduled_time, now)
    ]
    page = upcoming[:UPCOMING_EVENTS_LIMIT]

    return json.dumps(
        {
            "events": [event_payload(event, track_name) for event, track_name in page],
            "total": len(upcoming),
            "asOf": to_iso(now),
        },
        indent=2,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error_response(item_key: str, error: str) -> str:
    """Return a valid error response JSON string — always parseable."""
    return json.dumps({item_key: [], "total": 0, "error": error})

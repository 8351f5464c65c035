"""Timestamp helpers for the timeline domain.

All datetimes leaving this module are timezone-aware UTC. Naive input is
interpreted as UTC, matching how the host sends ``YYYY-MM-DDTHH:MM:SS``
strings without an offset.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

# Content generation starts this long before the scheduled post time
GENERATION_LEAD = timedelta(minutes=30)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive means UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_timestamp(value: str | datetime) -> datetime:
    """
    Parse an ISO-8601 string (or pass through a datetime) as aware UTC.

    Accepts a trailing ``Z`` and date-only strings (midnight UTC).

    Raises:
        ValueError: If the string is not a valid ISO-8601 timestamp, or its
            offset moves it outside the representable UTC range
    """
    if isinstance(value, datetime):
        return _normalize(value, value)
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Invalid ISO 8601 datetime format")
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValueError(f"Invalid ISO 8601 datetime format: {value!r}") from None
    return _normalize(parsed, value)


def _normalize(parsed: datetime, raw: str | datetime) -> datetime:
    # e.g. 9999-12-31T23:59:59-23:59 parses but has no UTC equivalent
    try:
        return ensure_utc(parsed)
    except OverflowError:
        raise ValueError(f"Timestamp out of range: {raw!r}") from None


def to_iso(value: datetime) -> str:
    """Render an aware datetime as an ISO-8601 UTC string for the wire."""
    return ensure_utc(value).isoformat()


def to_storage(value: datetime) -> str:
    """
    Fixed-width naive-UTC text form used for SQLite DATETIME columns.

    Same layout SQLAlchemy's SQLite dialect writes
    (``YYYY-MM-DD HH:MM:SS.ffffff``), so lexical order is chronological.
    """
    return ensure_utc(value).replace(tzinfo=None).isoformat(sep=" ", timespec="microseconds")


def generation_time_for(scheduled_time: datetime) -> datetime:
    """Generation start for a post scheduled at ``scheduled_time``."""
    return ensure_utc(scheduled_time) - GENERATION_LEAD


def is_future(value: datetime, now: datetime) -> bool:
    """True when ``value`` is strictly after ``now``."""
    return ensure_utc(value) > ensure_utc(now)

"""
Tests for core.timeline — value objects, timing, naming and errors.

Pure unit tests: no storage, no filesystem.
"""

import logging
from datetime import UTC, datetime, timedelta, timezone

import pytest

from core.timeline.errors import DuplicateTrack, NotFound, StorageError, TimelineError
from core.timeline.naming import (
    MAX_FOLDER_NAME_LENGTH,
    build_media_path,
    event_folder_leaf,
    sanitize_file_name,
    track_folder,
)
from core.timeline.timing import (
    GENERATION_LEAD,
    ensure_utc,
    generation_time_for,
    is_future,
    parse_timestamp,
    to_iso,
    to_storage,
)
from core.timeline.types import PLATFORMS, ScheduledEvent, Track, derive_status

NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=UTC)


def _track(**overrides) -> Track:
    fields = {
        "id": "11111111-1111-4111-8111-111111111111",
        "name": "Launch",
        "type": "planned",
        "order": 1,
        "created_at": NOW,
        "updated_at": NOW,
    }
    fields.update(overrides)
    return Track(**fields)


# ---------------------------------------------------------------------------
# types.py
# ---------------------------------------------------------------------------


class TestDeriveStatus:
    """Status precedence: posted > generated > pending."""

    def test_pending_when_nothing_done(self) -> None:
        assert derive_status(posted=False, content_generated=False) == "pending"

    def test_generated(self) -> None:
        assert derive_status(posted=False, content_generated=True) == "generated"

    def test_posted_with_content(self) -> None:
        assert derive_status(posted=True, content_generated=True) == "posted"

    def test_posted_without_content_is_posted(self) -> None:
        assert derive_status(posted=True, content_generated=False) == "posted"

    def test_posted_without_content_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="core.timeline.types"):
            derive_status(posted=True, content_generated=False, event_id="evt-1")
        assert "evt-1" in caplog.text

    def test_consistent_flags_do_not_warn(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="core.timeline.types"):
            derive_status(posted=True, content_generated=True)
        assert caplog.records == []


class TestTrack:
    def test_valid_track(self) -> None:
        track = _track()
        assert track.type == "planned"

    def test_unknown_type_raises(self) -> None:
        with pytest.raises(ValueError, match="type must be one of"):
            _track(type="schedule")

    def test_blank_name_raises(self) -> None:
        with pytest.raises(ValueError, match="name must not be empty"):
            _track(name="   ")

    def test_is_frozen(self) -> None:
        track = _track()
        with pytest.raises(AttributeError):
            track.name = "Other"  # type: ignore[misc]


class TestScheduledEvent:
    def test_defaults(self) -> None:
        event = ScheduledEvent(
            id="e1",
            track_id="t1",
            name="Teaser",
            prompt="Write a teaser",
            platform="x",
            scheduled_time=NOW,
            generation_time=NOW - GENERATION_LEAD,
            agent="agent",
            media_path="tracks/Launch/teaser-2026-10-18",
            created_at=NOW,
            updated_at=NOW,
        )
        assert event.status == "pending"
        assert event.event_type == "scheduled"
        assert event.approval_via == "manual"
        assert event.mcp_tools == ("timeline", "fal", "sqlite", "playwright")
        assert event.metadata == {}

    def test_platforms(self) -> None:
        assert PLATFORMS == {"x", "linkedin", "instagram", "threads", "bluesky", "reddit"}


# ---------------------------------------------------------------------------
# timing.py
# ---------------------------------------------------------------------------


class TestParseTimestamp:
    def test_zulu_suffix(self) -> None:
        assert parse_timestamp("2026-10-20T15:00:00Z") == datetime(2026, 10, 20, 15, tzinfo=UTC)

    def test_naive_string_is_utc(self) -> None:
        parsed = parse_timestamp("2026-10-20T15:00:00")
        assert parsed.tzinfo is not None
        assert parsed == datetime(2026, 10, 20, 15, tzinfo=UTC)

    def test_offset_is_converted_to_utc(self) -> None:
        parsed = parse_timestamp("2026-10-20T17:00:00+02:00")
        assert parsed == datetime(2026, 10, 20, 15, tzinfo=UTC)
        assert parsed.utcoffset() == timedelta(0)

    def test_date_only_is_midnight(self) -> None:
        assert parse_timestamp("2026-10-20") == datetime(2026, 10, 20, tzinfo=UTC)

    def test_datetime_passthrough(self) -> None:
        value = datetime(2026, 10, 20, 15)
        assert parse_timestamp(value) == datetime(2026, 10, 20, 15, tzinfo=UTC)

    @pytest.mark.parametrize("raw", ["not a date", "", "2026-13-40T00:00:00"])
    def test_invalid_raises(self, raw: str) -> None:
        with pytest.raises(ValueError, match="Invalid ISO 8601"):
            parse_timestamp(raw)

    @pytest.mark.parametrize("raw", ["9999-12-31T23:59:59-23:59", "0001-01-01T00:00:00+01:00"])
    def test_offset_past_utc_range_raises(self, raw: str) -> None:
        with pytest.raises(ValueError, match="Timestamp out of range"):
            parse_timestamp(raw)

    def test_aware_datetime_past_utc_range_raises(self) -> None:
        value = datetime(9999, 12, 31, 23, 0, tzinfo=timezone(-timedelta(hours=23)))
        with pytest.raises(ValueError, match="Timestamp out of range"):
            parse_timestamp(value)


class TestTimingHelpers:
    def test_generation_lead_is_thirty_minutes(self) -> None:
        assert GENERATION_LEAD == timedelta(minutes=30)

    def test_generation_time_for(self) -> None:
        assert generation_time_for(NOW) == datetime(2026, 10, 18, 11, 30, tzinfo=UTC)

    def test_is_future_is_strict(self) -> None:
        assert is_future(NOW + timedelta(seconds=1), NOW)
        assert not is_future(NOW, NOW)
        assert not is_future(NOW - timedelta(seconds=1), NOW)

    def test_ensure_utc_converts_other_zones(self) -> None:
        tokyo = timezone(timedelta(hours=9))
        assert ensure_utc(datetime(2026, 10, 18, 21, tzinfo=tokyo)) == NOW

    def test_to_iso(self) -> None:
        assert to_iso(NOW) == "2026-10-18T12:00:00+00:00"

    def test_to_storage_is_fixed_width_naive_utc(self) -> None:
        assert to_storage(NOW) == "2026-10-18 12:00:00.000000"

    def test_to_storage_sorts_chronologically(self) -> None:
        earlier = to_storage(NOW)
        later = to_storage(NOW + timedelta(microseconds=5))
        assert earlier < later


# ---------------------------------------------------------------------------
# naming.py
# ---------------------------------------------------------------------------


class TestSanitizeFileName:
    def test_plain_name_unchanged(self) -> None:
        assert sanitize_file_name("Launch") == "Launch"

    def test_reserved_characters_replaced(self) -> None:
        assert sanitize_file_name('a<b>c:d"e/f\\g|h?i*j') == "a-b-c-d-e-f-g-h-i-j"

    def test_whitespace_runs_collapse(self) -> None:
        assert sanitize_file_name("Q3   launch\tweek") == "Q3_launch_week"

    def test_leading_dots_stripped(self) -> None:
        assert sanitize_file_name("...hidden") == "hidden"

    def test_mixed_hostile_name(self) -> None:
        cleaned = sanitize_file_name("..Q3 launch: part 1/2")
        assert cleaned == "Q3_launch-_part_1-2"
        assert not cleaned.startswith(".")
        assert not set('<>:"/\\|?*') & set(cleaned)

    def test_truncated_to_limit(self) -> None:
        assert len(sanitize_file_name("x" * 250)) == MAX_FOLDER_NAME_LENGTH

    def test_empty_result_becomes_untitled(self) -> None:
        assert sanitize_file_name("...") == "untitled"
        assert sanitize_file_name("") == "untitled"


class TestMediaPaths:
    def test_event_folder_leaf(self) -> None:
        assert event_folder_leaf("Teaser 1") == "teaser-1"

    def test_event_folder_leaf_hyphenates_whitespace(self) -> None:
        assert event_folder_leaf("Big  Reveal Day") == "big-reveal-day"

    def test_track_folder(self) -> None:
        assert str(track_folder("Launch: Q3")) == "tracks/Launch-_Q3"

    def test_build_media_path(self) -> None:
        assert build_media_path("Launch", "Teaser 1", NOW) == "tracks/Launch/teaser-1-2026-10-18"

    def test_build_media_path_uses_utc_date(self) -> None:
        late_evening_la = datetime(2026, 10, 18, 20, tzinfo=timezone(timedelta(hours=-7)))
        assert build_media_path("Launch", "Teaser", late_evening_la).endswith("2026-10-19")

    def test_build_media_path_posix_separators(self) -> None:
        assert "\\" not in build_media_path("A\\B", "C", NOW)


# ---------------------------------------------------------------------------
# errors.py
# ---------------------------------------------------------------------------


class TestErrors:
    def test_kinds_are_stable(self) -> None:
        assert TimelineError("x").kind == "internal"
        assert DuplicateTrack(_track()).kind == "duplicate_track"
        assert NotFound("track", "abc").kind == "not_found"
        assert StorageError("disk full").kind == "storage"

    def test_not_found_message(self) -> None:
        assert NotFound("event", "abc").message == "Event abc not found"

    def test_duplicate_track_payload(self) -> None:
        payload = DuplicateTrack(_track()).payload()
        assert payload["existingTrack"]["id"] == "11111111-1111-4111-8111-111111111111"
        assert payload["existingTrack"]["name"] == "Launch"
        assert payload["existingTrack"]["createdAt"] == "2026-10-18T12:00:00+00:00"

    def test_base_error_has_no_details(self) -> None:
        error = StorageError("boom")
        assert error.details == ()
        assert error.payload() == {}

"""Pydantic parameter models for the timeline operations.

Every operation validates its raw keyword arguments against one of these
models before touching storage. Fields accept both snake_case and the
camelCase names used on the wire (``scheduled_time`` / ``scheduledTime``).

The "must be in the future" rule needs the current time, which is passed
through the pydantic validation context::

    AddScheduledEventParams.model_validate(raw, context={"now": now})

Without a ``now`` in the context only the format is checked.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from core.timeline.timing import is_future, parse_timestamp
from core.timeline.types import (
    DEFAULT_AGENT,
    DEFAULT_APPROVAL_VIA,
    DEFAULT_MCP_TOOLS,
    DEFAULT_PLATFORM,
    MAX_EVENT_NAME_LENGTH,
    MAX_PROMPT_LENGTH,
    MAX_TRACK_NAME_LENGTH,
    Platform,
    TrackType,
)

DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 100

StatusFilter = Literal["all", "pending", "generated", "posted"]


def _check_uuid(value: str) -> str:
    try:
        return str(uuid.UUID(value))
    except ValueError:
        raise ValueError("must be a UUID string") from None


def _check_timestamp(value: str | datetime) -> str | datetime:
    # Keep the caller's representation; only prove it parses
    parse_timestamp(value)
    return value


def _require_future(value: str | datetime | None, info: ValidationInfo) -> str | datetime | None:
    now = (info.context or {}).get("now")
    if value is not None and now is not None and not is_future(parse_timestamp(value), now):
        raise ValueError("Scheduled time must be in the future")
    return value


IdStr = Annotated[str, AfterValidator(_check_uuid)]
Timestamp = Annotated[str | datetime, AfterValidator(_check_timestamp)]
TrackName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_TRACK_NAME_LENGTH)
]
EventName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_EVENT_NAME_LENGTH)
]
Prompt = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_PROMPT_LENGTH)
]
Limit = Annotated[int, Field(ge=1, le=MAX_PAGE_LIMIT)]
Offset = Annotated[int, Field(ge=0)]


class _Params(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        loc_by_alias=False,
        extra="forbid",
        frozen=True,
    )


# ---------------------------------------------------------------------------
# Tracks
# ---------------------------------------------------------------------------


class AddTrackParams(_Params):
    name: TrackName
    type: TrackType = "planned"
    order: int | None = None


class ListTracksParams(_Params):
    limit: Limit = DEFAULT_PAGE_LIMIT
    offset: Offset = 0


class RemoveTrackParams(_Params):
    track_id: IdStr


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class AddScheduledEventParams(_Params):
    track_name: TrackName
    event_name: EventName
    prompt: Prompt
    scheduled_time: Timestamp
    platform: Platform = DEFAULT_PLATFORM
    agent: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)] = DEFAULT_AGENT
    metadata: dict[str, Any] = Field(default_factory=dict)
    approval_via: str = DEFAULT_APPROVAL_VIA
    mcp_tools: list[str] = Field(default_factory=lambda: list(DEFAULT_MCP_TOOLS))

    @field_validator("scheduled_time")
    @classmethod
    def scheduled_time_in_future(
        cls, value: str | datetime, info: ValidationInfo
    ) -> str | datetime:
        return _require_future(value, info)


class ListScheduledEventsParams(_Params):
    track_id: IdStr | None = None
    status: StatusFilter = "all"
    platform: Platform | None = None
    start_date: Timestamp | None = None
    end_date: Timestamp | None = None
    limit: Limit = DEFAULT_PAGE_LIMIT
    offset: Offset = 0


class EventPatch(_Params):
    """
    Partial update of a scheduled event — one optional slot per mutable field.

    At least one slot must be set. Side effects of each slot are applied by
    the update operation:
        prompt          resets ``content_generated``
        scheduled_time  must be in the future; recomputes ``generation_time``
    """

    name: EventName | None = None
    prompt: Prompt | None = None
    scheduled_time: Timestamp | None = None
    approved: bool | None = None
    platform: Platform | None = None

    @field_validator("scheduled_time")
    @classmethod
    def scheduled_time_in_future(
        cls, value: str | datetime | None, info: ValidationInfo
    ) -> str | datetime | None:
        return _require_future(value, info)

    @model_validator(mode="after")
    def at_least_one_field(self) -> EventPatch:
        if not self.changes():
            raise ValueError("At least one update field must be provided")
        return self

    def changes(self) -> dict[str, Any]:
        """Slots that were provided, keyed by field name."""
        return {name: value for name, value in self if value is not None}


class UpdateScheduledEventParams(_Params):
    event_id: IdStr
    updates: EventPatch


class RemoveScheduledEventParams(_Params):
    event_id: IdStr

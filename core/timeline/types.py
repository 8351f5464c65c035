"""Timeline value objects — tracks and scheduled events.

These are the data contracts shared by the storage backends and the
operation layer. All types are frozen dataclasses; mutation happens by
writing a new row through a store, never by editing an instance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from functools import cached_property
from typing import Any, Literal, get_args

logger = logging.getLogger(__name__)

TrackType = Literal["planned", "automation"]
Platform = Literal["x", "linkedin", "instagram", "threads", "bluesky", "reddit"]
EventType = Literal["scheduled", "automation_generated"]
EventStatus = Literal["pending", "generated", "posted"]

TRACK_TYPES: frozenset[str] = frozenset(get_args(TrackType))
PLATFORMS: frozenset[str] = frozenset(get_args(Platform))
EVENT_TYPES: frozenset[str] = frozenset(get_args(EventType))
EVENT_STATUSES: frozenset[str] = frozenset(get_args(EventStatus))

DEFAULT_PLATFORM: Platform = "x"
DEFAULT_AGENT = "claude-sonnet-4-20250514"
DEFAULT_APPROVAL_VIA = "manual"
DEFAULT_MCP_TOOLS: tuple[str, ...] = ("timeline", "fal", "sqlite", "playwright")

MAX_TRACK_NAME_LENGTH = 100
MAX_EVENT_NAME_LENGTH = 200
MAX_PROMPT_LENGTH = 5000


@dataclass(frozen=True)
class Track:
    """A named, ordered grouping of events (a campaign or content series).

    Attributes:
        id: UUID4 string.
        name: Display name, unique together with ``type``.
        type: ``planned`` for hand-scheduled series, ``automation`` for
            rows owned by an automation config.
        order: Sort key for display; gaps are allowed.
        created_at: UTC creation time.
        updated_at: UTC time of the last mutation.
    """

    id: str
    name: str
    type: TrackType
    order: int
    created_at: datetime
    updated_at: datetime

    def __post_init__(self) -> None:
        if self.type not in TRACK_TYPES:
            raise ValueError(f"type must be one of {sorted(TRACK_TYPES)}, got {self.type!r}")
        if not self.name.strip():
            raise ValueError("name must not be empty")


@dataclass(frozen=True)
class ScheduledEvent:
    """A single scheduled content item owned by exactly one track.

    ``generation_time`` is always ``scheduled_time`` minus the generation
    lead (see ``core.timeline.timing``). The three lifecycle flags are
    independent columns; callers read ``status`` instead of combining them.
    """

    id: str
    track_id: str
    name: str
    prompt: str
    platform: Platform
    scheduled_time: datetime
    generation_time: datetime
    agent: str
    media_path: str
    created_at: datetime
    updated_at: datetime
    content_generated: bool = False
    approved: bool = False
    posted: bool = False
    event_type: EventType = "scheduled"
    metadata: dict[str, Any] = field(default_factory=dict)
    approval_via: str = DEFAULT_APPROVAL_VIA
    mcp_tools: tuple[str, ...] = DEFAULT_MCP_TOOLS

    @cached_property
    def status(self) -> EventStatus:
        # Once per instance; derive_status may log a warning
        return derive_status(
            posted=self.posted,
            content_generated=self.content_generated,
            event_id=self.id,
        )


def derive_status(
    *,
    posted: bool,
    content_generated: bool,
    event_id: str | None = None,
) -> EventStatus:
    """
    Collapse the lifecycle flags into a single status.

    Precedence is ``posted`` > ``generated`` > ``pending``. A posted row
    without generated content is still ``posted`` but is logged as a
    data-quality warning.

    Args:
        posted: Whether the event was published.
        content_generated: Whether content exists for the current prompt.
        event_id: Optional id, only used in the warning message.

    Returns:
        ``"posted"``, ``"generated"`` or ``"pending"``
    """
    if posted:
        if not content_generated:
            logger.warning(
                "Event %s is marked posted without generated content", event_id or "?"
            )
        return "posted"
    if content_generated:
        return "generated"
    return "pending"

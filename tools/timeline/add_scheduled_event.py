"""
add_scheduled_event tool — schedule a content item on a track.

Side-effect tool: may create the track, inserts the event row and writes
the media folder with its info.json.
"""

import logging
from datetime import datetime
from typing import Any

from core.timeline.naming import build_media_path
from core.timeline.params import AddScheduledEventParams
from core.timeline.timing import GENERATION_LEAD, generation_time_for, parse_timestamp, to_iso
from core.timeline.types import ScheduledEvent
from tools.base import TimelineTool, ToolResult
from tools.timeline.common import find_or_create_track, new_id
from tools.timeline.sidecar import write_event_sidecar, write_track_sidecar

logger = logging.getLogger(__name__)


def _echo_timing(supplied: str | datetime) -> tuple[Any, Any]:
    """
    Scheduled and generation time in the caller's representation.

    A string comes back as the same string (generation time as ISO text);
    a datetime comes back as a datetime.
    """
    if isinstance(supplied, datetime):
        return supplied, supplied - GENERATION_LEAD
    return supplied, to_iso(generation_time_for(parse_timestamp(supplied)))


class AddScheduledEvent(TimelineTool):
    """
    Schedule a post on the track named ``track_name``.

    The track is found by (name, "planned") or created on the fly.
    Generation is scheduled 30 minutes before the post time, and the
    media folder is derived from the track and event names plus today's
    UTC date.

    Example:
        result = tool(
            track_name="Launch",
            event_name="Teaser 1",
            prompt="Announce the beta",
            scheduled_time="2026-10-20T15:00:00Z",
        )
        # data: {"id": "...", "mediaPath": "tracks/Launch/teaser-1-2026-10-18", ...}
    """

    params_model = AddScheduledEventParams

    @property
    def name(self) -> str:
        return "add_scheduled_event"

    @property
    def description(self) -> str:
        return (
            "Schedule a social media post on a track. The track is created if it "
            "does not exist. scheduled_time must be an ISO-8601 timestamp in the "
            "future; content generation is planned 30 minutes earlier. "
            "Platforms: x, linkedin, instagram, threads, bluesky, reddit."
        )

    def execute(self, params: AddScheduledEventParams) -> ToolResult:
        now = self.context.now()
        track, track_created = find_or_create_track(self.store, params.track_name, now)

        scheduled_time = parse_timestamp(params.scheduled_time)
        event = ScheduledEvent(
            id=new_id(),
            track_id=track.id,
            name=params.event_name,
            prompt=params.prompt,
            platform=params.platform,
            scheduled_time=scheduled_time,
            generation_time=generation_time_for(scheduled_time),
            agent=params.agent,
            media_path=build_media_path(track.name, params.event_name, now),
            created_at=now,
            updated_at=now,
            metadata=dict(params.metadata),
            approval_via=params.approval_via,
            mcp_tools=tuple(params.mcp_tools),
        )
        self.store.insert_event(event)
        logger.info(
            "Event %r scheduled on %r for %s (%s)",
            event.name,
            track.name,
            to_iso(event.scheduled_time),
            event.id,
        )

        if track_created:
            write_track_sidecar(self.context.workspace, track)
        folder_created = write_event_sidecar(self.context.workspace, event)

        scheduled_echo, generation_echo = _echo_timing(params.scheduled_time)
        return ToolResult(
            success=True,
            data={
                "id": event.id,
                "trackId": track.id,
                "name": event.name,
                "scheduledTime": scheduled_echo,
                "generationTime": generation_echo,
                "mediaPath": event.media_path,
                "platform": event.platform,
            },
            metadata={"track_created": track_created, "folder_created": folder_created},
        )

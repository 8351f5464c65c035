"""
list_scheduled_events tool — filtered, paginated event listing.

The store applies the equality filters (track, platform) and ordering;
status and the date window are applied here, before pagination, so
``pagination.total`` is the filtered count.
"""

from datetime import datetime

from core.timeline.params import ListScheduledEventsParams
from core.timeline.timing import parse_timestamp
from core.timeline.types import ScheduledEvent
from tools.base import TimelineTool, ToolResult
from tools.timeline.common import event_payload


def _in_window(event: ScheduledEvent, start: datetime | None, end: datetime | None) -> bool:
    # Both bounds inclusive
    if start is not None and event.scheduled_time < start:
        return False
    if end is not None and event.scheduled_time > end:
        return False
    return True


class ListScheduledEvents(TimelineTool):
    """
    List scheduled events ascending by scheduled time.

    ``status`` compares against the derived status, so ``posted`` matches
    every posted event whatever its ``content_generated`` flag says.
    """

    params_model = ListScheduledEventsParams

    @property
    def name(self) -> str:
        return "list_scheduled_events"

    @property
    def description(self) -> str:
        return (
            "List scheduled events, optionally filtered by track_id, status "
            "(all, pending, generated, posted), platform and an inclusive "
            "start_date/end_date window. Results are ordered by scheduled time."
        )

    def execute(self, params: ListScheduledEventsParams) -> ToolResult:
        rows = self.store.list_events(
            event_type="scheduled",
            track_id=params.track_id,
            platform=params.platform,
        )

        start = parse_timestamp(params.start_date) if params.start_date is not None else None
        end = parse_timestamp(params.end_date) if params.end_date is not None else None

        matching = [
            (event, track_name)
            for event, track_name in rows
            if (params.status == "all" or event.status == params.status)
            and _in_window(event, start, end)
        ]
        page = matching[params.offset : params.offset + params.limit]

        return ToolResult(
            success=True,
            data={
                "events": [event_payload(event, track_name) for event, track_name in page],
                "pagination": {
                    "limit": params.limit,
                    "offset": params.offset,
                    "total": len(matching),
                },
            },
        )

"""remove_scheduled_event tool — idempotent event delete."""

import logging

from core.timeline.params import RemoveScheduledEventParams
from tools.base import TimelineTool, ToolResult

logger = logging.getLogger(__name__)


class RemoveScheduledEvent(TimelineTool):
    """
    Delete an event by id.

    Succeeds whether or not the id existed; ``deleted`` tells the caller
    which case it was.
    """

    params_model = RemoveScheduledEventParams

    @property
    def name(self) -> str:
        return "remove_scheduled_event"

    @property
    def description(self) -> str:
        return "Remove a scheduled event. Succeeds even if the event no longer exists."

    def execute(self, params: RemoveScheduledEventParams) -> ToolResult:
        deleted = self.store.delete_event(params.event_id)
        if not deleted:
            logger.debug("remove_scheduled_event: %s did not exist", params.event_id)

        return ToolResult(
            success=True,
            data={
                "message": f"Event {params.event_id} removed successfully",
                "deleted": deleted,
            },
        )

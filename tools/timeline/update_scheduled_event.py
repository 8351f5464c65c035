"""
update_scheduled_event tool — apply an EventPatch to one event.

Per-field rules:
    prompt          also sets content_generated = False
    scheduled_time  must be in the future (checked during validation);
                    generation_time is recomputed
"""

import logging
from typing import Any

from core.timeline.errors import NotFound
from core.timeline.params import EventPatch, UpdateScheduledEventParams
from core.timeline.timing import generation_time_for, parse_timestamp, to_iso
from tools.base import TimelineTool, ToolResult

logger = logging.getLogger(__name__)


def patch_to_changes(patch: EventPatch) -> dict[str, Any]:
    """Translate a validated patch into store column changes."""
    changes: dict[str, Any] = {}
    provided = patch.changes()

    for field_name in ("name", "approved", "platform"):
        if field_name in provided:
            changes[field_name] = provided[field_name]

    if "prompt" in provided:
        changes["prompt"] = provided["prompt"]
        changes["content_generated"] = False

    if "scheduled_time" in provided:
        scheduled_time = parse_timestamp(provided["scheduled_time"])
        changes["scheduled_time"] = scheduled_time
        changes["generation_time"] = generation_time_for(scheduled_time)

    return changes


class UpdateScheduledEvent(TimelineTool):
    """Partially update a scheduled event; unknown ids are NotFound."""

    params_model = UpdateScheduledEventParams

    @property
    def name(self) -> str:
        return "update_scheduled_event"

    @property
    def description(self) -> str:
        return (
            "Update a scheduled event. Provide at least one of name, prompt, "
            "scheduled_time, approved, platform in updates. Changing the prompt "
            "marks previously generated content as stale; a new scheduled_time "
            "must be in the future."
        )

    def execute(self, params: UpdateScheduledEventParams) -> ToolResult:
        changes = patch_to_changes(params.updates)
        changes["updated_at"] = self.context.now()

        updated = self.store.update_event(params.event_id, changes)
        if updated is None:
            raise NotFound("event", params.event_id)

        logger.info("Event %s updated: %s", updated.id, sorted(params.updates.changes()))
        return ToolResult(
            success=True,
            data={
                "id": updated.id,
                "name": updated.name,
                "scheduledTime": to_iso(updated.scheduled_time),
                "approved": updated.approved,
                "platform": updated.platform,
            },
        )

"""
remove_track tool — delete a track and, through the cascade, its events.
"""

import logging

from core.timeline.errors import NotFound
from core.timeline.params import RemoveTrackParams
from tools.base import TimelineTool, ToolResult

logger = logging.getLogger(__name__)


class RemoveTrack(TimelineTool):
    """
    Remove a track and every event it owns.

    The sidecar folders on disk are left in place.
    """

    params_model = RemoveTrackParams

    @property
    def name(self) -> str:
        return "remove_track"

    @property
    def description(self) -> str:
        return (
            "Remove a track and all of its scheduled events. "
            "WARNING: this deletes every event in the track."
        )

    def execute(self, params: RemoveTrackParams) -> ToolResult:
        track = self.store.get_track(params.track_id)
        if track is None:
            raise NotFound("track", params.track_id)

        deleted_events = self.store.delete_track(track.id)
        logger.info("Track %r removed with %d events", track.name, deleted_events)

        return ToolResult(
            success=True,
            data={
                "message": f'Track "{track.name}" removed successfully',
                "deletedEvents": deleted_events,
                "trackType": track.type,
            },
        )

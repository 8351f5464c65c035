"""
add_track tool — explicitly create a planned or automation track.

Side-effect tool: inserts a row and writes the track sidecar folder.
"""

import logging

from core.timeline.errors import DuplicateTrack, StorageError
from core.timeline.params import AddTrackParams
from core.timeline.types import Track
from db.store import TrackAlreadyExists
from tools.base import TimelineTool, ToolResult
from tools.timeline.common import new_id, next_track_order, track_payload
from tools.timeline.sidecar import write_track_sidecar

logger = logging.getLogger(__name__)


class AddTrack(TimelineTool):
    """
    Create a new track.

    Unlike the implicit creation done by add_scheduled_event, an existing
    (name, type) pair is an error here: the caller gets DuplicateTrack with
    the existing track attached so it can reuse it.

    Example:
        result = tool(name="Product Launch")
        # data: {"id": "...", "name": "Product Launch", "type": "planned", "order": 3, ...}
    """

    params_model = AddTrackParams

    @property
    def name(self) -> str:
        return "add_track"

    @property
    def description(self) -> str:
        return (
            "Create a new track (a campaign or content series) on the timeline. "
            "Fails with duplicate_track if a track with the same name and type "
            "exists; the existing track is returned so it can be reused. "
            "Order defaults to the end of the timeline."
        )

    def execute(self, params: AddTrackParams) -> ToolResult:
        existing = self.store.find_track(params.name, params.type)
        if existing is not None:
            raise DuplicateTrack(existing)

        now = self.context.now()
        order = params.order if params.order is not None else next_track_order(self.store)
        track = Track(
            id=new_id(),
            name=params.name,
            type=params.type,
            order=order,
            created_at=now,
            updated_at=now,
        )
        try:
            self.store.insert_track(track)
        except TrackAlreadyExists:
            winner = self.store.find_track(params.name, params.type)
            if winner is None:
                raise StorageError(f"Track {params.name!r} could not be read back") from None
            raise DuplicateTrack(winner) from None

        folder_created = write_track_sidecar(self.context.workspace, track)
        logger.info("Track %r created (%s) order=%d", track.name, track.id, track.order)

        data = track_payload(track)
        data["message"] = f'Track "{track.name}" created successfully'
        return ToolResult(
            success=True,
            data=data,
            metadata={"folder_created": folder_created},
        )

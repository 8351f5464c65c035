"""list_tracks tool — paginated view of the planned tracks."""

from core.timeline.params import ListTracksParams
from tools.base import TimelineTool, ToolResult
from tools.timeline.common import track_payload


class ListTracks(TimelineTool):
    """
    List planned tracks ordered by ``order``, ties in insertion order.

    ``pagination.total`` counts every planned track, not just the page.
    """

    params_model = ListTracksParams

    @property
    def name(self) -> str:
        return "list_tracks"

    @property
    def description(self) -> str:
        return (
            "List the planned content tracks in timeline order. "
            "Use limit (1-100, default 50) and offset to page through them."
        )

    def execute(self, params: ListTracksParams) -> ToolResult:
        tracks = self.store.list_tracks("planned", params.limit, params.offset)
        total = self.store.count_tracks("planned")
        return ToolResult(
            success=True,
            data={
                "tracks": [track_payload(t) for t in tracks],
                "pagination": {
                    "limit": params.limit,
                    "offset": params.offset,
                    "total": total,
                },
            },
        )

"""
Tool registry for the timeline operations.

Tools need a TimelineContext (store + workspace), so they are built
explicitly by ``build_registry`` rather than discovered and instantiated
without arguments.
"""

from tools.base import TimelineTool
from tools.context import TimelineContext


class ToolRegistry:
    """
    Registry of timeline tools, looked up by name.

    Usage:
        registry = build_registry(context)
        tool = registry.get("add_track")
        result = tool(name="Launch")
    """

    def __init__(self):
        self._tools: dict[str, TimelineTool] = {}

    def register(self, tool: TimelineTool) -> None:
        """
        Register a tool instance.

        Raises:
            ValueError: If tool with same name already registered
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")

        self._tools[tool.name] = tool

    def get(self, name: str) -> TimelineTool | None:
        return self._tools.get(name)

    def require(self, name: str) -> TimelineTool:
        """Like get(), but raises KeyError for unknown names."""
        tool = self._tools.get(name)
        if tool is None:
            raise KeyError(f"No tool named {name!r}. Known: {self.names()}")
        return tool

    def names(self) -> list[str]:
        return sorted(self._tools)

    def list_tools(self) -> list[dict]:
        """
        List all registered tools.

        Returns:
            List of tool dicts (name, description, parameters)
        """
        return [tool.to_dict() for tool in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools


def build_registry(context: TimelineContext) -> ToolRegistry:
    """
    Build a registry holding every timeline operation bound to ``context``.

    Returns:
        ToolRegistry with the seven track/event tools
    """
    from tools.timeline.add_scheduled_event import AddScheduledEvent
    from tools.timeline.add_track import AddTrack
    from tools.timeline.list_scheduled_events import ListScheduledEvents
    from tools.timeline.list_tracks import ListTracks
    from tools.timeline.remove_scheduled_event import RemoveScheduledEvent
    from tools.timeline.remove_track import RemoveTrack
    from tools.timeline.update_scheduled_event import UpdateScheduledEvent

    registry = ToolRegistry()
    for tool_cls in (
        AddTrack,
        ListTracks,
        RemoveTrack,
        AddScheduledEvent,
        ListScheduledEvents,
        UpdateScheduledEvent,
        RemoveScheduledEvent,
    ):
        registry.register(tool_cls(context))
    return registry

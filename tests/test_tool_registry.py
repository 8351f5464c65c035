"""
Tests for tool registry and registry construction.
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from tools.context import TimelineContext
from tools.registry import ToolRegistry, build_registry
from tools.timeline.add_track import AddTrack
from tools.timeline.list_tracks import ListTracks

EXPECTED_TOOLS = [
    "add_scheduled_event",
    "add_track",
    "list_scheduled_events",
    "list_tracks",
    "remove_scheduled_event",
    "remove_track",
    "update_scheduled_event",
]


@pytest.fixture()
def mock_context(tmp_path: Path) -> TimelineContext:
    return TimelineContext(store=MagicMock(), workspace=tmp_path)


class TestToolRegistry:
    """Test ToolRegistry registration and lookup."""

    def test_register_tool(self, mock_context):
        registry = ToolRegistry()
        registry.register(AddTrack(mock_context))

        assert len(registry) == 1
        assert "add_track" in registry

    def test_register_duplicate_raises(self, mock_context):
        registry = ToolRegistry()
        registry.register(AddTrack(mock_context))

        with pytest.raises(ValueError, match="already registered"):
            registry.register(AddTrack(mock_context))

    def test_get_tool(self, mock_context):
        registry = ToolRegistry()
        tool = ListTracks(mock_context)
        registry.register(tool)

        assert registry.get("list_tracks") is tool

    def test_get_nonexistent_tool(self):
        assert ToolRegistry().get("nope") is None

    def test_require_nonexistent_tool_raises(self):
        with pytest.raises(KeyError, match="nope"):
            ToolRegistry().require("nope")

    def test_require_error_lists_known_names(self, mock_context):
        registry = ToolRegistry()
        registry.register(ListTracks(mock_context))
        registry.register(AddTrack(mock_context))

        with pytest.raises(KeyError) as exc_info:
            registry.require("nope")

        assert "Known: ['add_track', 'list_tracks']" in str(exc_info.value)

    def test_list_tools(self, mock_context):
        registry = ToolRegistry()
        registry.register(AddTrack(mock_context))
        registry.register(ListTracks(mock_context))

        tools = registry.list_tools()

        assert {t["name"] for t in tools} == {"add_track", "list_tracks"}
        assert all("parameters" in t and "description" in t for t in tools)

    def test_contains(self, mock_context):
        registry = ToolRegistry()
        registry.register(AddTrack(mock_context))

        assert "add_track" in registry
        assert "remove_track" not in registry


class TestBuildRegistry:
    """build_registry binds every timeline operation to one context."""

    def test_all_operations_registered(self, mock_context):
        registry = build_registry(mock_context)
        assert registry.names() == EXPECTED_TOOLS

    def test_tools_share_context(self, mock_context):
        registry = build_registry(mock_context)
        assert all(registry.require(name).context is mock_context for name in EXPECTED_TOOLS)

    def test_schemas_use_camel_case(self, mock_context):
        schema = build_registry(mock_context).require("add_scheduled_event").to_dict()["parameters"]
        assert "scheduledTime" in schema["properties"]
        assert set(schema["required"]) == {"trackName", "eventName", "prompt", "scheduledTime"}

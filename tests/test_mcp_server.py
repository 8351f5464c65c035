"""
Timeline MCP Server — server, transport and handler tests.

Tests that:
    1. schemas.py — McpCallLog, make_call_log, URI constants are correct
    2. transport.py — configure_logging doesn't crash, get_transport_mode defaults
    3. server.py — FastMCP instance created, the seven tools registered
    4. handlers.py — tools return JSON envelopes against a real temporary store

Handler tests build their own server with create_server() so the
module-level server (bound to the current directory) is never used for
writes.
"""

import json
import logging
import os
import time
import uuid
from pathlib import Path
from unittest.mock import patch

import pytest

from db.store import TimelineStore
from timeline_mcp.config import TimelineConfig
from timeline_mcp.runtime import TimelineRuntime
from timeline_mcp.server import create_server

TOOL_NAMES = {
    "add_track",
    "list_tracks",
    "remove_track",
    "add_scheduled_event",
    "list_scheduled_events",
    "update_scheduled_event",
    "remove_scheduled_event",
}


@pytest.fixture()
def runtime(workspace: Path, store: TimelineStore, clock) -> TimelineRuntime:
    runtime = TimelineRuntime(TimelineConfig(workspace=workspace), clock=clock, store=store)
    yield runtime
    runtime.close()


@pytest.fixture()
def server(runtime: TimelineRuntime):
    mcp, _ = create_server(runtime.config, runtime)
    return mcp


async def call_tool(mcp, name: str, /, **kwargs) -> dict:
    tool_fn = mcp._tool_manager._tools[name]  # type: ignore[attr-defined]
    return json.loads(await tool_fn.fn(**kwargs))


# ---------------------------------------------------------------------------
# schemas.py tests
# ---------------------------------------------------------------------------


class TestMcpCallLog:
    """Tests for McpCallLog dataclass and make_call_log factory."""

    def test_call_log_has_auto_id(self) -> None:
        from timeline_mcp.schemas import McpCallLog

        log = McpCallLog(tool_name="add_track", inputs={}, outputs={}, success=True, latency_ms=1.0)
        assert len(log.call_id) == 8

    def test_call_log_auto_timestamp(self) -> None:
        from timeline_mcp.schemas import McpCallLog

        before = time.time()
        log = McpCallLog(tool_name="t", inputs={}, outputs={}, success=True, latency_ms=1.0)
        after = time.time()
        assert before <= log.timestamp <= after

    def test_to_dict_has_required_keys(self) -> None:
        from timeline_mcp.schemas import McpCallLog

        log = McpCallLog(
            tool_name="add_track",
            inputs={"name": "Launch"},
            outputs={"id": "abc"},
            success=True,
            latency_ms=12.345,
        )
        d = log.to_dict()
        assert set(d) == {
            "call_id",
            "tool_name",
            "inputs",
            "outputs",
            "success",
            "error",
            "error_kind",
            "latency_ms",
            "timestamp",
        }
        assert d["latency_ms"] == 12.35

    def test_str_representation_ok(self) -> None:
        from timeline_mcp.schemas import McpCallLog

        log = McpCallLog(tool_name="list_tracks", inputs={}, outputs={}, success=True, latency_ms=3.0)
        assert "list_tracks OK 3.0ms" in str(log)

    def test_str_representation_error(self) -> None:
        from timeline_mcp.schemas import make_call_log

        log = make_call_log(
            "remove_track",
            {},
            {},
            2.0,
            success=False,
            error="Track x not found",
            error_kind="not_found",
        )
        assert "ERR[not_found]:Track x not found" in str(log)

    def test_long_prompt_is_clipped(self) -> None:
        from timeline_mcp.schemas import MAX_LOGGED_STRING, make_call_log

        log = make_call_log(
            "add_scheduled_event",
            {"prompt": "p" * 5000, "updates": {"prompt": "q" * 200}, "agent": None},
            {},
            1.0,
        )
        assert log.inputs["prompt"] == "p" * MAX_LOGGED_STRING + "... (5000 chars)"
        assert log.inputs["updates"]["prompt"].endswith("... (200 chars)")
        assert "agent" not in log.inputs

    def test_unique_call_ids(self) -> None:
        from timeline_mcp.schemas import make_call_log

        ids = {make_call_log("t", {}, {}, 1.0).call_id for _ in range(50)}
        assert len(ids) == 50


class TestUriConstants:
    def test_uris(self) -> None:
        from timeline_mcp.schemas import URI_TRACKS, URI_UPCOMING_EVENTS

        assert URI_TRACKS == "timeline://tracks"
        assert URI_UPCOMING_EVENTS == "timeline://events/upcoming"


# ---------------------------------------------------------------------------
# transport.py tests
# ---------------------------------------------------------------------------


class TestTransport:
    def test_configure_logging_does_not_raise(self) -> None:
        from timeline_mcp.transport import configure_logging

        configure_logging(level=logging.DEBUG)
        configure_logging(level="warning")
        configure_logging(level="not-a-level")
        assert logging.getLogger().level == logging.INFO

    def test_configure_logging_with_config_level(self, tmp_path: Path) -> None:
        from timeline_mcp.transport import configure_logging

        config = TimelineConfig(workspace=tmp_path, log_level="warning")
        configure_logging(config.log_level_value)
        assert logging.getLogger().level == logging.WARNING

    def test_configure_logging_silences_sqlalchemy(self) -> None:
        from timeline_mcp.transport import configure_logging

        configure_logging(level=logging.DEBUG)
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_get_transport_mode_default_is_stdio(self) -> None:
        from timeline_mcp.transport import get_transport_mode

        with patch.dict(os.environ, {}, clear=True):
            assert get_transport_mode() == "stdio"

    def test_get_transport_mode_sse(self) -> None:
        from timeline_mcp.transport import get_transport_mode

        assert get_transport_mode({"MCP_TRANSPORT": "sse"}) == "sse"

    def test_get_transport_mode_unknown_falls_back_to_stdio(self) -> None:
        from timeline_mcp.transport import get_transport_mode

        assert get_transport_mode({"MCP_TRANSPORT": "grpc"}) == "stdio"

    def test_get_transport_mode_case_insensitive(self) -> None:
        from timeline_mcp.transport import get_transport_mode

        with patch.dict(os.environ, {"MCP_TRANSPORT": "SSE"}):
            assert get_transport_mode() == "sse"


# ---------------------------------------------------------------------------
# server.py: FastMCP instance
# ---------------------------------------------------------------------------


class TestMcpServerInstance:
    """The FastMCP instance is created and tools are registered."""

    def test_mcp_instance_exists(self) -> None:
        from timeline_mcp.server import mcp

        assert mcp is not None

    def test_expected_tools_registered(self) -> None:
        from timeline_mcp.server import mcp

        tool_names = set(mcp._tool_manager._tools.keys())  # type: ignore[attr-defined]
        assert tool_names == TOOL_NAMES

    def test_server_name_is_timeline(self) -> None:
        from timeline_mcp.server import mcp

        assert mcp.name == "timeline"

    def test_module_runtime_is_lazy(self) -> None:
        from timeline_mcp.server import runtime

        assert runtime.is_open is False

    def test_main_closes_runtime(self) -> None:
        import timeline_mcp.server as server_module

        with (
            patch.object(server_module.mcp, "run", side_effect=RuntimeError("transport died")),
            patch.object(server_module.runtime, "close") as close,
        ):
            with pytest.raises(RuntimeError, match="transport died"):
                server_module.main()
        close.assert_called_once()


# ---------------------------------------------------------------------------
# handlers.py: tool handler responses
# ---------------------------------------------------------------------------


class TestTrackHandlers:
    @pytest.mark.asyncio
    async def test_add_and_list_tracks(self, server) -> None:
        added = await call_tool(server, "add_track", name="Launch")
        listed = await call_tool(server, "list_tracks")

        assert added["success"] is True
        assert added["message"] == 'Track "Launch" created successfully'
        assert listed["tracks"][0]["id"] == added["id"]
        assert listed["pagination"]["total"] == 1

    @pytest.mark.asyncio
    async def test_duplicate_track_envelope(self, server) -> None:
        first = await call_tool(server, "add_track", name="Launch")
        second = await call_tool(server, "add_track", name="Launch")

        assert second["success"] is False
        assert second["error"]["kind"] == "duplicate_track"
        assert second["existingTrack"]["id"] == first["id"]

    @pytest.mark.asyncio
    async def test_remove_unknown_track(self, server) -> None:
        result = await call_tool(server, "remove_track", track_id=str(uuid.uuid4()))
        assert result["success"] is False
        assert result["error"]["kind"] == "not_found"


class TestEventHandlers:
    @pytest.mark.asyncio
    async def test_event_lifecycle(self, server, clock) -> None:
        added = await call_tool(
            server,
            "add_scheduled_event",
            track_name="Launch",
            event_name="Teaser 1",
            prompt="Announce the beta",
            scheduled_time=clock.iso_in(hours=2),
        )
        assert added["success"] is True
        assert added["mediaPath"] == "tracks/Launch/teaser-1-2026-10-18"

        updated = await call_tool(
            server,
            "update_scheduled_event",
            event_id=added["id"],
            updates={"approved": True},
        )
        assert updated["approved"] is True

        listed = await call_tool(server, "list_scheduled_events", status="pending")
        assert [e["id"] for e in listed["events"]] == [added["id"]]

        removed = await call_tool(server, "remove_scheduled_event", event_id=added["id"])
        assert removed == {
            "success": True,
            "message": f"Event {added['id']} removed successfully",
            "deleted": True,
        }

    @pytest.mark.asyncio
    async def test_validation_envelope(self, server, clock) -> None:
        result = await call_tool(
            server,
            "add_scheduled_event",
            track_name="Launch",
            event_name="Late",
            prompt="p",
            scheduled_time=clock.iso_in(hours=-1),
        )
        assert result["success"] is False
        assert result["error"]["kind"] == "validation"
        assert result["error"]["details"] == ["scheduled_time: Scheduled time must be in the future"]

    @pytest.mark.asyncio
    async def test_empty_update_envelope(self, server) -> None:
        result = await call_tool(
            server, "update_scheduled_event", event_id=str(uuid.uuid4()), updates={}
        )
        assert result["error"]["kind"] == "validation"

    @pytest.mark.asyncio
    async def test_unexpected_runtime_failure_is_internal(self, server, runtime) -> None:
        with patch.object(runtime, "call", side_effect=RuntimeError("boom")):
            result = await call_tool(server, "list_tracks")

        assert result["success"] is False
        assert result["error"]["kind"] == "internal"

    @pytest.mark.asyncio
    async def test_each_call_is_logged(self, server, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="timeline_mcp.handlers"):
            await call_tool(server, "list_tracks")
            await call_tool(server, "remove_track", track_id="bad")

        messages = [r.getMessage() for r in caplog.records if r.name == "timeline_mcp.handlers"]
        assert any("list_tracks OK" in m for m in messages)
        assert any("remove_track ERR[validation]" in m for m in messages)


# ---------------------------------------------------------------------------
# handlers.py: resources and prompts
# ---------------------------------------------------------------------------


class TestResourceHandlers:
    def test_tracks_resource_returns_json(self, server) -> None:
        resource = server._resource_manager._resources.get("timeline://tracks")  # type: ignore[attr-defined]
        if resource is None:
            pytest.skip("Resource not accessible via internal API")
        data = json.loads(resource.fn())
        assert data == {"tracks": [], "total": 0}

    def test_upcoming_resource_returns_json(self, server) -> None:
        resource = server._resource_manager._resources.get(  # type: ignore[attr-defined]
            "timeline://events/upcoming"
        )
        if resource is None:
            pytest.skip("Resource not accessible via internal API")
        data = json.loads(resource.fn())
        assert data["events"] == []
        assert data["asOf"] == "2026-10-18T12:00:00+00:00"


class TestPromptHandlers:
    def test_plan_content_week_returns_string(self, server) -> None:
        prompt_fn = server._prompt_manager._prompts.get("plan_content_week")  # type: ignore[attr-defined]
        if prompt_fn is None:
            pytest.skip("Prompt not accessible via internal API")
        result = prompt_fn.fn(theme="beta launch", platforms="x", posts_per_day=2)
        assert isinstance(result, str)
        assert "beta launch" in result
        assert "timeline://tracks" in result
        assert "add_scheduled_event" in result

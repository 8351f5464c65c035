"""
Timeline MCP — tool, resource, and prompt handlers.

Handlers are thin: collect arguments → run the registered tool through the
runtime → serialize the ToolResult. Every tool call emits one McpCallLog.

Handler categories:
    Tools     — the seven track/event operations
    Resources — read-only views (tracks overview, upcoming events)
    Prompts   — pre-built prompt templates (plan_content_week)
"""

from __future__ import annotations

import json
import logging
import time
from datetime import date, datetime
from typing import Any

from mcp.server.fastmcp import FastMCP

from timeline_mcp.resources import read_tracks, read_upcoming_events
from timeline_mcp.runtime import TimelineRuntime
from timeline_mcp.schemas import URI_TRACKS, URI_UPCOMING_EVENTS, make_call_log
from tools.base import ToolResult

logger = logging.getLogger(__name__)

# Keys copied from a successful result into the call log
_SUMMARY_KEYS = ("id", "trackId", "name", "deletedEvents", "deleted", "pagination")

# ---------------------------------------------------------------------------
# Call plumbing: structured log on every MCP call
# ---------------------------------------------------------------------------


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _dump(result: ToolResult) -> str:
    return json.dumps(result.to_response(), indent=2, default=_json_default)


def _summarize(result: ToolResult) -> dict[str, Any]:
    data = result.data if isinstance(result.data, dict) else {}
    outputs = {key: data[key] for key in _SUMMARY_KEYS if key in data}
    if "events" in data:
        outputs["returned"] = len(data["events"])
    if "tracks" in data:
        outputs["returned"] = len(data["tracks"])
    return outputs


def _log_call(tool_name: str, inputs: dict[str, Any], result: ToolResult, latency_ms: float) -> None:
    """Emit a structured McpCallLog to the logger."""
    record = make_call_log(
        tool_name=tool_name,
        inputs=inputs,
        outputs=_summarize(result) if result.success else {},
        latency_ms=latency_ms,
        success=result.success,
        error=result.error,
        error_kind=result.error_kind,
    )
    if result.success:
        logger.info("%s", record)
    elif result.error_kind in ("storage", "internal"):
        logger.error("%s", record)
    else:
        logger.warning("%s", record)


def invoke(runtime: TimelineRuntime, tool_name: str, inputs: dict[str, Any]) -> str:
    """
    Run ``tool_name`` with ``inputs`` and return the JSON response string.

    Never raises: the tool layer already maps errors to ToolResults, and
    anything escaping it is reported as an internal failure.
    """
    t_start = time.perf_counter()
    try:
        result = runtime.call(tool_name, **inputs)
    except Exception as exc:
        logger.exception("%s crashed outside the tool layer", tool_name)
        result = ToolResult(
            success=False,
            error=f"Tool execution failed: {exc}",
            error_kind="internal",
        )
    latency_ms = (time.perf_counter() - t_start) * 1000
    _log_call(tool_name, inputs, result, latency_ms)
    return _dump(result)


# ---------------------------------------------------------------------------
# Handler registration: called from server.py with the FastMCP instance
# ---------------------------------------------------------------------------


def register_all(mcp: FastMCP, runtime: TimelineRuntime) -> None:
    """
    Register all tools, resources, and prompts onto the FastMCP instance.

    Args:
        mcp: FastMCP server instance to attach handlers to
        runtime: Shared store + registry used by every handler
    """
    _register_tools(mcp, runtime)
    _register_resources(mcp, runtime)
    _register_prompts(mcp)
    logger.info("All MCP handlers registered (tools + resources + prompts)")


# ---------------------------------------------------------------------------
# TOOLS
# ---------------------------------------------------------------------------


def _register_tools(mcp: FastMCP, runtime: TimelineRuntime) -> None:
    """Register the track and event tools."""

    # ------------------------------------------------------------------
    # Tracks
    # ------------------------------------------------------------------

    @mcp.tool()
    async def add_track(name: str, type: str = "planned", order: int | None = None) -> str:
        """
        Create a new track (a campaign or content series) on the timeline.

        Fails with error kind "duplicate_track" when a track with the same
        name and type exists; the response then carries "existingTrack" so
        you can reuse it.

        Args:
            name: Track name (1-100 characters)
            type: "planned" (default) or "automation"
            order: Position on the timeline; defaults to after the last track

        Returns:
            JSON with id, name, type, order, createdAt
        """
        return invoke(runtime, "add_track", {"name": name, "type": type, "order": order})

    @mcp.tool()
    async def list_tracks(limit: int = 50, offset: int = 0) -> str:
        """
        List planned tracks in timeline order.

        Args:
            limit: Page size (1-100, default 50)
            offset: Number of tracks to skip (default 0)

        Returns:
            JSON with tracks[] and pagination {limit, offset, total}
        """
        return invoke(runtime, "list_tracks", {"limit": limit, "offset": offset})

    @mcp.tool()
    async def remove_track(track_id: str) -> str:
        """
        Remove a track and ALL of its scheduled events.

        Args:
            track_id: UUID of the track

        Returns:
            JSON with message, deletedEvents, trackType
        """
        return invoke(runtime, "remove_track", {"track_id": track_id})

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    @mcp.tool()
    async def add_scheduled_event(
        track_name: str,
        event_name: str,
        prompt: str,
        scheduled_time: str,
        platform: str = "x",
        agent: str | None = None,
        metadata: dict[str, Any] | None = None,
        approval_via: str | None = None,
        mcp_tools: list[str] | None = None,
    ) -> str:
        """
        Schedule a social media post. The track is created if it does not exist.

        Content generation is planned 30 minutes before scheduled_time, and a
        media folder tracks/{track}/{event}-{date} is created in the workspace.

        Args:
            track_name: Track to add the event to (created when missing)
            event_name: Event name (1-200 characters)
            prompt: Content-generation prompt (1-5000 characters)
            scheduled_time: ISO-8601 timestamp in the future, e.g. "2026-11-02T15:00:00Z"
            platform: One of x, linkedin, instagram, threads, bluesky, reddit
            agent: Generation model identifier (optional)
            metadata: Free-form JSON object stored with the event (optional)
            approval_via: Approval channel, default "manual" (optional)
            mcp_tools: Tool servers the generation agent may use (optional)

        Returns:
            JSON with id, trackId, name, scheduledTime, generationTime, mediaPath, platform
        """
        return invoke(
            runtime,
            "add_scheduled_event",
            {
                "track_name": track_name,
                "event_name": event_name,
                "prompt": prompt,
                "scheduled_time": scheduled_time,
                "platform": platform,
                "agent": agent,
                "metadata": metadata,
                "approval_via": approval_via,
                "mcp_tools": mcp_tools,
            },
        )

    @mcp.tool()
    async def list_scheduled_events(
        track_id: str | None = None,
        status: str = "all",
        platform: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> str:
        """
        List scheduled events ordered by scheduled time.

        Args:
            track_id: Only events of this track (optional)
            status: all (default), pending, generated or posted
            platform: Only events for this platform (optional)
            start_date: Inclusive lower bound on scheduled time, ISO-8601 (optional)
            end_date: Inclusive upper bound on scheduled time, ISO-8601 (optional)
            limit: Page size (1-100, default 50)
            offset: Number of matching events to skip (default 0)

        Returns:
            JSON with events[] and pagination {limit, offset, total}
        """
        return invoke(
            runtime,
            "list_scheduled_events",
            {
                "track_id": track_id,
                "status": status,
                "platform": platform,
                "start_date": start_date,
                "end_date": end_date,
                "limit": limit,
                "offset": offset,
            },
        )

    @mcp.tool()
    async def update_scheduled_event(event_id: str, updates: dict[str, Any]) -> str:
        """
        Update a scheduled event.

        Args:
            event_id: UUID of the event
            updates: At least one of name, prompt, scheduled_time, approved, platform.
                A new prompt marks generated content as stale; a new
                scheduled_time must be in the future.

        Returns:
            JSON with id, name, scheduledTime, approved, platform
        """
        return invoke(
            runtime, "update_scheduled_event", {"event_id": event_id, "updates": updates}
        )

    @mcp.tool()
    async def remove_scheduled_event(event_id: str) -> str:
        """
        Remove a scheduled event. Succeeds even if the event no longer exists.

        Args:
            event_id: UUID of the event

        Returns:
            JSON with message and deleted (whether a row was removed)
        """
        return invoke(runtime, "remove_scheduled_event", {"event_id": event_id})


# ---------------------------------------------------------------------------
# RESOURCES
# ---------------------------------------------------------------------------


def _register_resources(mcp: FastMCP, runtime: TimelineRuntime) -> None:
    """
    Register the read-only timeline resources.

    Each resource delegates immediately to resources.py — no logic here.
    """

    @mcp.resource(URI_TRACKS)
    def get_tracks() -> str:
        """
        Read every planned track with its event counts by status.

        Use this to get an overview of the content calendar before adding
        or rescheduling events.
        """
        return read_tracks(runtime)

    @mcp.resource(URI_UPCOMING_EVENTS)
    def get_upcoming_events() -> str:
        """
        Read the next 20 events that are scheduled in the future and not yet posted.
        """
        return read_upcoming_events(runtime)


# ---------------------------------------------------------------------------
# PROMPTS
# ---------------------------------------------------------------------------


def _register_prompts(mcp: FastMCP) -> None:
    """Register timeline prompt templates."""

    @mcp.prompt()
    def plan_content_week(
        theme: str = "product updates",
        platforms: str = "x, linkedin",
        posts_per_day: int = 1,
    ) -> str:
        """
        Generate a plan for scheduling a week of social media posts.

        Args:
            theme: What the week's content is about
            platforms: Comma-separated target platforms
            posts_per_day: Posts to schedule per platform per day

        Returns:
            Prompt that guides the LLM to fill the calendar
        """
        return (
            f"You are a content strategist managing a social media timeline.\n\n"
            f"Context:\n"
            f"  - Theme: {theme}\n"
            f"  - Platforms: {platforms}\n"
            f"  - Posts per platform per day: {posts_per_day}\n\n"
            f"Your task:\n"
            f"1. Read the tracks resource ({URI_TRACKS}) to see the existing "
            f"content series and how many events each one holds.\n"
            f"2. Read the upcoming events resource ({URI_UPCOMING_EVENTS}) so you "
            f"do not double-book a slot.\n"
            f"3. Pick an existing track that fits the theme, or choose a new track "
            f"name (add_scheduled_event creates it).\n"
            f"4. For each of the next 7 days, call add_scheduled_event once per "
            f"platform and post, with a specific prompt and a future ISO-8601 "
            f"scheduled_time. Remember generation starts 30 minutes earlier.\n"
            f"5. Finish with list_scheduled_events filtered to the new track and "
            f"summarize the week as a table of day, time, platform and event name.\n\n"
            f"Vary the angle of each post. Avoid scheduling two posts on the same "
            f"platform within an hour."
        )

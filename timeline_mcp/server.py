"""
Timeline MCP Server — entrypoint.

This is the main entrypoint for the MCP server. It:
    1. Reads configuration from the environment (TimelineConfig.from_env)
    2. Configures logging (stderr only — stdout is reserved for JSON-RPC)
    3. Creates the FastMCP instance and the lazily opened runtime
    4. Registers all handlers (tools, resources, prompts) from handlers.py
    5. Starts the transport (stdio by default, SSE via MCP_TRANSPORT=sse)

Running:
    # Development
    TIMELINE_WORKSPACE=/path/to/workspace python -m timeline_mcp.server

    # Installed console script
    timeline-mcp

MCP host config:
    {
        "mcpServers": {
            "timeline": {
                "command": "/absolute/path/.venv/bin/timeline-mcp",
                "env": {
                    "TIMELINE_WORKSPACE": "/absolute/path/to/workspace",
                    "TIMELINE_STORE": "sqlalchemy"
                }
            }
        }
    }
"""

from __future__ import annotations

import logging

from mcp.server.fastmcp import FastMCP

from timeline_mcp.config import TimelineConfig
from timeline_mcp.handlers import register_all
from timeline_mcp.runtime import TimelineRuntime
from timeline_mcp.transport import configure_logging

# Server identity: used in MCP client UIs as the connector name
_SERVER_NAME = "timeline"
_SERVER_VERSION = "1.0.0"

_INSTRUCTIONS = (
    "Timeline Server — plan social media content on a calendar. "
    "Tracks group related posts (a campaign or series); scheduled events are "
    "individual posts with a prompt, a platform and a scheduled time. "
    "Use add_scheduled_event to schedule posts (the track is created on demand), "
    "list_scheduled_events to review the calendar, and update_scheduled_event to "
    "reschedule or approve. Read timeline://tracks for an overview."
)


def create_server(
    config: TimelineConfig, runtime: TimelineRuntime | None = None
) -> tuple[FastMCP, TimelineRuntime]:
    """
    Build a FastMCP instance wired to a runtime for ``config``.

    Args:
        config: Server configuration
        runtime: Existing runtime to reuse (tests inject one with a frozen clock)

    Returns:
        (mcp, runtime) — the store is not opened until the first call
    """
    runtime = runtime or TimelineRuntime(config)
    mcp = FastMCP(_SERVER_NAME, instructions=_INSTRUCTIONS)
    register_all(mcp, runtime)
    return mcp, runtime


# ---------------------------------------------------------------------------
# Module-level server: configure logging FIRST
# ---------------------------------------------------------------------------

config = TimelineConfig.from_env()
configure_logging(config.log_level_value)
logger = logging.getLogger(__name__)

mcp, runtime = create_server(config)

logger.info(
    "Timeline MCP Server v%s initialized — %d tools registered (workspace=%s, store=%s)",
    _SERVER_VERSION,
    len(mcp._tool_manager._tools),  # type: ignore[attr-defined]
    config.workspace,
    config.store_backend,
)

# ---------------------------------------------------------------------------
# Main entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    """
    Start the MCP server and close the store on exit.

    Transport is determined by MCP_TRANSPORT:
        stdio (default) — local MCP hosts
        sse             — remote hosts over HTTP
    """
    logger.info("Starting Timeline MCP Server (transport=%s)", config.transport)
    try:
        mcp.run(transport=config.transport)
    finally:
        runtime.close()


if __name__ == "__main__":
    main()

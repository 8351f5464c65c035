"""
Timeline MCP — transport configuration and logging setup.

Responsibilities:
    - Configure logging to stderr (NEVER stdout — corrupts stdio transport)
    - Select the transport: stdio (local host app) or SSE (remote host)
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from typing import Literal

TransportMode = Literal["stdio", "sse"]

TRANSPORT_MODES: frozenset[str] = frozenset({"stdio", "sse"})

# ---------------------------------------------------------------------------
# Logging: must go to stderr, NEVER stdout
# ---------------------------------------------------------------------------

# MCP stdio transport uses stdout exclusively for JSON-RPC messages.

_LOG_FORMAT = "%(asctime)s.%(msecs)03d " "[%(name)s] %(levelname)s " "%(message)s"
_LOG_DATE_FORMAT = "%H:%M:%S"

_NOISY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "httpx", "httpcore", "mcp", "uvicorn")


def configure_logging(level: int | str = logging.INFO) -> None:
    """
    Configure root logger to write structured output to stderr.

    Must be called BEFORE the MCP server starts to ensure no
    accidental stdout writes corrupt the stdio transport.

    Args:
        level: Logging level, as an int or a name like "DEBUG" (default: INFO)
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # Silence noisy third-party loggers that write INFO spam
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# Transport selection
# ---------------------------------------------------------------------------


def get_transport_mode(environ: Mapping[str, str] | None = None) -> TransportMode:
    """
    Determine the active transport mode from environment.

    Reads MCP_TRANSPORT:
        "sse"   → HTTP + Server-Sent Events
        default → "stdio"

    Returns:
        "stdio" or "sse"
    """
    env = os.environ if environ is None else environ
    mode = env.get("MCP_TRANSPORT", "stdio").lower().strip()
    if mode not in TRANSPORT_MODES:
        logging.getLogger(__name__).warning(
            "Unknown MCP_TRANSPORT=%r — falling back to stdio", mode
        )
        return "stdio"
    return mode  # type: ignore[return-value]

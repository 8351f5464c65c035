"""
Timeline MCP — resource URIs and the per-call log record.

No I/O here; handlers.py owns the logger.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Resource URIs
# ---------------------------------------------------------------------------

URI_TRACKS = "timeline://tracks"
URI_UPCOMING_EVENTS = "timeline://events/upcoming"

# Upcoming-events resource page size
UPCOMING_EVENTS_LIMIT = 20

# Longest string input copied verbatim into a call log (prompts run to 5000 chars)
MAX_LOGGED_STRING = 80

# ---------------------------------------------------------------------------
# Call log
# ---------------------------------------------------------------------------


def _clip(value: Any) -> Any:
    if isinstance(value, str) and len(value) > MAX_LOGGED_STRING:
        return f"{value[:MAX_LOGGED_STRING]}... ({len(value)} chars)"
    if isinstance(value, dict):
        return {key: _clip(item) for key, item in value.items()}
    return value


@dataclass
class McpCallLog:
    """
    One line of the call log: which timeline tool ran, with what, and how it ended.

    Attributes:
        call_id:     8-char id correlating this line with any exception trace
        tool_name:   Timeline tool that was invoked
        inputs:      Arguments as received, long strings clipped
        outputs:     Ids and counts from the result, never full payloads
        success:     ToolResult.success
        latency_ms:  Time spent in the tool, in milliseconds
        timestamp:   Unix time the record was created
        error:       ToolResult.error on failure
        error_kind:  ToolResult.error_kind on failure
    """

    tool_name: str
    inputs: dict[str, Any]
    outputs: dict[str, Any]
    success: bool
    latency_ms: float
    timestamp: float = field(default_factory=time.time)
    call_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    error: str | None = None
    error_kind: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "call_id": self.call_id,
            "tool_name": self.tool_name,
            "inputs": self.inputs,
            "outputs": self.outputs,
            "success": self.success,
            "error": self.error,
            "error_kind": self.error_kind,
            "latency_ms": round(self.latency_ms, 2),
            "timestamp": self.timestamp,
        }

    def __str__(self) -> str:
        outcome = "OK" if self.success else f"ERR[{self.error_kind or 'internal'}]:{self.error}"
        return f"[{self.call_id}] {self.tool_name} {outcome} {self.latency_ms:.1f}ms"


def make_call_log(
    tool_name: str,
    inputs: dict[str, Any],
    outputs: dict[str, Any],
    latency_ms: float,
    success: bool = True,
    error: str | None = None,
    error_kind: str | None = None,
) -> McpCallLog:
    """
    Build the log record for one tool call.

    ``None`` arguments are dropped and long strings (prompts) are clipped
    so each record stays one readable line.
    """
    return McpCallLog(
        tool_name=tool_name,
        inputs={key: _clip(value) for key, value in inputs.items() if value is not None},
        outputs=outputs,
        success=success,
        error=error,
        error_kind=error_kind,
        latency_ms=latency_ms,
    )

"""core/timeline — content-calendar domain model.

Modules:
    types       Track / ScheduledEvent value objects and enums.
    timing      Timestamp parsing, UTC normalization, generation-time rule.
    naming      Filesystem-safe names and media path derivation.
    params      Pydantic parameter models for every timeline operation.
    errors      Error taxonomy surfaced to the MCP host.

Pure package — no I/O, no env vars, no imports from db/ or tools/.
"""

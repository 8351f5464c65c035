"""
Timeline MCP Server package.

Exposes the content-calendar operations (tracks and scheduled events)
via the Model Context Protocol.

Architecture:
    server.py    — FastMCP instance + startup entrypoint
    handlers.py  — Tool/resource/prompt registration
    resources.py — Read-only resource implementations (always valid JSON)
    runtime.py   — Lazily opened store + tool registry
    config.py    — Environment-driven configuration
    schemas.py   — URI constants and structured call logs
    transport.py — Transport selection (stdio / SSE) + logging setup
"""

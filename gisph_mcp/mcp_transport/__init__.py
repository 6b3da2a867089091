"""MCP transport module - SSE and streamable HTTP adapters."""

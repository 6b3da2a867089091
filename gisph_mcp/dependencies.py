"""Global dependencies for the application."""

from fastapi import Request

from gisph_mcp.mcp_transport.connections import SseConnectionManager
from gisph_mcp.registry.service import ToolRegistry
from gisph_mcp.sessions.store import SessionStore


async def get_tool_registry(request: Request) -> ToolRegistry:
    return request.app.state.tool_registry


async def get_session_store(request: Request) -> SessionStore:
    """Persisted sessions of the streamable HTTP transport."""
    return request.app.state.session_store


async def get_sse_connections(request: Request) -> SseConnectionManager:
    """Live SSE streams keyed by session id."""
    return request.app.state.sse_connections

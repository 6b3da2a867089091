"""Service layer for tool invocation with audit logging."""

import uuid

from gisph_mcp.audit import audit_tool_invocation
from gisph_mcp.mcp_transport.schemas import MCPToolCallResult
from gisph_mcp.registry.service import ToolRegistry
from gisph_mcp.sessions.store import SessionContext

from .schemas import InvokeToolRequest
from .exceptions import (
    ToolError,
    UpstreamError,
    UpstreamProtocolError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)


def generate_request_id() -> str:
    """Generate a unique request ID for tracing."""
    return str(uuid.uuid4())


async def invoke_tool(
    registry: ToolRegistry,
    request: InvokeToolRequest,
    credential: str,
    session: SessionContext | None = None,
) -> MCPToolCallResult:
    """Invoke a tool on behalf of a caller.

    This is the main entry point for tool invocation. It:
    1. Looks up the tool and validates its arguments
    2. Issues the single upstream call with the caller's credential
    3. Logs the invocation for audit

    Args:
        registry: Tool registry to dispatch through.
        request: Tool invocation request.
        credential: Caller's API key.
        session: Session the invocation belongs to, for audit context.

    Returns:
        Tool result with the pretty-printed upstream payload.

    Raises:
        UnknownToolError: If the tool is not in the registry.
        InvalidArgumentsError: If the arguments fail validation.
        UpstreamError: If upstream answers with a non-2xx status.
        UpstreamUnavailableError: If upstream cannot be reached.
        UpstreamProtocolError: If upstream returns a non-JSON 2xx body.
    """
    request_id = request.request_id or generate_request_id()

    async with audit_tool_invocation(
        request_id=request_id,
        tool_name=request.tool_name,
        session_id=session.session_id if session else None,
        transport=session.transport if session else None,
    ) as audit_ctx:
        try:
            return await registry.dispatch(request.tool_name, request.arguments, credential)
        except UpstreamTimeoutError:
            audit_ctx.mark_timeout()
            raise
        except (UpstreamError, UpstreamUnavailableError, UpstreamProtocolError) as e:
            audit_ctx.mark_upstream_error(e.code)
            raise
        except ToolError as e:
            audit_ctx.mark_error(e.code)
            raise

"""Business logic for MCP protocol handlers shared by both transports."""

from typing import Any

import structlog
from pydantic import ValidationError

from gisph_mcp.config import get_settings
from gisph_mcp.gateway.exceptions import ToolError, UpstreamProtocolError
from gisph_mcp.gateway.schemas import InvokeToolRequest
from gisph_mcp.gateway.service import invoke_tool
from gisph_mcp.registry.service import ToolRegistry, text_result
from gisph_mcp.sessions.store import SessionContext

from .schemas import (
    MCPErrorCodes,
    MCPInitializeParams,
    MCPJSONRPCRequest,
    MCPJSONRPCResponse,
    MCPToolCallParams,
    MCPToolCallResult,
    MCPToolListResult,
)


logger = structlog.get_logger("mcp")

SERVER_NAME = "gis-ph"
SUPPORTED_PROTOCOL_VERSIONS = ("2025-06-18", "2025-03-26", "2024-11-05")
LATEST_PROTOCOL_VERSION = SUPPORTED_PROTOCOL_VERSIONS[0]


def negotiate_protocol_version(requested: str | None) -> str:
    """Echo the client's version when supported, else offer the latest."""
    if requested in SUPPORTED_PROTOCOL_VERSIONS:
        return requested
    return LATEST_PROTOCOL_VERSION


async def handle_initialize(params: MCPInitializeParams) -> dict[str, Any]:
    """Handle initialize request.

    Args:
        params: Initialize parameters from client.

    Returns:
        Server initialization response.
    """
    settings = get_settings()
    logger.info(
        "mcp_initialize",
        client=params.clientInfo.get("name", "unknown"),
        protocol_version=params.protocolVersion,
    )
    return {
        "protocolVersion": negotiate_protocol_version(params.protocolVersion),
        "capabilities": {
            "tools": {
                "listChanged": False  # Static tool list
            }
        },
        "serverInfo": {
            "name": SERVER_NAME,
            "version": settings.APP_VERSION,
        },
    }


async def handle_tools_list(registry: ToolRegistry) -> MCPToolListResult:
    """Handle tools/list request.

    Args:
        registry: Tool registry.

    Returns:
        Every registered tool in registration order.
    """
    return MCPToolListResult(tools=registry.list_tools())


async def handle_tools_call(
    registry: ToolRegistry,
    credential: str,
    name: str,
    arguments: Any,
    session: SessionContext | None = None,
    request_id: str | None = None,
) -> MCPToolCallResult:
    """Handle tools/call request.

    Caller-side and upstream failures become error results so the
    connection stays usable.

    Args:
        registry: Tool registry.
        credential: Caller's API key.
        name: Tool name to invoke.
        arguments: Tool arguments, passed through unvalidated.
        session: Session the call belongs to.
        request_id: JSON-RPC id used as the trace id.

    Returns:
        Tool execution result.

    Raises:
        UpstreamProtocolError: If upstream returns a non-JSON 2xx body.
    """
    request = InvokeToolRequest(
        tool_name=name,
        arguments=arguments,
        request_id=request_id,
    )
    try:
        return await invoke_tool(
            registry=registry,
            request=request,
            credential=credential,
            session=session,
        )
    except ToolError as e:
        return text_result(e.to_payload(), is_error=True)


async def process_message(
    message: Any,
    registry: ToolRegistry,
    credential: str,
    session: SessionContext | None = None,
) -> MCPJSONRPCResponse | None:
    """Process one JSON-RPC message.

    Args:
        message: Decoded JSON message.
        registry: Tool registry.
        credential: Credential every tool call in this message runs with.
        session: Session the message arrived on.

    Returns:
        The response, or None for notifications and client responses.
    """
    if not isinstance(message, dict):
        return MCPJSONRPCResponse.error_response(
            id=None,
            code=MCPErrorCodes.INVALID_REQUEST,
            message="Invalid Request: expected a JSON-RPC object",
        )

    if "method" not in message and ("result" in message or "error" in message):
        # Response to a server-initiated request; nothing to answer.
        return None

    try:
        jsonrpc_request = MCPJSONRPCRequest(**message)
    except ValidationError:
        request_id = message.get("id")
        return MCPJSONRPCResponse.error_response(
            id=request_id if isinstance(request_id, (str, int)) else None,
            code=MCPErrorCodes.INVALID_REQUEST,
            message="Invalid Request",
        )

    method = jsonrpc_request.method
    params = jsonrpc_request.params or {}

    if jsonrpc_request.is_notification:
        logger.debug("mcp_notification", method=method)
        return None

    try:
        if method == "initialize":
            init_params = MCPInitializeParams(**params)
            result = await handle_initialize(init_params)
            return MCPJSONRPCResponse.success(jsonrpc_request.id, result)

        elif method == "ping":
            return MCPJSONRPCResponse.success(jsonrpc_request.id, {})

        elif method == "tools/list":
            result = await handle_tools_list(registry)
            return MCPJSONRPCResponse.success(jsonrpc_request.id, result.model_dump())

        elif method == "tools/call":
            try:
                call_params = MCPToolCallParams(**params)
            except ValidationError:
                return MCPJSONRPCResponse.error_response(
                    id=jsonrpc_request.id,
                    code=MCPErrorCodes.INVALID_PARAMS,
                    message="Invalid params: tools/call requires a tool 'name'",
                )
            result = await handle_tools_call(
                registry=registry,
                credential=credential,
                name=call_params.name,
                arguments=call_params.arguments,
                session=session,
                request_id=str(jsonrpc_request.id),
            )
            return MCPJSONRPCResponse.success(jsonrpc_request.id, result.model_dump())

        else:
            return MCPJSONRPCResponse.error_response(
                id=jsonrpc_request.id,
                code=MCPErrorCodes.METHOD_NOT_FOUND,
                message=f"Method not found: {method}",
            )

    except UpstreamProtocolError as e:
        return MCPJSONRPCResponse.error_response(
            id=jsonrpc_request.id,
            code=MCPErrorCodes.INTERNAL_ERROR,
            message=e.message,
            data={"error": e.code},
        )
    except ValidationError:
        return MCPJSONRPCResponse.error_response(
            id=jsonrpc_request.id,
            code=MCPErrorCodes.INVALID_PARAMS,
            message=f"Invalid params for {method}",
        )
    except Exception as e:
        logger.error("mcp_internal_error", method=method, error=str(e), exc_info=True)
        return MCPJSONRPCResponse.error_response(
            id=jsonrpc_request.id,
            code=MCPErrorCodes.INTERNAL_ERROR,
            message=f"Internal error: {str(e)}",
        )


async def process_payload(
    payload: Any,
    registry: ToolRegistry,
    credential: str,
    session: SessionContext | None = None,
) -> list[MCPJSONRPCResponse]:
    """Process a single message or a batch, one message at a time in order.

    Returns:
        Responses in message order; empty when only notifications arrived.
    """
    messages = payload if isinstance(payload, list) else [payload]
    if isinstance(payload, list) and not payload:
        return [
            MCPJSONRPCResponse.error_response(
                id=None,
                code=MCPErrorCodes.INVALID_REQUEST,
                message="Invalid Request: empty batch",
            )
        ]

    responses: list[MCPJSONRPCResponse] = []
    for message in messages:
        response = await process_message(message, registry, credential, session=session)
        if response is not None:
            responses.append(response)
    return responses


def is_initialize(payload: Any) -> bool:
    """Whether the payload carries an initialize request."""
    messages = payload if isinstance(payload, list) else [payload]
    return any(isinstance(m, dict) and m.get("method") == "initialize" for m in messages)

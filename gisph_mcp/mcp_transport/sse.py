"""SSE transport implementation for MCP protocol."""

import asyncio
import json
from typing import Annotated, Any, AsyncIterator

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, StreamingResponse

from gisph_mcp.auth.dependencies import get_request_credential
from gisph_mcp.auth.exceptions import SessionNotFoundError
from gisph_mcp.config import get_settings
from gisph_mcp.dependencies import get_sse_connections, get_tool_registry
from gisph_mcp.registry.service import ToolRegistry
from gisph_mcp.sessions.store import SSE_SESSION_QUERY_PARAM

from .connections import SseConnectionManager
from .schemas import MCPErrorCodes, MCPJSONRPCResponse
from .service import process_payload


router = APIRouter(prefix="", tags=["mcp-sse"])

SSE_PATH = "/sse"
MESSAGE_PATH = "/sse/message"


class InvalidPayload(Exception):
    """Raised when a request body is not JSON."""


def _jsonrpc_error_response(
    request_id: str | int | None,
    code: int,
    message: str,
    status_code: int = 200,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=MCPJSONRPCResponse.error_response(
            id=request_id,
            code=code,
            message=message,
        ).to_wire(),
    )


async def read_jsonrpc_payload(request: Request) -> Any:
    """Decode the JSON body of a transport request.

    Raises:
        InvalidPayload: If the body is not valid JSON.
    """
    try:
        return await request.json()
    except ValueError as e:
        raise InvalidPayload(str(e))


def render_responses(
    payload: Any,
    responses: list[MCPJSONRPCResponse],
    headers: dict[str, str] | None = None,
) -> Response:
    """Answer in the shape the client sent: a batch for a batch, else one object."""
    if not responses:
        return Response(status_code=202, headers=headers)
    if isinstance(payload, list):
        content: Any = [response.to_wire() for response in responses]
    else:
        content = responses[0].to_wire()
    return JSONResponse(content=content, headers=headers)


def format_sse_event(data: str, event: str | None = None) -> str:
    lines = [f"event: {event}"] if event else []
    lines.extend(f"data: {line}" for line in data.splitlines() or [""])
    return "\n".join(lines) + "\n\n"


def message_endpoint(session_id: str) -> str:
    return f"{MESSAGE_PATH}?{SSE_SESSION_QUERY_PARAM}={session_id}"


async def event_stream(
    connections: SseConnectionManager,
    credential: str,
    ping_interval: float,
) -> AsyncIterator[str]:
    """Open a stream session, then yield its endpoint event, queued responses
    and keep-alive pings.

    The session only exists while the generator runs and is discarded when
    the client disconnects.
    """
    connection = connections.open(credential)
    try:
        endpoint = message_endpoint(connection.session_id)
        yield format_sse_event(endpoint, event="endpoint")
        while True:
            try:
                message = await asyncio.wait_for(connection.queue.get(), timeout=ping_interval)
            except asyncio.TimeoutError:
                yield ": ping\n\n"
                continue
            yield format_sse_event(json.dumps(message, ensure_ascii=False), event="message")
    finally:
        connections.close(connection.session_id)


@router.get(SSE_PATH, operation_id="sse_endpoint_get")
async def sse_get_endpoint(
    credential: Annotated[str, Depends(get_request_credential)],
    connections: Annotated[SseConnectionManager, Depends(get_sse_connections)],
):
    """Establish SSE stream and send endpoint info."""
    settings = get_settings()

    return StreamingResponse(
        event_stream(connections, credential, settings.SSE_PING_INTERVAL_SECONDS),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post(MESSAGE_PATH, operation_id="sse_message_post")
@router.post(SSE_PATH, operation_id="sse_endpoint_post")
async def sse_post_endpoint(
    request: Request,
    credential: Annotated[str, Depends(get_request_credential)],
    connections: Annotated[SseConnectionManager, Depends(get_sse_connections)],
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
) -> Response:
    """Handle JSON-RPC 2.0 messages.

    With a ``sessionId`` the responses are pushed onto that stream and the
    POST is acknowledged with 202. Without one they are returned inline.
    """
    try:
        payload = await read_jsonrpc_payload(request)
    except InvalidPayload:
        return _jsonrpc_error_response(
            request_id=None,
            code=MCPErrorCodes.PARSE_ERROR,
            message="Parse error",
            status_code=400,
        )

    session_id = request.query_params.get(SSE_SESSION_QUERY_PARAM)
    if session_id is None:
        responses = await process_payload(payload, registry, credential)
        return render_responses(payload, responses)

    connection = connections.get(session_id)
    if connection is None:
        raise SessionNotFoundError(session_id)

    # The credential bound at stream establishment serves every message.
    responses = await process_payload(
        payload,
        registry,
        connection.context.credential or credential,
        session=connection.context,
    )
    for response in responses:
        await connection.send(response.to_wire())
    return Response(status_code=202, content="Accepted", media_type="text/plain")

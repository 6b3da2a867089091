"""Streamable HTTP transport for MCP protocol with persisted sessions."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from gisph_mcp.auth.dependencies import get_streamable_credential
from gisph_mcp.auth.exceptions import SessionNotFoundError
from gisph_mcp.dependencies import get_session_store, get_tool_registry
from gisph_mcp.registry.service import ToolRegistry
from gisph_mcp.sessions.store import SESSION_ID_HEADER, SessionContext, SessionStore, new_session_id

from .schemas import MCPErrorCodes
from .service import is_initialize, process_payload
from .sse import InvalidPayload, _jsonrpc_error_response, read_jsonrpc_payload, render_responses


router = APIRouter(prefix="", tags=["mcp-streamable"])

MCP_PATH = "/mcp"


@router.post(MCP_PATH, operation_id="mcp_endpoint_post")
async def mcp_post_endpoint(
    request: Request,
    credential: Annotated[str, Depends(get_streamable_credential)],
    store: Annotated[SessionStore, Depends(get_session_store)],
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
) -> Response:
    """Handle one JSON-RPC message or a batch within a single exchange.

    A successful initialize opens a session whose id is returned in the
    ``Mcp-Session-Id`` header. Later requests naming that session may omit
    the credential; the one bound first keeps serving every call.
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

    session: SessionContext | None = None
    session_id = request.headers.get(SESSION_ID_HEADER)
    if session_id:
        if store.get(session_id) is None:
            raise SessionNotFoundError(session_id)
        session = store.bind(session_id, credential)

    effective_credential = session.credential if session and session.credential else credential
    responses = await process_payload(payload, registry, effective_credential, session=session)

    if session is None and is_initialize(payload):
        initialized = any(response.result is not None for response in responses)
        if initialized:
            session = store.bind(new_session_id(), credential)

    headers = {SESSION_ID_HEADER: session.session_id} if session else None
    return render_responses(payload, responses, headers=headers)


@router.get(MCP_PATH, operation_id="mcp_endpoint_get")
@router.api_route(MCP_PATH, methods=["PUT", "PATCH"], include_in_schema=False)
async def mcp_get_endpoint(
    credential: Annotated[str, Depends(get_streamable_credential)],
) -> Response:
    """Refuse methods other than POST and DELETE once the caller is authenticated.

    No server-initiated stream is offered on this endpoint.
    """
    response = _jsonrpc_error_response(
        request_id=None,
        code=MCPErrorCodes.METHOD_NOT_ALLOWED,
        message="Method not allowed: use POST to send messages",
        status_code=405,
    )
    response.headers["Allow"] = "POST, DELETE"
    return response


@router.delete(MCP_PATH, operation_id="mcp_endpoint_delete")
async def mcp_delete_endpoint(
    request: Request,
    credential: Annotated[str, Depends(get_streamable_credential)],
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> Response:
    """Terminate a session."""
    session_id = request.headers.get(SESSION_ID_HEADER)
    if not session_id:
        return _jsonrpc_error_response(
            request_id=None,
            code=MCPErrorCodes.INVALID_REQUEST,
            message=f"Missing {SESSION_ID_HEADER} header",
            status_code=400,
        )
    if not store.discard(session_id):
        raise SessionNotFoundError(session_id)
    return Response(status_code=200)

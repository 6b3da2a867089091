import logging
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth.exceptions import (
    AuthenticationError,
    GisGatewayError,
    SessionNotFoundError,
)
from .config import get_settings
from .gateway.proxy import UpstreamClient
from .mcp_transport.connections import SseConnectionManager
from .mcp_transport.schemas import MCPErrorCodes, MCPJSONRPCResponse
from .mcp_transport.sse import router as mcp_sse_router
from .mcp_transport.streamable import router as mcp_streamable_router
from .registry.service import build_tool_registry
from .sessions.store import SESSION_ID_HEADER, SessionStore

settings = get_settings()

CORS_ALLOW_METHODS = ["GET", "POST", "DELETE", "OPTIONS"]
CORS_ALLOW_HEADERS = ["Content-Type", "Authorization", settings.API_KEY_HEADER, SESSION_ID_HEADER]


def configure_logging(level: str) -> None:
    """Route structlog output as JSON lines filtered at the given level."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.MCP_LOG_LEVEL)

    # timeout=None removes the client default; the upstream client sets its own
    app.state.http_client = httpx.AsyncClient(timeout=None)
    app.state.upstream_client = UpstreamClient(
        app.state.http_client,
        base_url=settings.UPSTREAM_BASE_URL,
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
    )
    app.state.tool_registry = build_tool_registry(
        app.state.upstream_client,
        config_path=settings.TOOLS_CONFIG_PATH,
    )
    app.state.session_store = SessionStore(
        ttl_seconds=settings.SESSION_TTL_SECONDS,
        maxsize=settings.SESSION_MAX_ENTRIES,
    )
    app.state.sse_connections = SseConnectionManager()

    structlog.get_logger("app").info(
        "app_started",
        tools=len(app.state.tool_registry),
        upstream=settings.UPSTREAM_BASE_URL,
    )

    yield

    app.state.session_store.clear()
    await app.state.http_client.aclose()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    debug=settings.DEBUG
)


@app.middleware("http")
async def answer_options(request: Request, call_next):
    """Answer bare OPTIONS requests on any path; CORS preflights never reach here."""
    if request.method != "OPTIONS":
        return await call_next(request)
    return Response(
        status_code=204,
        headers={
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": ", ".join(CORS_ALLOW_METHODS),
            "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
            "Access-Control-Expose-Headers": SESSION_ID_HEADER,
        },
    )


# Registered last so it wraps the OPTIONS handler above
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=CORS_ALLOW_METHODS,
    allow_headers=CORS_ALLOW_HEADERS,
    expose_headers=[SESSION_ID_HEADER],
)

# Global exception handlers
@app.exception_handler(AuthenticationError)
async def authentication_exception_handler(request: Request, exc: AuthenticationError):
    return JSONResponse(
        status_code=401,
        content={"error": exc.code, "message": exc.message}
    )

@app.exception_handler(SessionNotFoundError)
async def session_not_found_handler(request: Request, exc: SessionNotFoundError):
    return JSONResponse(
        status_code=404,
        content=MCPJSONRPCResponse.error_response(
            id=None,
            code=MCPErrorCodes.SESSION_NOT_FOUND,
            message=exc.message,
        ).to_wire(),
    )

@app.exception_handler(GisGatewayError)
async def gateway_exception_handler(request: Request, exc: GisGatewayError):
    return JSONResponse(
        status_code=500,
        content={"error": exc.code, "message": exc.message}
    )

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        content = {"error": "NOT_FOUND", "message": "Not found"}
    else:
        content = {"error": "HTTP_ERROR", "message": str(exc.detail)}
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


@app.get("/")
async def server_info():
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "auth": (
            f"Pass your gis.ph API key via the '{settings.API_KEY_HEADER}' header "
            f"or the ?{settings.API_KEY_QUERY_PARAM}= query parameter."
        ),
        "endpoints": {
            "sse": f"{settings.PUBLIC_BASE_URL}/sse",
            "mcp": f"{settings.PUBLIC_BASE_URL}/mcp",
        },
    }


@app.get("/health")
async def health_check():
    return {"status": "ok", "app": settings.APP_NAME}


# Include routers
app.include_router(mcp_sse_router)
app.include_router(mcp_streamable_router)

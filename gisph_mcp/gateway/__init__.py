"""Gateway module - Tool invocation and upstream proxying."""

from .schemas import (
    HttpMethod,
    UpstreamRequest,
    InvokeToolRequest,
)
from .exceptions import (
    GatewayError,
    ToolError,
    UnknownToolError,
    InvalidArgumentsError,
    UpstreamError,
    UpstreamUnavailableError,
    UpstreamTimeoutError,
    UpstreamProtocolError,
)
from .proxy import UpstreamClient


__all__ = [
    # Schemas
    "HttpMethod",
    "UpstreamRequest",
    "InvokeToolRequest",
    # Exceptions
    "GatewayError",
    "ToolError",
    "UnknownToolError",
    "InvalidArgumentsError",
    "UpstreamError",
    "UpstreamUnavailableError",
    "UpstreamTimeoutError",
    "UpstreamProtocolError",
    # Client
    "UpstreamClient",
]

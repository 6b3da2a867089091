"""Custom exceptions for tool dispatch and upstream calls."""

from typing import Any

from gisph_mcp.auth.exceptions import GisGatewayError


class GatewayError(GisGatewayError):
    """Base exception for gateway-specific errors."""
    pass


class ToolError(GatewayError):
    """Caller-side errors reported as tool results."""

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message}


class UnknownToolError(ToolError):
    """Raised when the requested tool is not in the registry.

    Attributes:
        tool_name: Name of the tool that was not found.
    """

    def __init__(self, tool_name: str):
        super().__init__(
            message=f"Tool '{tool_name}' not found",
            code="UNKNOWN_TOOL"
        )
        self.tool_name = tool_name


class InvalidArgumentsError(ToolError):
    """Raised when tool arguments do not match the declared input schema.

    Attributes:
        tool_name: Tool whose schema was violated.
        details: One entry per violation, each with ``field`` and ``message``.
    """

    def __init__(self, tool_name: str, details: list[dict[str, str]]):
        summary = "; ".join(f"{d['field']}: {d['message']}" for d in details) or "invalid arguments"
        super().__init__(
            message=f"Invalid arguments for tool '{tool_name}': {summary}",
            code="INVALID_ARGUMENTS"
        )
        self.tool_name = tool_name
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        return {**super().to_payload(), "details": self.details}


class UpstreamError(ToolError):
    """Raised when the upstream API answers with a non-2xx status.

    Attributes:
        status_code: HTTP status code from upstream.
        body_text: Raw response body, not parsed.
    """

    def __init__(self, status_code: int, body_text: str = ""):
        super().__init__(
            message=f"gis.ph API error {status_code}: {body_text}",
            code="UPSTREAM_ERROR"
        )
        self.status_code = status_code
        self.body_text = body_text

    def to_payload(self) -> dict[str, Any]:
        return {**super().to_payload(), "status": self.status_code, "body": self.body_text}


class UpstreamUnavailableError(ToolError):
    """Raised when the upstream API cannot be reached.

    Attributes:
        url: URL that was requested.
        reason: Description of the connection failure.
    """

    def __init__(self, url: str, reason: str = "Connection failed"):
        super().__init__(
            message=f"gis.ph API at '{url}' is unavailable: {reason}",
            code="UPSTREAM_UNAVAILABLE"
        )
        self.url = url
        self.reason = reason


class UpstreamTimeoutError(UpstreamUnavailableError):
    """Raised when a configured upstream timeout is exceeded."""

    def __init__(self, url: str, timeout_seconds: float):
        super().__init__(url=url, reason=f"timed out after {timeout_seconds}s")
        self.code = "UPSTREAM_TIMEOUT"
        self.timeout_seconds = timeout_seconds


class UpstreamProtocolError(GatewayError):
    """Raised when a 2xx upstream response does not carry valid JSON.

    Fatal for the invocation that triggered it; not reported as a tool result.
    """

    def __init__(self, url: str, status_code: int, reason: str):
        super().__init__(
            message=f"gis.ph API at '{url}' returned {status_code} with a non-JSON body: {reason}",
            code="UPSTREAM_PROTOCOL_ERROR"
        )
        self.url = url
        self.status_code = status_code

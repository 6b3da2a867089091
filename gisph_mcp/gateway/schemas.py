"""Pydantic schemas for tool invocation and upstream requests."""

from typing import Any, Literal
from pydantic import BaseModel, Field


HttpMethod = Literal["GET", "POST", "PATCH"]


class UpstreamRequest(BaseModel):
    """One HTTP call against the gis.ph API.

    Attributes:
        method: HTTP method.
        path: Path relative to the upstream base URL, already substituted.
        query: Query parameters; never contains empty values.
        body: JSON body for POST/PATCH calls.
    """

    method: HttpMethod = Field(default="GET", description="HTTP method")
    path: str = Field(..., description="Substituted path, e.g. /provinces/0128")
    query: dict[str, str] = Field(default_factory=dict, description="Query parameters")
    body: dict[str, Any] | None = Field(default=None, description="JSON body")


class InvokeToolRequest(BaseModel):
    """A single tool invocation received from a transport.

    Attributes:
        tool_name: Name of the tool to invoke.
        arguments: Raw, unvalidated arguments.
        request_id: Optional request ID for tracing.
    """

    tool_name: str = Field(..., description="Tool to invoke")
    arguments: Any = Field(default=None, description="Tool arguments")
    request_id: str | None = Field(default=None, description="Optional request ID")

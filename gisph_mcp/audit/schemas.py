"""Schemas for tool invocation audit events."""

from enum import Enum

from pydantic import BaseModel, Field


class AuditStatus(str, Enum):
    """Status of a tool invocation."""

    success = "success"
    error = "error"
    upstream_error = "upstream_error"
    timeout = "timeout"


class AuditEvent(BaseModel):
    """One tool invocation as written to the log.

    Carries no credential material.

    Attributes:
        request_id: Correlation ID for tracing.
        session_id: Session the invocation ran in, if any.
        transport: Transport that carried the invocation.
        tool_name: Which tool was invoked.
        status: Outcome of the invocation.
        duration_ms: Call duration in milliseconds.
        error_code: Error code if failed.
    """

    request_id: str
    session_id: str | None = None
    transport: str | None = None
    tool_name: str
    status: AuditStatus
    duration_ms: int = Field(ge=0)
    error_code: str | None = None

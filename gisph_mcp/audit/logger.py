"""High-level async audit logger for tool invocations."""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog

from .schemas import AuditEvent, AuditStatus

logger = structlog.get_logger("audit")


class AuditContext:
    """Timing and outcome of one tool invocation.

    Starts as a success; handlers downgrade it with the ``mark_*`` methods
    before the event is written.

    Attributes:
        request_id: JSON-RPC id or generated trace id.
        tool_name: Tool being invoked.
        session_id: Session the invocation runs in.
        transport: ``sse`` or ``streamable``.
        start_time: ``perf_counter`` reading at creation.
        status: Outcome so far.
        error_code: Code of the failure, if any.
    """

    def __init__(
        self,
        request_id: str,
        tool_name: str,
        session_id: str | None = None,
        transport: str | None = None,
    ) -> None:
        self.request_id = request_id
        self.tool_name = tool_name
        self.session_id = session_id
        self.transport = transport
        self.start_time = time.perf_counter()
        self.status = AuditStatus.success
        self.error_code: str | None = None

    def mark_error(self, error_code: str) -> None:
        """Mark the invocation as failed with an error code.

        Args:
            error_code: The error code to record.
        """
        self.status = AuditStatus.error
        self.error_code = error_code

    def mark_upstream_error(self, error_code: str) -> None:
        """Mark the invocation as failed on the upstream side."""
        self.status = AuditStatus.upstream_error
        self.error_code = error_code

    def mark_timeout(self) -> None:
        """Mark the invocation as timed out."""
        self.status = AuditStatus.timeout
        self.error_code = "UPSTREAM_TIMEOUT"

    @property
    def duration_ms(self) -> int:
        """Calculate duration in milliseconds."""
        elapsed = time.perf_counter() - self.start_time
        return int(elapsed * 1000)


def log_tool_invocation(context: AuditContext) -> AuditEvent:
    """Write a tool invocation to the structured log.

    Args:
        context: Audit context with invocation details.

    Returns:
        The event that was logged.
    """
    event = AuditEvent(
        request_id=context.request_id,
        session_id=context.session_id,
        transport=context.transport,
        tool_name=context.tool_name,
        status=context.status,
        duration_ms=context.duration_ms,
        error_code=context.error_code,
    )

    log = logger.info if event.status == AuditStatus.success else logger.warning
    log("tool_invocation", **event.model_dump(mode="json"))
    return event


@asynccontextmanager
async def audit_tool_invocation(
    request_id: str,
    tool_name: str,
    session_id: str | None = None,
    transport: str | None = None,
) -> AsyncGenerator[AuditContext, None]:
    """Time a tool invocation and write its audit event on exit.

    The event is written whether the body returns or raises.

    Yields:
        AuditContext the caller marks on failure, e.g.::

            async with audit_tool_invocation(request_id, "get_city") as ctx:
                try:
                    return await registry.dispatch(...)
                except UpstreamError as e:
                    ctx.mark_upstream_error(e.code)
                    raise
    """
    context = AuditContext(request_id, tool_name, session_id=session_id, transport=transport)
    try:
        yield context
    finally:
        log_tool_invocation(context)

"""Audit module - Structured logging of tool invocations."""

from .logger import audit_tool_invocation, log_tool_invocation, AuditContext
from .schemas import AuditStatus, AuditEvent

__all__ = [
    "audit_tool_invocation",
    "log_tool_invocation",
    "AuditContext",
    "AuditStatus",
    "AuditEvent",
]

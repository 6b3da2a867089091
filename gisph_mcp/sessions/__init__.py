"""Sessions module - Per-connection credential binding."""

from .store import (
    SESSION_ID_HEADER,
    SSE_SESSION_QUERY_PARAM,
    SessionContext,
    SessionStore,
    new_session_id,
)

__all__ = [
    "SESSION_ID_HEADER",
    "SSE_SESSION_QUERY_PARAM",
    "SessionContext",
    "SessionStore",
    "new_session_id",
]

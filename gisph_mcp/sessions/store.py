"""Keyed session store binding connection identities to caller credentials."""

import time
import uuid
from typing import Literal

import structlog
from cachetools import TTLCache


logger = structlog.get_logger("sessions")

TransportName = Literal["sse", "streamable"]

SESSION_ID_HEADER = "Mcp-Session-Id"
SSE_SESSION_QUERY_PARAM = "sessionId"


def new_session_id() -> str:
    """Generate an opaque session identifier."""
    return uuid.uuid4().hex


class SessionContext:
    """Execution context shared by every invocation on one connection.

    The credential may be set once. Later attempts to bind a different
    value are ignored so the effective credential never changes within
    the session's lifetime.

    Attributes:
        session_id: Connection identity assigned when the session opened.
        transport: Transport that owns the session.
        created_at: Unix timestamp of creation.
    """

    def __init__(
        self,
        session_id: str,
        transport: TransportName,
        credential: str | None = None,
    ) -> None:
        self.session_id = session_id
        self.transport = transport
        self.created_at = time.time()
        self._credential: str | None = credential or None

    @property
    def credential(self) -> str | None:
        return self._credential

    def bind_credential(self, credential: str | None) -> bool:
        """Store the credential if none is bound yet.

        Args:
            credential: Candidate credential.

        Returns:
            True if the credential was stored by this call.
        """
        if self._credential or not credential:
            return False
        self._credential = credential
        return True

    def __repr__(self) -> str:
        bound = "bound" if self._credential else "unbound"
        return f"<SessionContext {self.session_id} transport={self.transport} {bound}>"


class SessionStore:
    """Bounded in-memory store of persisted sessions.

    Entries expire after ``ttl_seconds`` of inactivity; every successful
    lookup renews the entry.
    """

    def __init__(
        self,
        ttl_seconds: int = 86400,
        maxsize: int = 10000,
        transport: TransportName = "streamable",
    ) -> None:
        self.transport = transport
        self._sessions: TTLCache[str, SessionContext] = TTLCache(maxsize=maxsize, ttl=ttl_seconds)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def bind(self, session_id: str, credential: str | None) -> SessionContext:
        """Bind a credential to a session, creating the session if needed.

        Idempotent once a credential is present: the stored credential is
        kept and the candidate is discarded.

        Args:
            session_id: Connection identity.
            credential: Credential resolved for the current request.

        Returns:
            The session context for ``session_id``.
        """
        context = self._sessions.get(session_id)
        if context is None:
            context = SessionContext(session_id, self.transport)
            logger.info("session_created", session_id=session_id, transport=self.transport)

        if context.bind_credential(credential):
            logger.info("session_credential_bound", session_id=session_id)
        elif credential and context.credential != credential:
            logger.warning("session_credential_ignored", session_id=session_id)

        self._sessions[session_id] = context
        return context

    def get(self, session_id: str | None) -> SessionContext | None:
        """Look up a session and renew its expiry."""
        if not session_id:
            return None
        context = self._sessions.get(session_id)
        if context is not None:
            self._sessions[session_id] = context
        return context

    def discard(self, session_id: str) -> bool:
        """Remove a session.

        Returns:
            True if the session existed.
        """
        removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info("session_discarded", session_id=session_id, transport=self.transport)
        return removed

    def clear(self) -> None:
        self._sessions.clear()

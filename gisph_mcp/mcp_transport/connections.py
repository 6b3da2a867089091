"""Live SSE streams and the session bound to each of them."""

import asyncio
from typing import Any

import structlog

from gisph_mcp.sessions.store import SessionContext, new_session_id


logger = structlog.get_logger("sse")


class SseConnection:
    """One open event stream.

    Messages put on ``queue`` are written to the stream in order.
    """

    def __init__(self, context: SessionContext):
        self.context = context
        self.queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    @property
    def session_id(self) -> str:
        return self.context.session_id

    async def send(self, message: dict[str, Any]) -> None:
        await self.queue.put(message)


class SseConnectionManager:
    """Registry of open SSE streams keyed by session id."""

    def __init__(self) -> None:
        self._connections: dict[str, SseConnection] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def open(self, credential: str) -> SseConnection:
        """Create a stream session bound to the credential resolved at establishment."""
        context = SessionContext(new_session_id(), "sse", credential=credential)
        connection = SseConnection(context)
        self._connections[connection.session_id] = connection
        logger.info("sse_stream_opened", session_id=connection.session_id)
        return connection

    def get(self, session_id: str | None) -> SseConnection | None:
        if not session_id:
            return None
        return self._connections.get(session_id)

    def close(self, session_id: str) -> None:
        if self._connections.pop(session_id, None) is not None:
            logger.info("sse_stream_closed", session_id=session_id)

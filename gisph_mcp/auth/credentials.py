"""Prioritized extraction of the caller's gis.ph API key from a request."""

from typing import Callable, Iterable, Protocol

import structlog
from starlette.requests import HTTPConnection

from gisph_mcp.sessions.store import SessionContext


logger = structlog.get_logger("auth")


class CredentialSource(Protocol):
    """A single place a credential may be carried on an incoming request."""

    name: str

    def extract(self, request: HTTPConnection) -> str | None:
        ...


class HeaderCredentialSource:
    """Reads the credential from a dedicated request header."""

    def __init__(self, header_name: str = "x-api-key"):
        self.header_name = header_name
        self.name = f"header:{header_name}"

    def extract(self, request: HTTPConnection) -> str | None:
        return request.headers.get(self.header_name)


class QueryParamCredentialSource:
    """Reads the credential from a URL query parameter."""

    def __init__(self, param: str = "key"):
        self.param = param
        self.name = f"query:{param}"

    def extract(self, request: HTTPConnection) -> str | None:
        return request.query_params.get(self.param)


class SessionCredentialSource:
    """Reuses the credential already bound to the request's session.

    Args:
        lookup: Returns the session named by the request, if any.
    """

    def __init__(self, lookup: Callable[[HTTPConnection], SessionContext | None], name: str = "session"):
        self.lookup = lookup
        self.name = name

    def extract(self, request: HTTPConnection) -> str | None:
        context = self.lookup(request)
        return context.credential if context is not None else None


def resolve_credential(
    request: HTTPConnection,
    sources: Iterable[CredentialSource],
) -> str | None:
    """Return the first non-empty credential offered by ``sources``.

    Args:
        request: Incoming HTTP request.
        sources: Credential sources in priority order.

    Returns:
        The credential, or None if no source yields one.
    """
    for source in sources:
        value = source.extract(request)
        if value is not None:
            value = value.strip()
        if value:
            logger.debug("credential_resolved", source=source.name, path=request.url.path)
            return value
    return None

"""FastAPI dependencies that gate protected routes on a resolvable credential."""

from typing import Annotated

from fastapi import Depends, Request

from gisph_mcp.config import get_settings
from gisph_mcp.dependencies import get_session_store
from gisph_mcp.sessions.store import SESSION_ID_HEADER, SessionStore

from .credentials import (
    CredentialSource,
    HeaderCredentialSource,
    QueryParamCredentialSource,
    SessionCredentialSource,
    resolve_credential,
)
from .exceptions import MissingCredentialError


def request_credential_sources() -> list[CredentialSource]:
    """Header first, then query parameter."""
    settings = get_settings()
    return [
        HeaderCredentialSource(settings.API_KEY_HEADER),
        QueryParamCredentialSource(settings.API_KEY_QUERY_PARAM),
    ]


def _require(request: Request, sources: list[CredentialSource]) -> str:
    credential = resolve_credential(request, sources)
    if credential is None:
        settings = get_settings()
        raise MissingCredentialError(settings.API_KEY_HEADER, settings.API_KEY_QUERY_PARAM)
    return credential


async def get_request_credential(request: Request) -> str:
    """Resolve the credential carried by the request itself.

    Raises:
        MissingCredentialError: If neither the header nor the query parameter is set.
    """
    return _require(request, request_credential_sources())


async def get_streamable_credential(
    request: Request,
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> str:
    """Resolve the credential for the streamable HTTP transport.

    Falls back to the credential persisted for the session named by the
    ``Mcp-Session-Id`` header.
    """
    sources = [
        *request_credential_sources(),
        SessionCredentialSource(
            lambda conn: store.get(conn.headers.get(SESSION_ID_HEADER)),
            name="session:streamable",
        ),
    ]
    return _require(request, sources)

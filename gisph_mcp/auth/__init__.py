"""Auth module initialization."""

from .exceptions import (
    GisGatewayError,
    AuthenticationError,
    MissingCredentialError,
    SessionNotFoundError,
)
from .credentials import (
    CredentialSource,
    HeaderCredentialSource,
    QueryParamCredentialSource,
    SessionCredentialSource,
    resolve_credential,
)

__all__ = [
    # Exceptions
    "GisGatewayError",
    "AuthenticationError",
    "MissingCredentialError",
    "SessionNotFoundError",
    # Credentials
    "CredentialSource",
    "HeaderCredentialSource",
    "QueryParamCredentialSource",
    "SessionCredentialSource",
    "resolve_credential",
]

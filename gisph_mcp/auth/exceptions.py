"""Custom exceptions for credential handling."""


class GisGatewayError(Exception):
    """Base exception for all gis.ph gateway errors."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class AuthenticationError(GisGatewayError):
    """Raised when the caller cannot be authenticated."""
    pass


class MissingCredentialError(AuthenticationError):
    """Raised when no API key can be resolved for a protected request."""

    def __init__(self, header_name: str = "x-api-key", query_param: str = "key"):
        super().__init__(
            message=(
                "Missing API key. Pass your gis.ph API key via the "
                f"'{header_name}' header or add ?{query_param}=YOUR_KEY to the URL."
            ),
            code="MISSING_API_KEY"
        )
        self.header_name = header_name
        self.query_param = query_param


class SessionNotFoundError(GisGatewayError):
    """Raised when a request names a session the gateway does not know.

    Attributes:
        session_id: The unknown session identifier.
    """

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Session '{session_id}' not found or expired",
            code="SESSION_NOT_FOUND"
        )
        self.session_id = session_id

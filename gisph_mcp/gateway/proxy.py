"""HTTP client for the upstream gis.ph REST API."""

from typing import Any

import httpx
import structlog

from .schemas import UpstreamRequest
from .exceptions import (
    UpstreamError,
    UpstreamProtocolError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)


logger = structlog.get_logger("upstream")

DEFAULT_BASE_URL = "https://api.gis.ph/v1"


class UpstreamClient:
    """Issues one request per tool invocation against the gis.ph API.

    Args:
        client: Shared HTTP client.
        base_url: Fixed upstream base address.
        timeout: Per-request timeout in seconds; None waits indefinitely.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
    ):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def build_url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def call(self, upstream_request: UpstreamRequest, credential: str) -> Any:
        """Send an upstream request on behalf of a caller.

        Args:
            upstream_request: Method, path, query and body to send.
            credential: Caller's API key, sent as a bearer token.

        Returns:
            Parsed JSON payload of a 2xx response.

        Raises:
            UpstreamError: If upstream answers with a non-2xx status.
            UpstreamProtocolError: If a 2xx body is not valid JSON.
            UpstreamTimeoutError: If the configured timeout is exceeded.
            UpstreamUnavailableError: If the connection fails.
        """
        url = self.build_url(upstream_request.path)
        headers = {
            "Authorization": f"Bearer {credential}",
            "Accept": "application/json",
        }

        request_kwargs: dict[str, Any] = {
            "headers": headers,
            "timeout": self.timeout,
        }
        if upstream_request.query:
            request_kwargs["params"] = upstream_request.query
        if upstream_request.body is not None:
            request_kwargs["json"] = upstream_request.body

        try:
            response = await self.client.request(
                upstream_request.method,
                url,
                **request_kwargs,
            )
        except httpx.TimeoutException:
            raise UpstreamTimeoutError(url=url, timeout_seconds=self.timeout or 0.0)
        except httpx.RequestError as e:
            raise UpstreamUnavailableError(url=url, reason=str(e) or e.__class__.__name__)

        logger.debug(
            "upstream_response",
            method=upstream_request.method,
            path=upstream_request.path,
            status_code=response.status_code,
        )

        if not response.is_success:
            raise UpstreamError(status_code=response.status_code, body_text=response.text)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamProtocolError(url=url, status_code=response.status_code, reason=str(e))

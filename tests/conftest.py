# Test configuration
from typing import Callable

import httpx
import pytest

from gisph_mcp.gateway.proxy import UpstreamClient
from gisph_mcp.registry.service import ToolRegistry, build_tool_registry


class UpstreamRecorder:
    """MockTransport handler that records every upstream request.

    ``responder`` builds the response; by default a 200 with a small JSON body.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, json={"ok": True})
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def upstream() -> UpstreamRecorder:
    return UpstreamRecorder()


@pytest.fixture
def upstream_client(upstream: UpstreamRecorder) -> UpstreamClient:
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    return UpstreamClient(client, base_url="https://api.gis.ph/v1")


@pytest.fixture
def registry(upstream_client: UpstreamClient) -> ToolRegistry:
    return build_tool_registry(upstream_client)

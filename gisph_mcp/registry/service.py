"""Tool registry: lookup, validation and dispatch of tool invocations."""

import json
from pathlib import Path
from typing import Any, Iterator

import structlog

from gisph_mcp.gateway.exceptions import UnknownToolError
from gisph_mcp.gateway.proxy import UpstreamClient
from gisph_mcp.mcp_transport.schemas import MCPContent, MCPTool, MCPToolCallResult

from .config import load_tool_registry
from .schemas import ToolDescriptor
from .validation import ToolArguments, build_arguments_model, validate_arguments


logger = structlog.get_logger("registry")


def format_payload(payload: Any) -> str:
    """Pretty-print a JSON payload with stable 2-space indentation."""
    return json.dumps(payload, indent=2, ensure_ascii=False)


def text_result(payload: Any, is_error: bool = False) -> MCPToolCallResult:
    """Wrap a payload as the single text block of a tool result."""
    return MCPToolCallResult(
        content=[MCPContent(type="text", text=format_payload(payload))],
        isError=is_error,
    )


class ToolRegistry:
    """Ordered mapping of tool name to descriptor.

    Args:
        upstream: Client used by every handler to reach the gis.ph API.
    """

    def __init__(self, upstream: UpstreamClient):
        self.upstream = upstream
        self._tools: dict[str, ToolDescriptor] = {}
        self._argument_models: dict[str, type[ToolArguments]] = {}

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools.values())

    def register(self, descriptor: ToolDescriptor) -> None:
        """Add a tool.

        Raises:
            ValueError: If a tool with the same name is already registered.
        """
        if descriptor.name in self._tools:
            raise ValueError(f"duplicate tool name: {descriptor.name}")
        self._tools[descriptor.name] = descriptor
        self._argument_models[descriptor.name] = build_arguments_model(descriptor)

    def get(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def list_tools(self) -> list[MCPTool]:
        """Tools in registration order, as advertised by tools/list."""
        return [
            MCPTool(
                name=tool.name,
                description=tool.description,
                inputSchema=tool.input_schema(),
            )
            for tool in self._tools.values()
        ]

    async def dispatch(
        self,
        tool_name: str,
        raw_arguments: Any,
        credential: str,
    ) -> MCPToolCallResult:
        """Validate arguments and run one tool against the upstream API.

        Args:
            tool_name: Name of the tool to invoke.
            raw_arguments: Arguments as received from the client.
            credential: Caller's API key for the upstream call.

        Returns:
            Tool result holding the pretty-printed upstream payload.

        Raises:
            UnknownToolError: If no tool has this name.
            InvalidArgumentsError: If the arguments fail validation.
            UpstreamError: If upstream answers with a non-2xx status.
            UpstreamUnavailableError: If upstream cannot be reached.
            UpstreamProtocolError: If upstream returns a non-JSON 2xx body.
        """
        descriptor = self._tools.get(tool_name)
        if descriptor is None:
            raise UnknownToolError(tool_name)

        arguments = validate_arguments(self._argument_models[tool_name], tool_name, raw_arguments)
        upstream_request = descriptor.build_request(arguments)
        payload = await self.upstream.call(upstream_request, credential)
        return text_result(payload)


def build_tool_registry(
    upstream: UpstreamClient,
    config_path: str | Path | None = None,
) -> ToolRegistry:
    """Create a registry populated from the static tool config.

    Args:
        upstream: Client shared by all tool handlers.
        config_path: Optional path override for the tool registry config.

    Returns:
        Populated ToolRegistry.
    """
    registry = ToolRegistry(upstream)
    for descriptor in load_tool_registry(config_path).tools:
        registry.register(descriptor)
    logger.info("tool_registry_loaded", tool_count=len(registry))
    return registry

"""Registry module - Tool definitions, argument validation and dispatch."""

from .config import DEFAULT_TOOLS_CONFIG, ToolRegistryConfig, load_tool_registry
from .schemas import ParamSpec, ToolDescriptor
from .service import ToolRegistry, build_tool_registry, text_result


__all__ = [
    "DEFAULT_TOOLS_CONFIG",
    "ToolRegistryConfig",
    "load_tool_registry",
    "ParamSpec",
    "ToolDescriptor",
    "ToolRegistry",
    "build_tool_registry",
    "text_result",
]

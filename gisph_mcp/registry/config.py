"""Static tool registry config loader."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from .schemas import ToolDescriptor


DEFAULT_TOOLS_CONFIG = Path(__file__).parent / "tools.yaml"


class ToolRegistryConfig(BaseModel):
    """Container for tool definitions."""

    tools: list[ToolDescriptor] = Field(default_factory=list)


def load_tool_registry(config_path: str | Path | None = None) -> ToolRegistryConfig:
    """Load tool registry config from YAML.

    Args:
        config_path: Optional custom path for the tool registry config.

    Returns:
        Parsed ToolRegistryConfig.

    Raises:
        FileNotFoundError: If the config file does not exist.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_TOOLS_CONFIG

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    return ToolRegistryConfig(**data)

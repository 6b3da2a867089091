"""Pydantic schemas for declarative tool descriptors."""

import json
import re
from typing import Any, Literal
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, model_validator

from gisph_mcp.gateway.schemas import HttpMethod, UpstreamRequest


ParamType = Literal["string", "number", "integer", "boolean", "object", "array", "geometry"]
ParamLocation = Literal["path", "query", "body"]

GEOMETRY_TYPES = (
    "Point",
    "MultiPoint",
    "LineString",
    "MultiLineString",
    "Polygon",
    "MultiPolygon",
)

_PATH_PARAM_PATTERN = re.compile(r"\{(\w+)\}")


def stringify_value(value: Any) -> str:
    """Render an argument for a URL path segment or query string.

    Integral floats lose their fractional part (``121.0`` -> ``"121"``)
    and booleans are lower-cased.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return repr(value)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


class ParamSpec(BaseModel):
    """Declared input parameter of a tool.

    Attributes:
        type: Primitive (or structured) type the argument must have.
        required: Whether the argument must be supplied.
        enum: Allowed values, if restricted.
        description: Human-readable description shown to clients.
        location: Where the argument is routed in the upstream request.
        upstream_name: Name used upstream when it differs from the tool's.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    type: ParamType = "string"
    required: bool = False
    enum: list[str] | None = None
    description: str | None = None
    location: ParamLocation = Field(default="query", alias="in")
    upstream_name: str | None = Field(default=None, alias="as")

    def json_schema(self) -> dict[str, Any]:
        """JSON Schema fragment advertised in tools/list."""
        if self.type == "geometry":
            schema: dict[str, Any] = {
                "type": "object",
                "properties": {
                    "type": {"type": "string", "enum": list(GEOMETRY_TYPES)},
                    "coordinates": {"type": "array"},
                },
                "required": ["type", "coordinates"],
            }
        elif self.type == "object":
            schema = {"type": "object", "additionalProperties": True}
        else:
            schema = {"type": self.type}

        if self.enum:
            schema["enum"] = list(self.enum)
        elif self.location == "path" and self.type == "string":
            schema["minLength"] = 1
        if self.description:
            schema["description"] = self.description
        return schema


class ToolDescriptor(BaseModel):
    """A named operation mapped to exactly one upstream call.

    Attributes:
        name: Unique, stable tool name.
        description: Human-readable description.
        method: Upstream HTTP method.
        path: Upstream path template with ``{param}`` placeholders.
        params: Declared parameters in advertised order.
    """

    name: str = Field(..., min_length=1)
    description: str
    method: HttpMethod = "GET"
    path: str
    params: dict[str, ParamSpec] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_path_params(self) -> "ToolDescriptor":
        placeholders = set(_PATH_PARAM_PATTERN.findall(self.path))
        declared = {name for name, spec in self.params.items() if spec.location == "path"}
        if placeholders != declared:
            raise ValueError(
                f"tool '{self.name}': path placeholders {sorted(placeholders)} "
                f"do not match path params {sorted(declared)}"
            )
        for name in declared:
            if not self.params[name].required:
                raise ValueError(f"tool '{self.name}': path param '{name}' must be required")
        return self

    def input_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {name: spec.json_schema() for name, spec in self.params.items()},
        }
        required = [name for name, spec in self.params.items() if spec.required]
        if required:
            schema["required"] = required
        return schema

    def build_request(self, arguments: dict[str, Any]) -> UpstreamRequest:
        """Map validated arguments onto an upstream request.

        Query parameters are included only when their rendered value is a
        non-empty string. Body keys are included only when supplied.

        Args:
            arguments: Arguments already validated against ``params``.

        Returns:
            The single upstream request for this invocation.
        """
        def substitute(match: re.Match) -> str:
            return quote(stringify_value(arguments[match.group(1)]), safe="")

        path = _PATH_PARAM_PATTERN.sub(substitute, self.path)

        query: dict[str, str] = {}
        body: dict[str, Any] = {}
        for name, spec in self.params.items():
            value = arguments.get(name)
            if value is None or spec.location == "path":
                continue
            target = spec.upstream_name or name
            if spec.location == "query":
                rendered = stringify_value(value)
                if rendered:
                    query[target] = rendered
            else:
                body[target] = value

        return UpstreamRequest(
            method=self.method,
            path=path,
            query=query,
            body=body if self.method != "GET" else None,
        )

"""Generic argument validation driven by declared parameter specs."""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    StringConstraints,
    ValidationError,
    create_model,
)

from gisph_mcp.gateway.exceptions import InvalidArgumentsError

from .schemas import GEOMETRY_TYPES, ParamSpec, ToolDescriptor


class GeoJSONGeometry(BaseModel):
    """Structured geometry argument: a GeoJSON type and its coordinates."""

    model_config = ConfigDict(extra="allow")

    type: Literal[GEOMETRY_TYPES]  # type: ignore[valid-type]
    coordinates: list[Any]


class ToolArguments(BaseModel):
    """Base for generated argument models. Unknown arguments are ignored."""

    model_config = ConfigDict(extra="ignore")


_TYPE_MAP: dict[str, Any] = {
    "string": StrictStr,
    "number": Union[StrictInt, StrictFloat],
    "integer": StrictInt,
    "boolean": StrictBool,
    "object": dict[str, Any],
    "array": list[Any],
    "geometry": GeoJSONGeometry,
}


def _annotation_for(spec: ParamSpec) -> Any:
    if spec.enum:
        return Literal[tuple(spec.enum)]  # type: ignore[valid-type]
    if spec.location == "path" and spec.type == "string":
        # An empty segment would collapse the path onto its parent resource.
        return Annotated[StrictStr, StringConstraints(min_length=1)]
    return _TYPE_MAP[spec.type]


def build_arguments_model(descriptor: ToolDescriptor) -> type[ToolArguments]:
    """Create the pydantic model that validates one tool's arguments."""
    fields: dict[str, Any] = {}
    for name, spec in descriptor.params.items():
        annotation = _annotation_for(spec)
        if spec.required:
            fields[name] = (annotation, ...)
        else:
            fields[name] = (Optional[annotation], None)

    model_name = "".join(part.title() for part in descriptor.name.split("_")) + "Arguments"
    return create_model(model_name, __base__=ToolArguments, **fields)


def _format_errors(exc: ValidationError) -> list[dict[str, str]]:
    details = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())) or "arguments"
        details.append({"field": field, "message": error.get("msg", "invalid value")})
    return details


def validate_arguments(
    model: type[ToolArguments],
    tool_name: str,
    raw_arguments: Any,
) -> dict[str, Any]:
    """Validate raw arguments against a tool's argument model.

    Args:
        model: Model built by ``build_arguments_model``.
        tool_name: Tool name used in error messages.
        raw_arguments: Arguments as received from the client.

    Returns:
        Declared arguments that were supplied, with structured values
        converted back to plain JSON types.

    Raises:
        InvalidArgumentsError: If a required argument is missing or any
            supplied argument has the wrong type or value.
    """
    if raw_arguments is None:
        raw_arguments = {}
    if not isinstance(raw_arguments, dict):
        raise InvalidArgumentsError(
            tool_name,
            [{"field": "arguments", "message": "Arguments must be an object"}],
        )

    try:
        validated = model.model_validate(raw_arguments)
    except ValidationError as e:
        raise InvalidArgumentsError(tool_name, _format_errors(e))

    return {key: value for key, value in validated.model_dump().items() if value is not None}

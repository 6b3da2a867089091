"""Unit tests for the tool registry: catalogue, validation and dispatch."""

import json

import httpx
import pytest
from pydantic import ValidationError

from gisph_mcp.gateway.exceptions import InvalidArgumentsError, UnknownToolError
from gisph_mcp.registry.config import load_tool_registry
from gisph_mcp.registry.schemas import ParamSpec, ToolDescriptor, stringify_value
from gisph_mcp.registry.service import ToolRegistry, format_payload


EXPECTED_TOOLS = [
    "get_provinces",
    "get_province",
    "get_cities",
    "get_city",
    "get_barangays",
    "get_barangay",
    "search_location",
    "reverse_geocode",
    "get_demographics",
    "list_datasets",
    "get_dataset",
    "create_dataset",
    "update_dataset",
    "list_features",
    "get_feature",
    "get_features_by_dataset",
    "create_feature",
]


def result_payload(result):
    assert len(result.content) == 1
    assert result.content[0].type == "text"
    return json.loads(result.content[0].text)


class TestToolCatalogue:
    """Tests for the static tool config."""

    def test_catalogue_loads_in_order(self):
        """Test every tool is loaded in declaration order."""
        config = load_tool_registry()

        assert [tool.name for tool in config.tools] == EXPECTED_TOOLS

    def test_registry_lists_tools(self, registry):
        """Test tools/list entries carry name, description and schema."""
        tools = registry.list_tools()

        assert [tool.name for tool in tools] == EXPECTED_TOOLS
        assert all(tool.description for tool in tools)
        assert all(tool.inputSchema["type"] == "object" for tool in tools)

    def test_required_params_advertised(self, registry):
        """Test required params appear in the input schema."""
        schema = registry.get("get_demographics").input_schema()

        assert schema["required"] == ["location_code", "level"]
        assert schema["properties"]["level"]["enum"] == ["province", "city", "barangay"]

    def test_no_required_key_for_optional_only_tools(self, registry):
        """Test tools without required params omit the required list."""
        schema = registry.get("get_barangays").input_schema()

        assert "required" not in schema
        assert set(schema["properties"]) == {"city_code", "province_code"}

    def test_geometry_schema(self, registry):
        """Test geometry params advertise the GeoJSON shape."""
        geometry = registry.get("create_feature").input_schema()["properties"]["geometry"]

        assert geometry["type"] == "object"
        assert geometry["required"] == ["type", "coordinates"]
        assert "Polygon" in geometry["properties"]["type"]["enum"]

    def test_duplicate_name_rejected(self, upstream_client):
        """Test registering the same name twice fails."""
        registry = ToolRegistry(upstream_client)
        descriptor = ToolDescriptor(name="get_provinces", description="d", path="/provinces")
        registry.register(descriptor)

        with pytest.raises(ValueError):
            registry.register(descriptor)

    def test_path_placeholder_must_be_declared(self):
        """Test descriptors reject undeclared path placeholders."""
        with pytest.raises(ValidationError):
            ToolDescriptor(name="bad", description="d", path="/cities/{city_code}")

    def test_path_param_must_be_required(self):
        """Test optional path params are rejected."""
        with pytest.raises(ValidationError):
            ToolDescriptor(
                name="bad",
                description="d",
                path="/cities/{city_code}",
                params={"city_code": ParamSpec(location="path")},
            )


class TestStringifyValue:
    """Tests for query and path rendering."""

    def test_integral_float_loses_fraction(self):
        assert stringify_value(121.0) == "121"

    def test_float_kept(self):
        assert stringify_value(14.5995) == "14.5995"

    def test_bool_lowercased(self):
        assert stringify_value(True) == "true"

    def test_string_unchanged(self):
        assert stringify_value("Quezon") == "Quezon"


class TestArgumentValidation:
    """Tests for declared-schema validation before any upstream call."""

    @pytest.mark.asyncio
    async def test_missing_required_makes_no_upstream_call(self, registry, upstream):
        """Test a missing required argument fails without contacting upstream."""
        with pytest.raises(InvalidArgumentsError) as exc_info:
            await registry.dispatch("get_province", {}, "ABC")

        assert upstream.requests == []
        assert exc_info.value.code == "INVALID_ARGUMENTS"
        assert exc_info.value.details[0]["field"] == "province_code"

    @pytest.mark.asyncio
    async def test_wrong_type_rejected(self, registry, upstream):
        """Test primitive types are enforced strictly."""
        with pytest.raises(InvalidArgumentsError):
            await registry.dispatch("reverse_geocode", {"lat": "14.6", "lng": 121.0}, "ABC")

        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_enum_enforced(self, registry, upstream):
        """Test enumerated params reject other values."""
        with pytest.raises(InvalidArgumentsError):
            await registry.dispatch(
                "get_demographics",
                {"location_code": "1400100000", "level": "region"},
                "ABC",
            )

        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_invalid_geometry_rejected(self, registry, upstream):
        """Test geometry must name a known GeoJSON type."""
        with pytest.raises(InvalidArgumentsError):
            await registry.dispatch(
                "create_feature",
                {"dataset_id": "ds1", "geometry": {"type": "Circle", "coordinates": []}},
                "ABC",
            )

        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_empty_path_param_rejected(self, registry, upstream):
        """Test an empty path segment is refused instead of hitting the list endpoint."""
        with pytest.raises(InvalidArgumentsError) as exc_info:
            await registry.dispatch("get_province", {"province_code": ""}, "ABC")

        assert upstream.requests == []
        assert exc_info.value.details[0]["field"] == "province_code"

    def test_path_param_advertises_min_length(self, registry):
        schema = registry.get("get_province").input_schema()

        assert schema["properties"]["province_code"]["minLength"] == 1

    @pytest.mark.asyncio
    async def test_non_object_arguments_rejected(self, registry):
        """Test arguments must be a JSON object."""
        with pytest.raises(InvalidArgumentsError):
            await registry.dispatch("get_provinces", ["x"], "ABC")

    @pytest.mark.asyncio
    async def test_unknown_tool(self, registry, upstream):
        """Test unknown tool names raise UnknownToolError."""
        with pytest.raises(UnknownToolError) as exc_info:
            await registry.dispatch("get_weather", {}, "ABC")

        assert exc_info.value.tool_name == "get_weather"
        assert upstream.requests == []


class TestDispatch:
    """Tests for request mapping to the single upstream call."""

    @pytest.mark.asyncio
    async def test_path_param_and_bearer(self, registry, upstream):
        """Test the path template is filled and the caller's key forwarded."""
        upstream.responder = lambda request: httpx.Response(200, json={"code": "0128", "name": "Ilocos Norte"})

        result = await registry.dispatch("get_province", {"province_code": "0128"}, "ABC")

        assert len(upstream.requests) == 1
        assert str(upstream.last.url) == "https://api.gis.ph/v1/provinces/0128"
        assert upstream.last.method == "GET"
        assert upstream.last.headers["Authorization"] == "Bearer ABC"
        assert result.isError is False
        assert result_payload(result) == {"code": "0128", "name": "Ilocos Norte"}

    @pytest.mark.asyncio
    async def test_result_is_pretty_printed(self, registry, upstream):
        """Test the payload is rendered with two-space indentation."""
        payload = {"provinces": [{"name": "Cebu"}]}
        upstream.responder = lambda request: httpx.Response(200, json=payload)

        result = await registry.dispatch("get_provinces", {}, "ABC")

        assert result.content[0].text == format_payload(payload)
        assert '\n  "provinces"' in result.content[0].text

    @pytest.mark.asyncio
    async def test_search_renames_query(self, registry, upstream):
        """Test search_location sends q and omits an absent type."""
        await registry.dispatch("search_location", {"query": "Quezon"}, "ABC")

        assert str(upstream.last.url) == "https://api.gis.ph/v1/search?q=Quezon"

    @pytest.mark.asyncio
    async def test_optional_query_omitted(self, registry, upstream):
        """Test unsupplied and empty optional params are left out."""
        await registry.dispatch("get_cities", {"province_code": ""}, "ABC")

        assert str(upstream.last.url) == "https://api.gis.ph/v1/cities"

    @pytest.mark.asyncio
    async def test_reverse_geocode_renders_numbers(self, registry, upstream):
        """Test numeric query values are stringified."""
        await registry.dispatch("reverse_geocode", {"lat": 14.5995, "lng": 121.0}, "ABC")

        assert upstream.last.url.params["lat"] == "14.5995"
        assert upstream.last.url.params["lng"] == "121"

    @pytest.mark.asyncio
    async def test_demographics_renames_code(self, registry, upstream):
        """Test location_code travels upstream as code."""
        await registry.dispatch(
            "get_demographics",
            {"location_code": "1400100000", "level": "province"},
            "ABC",
        )

        assert upstream.last.url.path == "/v1/analytics/demographics"
        assert dict(upstream.last.url.params) == {"code": "1400100000", "level": "province"}

    @pytest.mark.asyncio
    async def test_path_segment_is_encoded(self, registry, upstream):
        """Test path arguments cannot inject extra segments."""
        await registry.dispatch("get_dataset", {"id": "a/b c"}, "ABC")

        assert upstream.last.url.raw_path == b"/v1/datasets/a%2Fb%20c"

    @pytest.mark.asyncio
    async def test_create_dataset_body(self, registry, upstream):
        """Test body params are sent as JSON and absent ones omitted."""
        await registry.dispatch(
            "create_dataset",
            {"name": "Schools", "data_type": "vector", "geometry_type": "Point"},
            "ABC",
        )

        assert upstream.last.method == "POST"
        assert str(upstream.last.url) == "https://api.gis.ph/v1/datasets"
        assert json.loads(upstream.last.content) == {
            "name": "Schools",
            "data_type": "vector",
            "geometry_type": "Point",
        }

    @pytest.mark.asyncio
    async def test_update_dataset_patch(self, registry, upstream):
        """Test update_dataset uses PATCH with only the supplied fields."""
        await registry.dispatch("update_dataset", {"id": "ds1", "description": "Updated"}, "ABC")

        assert upstream.last.method == "PATCH"
        assert upstream.last.url.path == "/v1/datasets/ds1"
        assert json.loads(upstream.last.content) == {"description": "Updated"}

    @pytest.mark.asyncio
    async def test_create_feature_body(self, registry, upstream):
        """Test geometry and properties are forwarded untouched."""
        geometry = {"type": "Point", "coordinates": [121.0, 14.6]}

        await registry.dispatch(
            "create_feature",
            {"dataset_id": "ds1", "geometry": geometry, "properties": {"name": "Plaza"}},
            "ABC",
        )

        assert upstream.last.url.path == "/v1/features"
        assert json.loads(upstream.last.content) == {
            "dataset_id": "ds1",
            "geometry": geometry,
            "properties": {"name": "Plaza"},
        }

    @pytest.mark.asyncio
    async def test_features_by_dataset(self, registry, upstream):
        """Test get_features_by_dataset routes by dataset id."""
        await registry.dispatch("get_features_by_dataset", {"dataset_id": "ds1"}, "ABC")

        assert upstream.last.url.path == "/v1/features/dataset/ds1"
        assert upstream.last.content == b""

    @pytest.mark.asyncio
    async def test_unknown_arguments_ignored(self, registry, upstream):
        """Test undeclared arguments never reach upstream."""
        await registry.dispatch("get_provinces", {"extra": "x"}, "ABC")

        assert str(upstream.last.url) == "https://api.gis.ph/v1/provinces"

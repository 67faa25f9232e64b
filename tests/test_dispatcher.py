"""Tests for the tool catalog and the dispatcher."""

import json

import pytest
from mcp import types

from core.dispatcher import dispatch
from core.registry import ToolRegistry, ToolSpec, load_tools, object_schema

EXPECTED_TOOLS = {
    "snyk_verify_token",
    "snyk_list_orgs",
    "snyk_get_org",
    "snyk_get_org_entitlements",
    "snyk_list_projects",
    "snyk_get_project",
    "snyk_activate_project",
    "snyk_deactivate_project",
    "snyk_list_issues",
    "snyk_get_issue",
    "snyk_get_project_aggregated_issues",
    "snyk_ignore_issue",
    "snyk_test_package",
    "snyk_list_package_issues",
    "snyk_get_sbom",
    "snyk_list_dependencies",
    "snyk_list_targets",
    "snyk_list_policies",
    "snyk_get_policy",
    "snyk_create_policy",
    "snyk_update_policy",
}


class TestCatalog:

    def test_catalog_contains_every_tool(self):
        registry = load_tools()

        assert set(registry.names()) == EXPECTED_TOOLS

    def test_tool_definitions(self):
        tools = {tool.name: tool for tool in load_tools().list_tools()}

        assert all(isinstance(tool, types.Tool) for tool in tools.values())
        assert all(tool.description for tool in tools.values())
        assert all(tool.inputSchema["type"] == "object" for tool in tools.values())
        assert tools["snyk_get_project"].inputSchema["required"] == ["project_id"]
        assert tools["snyk_get_sbom"].inputSchema["properties"]["format"]["default"] == "cyclonedx+json"
        assert tools["snyk_test_package"].inputSchema["properties"]["package_manager"]["enum"] == [
            "npm", "maven", "pip", "rubygems", "nuget", "composer", "golang", "cargo",
        ]
        assert tools["snyk_verify_token"].inputSchema["required"] == []

    def test_listing_does_not_expose_internal_schema_objects(self):
        registry = load_tools()
        tool = registry.list_tools()[0]
        tool.inputSchema["properties"]["injected"] = {"type": "string"}

        assert "injected" not in registry.list_tools()[0].inputSchema["properties"]

    def test_duplicate_names_are_rejected(self):
        async def noop(args):
            return "{}"

        spec = ToolSpec(name="dup", description="", input_schema=object_schema({}), func=noop)

        with pytest.raises(ValueError, match="Duplicate tool name"):
            ToolRegistry([spec, spec])


class TestDispatch:

    @pytest.mark.asyncio
    async def test_unknown_tool(self, snyk_api):
        result = await dispatch(load_tools(), "snyk_delete_everything", {})

        assert result.isError is True
        assert result.content[0].text == "Unknown tool: snyk_delete_everything"
        assert snyk_api.requests == []

    @pytest.mark.asyncio
    async def test_success_is_wrapped_as_text(self, snyk_api):
        snyk_api.json("GET", "/v1/user/me", {"id": "u1", "username": "dev"})

        result = await dispatch(load_tools(), "snyk_verify_token", None)

        assert not result.isError
        assert json.loads(result.content[0].text)["user"]["id"] == "u1"

    @pytest.mark.asyncio
    async def test_tool_error_payload_is_not_a_transport_error(self, snyk_api):
        result = await dispatch(load_tools(), "snyk_get_project", {"project_id": "p1"})

        assert not result.isError
        assert "org_id is required" in json.loads(result.content[0].text)["error"]

    @pytest.mark.asyncio
    async def test_escaping_exception_is_caught(self):
        async def explode(args):
            raise RuntimeError("handler blew up")

        registry = ToolRegistry([
            ToolSpec(name="explode", description="always fails", input_schema=object_schema({}), func=explode),
        ])

        result = await dispatch(registry, "explode", {})

        assert result.isError is True
        assert result.content[0].text == "Error: handler blew up"

    @pytest.mark.asyncio
    async def test_arguments_are_passed_through(self):
        received = []

        async def echo(args):
            received.append(args)
            return "ok"

        registry = ToolRegistry([ToolSpec(name="echo", description="", input_schema=object_schema({}), func=echo)])

        result = await dispatch(registry, "echo", {"org_id": "org-1"})

        assert received == [{"org_id": "org-1"}]
        assert result.content[0].text == "ok"

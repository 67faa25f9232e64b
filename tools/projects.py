from typing import Any, Mapping

from core.clients import get_rest_client, get_v1_client  # type: ignore
from core.handler import snyk_tool  # type: ignore
from core.pagination import fetch_all_pages  # type: ignore
from core.registry import ORG_ID_PROPERTY, limit_property, object_schema  # type: ignore
from utils.arguments import (  # type: ignore
    ORG_REQUIRED,
    error_result,
    is_missing,
    page_plan,
    quote_segment,
    resolve_limit,
    resolve_org_id,
    to_result,
    validate_required,
)

PROJECT_ID_PROPERTY = {"type": "string", "description": "The project ID"}


def _simplify_project(project: dict) -> dict:
    attributes = project.get("attributes") or {}
    return {
        "id": project.get("id"),
        "name": attributes.get("name"),
        "type": attributes.get("type"),
        "origin": attributes.get("origin"),
        "target_reference": attributes.get("target_reference"),
        "status": attributes.get("status"),
        "created": attributes.get("created"),
        "business_criticality": attributes.get("business_criticality"),
        "environment": attributes.get("environment"),
        "lifecycle": attributes.get("lifecycle"),
    }


@snyk_tool
async def list_projects(args: Mapping[str, Any]) -> str:
    """List projects of an organization, optionally filtered by target, origin or type."""
    org_id = resolve_org_id(args)
    if not org_id:
        return error_result(ORG_REQUIRED)
    limit, limit_error = resolve_limit(args)
    if limit_error:
        return to_result(limit_error)
    page_size, max_pages = page_plan(limit)

    params = [("limit", page_size)]
    for name in ("target_id", "origin", "type"):
        if not is_missing(args.get(name)):
            params.append((name, args[name]))

    projects = await fetch_all_pages(
        get_rest_client(),
        f"/orgs/{quote_segment(org_id)}/projects",
        max_pages,
        params=params,
    )
    projects = projects[:limit]
    return to_result({
        "count": len(projects),
        "projects": [_simplify_project(project) for project in projects],
    })


@snyk_tool
async def get_project(args: Mapping[str, Any]) -> str:
    org_id = resolve_org_id(args)
    if not org_id:
        return error_result(ORG_REQUIRED)
    missing = validate_required(args, "project_id")
    if missing:
        return to_result(missing)

    response = await get_rest_client().get(
        f"/orgs/{quote_segment(org_id)}/projects/{quote_segment(args['project_id'])}"
    )
    response.raise_for_status()
    project = response.json().get("data") or {}
    result = _simplify_project(project)
    result["relationships"] = project.get("relationships")
    return to_result(result)


async def _set_project_state(args: Mapping[str, Any], action: str) -> str:
    org_id = resolve_org_id(args)
    if not org_id:
        return error_result(ORG_REQUIRED)
    missing = validate_required(args, "project_id")
    if missing:
        return to_result(missing)

    project_id = args["project_id"]
    response = await get_v1_client().post(
        f"/org/{quote_segment(org_id)}/project/{quote_segment(project_id)}/{action}"
    )
    response.raise_for_status()
    return to_result({
        "success": True,
        "message": f"Project {project_id} has been {action}d",
    })


@snyk_tool
async def activate_project(args: Mapping[str, Any]) -> str:
    return await _set_project_state(args, "activate")


@snyk_tool
async def deactivate_project(args: Mapping[str, Any]) -> str:
    return await _set_project_state(args, "deactivate")


def get_tools() -> dict[str, Any]:
    return {
        "snyk_list_projects": {
            "func": list_projects,
            "title": "List projects",
            "description": "List all projects in an organization with optional filtering",
            "input_schema": object_schema({
                "org_id": ORG_ID_PROPERTY,
                "target_id": {"type": "string", "description": "Filter by target ID"},
                "origin": {
                    "type": "string",
                    "description": "Filter by origin (e.g., github, gitlab, cli, docker-hub)",
                },
                "type": {
                    "type": "string",
                    "description": "Filter by project type (e.g., npm, maven, pip, docker)",
                },
                "limit": limit_property("projects"),
            }),
        },
        "snyk_get_project": {
            "func": get_project,
            "title": "Get project",
            "description": "Get details about a specific project including its configuration",
            "input_schema": object_schema(
                {"org_id": ORG_ID_PROPERTY, "project_id": PROJECT_ID_PROPERTY},
                required=["project_id"],
            ),
        },
        "snyk_activate_project": {
            "func": activate_project,
            "title": "Activate project",
            "description": "Activate a deactivated project to resume monitoring",
            "input_schema": object_schema(
                {
                    "org_id": ORG_ID_PROPERTY,
                    "project_id": {"type": "string", "description": "The project ID to activate"},
                },
                required=["project_id"],
            ),
        },
        "snyk_deactivate_project": {
            "func": deactivate_project,
            "title": "Deactivate project",
            "description": "Deactivate a project to pause monitoring",
            "input_schema": object_schema(
                {
                    "org_id": ORG_ID_PROPERTY,
                    "project_id": {"type": "string", "description": "The project ID to deactivate"},
                },
                required=["project_id"],
            ),
        },
    }

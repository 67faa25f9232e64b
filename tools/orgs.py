from typing import Any, Mapping

from core.clients import get_rest_client, get_v1_client  # type: ignore
from core.handler import snyk_tool  # type: ignore
from core.pagination import fetch_all_pages  # type: ignore
from core.registry import ORG_ID_PROPERTY, limit_property, object_schema  # type: ignore
from utils.arguments import (  # type: ignore
    ORG_REQUIRED,
    error_result,
    page_plan,
    quote_segment,
    resolve_limit,
    resolve_org_id,
    to_result,
)


def _simplify_org(org: dict) -> dict:
    attributes = org.get("attributes") or {}
    return {
        "id": org.get("id"),
        "name": attributes.get("name"),
        "slug": attributes.get("slug"),
        "group_id": attributes.get("group_id"),
        "is_personal": attributes.get("is_personal"),
    }


@snyk_tool
async def list_orgs(args: Mapping[str, Any]) -> str:
    """List organizations visible to the token, following pages up to `limit`."""
    limit, limit_error = resolve_limit(args)
    if limit_error:
        return to_result(limit_error)
    page_size, max_pages = page_plan(limit)

    orgs = await fetch_all_pages(get_rest_client(), "/orgs", max_pages, params={"limit": page_size})
    orgs = orgs[:limit]
    return to_result({
        "count": len(orgs),
        "organizations": [_simplify_org(org) for org in orgs],
    })


@snyk_tool
async def get_org(args: Mapping[str, Any]) -> str:
    org_id = resolve_org_id(args)
    if not org_id:
        return error_result(ORG_REQUIRED)

    response = await get_rest_client().get(f"/orgs/{quote_segment(org_id)}")
    response.raise_for_status()
    org = response.json().get("data") or {}
    result = _simplify_org(org)
    result["created"] = (org.get("attributes") or {}).get("created")
    return to_result(result)


@snyk_tool
async def get_org_entitlements(args: Mapping[str, Any]) -> str:
    """Return the raw V1 entitlements document for an organization."""
    org_id = resolve_org_id(args)
    if not org_id:
        return error_result(ORG_REQUIRED)

    response = await get_v1_client().get(f"/org/{quote_segment(org_id)}/entitlements")
    response.raise_for_status()
    return to_result(response.json())


def get_tools() -> dict[str, Any]:
    return {
        "snyk_list_orgs": {
            "func": list_orgs,
            "title": "List organizations",
            "description": "List all organizations accessible to the authenticated user",
            "input_schema": object_schema({"limit": limit_property("organizations")}),
        },
        "snyk_get_org": {
            "func": get_org,
            "title": "Get organization",
            "description": "Get details about a specific organization",
            "input_schema": object_schema({"org_id": ORG_ID_PROPERTY}),
        },
        "snyk_get_org_entitlements": {
            "func": get_org_entitlements,
            "title": "Get organization entitlements",
            "description": "Get the entitlements for an organization (what features are available)",
            "input_schema": object_schema({"org_id": ORG_ID_PROPERTY}),
        },
    }

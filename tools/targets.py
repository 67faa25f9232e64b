from typing import Any, Mapping

from core.clients import get_rest_client  # type: ignore
from core.handler import snyk_tool  # type: ignore
from core.pagination import fetch_all_pages  # type: ignore
from core.registry import ORG_ID_PROPERTY, limit_property, object_schema  # type: ignore
from utils.arguments import (  # type: ignore
    ORG_REQUIRED,
    as_bool,
    error_result,
    is_missing,
    page_plan,
    quote_segment,
    resolve_limit,
    resolve_org_id,
    to_result,
)


@snyk_tool
async def list_targets(args: Mapping[str, Any]) -> str:
    """List the repositories and registries (targets) imported into an organization."""
    org_id = resolve_org_id(args)
    if not org_id:
        return error_result(ORG_REQUIRED)
    limit, limit_error = resolve_limit(args)
    if limit_error:
        return to_result(limit_error)
    page_size, max_pages = page_plan(limit)

    params = [("limit", page_size)]
    if not is_missing(args.get("origin")):
        params.append(("origin", args["origin"]))
    if args.get("exclude_empty") is not None and as_bool(args["exclude_empty"]):
        params.append(("exclude_empty", "true"))

    targets = await fetch_all_pages(
        get_rest_client(),
        f"/orgs/{quote_segment(org_id)}/targets",
        max_pages,
        params=params,
    )
    targets = targets[:limit]
    simplified = []
    for target in targets:
        attributes = target.get("attributes") or {}
        simplified.append({
            "id": target.get("id"),
            "display_name": attributes.get("display_name"),
            "url": attributes.get("url"),
            "created_at": attributes.get("created_at"),
            "is_private": attributes.get("is_private"),
        })
    return to_result({"count": len(simplified), "targets": simplified})


def get_tools() -> dict[str, Any]:
    return {
        "snyk_list_targets": {
            "func": list_targets,
            "title": "List targets",
            "description": "List all targets (repositories, container registries) in an organization",
            "input_schema": object_schema({
                "org_id": ORG_ID_PROPERTY,
                "origin": {
                    "type": "string",
                    "description": "Filter by origin (e.g., github, gitlab, docker-hub)",
                },
                "exclude_empty": {
                    "type": "boolean",
                    "description": "Exclude targets with no projects (default: false)",
                    "default": False,
                },
                "limit": limit_property("targets"),
            }),
        },
    }

from typing import Any, Mapping

from core.clients import get_rest_client, get_v1_client  # type: ignore
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
    validate_enum,
    validate_required,
)

SCAN_ITEM_TYPES = ["project", "container_image"]
ISSUE_TYPES = ["package_vulnerability", "license", "cloud", "code", "config", "custom"]
IGNORE_REASONS = ["not-vulnerable", "wont-fix", "temporary-ignore"]


def _flag(args: Mapping[str, Any], name: str, default: bool) -> bool:
    value = args.get(name)
    return default if value is None else as_bool(value)


def _simplify_issue(issue: dict) -> dict:
    attributes = issue.get("attributes") or {}
    return {
        "id": issue.get("id"),
        "title": attributes.get("title"),
        "type": attributes.get("type"),
        "severity": attributes.get("effective_severity_level"),
        "status": attributes.get("status"),
        "ignored": attributes.get("ignored"),
        "problems": attributes.get("problems"),
    }


@snyk_tool
async def list_issues(args: Mapping[str, Any]) -> str:
    org_id = resolve_org_id(args)
    if not org_id:
        return error_result(ORG_REQUIRED)
    limit, limit_error = resolve_limit(args)
    if limit_error:
        return to_result(limit_error)
    for name, allowed in (("scan_item_type", SCAN_ITEM_TYPES), ("type", ISSUE_TYPES)):
        if not is_missing(args.get(name)):
            invalid = validate_enum(args[name], name, allowed)
            if invalid:
                return to_result(invalid)
    page_size, max_pages = page_plan(limit)

    params = [("limit", page_size)]
    # The scan item filter only applies when both id and type are given
    if not is_missing(args.get("scan_item_id")) and not is_missing(args.get("scan_item_type")):
        params.append(("scan_item.id", args["scan_item_id"]))
        params.append(("scan_item.type", args["scan_item_type"]))
    if not is_missing(args.get("type")):
        params.append(("type", args["type"]))
    levels = args.get("effective_severity_level")
    if levels:
        if isinstance(levels, str):
            levels = [levels]
        params.extend(("effective_severity_level", level) for level in levels)
    if args.get("ignored") is not None:
        params.append(("ignored", str(as_bool(args["ignored"])).lower()))

    issues = await fetch_all_pages(
        get_rest_client(),
        f"/orgs/{quote_segment(org_id)}/issues",
        max_pages,
        params=params,
    )
    issues = issues[:limit]
    return to_result({
        "count": len(issues),
        "issues": [_simplify_issue(issue) for issue in issues],
    })


@snyk_tool
async def get_issue(args: Mapping[str, Any]) -> str:
    org_id = resolve_org_id(args)
    if not org_id:
        return error_result(ORG_REQUIRED)
    missing = validate_required(args, "issue_id")
    if missing:
        return to_result(missing)

    response = await get_rest_client().get(
        f"/orgs/{quote_segment(org_id)}/issues/{quote_segment(args['issue_id'])}"
    )
    response.raise_for_status()
    issue = response.json().get("data") or {}
    result = _simplify_issue(issue)
    result["coordinates"] = (issue.get("attributes") or {}).get("coordinates")
    return to_result(result)


@snyk_tool
async def get_project_aggregated_issues(args: Mapping[str, Any]) -> str:
    """Fetch the V1 aggregated issue list of one project, with descriptions and paths by default."""
    org_id = resolve_org_id(args)
    if not org_id:
        return error_result(ORG_REQUIRED)
    missing = validate_required(args, "project_id")
    if missing:
        return to_result(missing)

    response = await get_v1_client().post(
        f"/org/{quote_segment(org_id)}/project/{quote_segment(args['project_id'])}/aggregated-issues",
        json={
            "includeDescription": _flag(args, "include_description", default=True),
            "includeIntroducedThrough": _flag(args, "include_introduced_through", default=True),
        },
    )
    response.raise_for_status()
    return to_result({"issues": response.json().get("issues")})


@snyk_tool
async def ignore_issue(args: Mapping[str, Any]) -> str:
    org_id = resolve_org_id(args)
    if not org_id:
        return error_result(ORG_REQUIRED)
    missing = validate_required(args, "project_id", "issue_id", "reason")
    if missing:
        return to_result(missing)
    invalid = validate_enum(args["reason"], "reason", IGNORE_REASONS)
    if invalid:
        return to_result(invalid)

    payload: dict[str, Any] = {"reason": args["reason"]}
    if not is_missing(args.get("reason_type")):
        payload["reasonType"] = args["reason_type"]
    if not is_missing(args.get("expires_at")):
        payload["expires"] = args["expires_at"]
    if args.get("disregard_if_fixable") is not None:
        payload["disregardIfFixable"] = as_bool(args["disregard_if_fixable"])

    response = await get_v1_client().post(
        f"/org/{quote_segment(org_id)}/project/{quote_segment(args['project_id'])}"
        f"/ignore/{quote_segment(args['issue_id'])}",
        json=payload,
    )
    response.raise_for_status()
    return to_result({"success": True, "ignore": response.json()})


def get_tools() -> dict[str, Any]:
    return {
        "snyk_list_issues": {
            "func": list_issues,
            "title": "List issues",
            "description": "List all issues (vulnerabilities) for an organization with filtering options",
            "input_schema": object_schema({
                "org_id": ORG_ID_PROPERTY,
                "scan_item_id": {"type": "string", "description": "Filter issues by project/scan item ID"},
                "scan_item_type": {
                    "type": "string",
                    "description": "Type of scan item (e.g., project, container_image)",
                    "enum": SCAN_ITEM_TYPES,
                },
                "type": {"type": "string", "description": "Filter by issue type", "enum": ISSUE_TYPES},
                "effective_severity_level": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Filter by severity levels (e.g., ['critical', 'high'])",
                },
                "ignored": {"type": "boolean", "description": "Filter by ignored status"},
                "limit": limit_property("issues"),
            }),
        },
        "snyk_get_issue": {
            "func": get_issue,
            "title": "Get issue",
            "description": "Get detailed information about a specific issue",
            "input_schema": object_schema(
                {"org_id": ORG_ID_PROPERTY, "issue_id": {"type": "string", "description": "The issue ID"}},
                required=["issue_id"],
            ),
        },
        "snyk_get_project_aggregated_issues": {
            "func": get_project_aggregated_issues,
            "title": "Get project aggregated issues",
            "description": "Get aggregated issues for a project (uses V1 API for detailed vulnerability information)",
            "input_schema": object_schema(
                {
                    "org_id": ORG_ID_PROPERTY,
                    "project_id": {"type": "string", "description": "The project ID"},
                    "include_description": {
                        "type": "boolean",
                        "description": "Include issue descriptions (default: true)",
                        "default": True,
                    },
                    "include_introduced_through": {
                        "type": "boolean",
                        "description": "Include dependency paths (default: true)",
                        "default": True,
                    },
                },
                required=["project_id"],
            ),
        },
        "snyk_ignore_issue": {
            "func": ignore_issue,
            "title": "Ignore issue",
            "description": "Ignore an issue in a project",
            "input_schema": object_schema(
                {
                    "org_id": ORG_ID_PROPERTY,
                    "project_id": {"type": "string", "description": "The project ID"},
                    "issue_id": {"type": "string", "description": "The issue ID to ignore"},
                    "reason": {"type": "string", "description": "Reason for ignoring", "enum": IGNORE_REASONS},
                    "reason_type": {"type": "string", "description": "Additional context for the ignore reason"},
                    "expires_at": {
                        "type": "string",
                        "description": "Expiration date for the ignore (ISO 8601 format)",
                    },
                    "disregard_if_fixable": {
                        "type": "boolean",
                        "description": "Remove ignore when fix becomes available (default: false)",
                        "default": False,
                    },
                },
                required=["project_id", "issue_id", "reason"],
            ),
        },
    }

"""Organization- and group-level policy tools (REST API).

Every policy tool is scoped by `group_id` when one is given, otherwise by the
organization (argument or SNYK_ORG_ID).
"""
from typing import Any, Mapping

from core.clients import get_rest_client  # type: ignore
from core.handler import snyk_tool  # type: ignore
from core.pagination import fetch_all_pages  # type: ignore
from core.registry import ORG_ID_PROPERTY, limit_property, object_schema  # type: ignore
from utils.arguments import (  # type: ignore
    ORG_OR_GROUP_REQUIRED,
    error_result,
    is_missing,
    page_plan,
    quote_segment,
    resolve_limit,
    resolve_scope,
    to_result,
    validate_required,
)

OPTIONAL_ATTRIBUTES = ("name", "action_type", "action", "conditions_group")


def _policy_fields(policy: dict, *names: str) -> dict:
    attributes = policy.get("attributes") or {}
    result = {"id": policy.get("id")}
    for name in names:
        result[name] = attributes.get(name)
    return result


def _policy_summary(policy: dict) -> dict:
    return _policy_fields(
        policy, "name", "action_type", "action", "conditions_group", "review", "created_at", "updated_at"
    )


def _present_attributes(args: Mapping[str, Any]) -> dict:
    return {name: args[name] for name in OPTIONAL_ATTRIBUTES if not is_missing(args.get(name))}


@snyk_tool
async def list_policies(args: Mapping[str, Any]) -> str:
    scope = resolve_scope(args)
    if not scope:
        return error_result(ORG_OR_GROUP_REQUIRED)
    limit, limit_error = resolve_limit(args)
    if limit_error:
        return to_result(limit_error)
    page_size, max_pages = page_plan(limit)

    policies = await fetch_all_pages(
        get_rest_client(), f"{scope}/policies", max_pages, params={"limit": page_size}
    )
    policies = policies[:limit]
    return to_result({
        "count": len(policies),
        "policies": [_policy_summary(policy) for policy in policies],
    })


@snyk_tool
async def get_policy(args: Mapping[str, Any]) -> str:
    scope = resolve_scope(args)
    if not scope:
        return error_result(ORG_OR_GROUP_REQUIRED)
    missing = validate_required(args, "policy_id")
    if missing:
        return to_result(missing)

    response = await get_rest_client().get(f"{scope}/policies/{quote_segment(args['policy_id'])}")
    response.raise_for_status()
    return to_result(_policy_summary(response.json().get("data") or {}))


@snyk_tool
async def create_policy(args: Mapping[str, Any]) -> str:
    scope = resolve_scope(args)
    if not scope:
        return error_result(ORG_OR_GROUP_REQUIRED)
    missing = validate_required(args, "name", "action_type")
    if missing:
        return to_result(missing)

    payload = {
        "data": {
            "type": "policy",
            "attributes": _present_attributes(args),
        },
    }
    response = await get_rest_client().post(f"{scope}/policies", json=payload)
    response.raise_for_status()
    policy = response.json().get("data") or {}
    return to_result({
        "success": True,
        "policy": _policy_fields(policy, "name", "action_type", "action", "conditions_group"),
    })


@snyk_tool
async def update_policy(args: Mapping[str, Any]) -> str:
    """Patch a policy; only the attributes present in the arguments are sent."""
    scope = resolve_scope(args)
    if not scope:
        return error_result(ORG_OR_GROUP_REQUIRED)
    missing = validate_required(args, "policy_id")
    if missing:
        return to_result(missing)

    policy_id = args["policy_id"]
    payload = {
        "data": {
            "type": "policy",
            "id": policy_id,
            "attributes": _present_attributes(args),
        },
    }
    response = await get_rest_client().patch(f"{scope}/policies/{quote_segment(policy_id)}", json=payload)
    response.raise_for_status()
    policy = response.json().get("data") or {}
    return to_result({
        "success": True,
        "policy": _policy_fields(policy, "name", "action_type", "action", "conditions_group", "updated_at"),
    })


def _scope_properties(verb: str) -> dict:
    return {
        "org_id": ORG_ID_PROPERTY,
        "group_id": {"type": "string", "description": f"The group ID (if {verb} group-level policies)"},
    }


def get_tools() -> dict[str, Any]:
    attribute_properties = {
        "name": {"type": "string", "description": "The policy name"},
        "action_type": {"type": "string", "description": "The action type (e.g., 'ignore')"},
        "action": {
            "type": "object",
            "description": "Action configuration (e.g., {ignore_type: 'temporary', reason: 'false positive'})",
        },
        "conditions_group": {
            "type": "object",
            "description": "Conditions group defining when the policy applies",
        },
    }
    return {
        "snyk_list_policies": {
            "func": list_policies,
            "title": "List policies",
            "description": "List all policies for an organization or group",
            "input_schema": object_schema({**_scope_properties("listing"), "limit": limit_property("policies")}),
        },
        "snyk_get_policy": {
            "func": get_policy,
            "title": "Get policy",
            "description": "Get details about a specific policy",
            "input_schema": object_schema(
                {"policy_id": {"type": "string", "description": "The policy ID"}, **_scope_properties("getting")},
                required=["policy_id"],
            ),
        },
        "snyk_create_policy": {
            "func": create_policy,
            "title": "Create policy",
            "description": "Create a new policy for an organization or group",
            "input_schema": object_schema(
                {**_scope_properties("creating"), **attribute_properties},
                required=["name", "action_type"],
            ),
        },
        "snyk_update_policy": {
            "func": update_policy,
            "title": "Update policy",
            "description": "Update an existing policy",
            "input_schema": object_schema(
                {
                    "policy_id": {"type": "string", "description": "The policy ID to update"},
                    **_scope_properties("updating"),
                    **attribute_properties,
                },
                required=["policy_id"],
            ),
        },
    }

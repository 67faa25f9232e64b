"""Argument checks and result rendering shared by every Snyk tool.

Tools receive the raw argument dict from the MCP client. These helpers decode
the few shapes that recur (organization scope, limits, required and enum
fields) and return an error payload instead of raising, so a tool can hand the
payload straight back to the caller.
"""
from __future__ import annotations

import json
import math
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple
from urllib.parse import quote

from core.config import get_default_org_id  # type: ignore

MAX_PAGE_SIZE = 100
DEFAULT_LIMIT = 100

ORG_REQUIRED = "org_id is required (set SNYK_ORG_ID or provide org_id parameter)"
ORG_OR_GROUP_REQUIRED = "org_id or group_id is required (set SNYK_ORG_ID or provide org_id/group_id parameter)"


def to_result(payload: Any) -> str:
    """Serialize a tool result the way every tool returns it."""
    return json.dumps(payload, indent=2, default=str)


def error_result(message: str, **extra: Any) -> str:
    return to_result({"error": message, **extra})


def is_missing(value: Any) -> bool:
    return value is None or value == ""


def resolve_org_id(args: Mapping[str, Any]) -> Optional[str]:
    """Explicit `org_id` wins over the configured default organization."""
    org_id = args.get("org_id")
    if is_missing(org_id):
        return get_default_org_id()
    return str(org_id)


def resolve_scope(args: Mapping[str, Any]) -> Optional[str]:
    """Return the REST path prefix for group- or org-scoped resources.

    `/groups/<group_id>` when a group is given, else `/orgs/<org_id>`, else None.
    """
    group_id = args.get("group_id")
    if not is_missing(group_id):
        return f"/groups/{quote_segment(group_id)}"
    org_id = resolve_org_id(args)
    if org_id:
        return f"/orgs/{quote_segment(org_id)}"
    return None


def quote_segment(value: Any) -> str:
    return quote(str(value), safe="")


def validate_required(args: Mapping[str, Any], *field_names: str) -> Optional[Dict[str, Any]]:
    for name in field_names:
        if is_missing(args.get(name)):
            return {
                "error": f"Missing required parameter: {name}",
                "help": f"Please provide a valid value for {name}",
            }
    return None


def validate_enum(value: Any, field_name: str, allowed: Iterable[str]) -> Optional[Dict[str, Any]]:
    allowed = list(allowed)
    if value not in allowed:
        return {
            "error": f"Invalid value for {field_name}: {value}",
            "help": f"Allowed values are: {', '.join(allowed)}",
            "provided": value,
        }
    return None


def resolve_limit(args: Mapping[str, Any]) -> Tuple[Optional[int], Optional[Dict[str, Any]]]:
    """Decode `limit` into a positive int (default 100) or a validation error."""
    raw = args.get("limit")
    if is_missing(raw) or raw == 0:
        return DEFAULT_LIMIT, None
    if isinstance(raw, bool):
        raw = None
    try:
        limit = int(math.ceil(float(raw)))
    except (TypeError, ValueError, OverflowError):
        limit = 0
    if limit <= 0:
        return None, {
            "error": f"Invalid value for limit: {raw}",
            "help": "limit must be a positive number",
            "provided": args.get("limit"),
        }
    return limit, None


def page_plan(limit: int) -> Tuple[int, int]:
    """Return (page size, page ceiling) for fetching `limit` items."""
    return min(limit, MAX_PAGE_SIZE), math.ceil(limit / MAX_PAGE_SIZE)


def as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)

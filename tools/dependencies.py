"""Tools describing what a project is made of: its SBOM and its dependency graph."""
import logging
from typing import Any, Mapping

from core.clients import get_rest_client, get_v1_client  # type: ignore
from core.errors import format_error  # type: ignore
from core.handler import snyk_tool  # type: ignore
from core.registry import ORG_ID_PROPERTY, object_schema  # type: ignore
from utils import parse_response_body  # type: ignore
from utils.arguments import (  # type: ignore
    ORG_REQUIRED,
    error_result,
    is_missing,
    quote_segment,
    resolve_org_id,
    to_result,
    validate_enum,
    validate_required,
)

logger = logging.getLogger(__name__)

SBOM_FORMATS = ["cyclonedx+json", "cyclonedx+xml", "spdx+json"]
DEFAULT_SBOM_FORMAT = "cyclonedx+json"


@snyk_tool
async def get_sbom(args: Mapping[str, Any]) -> str:
    """Export a project's SBOM.

    JSON formats are returned as pretty-printed JSON, XML formats as the raw document.
    """
    org_id = resolve_org_id(args)
    if not org_id:
        return error_result(ORG_REQUIRED)
    missing = validate_required(args, "project_id")
    if missing:
        return to_result(missing)
    sbom_format = DEFAULT_SBOM_FORMAT if is_missing(args.get("format")) else args["format"]
    invalid = validate_enum(sbom_format, "format", SBOM_FORMATS)
    if invalid:
        return to_result(invalid)

    response = await get_rest_client().get(
        f"/orgs/{quote_segment(org_id)}/projects/{quote_segment(args['project_id'])}/sbom",
        params={"format": sbom_format},
        headers={"Accept": "application/json" if "json" in sbom_format else "application/xml"},
    )
    response.raise_for_status()
    body = parse_response_body(response)
    if isinstance(body, str):
        return body
    return to_result(body)


@snyk_tool
async def list_dependencies(args: Mapping[str, Any]) -> str:
    """List a project's dependencies.

    Tries the V1 dep-graph endpoint first and falls back to the org-wide
    dependencies listing filtered by project. If both fail, the dep-graph
    error is the one reported.
    """
    org_id = resolve_org_id(args)
    if not org_id:
        return error_result(ORG_REQUIRED)
    missing = validate_required(args, "project_id")
    if missing:
        return to_result(missing)

    project_id = args["project_id"]
    client = get_v1_client()
    try:
        response = await client.post(
            f"/org/{quote_segment(org_id)}/project/{quote_segment(project_id)}/dep-graph"
        )
        response.raise_for_status()
        return to_result({
            "project_id": project_id,
            "dep_graph": response.json().get("depGraph"),
        })
    except Exception as primary_error:
        logger.info(f"dep-graph lookup failed for project {project_id} ({format_error(primary_error)}); "
                    "trying dependencies listing")
        try:
            response = await client.get(
                f"/org/{quote_segment(org_id)}/dependencies",
                params={"projectIds": project_id},
            )
            response.raise_for_status()
            data = response.json()
            return to_result({
                "project_id": project_id,
                "dependencies": data.get("results"),
                "total": data.get("total"),
            })
        except Exception as fallback_error:
            logger.warning(f"dependencies listing also failed for project {project_id}: "
                           f"{format_error(fallback_error)}")
            return error_result(format_error(primary_error))


def get_tools() -> dict[str, Any]:
    return {
        "snyk_get_sbom": {
            "func": get_sbom,
            "title": "Get project SBOM",
            "description": "Export a project's Software Bill of Materials (SBOM) in CycloneDX or SPDX format",
            "input_schema": object_schema(
                {
                    "org_id": ORG_ID_PROPERTY,
                    "project_id": {"type": "string", "description": "The project ID"},
                    "format": {
                        "type": "string",
                        "description": "SBOM format",
                        "enum": SBOM_FORMATS,
                        "default": DEFAULT_SBOM_FORMAT,
                    },
                },
                required=["project_id"],
            ),
        },
        "snyk_list_dependencies": {
            "func": list_dependencies,
            "title": "List project dependencies",
            "description": "List all dependencies for a project (V1 API)",
            "input_schema": object_schema(
                {
                    "org_id": ORG_ID_PROPERTY,
                    "project_id": {"type": "string", "description": "The project ID"},
                },
                required=["project_id"],
            ),
        },
    }

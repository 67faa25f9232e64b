from typing import Any, Mapping

from core.clients import get_rest_client, get_v1_client  # type: ignore
from core.handler import snyk_tool  # type: ignore
from core.registry import ORG_ID_PROPERTY, object_schema  # type: ignore
from utils.arguments import (  # type: ignore
    ORG_REQUIRED,
    error_result,
    quote_segment,
    resolve_org_id,
    to_result,
    validate_required,
)

# package manager name -> V1 /test endpoint segment
TEST_ENDPOINTS = {
    "npm": "npm",
    "maven": "maven",
    "pip": "pip",
    "rubygems": "rubygems",
    "nuget": "nuget",
    "composer": "composer",
    "golang": "golangdep",
    "cargo": "cargo",
}


@snyk_tool
async def test_package(args: Mapping[str, Any]) -> str:
    """Test one package version for known vulnerabilities without importing a project.

    The organization is optional here; when known it is passed as `org` so the
    test counts against that organization.
    """
    missing = validate_required(args, "package_manager", "package_name", "package_version")
    if missing:
        return to_result(missing)
    package_manager = args["package_manager"]
    endpoint = TEST_ENDPOINTS.get(package_manager) if isinstance(package_manager, str) else None
    if not endpoint:
        return error_result(
            f"Unsupported package manager: {package_manager}",
            help=f"Allowed values are: {', '.join(TEST_ENDPOINTS)}",
            provided=package_manager,
        )

    org_id = resolve_org_id(args)
    package_version = args["package_version"]
    response = await get_v1_client().get(
        f"/test/{endpoint}/{quote_segment(args['package_name'])}/{quote_segment(package_version)}",
        params={"org": org_id} if org_id else None,
    )
    response.raise_for_status()
    data = response.json()
    issues = data.get("issues") or {}
    vulnerabilities = issues.get("vulnerabilities") or []
    return to_result({
        "ok": data.get("ok"),
        "issues_count": len(vulnerabilities),
        "vulnerabilities": [
            {
                "id": vuln.get("id"),
                "title": vuln.get("title"),
                "severity": vuln.get("severity"),
                "cvssScore": vuln.get("cvssScore"),
                "exploit": vuln.get("exploit"),
                "fixedIn": vuln.get("fixedIn"),
            }
            for vuln in vulnerabilities
        ],
        "licenses": issues.get("licenses"),
        "package_info": {
            "name": data.get("packageManager"),
            "version": package_version,
        },
    })


@snyk_tool
async def list_package_issues(args: Mapping[str, Any]) -> str:
    org_id = resolve_org_id(args)
    if not org_id:
        return error_result(ORG_REQUIRED)
    missing = validate_required(args, "purl")
    if missing:
        return to_result(missing)

    purl = args["purl"]
    response = await get_rest_client().get(
        f"/orgs/{quote_segment(org_id)}/packages/{quote_segment(purl)}/issues"
    )
    response.raise_for_status()
    issues = response.json().get("data") or []
    return to_result({
        "purl": purl,
        "issues": [
            {
                "id": issue.get("id"),
                "title": (issue.get("attributes") or {}).get("title"),
                "type": (issue.get("attributes") or {}).get("type"),
                "severity": (issue.get("attributes") or {}).get("effective_severity_level"),
            }
            for issue in issues
        ],
    })


def get_tools() -> dict[str, Any]:
    return {
        "snyk_test_package": {
            "func": test_package,
            "title": "Test package",
            "description": "Test a package for known vulnerabilities without importing a project",
            "input_schema": object_schema(
                {
                    "org_id": ORG_ID_PROPERTY,
                    "package_manager": {
                        "type": "string",
                        "description": "Package manager type",
                        "enum": list(TEST_ENDPOINTS),
                    },
                    "package_name": {
                        "type": "string",
                        "description": (
                            "The package name (e.g., 'lodash' for npm, "
                            "'org.apache.logging.log4j:log4j-core' for maven)"
                        ),
                    },
                    "package_version": {"type": "string", "description": "The package version to test"},
                },
                required=["package_manager", "package_name", "package_version"],
            ),
        },
        "snyk_list_package_issues": {
            "func": list_package_issues,
            "title": "List package issues",
            "description": "List known vulnerabilities for a package using Package URL (purl)",
            "input_schema": object_schema(
                {
                    "org_id": ORG_ID_PROPERTY,
                    "purl": {
                        "type": "string",
                        "description": (
                            "Package URL (e.g., 'pkg:npm/lodash@4.17.20', "
                            "'pkg:maven/org.apache.logging.log4j/log4j-core@2.14.0')"
                        ),
                    },
                },
                required=["purl"],
            ),
        },
    }

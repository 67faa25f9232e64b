from typing import Any, Mapping

from core.clients import get_v1_client  # type: ignore
from core.handler import snyk_tool  # type: ignore
from core.registry import object_schema  # type: ignore
from utils.arguments import to_result  # type: ignore


@snyk_tool
async def verify_token(args: Mapping[str, Any]) -> str:
    """Check the configured token by fetching the authenticated user (V1 /user/me)."""
    response = await get_v1_client().get("/user/me")
    response.raise_for_status()
    user = response.json()
    return to_result({
        "success": True,
        "user": {
            "id": user.get("id"),
            "username": user.get("username"),
            "email": user.get("email"),
            "name": user.get("name"),
        },
    })


def get_tools() -> dict[str, Any]:
    return {
        "snyk_verify_token": {
            "func": verify_token,
            "title": "Verify Snyk token",
            "description": "Verify the Snyk API token and get information about the authenticated user",
            "input_schema": object_schema({}),
        },
    }

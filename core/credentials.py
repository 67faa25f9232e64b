from typing import Any, Dict, Optional

from core.config import get_token  # type: ignore

TOKEN_HELP = (
    "Please set the SNYK_TOKEN environment variable with your Snyk API token. "
    "You can find your token at https://app.snyk.io/account or generate one via the Snyk CLI with 'snyk auth'."
)


def check_credentials() -> Optional[Dict[str, Any]]:
    """Return an error payload when no Snyk token is configured, otherwise None.

    Every tool calls this before touching a backend client.
    """
    if not get_token():
        return {
            "error": "SNYK_TOKEN environment variable is not set",
            "help": TOKEN_HELP,
        }
    return None

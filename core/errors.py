"""Turn anything a tool can fail with into one descriptive line of text.

`format_error` is the only place backend failures are rendered; tools put its
output under the `error` key of their result.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

import httpx


@dataclass(frozen=True)
class BackendError:
    """A failed Snyk API call: an HTTP error response or a transport failure."""

    status: Optional[int]
    details: List[str] = field(default_factory=list)
    message: str = ""

    def render(self) -> str:
        status = self.status if self.status is not None else "no response"
        text = "; ".join(self.details) if self.details else self.message
        return f"Backend Error ({status}): {text}"


@dataclass(frozen=True)
class GenericError:
    message: str

    def render(self) -> str:
        return self.message


@dataclass(frozen=True)
class UnknownError:
    value: str

    def render(self) -> str:
        return self.value


ClassifiedError = Union[BackendError, GenericError, UnknownError]


def _error_details(response: httpx.Response) -> List[str]:
    """Collect `detail` (or `title`) from a JSON:API `errors` array, if the body has one."""
    try:
        body = response.json()
    except Exception:
        return []
    if not isinstance(body, dict):
        return []
    errors = body.get("errors")
    if not isinstance(errors, list):
        return []
    details = []
    for entry in errors:
        if isinstance(entry, dict):
            text = entry.get("detail") or entry.get("title")
            if text:
                details.append(str(text))
    return details


def _first_line(text: str) -> str:
    # httpx appends a documentation link on a second line
    lines = text.splitlines()
    return lines[0] if lines else text


def classify_error(value: Any) -> ClassifiedError:
    if isinstance(value, httpx.HTTPStatusError):
        return BackendError(
            status=value.response.status_code,
            details=_error_details(value.response),
            message=_first_line(str(value)),
        )
    if isinstance(value, httpx.RequestError):
        return BackendError(status=None, message=str(value) or type(value).__name__)
    if isinstance(value, BaseException):
        return GenericError(str(value) or type(value).__name__)
    try:
        text = str(value)
    except Exception:
        text = repr(value)
    return UnknownError(text)


def format_error(value: Any) -> str:
    """Render any caught failure as a single string. Never raises."""
    try:
        return classify_error(value).render()
    except Exception:
        return object.__repr__(value)

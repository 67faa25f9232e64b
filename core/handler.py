"""Common wrapper for Snyk tool coroutines.

`snyk_tool` runs the credential check before the tool body and turns any
failure raised by the body into an `{"error": ...}` result, so tool modules
only contain request building and response reshaping.
"""
from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional

from core.credentials import check_credentials  # type: ignore
from core.errors import format_error  # type: ignore
from utils.arguments import error_result, to_result  # type: ignore

logger = logging.getLogger(__name__)

ToolFunc = Callable[[Mapping[str, Any]], Awaitable[str]]


def snyk_tool(func: ToolFunc) -> Callable[[Optional[Mapping[str, Any]]], Awaitable[str]]:
    @functools.wraps(func)
    async def wrapper(args: Optional[Mapping[str, Any]] = None) -> str:
        cred_error = check_credentials()
        if cred_error:
            return to_result(cred_error)
        try:
            return await func(args or {})
        except Exception as e:
            message = format_error(e)
            logger.warning(f"{func.__name__} failed: {message}")
            return error_result(message)

    return wrapper

"""Utilities for turning Snyk HTTP response bodies into Python values.

Most Snyk endpoints answer with JSON, but some (SBOM export in XML formats,
error pages from proxies) answer with plain text. `parse_response_body`
returns the decoded JSON when possible and the raw text otherwise, so tools
can pass either on to the caller.
"""
from __future__ import annotations

import json
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


def robust_parse_text(text: str) -> Any:
    """Try to parse text as JSON, then as NDJSON, else return the raw text."""
    if not text:
        return text

    try:
        return json.loads(text)
    except ValueError:
        pass

    # NDJSON: one JSON document per non-empty line
    try:
        objs = [json.loads(ln) for ln in text.splitlines() if ln.strip()]
        if objs:
            return objs if len(objs) > 1 else objs[0]
    except ValueError:
        pass

    return text


def parse_response_body(response: httpx.Response) -> Any:
    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        try:
            return response.json()
        except ValueError as e:
            logger.warning(
                f"Failed to decode JSON from {response.request.url}: {e}; returning parsed fallback"
            )
    return robust_parse_text(response.text)

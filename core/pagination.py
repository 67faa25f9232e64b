"""Follow `links.next` across Snyk REST list responses and collect every item."""
from __future__ import annotations

import logging
from typing import Any, List, Optional, Tuple

import httpx

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 10


class PaginationError(Exception):
    """Raised when a next-page link points outside the client's base URL."""


def _relative_next(client: httpx.AsyncClient, next_link: str) -> str:
    if not next_link.startswith(("http://", "https://")):
        return next_link
    base = str(client.base_url).rstrip("/")
    if next_link == base or next_link.startswith(base + "/") or next_link.startswith(base + "?"):
        return next_link[len(base):] or "/"
    raise PaginationError(f"Refusing to follow next page link outside {base}: {next_link}")


def _split_link(link: str) -> Tuple[str, httpx.QueryParams]:
    # httpx drops a query string embedded in the path when the client has default params
    path, _, query = link.partition("?")
    return path, httpx.QueryParams(query)


async def fetch_all_pages(
    client: httpx.AsyncClient,
    start_path: str,
    max_pages: int = DEFAULT_MAX_PAGES,
    params: Optional[Any] = None,
) -> List[Any]:
    """Fetch `start_path` and every following page, up to `max_pages` requests.

    `params` (a mapping or a list of pairs, for repeated keys) apply to the first
    request only; later pages carry their own query in `links.next`. Both are
    merged with the client's default params, so `version` is always sent.

    Items from each page's `data` array are concatenated in order. The loop stops
    when a page has no `links.next` or when the page ceiling is reached; hitting
    the ceiling is not reported. HTTP errors from any page propagate.
    """
    items: List[Any] = []
    cursor: Optional[str] = start_path
    pages = 0

    while cursor and pages < max_pages:
        logger.debug("Fetching page %d: %s", pages + 1, cursor)
        path, query = _split_link(cursor)
        if pages == 0 and params:
            query = query.merge(params)
        response = await client.get(path, params=query)
        response.raise_for_status()
        payload = response.json()
        items.extend(payload.get("data") or [])

        next_link = (payload.get("links") or {}).get("next")
        cursor = _relative_next(client, next_link) if next_link else None
        pages += 1

    return items

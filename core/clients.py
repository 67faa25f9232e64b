"""Lazily created, process-wide httpx clients for the two Snyk backends.

The REST API (JSON:API, calendar-versioned) and the legacy V1 API each get one
`httpx.AsyncClient`. Clients are built on first use, after the credential
check has passed, and reused for the rest of the process so connections are
pooled.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from typing import Optional

import httpx

from core.config import get_api_version, get_config, get_http_settings, get_token  # type: ignore

logger = logging.getLogger(__name__)

REST_CONTENT_TYPE = "application/vnd.api+json"
V1_CONTENT_TYPE = "application/json"

_lock = threading.Lock()
_rest_client: Optional[httpx.AsyncClient] = None
_v1_client: Optional[httpx.AsyncClient] = None


class DeadlineTransport(httpx.AsyncBaseTransport):
    """Bounds a whole request, body included, by one absolute deadline.

    httpx timeouts apply per phase (connect, read, write, pool), so a server
    that trickles its response can outlast them. The body is read inside the
    deadline and the response is returned fully buffered.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport, seconds: float):
        self._transport = transport
        self._seconds = seconds

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        async def send() -> httpx.Response:
            response = await self._transport.handle_async_request(request)
            try:
                await response.aread()
            except BaseException:
                await response.aclose()
                raise
            return response

        try:
            return await asyncio.wait_for(send(), self._seconds)
        except asyncio.TimeoutError:
            raise httpx.ReadTimeout(
                f"Request did not complete within {self._seconds:g}s", request=request
            ) from None

    async def aclose(self) -> None:
        await self._transport.aclose()


def _build_client(
    base_url: str,
    content_type: str,
    params: Optional[dict] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    http_cfg = get_http_settings()
    timeout = float(http_cfg.get("timeout", 30.0))
    limits = httpx.Limits(
        max_connections=int(http_cfg.get("max_connections", 50)),
        max_keepalive_connections=int(http_cfg.get("max_keepalive_connections", 10)),
        keepalive_expiry=float(http_cfg.get("keepalive_expiry", 60.0)),
    )
    if transport is None:
        transport = httpx.AsyncHTTPTransport(limits=limits)
    return httpx.AsyncClient(
        base_url=base_url,
        headers={
            "Authorization": f"token {get_token()}",
            "Content-Type": content_type,
        },
        params=params,
        timeout=httpx.Timeout(timeout),
        transport=DeadlineTransport(transport, timeout),
    )


def get_rest_client() -> httpx.AsyncClient:
    """Return the shared REST API client, creating it on first use."""
    global _rest_client
    if _rest_client is None:
        with _lock:
            if _rest_client is None:
                base_url = get_config()["snyk_rest_api_url"].rstrip("/")
                _rest_client = _build_client(
                    base_url, REST_CONTENT_TYPE, params={"version": get_api_version()}
                )
                logger.info("Created Snyk REST client for %s (version %s)", base_url, get_api_version())
    return _rest_client


def get_v1_client() -> httpx.AsyncClient:
    """Return the shared V1 API client, creating it on first use."""
    global _v1_client
    if _v1_client is None:
        with _lock:
            if _v1_client is None:
                base_url = get_config()["snyk_v1_api_url"].rstrip("/")
                _v1_client = _build_client(base_url, V1_CONTENT_TYPE)
                logger.info("Created Snyk V1 client for %s", base_url)
    return _v1_client


async def aclose_clients() -> None:
    """Close any clients that were created. Called on server shutdown."""
    global _rest_client, _v1_client
    with _lock:
        clients = [c for c in (_rest_client, _v1_client) if c is not None]
        _rest_client = None
        _v1_client = None
    for client in clients:
        await client.aclose()


def reset_clients() -> None:
    """Forget the memoized clients without closing them. Used by tests."""
    global _rest_client, _v1_client
    with _lock:
        _rest_client = None
        _v1_client = None

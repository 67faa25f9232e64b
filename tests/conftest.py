"""
Shared fixtures for the Snyk MCP server tests.

Every test starts from a clean configuration (token set, no default org, built-in
defaults instead of config.yaml) and without memoized HTTP clients. The
`snyk_api` fixture routes both backend clients to an in-memory fake of the
Snyk APIs built on httpx.MockTransport.
"""

import functools
import json
from typing import Any, Callable, Dict, List, Tuple, Union

import httpx
import pytest

from core import clients
from core.config import ConfigLoader

REST_PREFIX = "/rest"
V1_PREFIX = "/v1"

Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeSnykApi:
    """Answers requests by (method, path); unknown routes get a JSON:API 404."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Route] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, route: Route) -> None:
        self.routes[(method.upper(), path)] = route

    def json(self, method: str, path: str, payload: Any, status_code: int = 200) -> None:
        self.add(method, path, httpx.Response(status_code, json=payload))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"errors": [{"title": "Not Found", "detail": f"No route {request.url.path}"}]})
        if callable(route):
            return route(request)
        return route

    def body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


def make_items(prefix: str, count: int, start: int = 0) -> List[Dict[str, Any]]:
    return [
        {"id": f"{prefix}-{i}", "type": prefix, "attributes": {"name": f"{prefix} {i}"}}
        for i in range(start, start + count)
    ]


@pytest.fixture(autouse=True)
def snyk_env(monkeypatch, tmp_path):
    monkeypatch.setenv("SNYK_TOKEN", "test-token")
    monkeypatch.delenv("SNYK_ORG_ID", raising=False)
    monkeypatch.delenv("SNYK_API_VERSION", raising=False)
    monkeypatch.delenv("SNYK_MCP_LOG_LEVEL", raising=False)
    monkeypatch.setenv("SNYK_MCP_CONFIG", str(tmp_path / "absent-config.yaml"))
    ConfigLoader.reset()
    clients.reset_clients()
    yield
    ConfigLoader.reset()
    clients.reset_clients()


@pytest.fixture
def no_token(monkeypatch):
    monkeypatch.delenv("SNYK_TOKEN", raising=False)
    ConfigLoader.reset()


@pytest.fixture
def default_org(monkeypatch):
    monkeypatch.setenv("SNYK_ORG_ID", "org-default")
    ConfigLoader.reset()
    return "org-default"


@pytest.fixture
def snyk_api(monkeypatch):
    api = FakeSnykApi()
    transport = httpx.MockTransport(api.handler)
    monkeypatch.setattr(clients, "_build_client", functools.partial(clients._build_client, transport=transport))
    return api

"""Tests for the memoized backend clients."""

import asyncio

import httpx
import pytest

from core import clients
from core.config import ConfigLoader


class TestBackendClients:

    def test_rest_client_configuration(self):
        client = clients.get_rest_client()

        assert str(client.base_url) == "https://api.snyk.io/rest/"
        assert client.headers["Authorization"] == "token test-token"
        assert client.headers["Content-Type"] == "application/vnd.api+json"
        assert client.params["version"] == "2024-10-15"
        assert client.timeout == httpx.Timeout(30.0)

    def test_v1_client_configuration(self):
        client = clients.get_v1_client()

        assert str(client.base_url) == "https://api.snyk.io/v1/"
        assert client.headers["Authorization"] == "token test-token"
        assert client.headers["Content-Type"] == "application/json"
        assert "version" not in client.params

    def test_clients_are_built_once(self, monkeypatch):
        built = []
        original = clients._build_client

        def counting_build(*args, **kwargs):
            built.append(args[0])
            return original(*args, **kwargs)

        monkeypatch.setattr(clients, "_build_client", counting_build)

        assert clients.get_rest_client() is clients.get_rest_client()
        assert clients.get_v1_client() is clients.get_v1_client()
        assert built == ["https://api.snyk.io/rest", "https://api.snyk.io/v1"]

    def test_memoized_client_ignores_later_configuration(self, monkeypatch):
        client = clients.get_rest_client()
        monkeypatch.setenv("SNYK_TOKEN", "other-token")
        ConfigLoader.reset()

        again = clients.get_rest_client()

        assert again is client
        assert again.headers["Authorization"] == "token test-token"

    @pytest.mark.asyncio
    async def test_aclose_clients_forgets_handles(self):
        rest = clients.get_rest_client()
        await clients.aclose_clients()

        assert rest.is_closed
        assert clients.get_rest_client() is not rest

    def test_connection_pool_limits(self, monkeypatch):
        for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
            monkeypatch.delenv(name, raising=False)
        created = []
        real_transport = httpx.AsyncHTTPTransport

        def recording_transport(**kwargs):
            created.append(kwargs["limits"])
            return real_transport(**kwargs)

        monkeypatch.setattr(httpx, "AsyncHTTPTransport", recording_transport)

        clients.get_rest_client()
        clients.get_v1_client()
        clients.get_rest_client()

        expected = httpx.Limits(max_connections=50, max_keepalive_connections=10, keepalive_expiry=60.0)
        assert created == [expected, expected]


class TestDeadlineTransport:

    @pytest.mark.asyncio
    async def test_slow_response_is_cut_off(self):
        async def slow(request):
            await asyncio.sleep(1)
            return httpx.Response(200, json={})

        transport = clients.DeadlineTransport(httpx.MockTransport(slow), 0.05)
        async with httpx.AsyncClient(base_url="https://api.snyk.io/v1", transport=transport) as client:
            with pytest.raises(httpx.ReadTimeout, match="within 0.05s"):
                await client.get("/user/me")

    @pytest.mark.asyncio
    async def test_trickled_body_counts_toward_deadline(self):
        async def trickle():
            for chunk in (b'{"data"', b": []}"):
                await asyncio.sleep(0.5)
                yield chunk

        def handler(request):
            return httpx.Response(200, content=trickle())

        transport = clients.DeadlineTransport(httpx.MockTransport(handler), 0.05)
        async with httpx.AsyncClient(base_url="https://api.snyk.io/rest", transport=transport) as client:
            with pytest.raises(httpx.ReadTimeout):
                await client.get("/orgs")

    @pytest.mark.asyncio
    async def test_fast_response_is_buffered(self):
        transport = clients.DeadlineTransport(
            httpx.MockTransport(lambda request: httpx.Response(200, json={"id": "u1"})), 5.0
        )
        async with httpx.AsyncClient(base_url="https://api.snyk.io/v1", transport=transport) as client:
            response = await client.get("/user/me")

        assert response.json() == {"id": "u1"}

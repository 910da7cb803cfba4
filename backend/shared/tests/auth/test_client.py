"""Tests for BackendAuthClient against a mocked auth endpoint."""

from __future__ import annotations

import httpx
import pytest

from shared.auth.client import BackendAuthClient
from shared.settings import BackendSettings

SETTINGS = BackendSettings(url="http://backend.test/", anon_key="anon")


def _client(handler) -> BackendAuthClient:
    return BackendAuthClient(SETTINGS, transport=httpx.MockTransport(handler))


async def test_valid_token_resolves_session():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["apikey"] = request.headers["apikey"]
        seen["auth"] = request.headers["authorization"]
        return httpx.Response(200, json={"id": "user-1", "email": "a@example.com"})

    session = await _client(handler).get_session("tok")

    assert session is not None
    assert session.user_id == "user-1"
    assert session.email == "a@example.com"
    assert session.access_token == "tok"
    assert seen == {"url": "http://backend.test/auth/v1/user", "apikey": "anon", "auth": "Bearer tok"}


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, json={"message": "invalid JWT"}),
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json={"email": "a@example.com"}),
        httpx.Response(200, json=["unexpected"]),
    ],
)
async def test_rejected_or_malformed_returns_none(response):
    assert await _client(lambda _request: response).get_session("tok") is None


async def test_transport_error_returns_none():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    assert await _client(handler).get_session("tok") is None


async def test_empty_token_skips_lookup():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"id": "user-1"})

    assert await _client(handler).get_session("") is None
    assert calls == []

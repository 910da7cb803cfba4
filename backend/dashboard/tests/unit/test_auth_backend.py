"""Tests for the bearer token authentication backend."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from dashboard.auth.backend import BearerTokenBackend, extract_access_token
from dashboard.auth.models import AuthenticatedUser
from shared.auth.models import AuthSession

SESSION = AuthSession(user_id="user-1", access_token="tok", email="user@example.com")


def _conn(*, headers=None, query=None, kind="http") -> MagicMock:
    conn = MagicMock()
    conn.headers = headers or {}
    conn.query_params = query or {}
    conn.scope = {"type": kind}
    return conn


@pytest.fixture
def auth_client() -> MagicMock:
    client = MagicMock()
    client.get_session = AsyncMock(return_value=SESSION)
    return client


class TestExtractAccessToken:
    def test_bearer_header(self):
        assert extract_access_token(_conn(headers={"authorization": "Bearer tok"})) == "tok"

    def test_scheme_is_case_insensitive(self):
        assert extract_access_token(_conn(headers={"authorization": "bearer tok"})) == "tok"

    def test_empty_bearer(self):
        assert extract_access_token(_conn(headers={"authorization": "Bearer  "})) is None

    def test_query_param_on_websocket(self):
        assert extract_access_token(_conn(query={"access_token": "tok"}, kind="websocket")) == "tok"

    def test_query_param_ignored_on_http(self):
        assert extract_access_token(_conn(query={"access_token": "tok"})) is None


class TestBearerTokenBackend:
    async def test_valid_token_authenticates(self, auth_client):
        backend = BearerTokenBackend(auth_client)

        result = await backend.authenticate(_conn(headers={"authorization": "Bearer tok"}))

        assert result is not None
        creds, user = result
        assert "authenticated" in creds.scopes
        assert isinstance(user, AuthenticatedUser)
        assert user.user_id == "user-1"
        assert user.session is SESSION
        auth_client.get_session.assert_awaited_once_with("tok")

    async def test_missing_token_skips_lookup(self, auth_client):
        backend = BearerTokenBackend(auth_client)

        assert await backend.authenticate(_conn()) is None
        auth_client.get_session.assert_not_awaited()

    async def test_rejected_token(self, auth_client):
        auth_client.get_session.return_value = None
        backend = BearerTokenBackend(auth_client)

        assert await backend.authenticate(_conn(headers={"authorization": "Bearer bad"})) is None

"""Shared fixtures for dashboard integration tests."""

from __future__ import annotations

from datetime import UTC, datetime

import httpx
import pytest

from dashboard.server.app import create_app
from dashboard.server.services import DashboardServices
from dashboard.server.settings import DashboardServerSettings
from dashboard.status.types import ProbePlayers, ProbeResult
from dashboard.tests.mocks.repositories import InMemoryProfileRepository, InMemoryServerRepository, StubProbe
from shared.auth.client import BackendAuthClient
from shared.dal.models import Profile, ServerRecord
from shared.settings import BackendSettings

BACKEND_SETTINGS = BackendSettings(url="http://backend.test", anon_key="test-anon-key")

# access token -> (user id, email)
USERS = {
    "tok-alice": ("alice", "alice@example.com"),
    "tok-bob": ("bob", "bob@example.com"),
}


def _auth_handler(request: httpx.Request) -> httpx.Response:
    token = request.headers.get("authorization", "").removeprefix("Bearer ")
    user = USERS.get(token)
    if user is None:
        return httpx.Response(401, json={"message": "invalid JWT"})
    return httpx.Response(200, json={"id": user[0], "email": user[1]})


@pytest.fixture
def server_repo() -> InMemoryServerRepository:
    return InMemoryServerRepository(
        [
            ServerRecord(id="1", name="alpha", url="alpha.example", owner_id="alice"),
            ServerRecord(id="2", name="beta", ip="10.0.0.2", port="25565", owner_id="alice"),
            ServerRecord(id="3", name="gamma", url="gamma.example", owner_id="bob"),
        ],
    )


@pytest.fixture
def profile_repo() -> InMemoryProfileRepository:
    created = datetime.now(tz=UTC)
    return InMemoryProfileRepository(
        [
            Profile(id="alice", username="alice", email="alice@example.com", is_admin=True, created_at=created),
            Profile(id="bob", email="bob@example.com", created_at=created),
        ],
    )


@pytest.fixture
def probe() -> StubProbe:
    return StubProbe(
        results={"alpha.example": ProbeResult(online=True, players=ProbePlayers(online=5, max=20))},
        default=ProbeResult(online=False),
    )


@pytest.fixture
def settings() -> DashboardServerSettings:
    # TestClient sends no Origin header, so origin checking is off unless a test opts in
    return DashboardServerSettings(ws_allowed_origin=None, refresh_interval_seconds=3600)


@pytest.fixture
def make_app(server_repo, profile_repo, probe):
    def factory(settings: DashboardServerSettings):
        services = DashboardServices(settings, probe, lambda _session: server_repo, lambda _session: profile_repo)
        auth_client = BackendAuthClient(BACKEND_SETTINGS, transport=httpx.MockTransport(_auth_handler))
        return create_app(settings, BACKEND_SETTINGS, services=services, auth_client=auth_client)

    return factory


@pytest.fixture
def app(make_app, settings):
    return make_app(settings)

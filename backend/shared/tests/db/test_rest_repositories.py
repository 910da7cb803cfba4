"""Tests for the REST-backed server and profile repositories."""

from __future__ import annotations

import json

import httpx
import pytest

from shared.auth.models import AuthSession
from shared.auth.session import SessionContext
from shared.dal.errors import PersistenceError
from shared.dal.models import ServerRecord, ServerStatus
from shared.db.connection import BackendConnection
from shared.db.profile_repository import RestProfileRepository
from shared.db.server_repository import RestServerRepository
from shared.settings import BackendSettings

SETTINGS = BackendSettings(url="http://backend.test", anon_key="anon")
SESSION = SessionContext(AuthSession(user_id="owner-1", access_token="tok"))

SERVER_ROW = {
    "id": 1,
    "name": "alpha",
    "ip": "10.0.0.1",
    "port": 25565,
    "url": None,
    "status": "Online",
    "players": 4,
    "owner_id": "owner-1",
    "created_at": "2025-03-01T10:00:00+00:00",
    "updated_at": None,
}

PROFILE_ROW = {
    "id": "owner-1",
    "username": "alice",
    "email": "alice@example.com",
    "avatar_url": None,
    "is_admin": True,
    "created_at": "2025-01-01T00:00:00+00:00",
    "updated_at": None,
}


class _Recorder:
    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


@pytest.fixture
async def connection_factory():
    opened: list[BackendConnection] = []

    def factory(recorder: _Recorder) -> BackendConnection:
        conn = BackendConnection(SETTINGS, transport=httpx.MockTransport(recorder))
        conn.connect()
        opened.append(conn)
        return conn

    yield factory
    for conn in opened:
        await conn.close()


class TestRestServerRepository:
    async def test_list_filters_and_orders(self, connection_factory):
        recorder = _Recorder(httpx.Response(200, json=[SERVER_ROW]))
        repo = RestServerRepository(connection_factory(recorder), SESSION)

        records = await repo.list("owner-1")

        params = recorder.requests[0].url.params
        assert params["owner_id"] == "eq.owner-1"
        assert params["order"] == "created_at.asc"
        assert records[0].id == "1"
        assert records[0].port == "25565"
        assert records[0].status is ServerStatus.ONLINE

    async def test_list_malformed_row_raises(self, connection_factory):
        recorder = _Recorder(httpx.Response(200, json=[{**SERVER_ROW, "players": -1}]))
        repo = RestServerRepository(connection_factory(recorder), SESSION)

        with pytest.raises(PersistenceError, match="Malformed"):
            await repo.list("owner-1")

    async def test_insert_omits_store_managed_fields(self, connection_factory):
        recorder = _Recorder(httpx.Response(201, json=[SERVER_ROW]))
        repo = RestServerRepository(connection_factory(recorder), SESSION)

        saved = await repo.insert(ServerRecord(name="alpha", ip="10.0.0.1", port="25565", owner_id="owner-1"))

        body = json.loads(recorder.requests[0].content)
        assert "id" not in body
        assert "created_at" not in body
        assert body["owner_id"] == "owner-1"
        assert body["status"] == "Offline"
        assert saved.id == "1"

    async def test_insert_without_rows_raises(self, connection_factory):
        recorder = _Recorder(httpx.Response(201, json=[]))
        repo = RestServerRepository(connection_factory(recorder), SESSION)

        with pytest.raises(PersistenceError, match="no rows"):
            await repo.insert(ServerRecord(name="alpha"))

    async def test_update_patches_by_id(self, connection_factory):
        recorder = _Recorder(httpx.Response(204))
        repo = RestServerRepository(connection_factory(recorder), SESSION)

        await repo.update("7", {"status": "Online", "players": 3})

        request = recorder.requests[0]
        assert request.method == "PATCH"
        assert request.url.params["id"] == "eq.7"
        assert json.loads(request.content) == {"status": "Online", "players": 3}
        assert request.headers["authorization"] == "Bearer tok"

    async def test_delete_by_id(self, connection_factory):
        recorder = _Recorder(httpx.Response(204))
        repo = RestServerRepository(connection_factory(recorder), SESSION)

        await repo.delete("7")

        assert recorder.requests[0].method == "DELETE"
        assert recorder.requests[0].url.params["id"] == "eq.7"

    async def test_store_failure_raises(self, connection_factory):
        recorder = _Recorder(httpx.Response(503))
        repo = RestServerRepository(connection_factory(recorder), SESSION)

        with pytest.raises(PersistenceError):
            await repo.update("7", {"status": "Offline"})


class TestRestProfileRepository:
    async def test_list_profiles(self, connection_factory):
        recorder = _Recorder(httpx.Response(200, json=[PROFILE_ROW]))
        repo = RestProfileRepository(connection_factory(recorder), SESSION)

        profiles = await repo.list_profiles()

        assert recorder.requests[0].url.params["order"] == "created_at.desc"
        assert profiles[0].is_admin is True
        assert profiles[0].display_name == "alice"

    async def test_get_profile_missing(self, connection_factory):
        recorder = _Recorder(httpx.Response(200, json=[]))
        repo = RestProfileRepository(connection_factory(recorder), SESSION)

        assert await repo.get_profile("ghost") is None

    async def test_get_profile_non_list_raises(self, connection_factory):
        recorder = _Recorder(httpx.Response(200, json={"id": "owner-1"}))
        repo = RestProfileRepository(connection_factory(recorder), SESSION)

        with pytest.raises(PersistenceError):
            await repo.get_profile("owner-1")

    async def test_set_admin(self, connection_factory):
        recorder = _Recorder(httpx.Response(204))
        repo = RestProfileRepository(connection_factory(recorder), SESSION)

        await repo.set_admin("u2", is_admin=True)

        request = recorder.requests[0]
        assert request.url.params["id"] == "eq.u2"
        assert json.loads(request.content) == {"is_admin": True}

"""Tests for auth policy helpers and route validation."""

from __future__ import annotations

import pytest
from starlette.authentication import AuthCredentials
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route, WebSocketRoute

from dashboard.auth.policy import (
    AUTH_POLICY_ATTR,
    admin_api,
    authenticated_websocket,
    protected_api,
    public_route,
    validate_route_auth_policy,
)


def _make_request(*, authenticated: bool) -> Request:
    scopes = ["authenticated"] if authenticated else []
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/api/servers",
        "query_string": b"",
        "headers": [],
        "root_path": "",
        "server": ("testserver", 80),
        "scheme": "http",
        "auth": AuthCredentials(scopes),
    }
    return Request(scope)


async def _handler(request: Request) -> JSONResponse:
    return JSONResponse({"ok": True})


async def _ws_handler(websocket) -> None:
    pass


class TestProtectedApi:
    async def test_unauthenticated_raises_401(self):
        endpoint = protected_api(_handler)
        with pytest.raises(HTTPException) as exc_info:
            await endpoint(_make_request(authenticated=False))
        assert exc_info.value.status_code == 401

    async def test_authenticated_passes(self):
        endpoint = protected_api(_handler)
        response = await endpoint(_make_request(authenticated=True))
        assert response.status_code == 200

    def test_marker(self):
        assert getattr(protected_api(_handler), AUTH_POLICY_ATTR) == "protected_api"


class TestAdminApi:
    async def test_unauthenticated_raises_401(self):
        endpoint = admin_api(_handler)
        with pytest.raises(HTTPException) as exc_info:
            await endpoint(_make_request(authenticated=False))
        assert exc_info.value.status_code == 401

    def test_marker(self):
        assert getattr(admin_api(_handler), AUTH_POLICY_ATTR) == "admin_api"


class TestPublicRoute:
    async def test_passes_through(self):
        endpoint = public_route(_handler)
        response = await endpoint(_make_request(authenticated=False))
        assert response.status_code == 200

    def test_marker_on_wrapper_only(self):
        endpoint = public_route(_handler)
        assert getattr(endpoint, AUTH_POLICY_ATTR) == "public"
        assert not hasattr(_handler, AUTH_POLICY_ATTR)


class TestValidateRouteAuthPolicy:
    def test_all_classified(self):
        routes = [
            Route("/health", public_route(_handler)),
            Route("/api/servers", protected_api(_handler)),
            WebSocketRoute("/ws/dashboard", authenticated_websocket(_ws_handler)),
        ]
        validate_route_auth_policy(routes)

    def test_unclassified_route_raises(self):
        async def unmarked(request: Request) -> JSONResponse:
            return JSONResponse({})

        with pytest.raises(RuntimeError, match="/api/unmarked"):
            validate_route_auth_policy([Route("/api/unmarked", unmarked)])

    def test_unclassified_websocket_raises(self):
        async def unmarked_ws(websocket) -> None:
            pass

        with pytest.raises(RuntimeError, match="/ws/raw"):
            validate_route_auth_policy([WebSocketRoute("/ws/raw", unmarked_ws)])

    def test_mount_is_exempt(self):
        validate_route_auth_policy([Mount("/static", routes=[])])

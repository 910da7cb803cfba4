"""Route auth policy helpers for fail-closed authorization.

Each helper wraps a route endpoint and sets the ``AUTH_POLICY_ATTR`` marker
so startup validation can verify every route declares a policy. Admin
checks need a profile lookup and happen in the admin service; routes that
perform them are marked ``admin_api``.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING

from starlette.authentication import requires
from starlette.routing import Mount, Route, WebSocketRoute

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from typing import Any

    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.routing import BaseRoute

AUTH_POLICY_ATTR = "__auth_policy__"


def _mark(endpoint: Callable[..., Any], policy: str) -> Callable[..., Any]:
    setattr(endpoint, AUTH_POLICY_ATTR, policy)
    return endpoint


def protected_api(endpoint: Callable[..., Any]) -> Callable[..., Any]:
    """Require authentication; raise 401 for unauthenticated API requests."""
    return _mark(requires("authenticated", status_code=401)(endpoint), "protected_api")


def admin_api(endpoint: Callable[..., Any]) -> Callable[..., Any]:
    """Require authentication here and an admin profile in the handler's service call."""
    return _mark(requires("authenticated", status_code=401)(endpoint), "admin_api")


def authenticated_websocket(endpoint: Callable[..., Any]) -> Callable[..., Any]:
    """Mark a WebSocket endpoint that checks ``websocket.user`` itself before accepting."""
    return _mark(endpoint, "authenticated_websocket")


def public_route(endpoint: Callable[..., Awaitable[Response]]) -> Callable[..., Any]:
    """Mark endpoint as explicitly public (no auth required).

    Returns a thin wrapper so the marker lives on the wrapper, not on the
    original callable.
    """

    @functools.wraps(endpoint)
    async def wrapper(request: Request, **kwargs: str) -> Response:
        return await endpoint(request, **kwargs)

    return _mark(wrapper, "public")


def validate_route_auth_policy(routes: list[BaseRoute]) -> None:
    """Verify every Route and WebSocketRoute has an auth policy marker. Mounts are exempt.

    Raises RuntimeError listing all unclassified routes if any are found.
    """
    unclassified: list[str] = []
    for route in routes:
        if isinstance(route, Mount):
            continue
        if isinstance(route, (Route, WebSocketRoute)) and not hasattr(route.endpoint, AUTH_POLICY_ATTR):
            name = route.name or getattr(route.endpoint, "__name__", "unknown")
            unclassified.append(f"{route.path} ({name})")

    if unclassified:
        details = ", ".join(unclassified)
        msg = f"Unclassified routes missing auth policy: {details}"
        raise RuntimeError(msg)

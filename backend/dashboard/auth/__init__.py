"""Dashboard authentication: Starlette backend, user model, and route policy."""

from dashboard.auth.backend import BearerTokenBackend
from dashboard.auth.models import AuthenticatedUser
from dashboard.auth.policy import (
    admin_api,
    authenticated_websocket,
    protected_api,
    public_route,
    validate_route_auth_policy,
)

__all__ = [
    "AuthenticatedUser",
    "BearerTokenBackend",
    "admin_api",
    "authenticated_websocket",
    "protected_api",
    "public_route",
    "validate_route_auth_policy",
]

"""Starlette AuthenticationBackend that resolves bearer access tokens."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.authentication import AuthCredentials, AuthenticationBackend

from dashboard.auth.models import AuthenticatedUser

if TYPE_CHECKING:
    from starlette.requests import HTTPConnection

    from shared.auth.client import BackendAuthClient

_BEARER_PREFIX = "bearer "


def extract_access_token(conn: HTTPConnection) -> str | None:
    """Read the token from the Authorization header, or from the query string on WebSockets."""
    header = conn.headers.get("authorization", "")
    if header.lower().startswith(_BEARER_PREFIX):
        return header[len(_BEARER_PREFIX) :].strip() or None
    if conn.scope["type"] == "websocket":
        return conn.query_params.get("access_token") or None
    return None


class BearerTokenBackend(AuthenticationBackend):
    """Authenticate via ``Authorization: Bearer <token>`` or ``?access_token=`` (WebSocket only).

    The token is checked against the hosted backend on every request; an
    unknown or expired token leaves the connection unauthenticated.
    """

    def __init__(self, auth_client: BackendAuthClient) -> None:
        self._auth_client = auth_client

    async def authenticate(
        self,
        conn: HTTPConnection,
    ) -> tuple[AuthCredentials, AuthenticatedUser] | None:
        token = extract_access_token(conn)
        if token is None:
            return None
        session = await self._auth_client.get_session(token)
        if session is None:
            return None
        return AuthCredentials(["authenticated"]), AuthenticatedUser(session)

"""Resolve bearer access tokens to sessions via the backend's auth endpoint."""

from __future__ import annotations

from http import HTTPStatus
from typing import TYPE_CHECKING

import httpx
import structlog

from shared.auth.models import AuthSession

if TYPE_CHECKING:
    from shared.settings import BackendSettings

logger = structlog.get_logger()


class BackendAuthClient:
    """Look up the user behind an access token.

    Token issuance, refresh and revocation all happen at the backend; this
    client only asks who a token belongs to.
    """

    def __init__(
        self,
        settings: BackendSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = settings.url.rstrip("/")
        self._anon_key = settings.anon_key
        self._transport = transport

    async def get_session(self, access_token: str) -> AuthSession | None:
        """Return the session for a valid token, or None when rejected or unreachable."""
        if not access_token:
            return None
        headers = {"apikey": self._anon_key, "Authorization": f"Bearer {access_token}"}
        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await client.get(f"{self._base_url}/auth/v1/user", headers=headers)
            except httpx.RequestError as e:
                logger.warning("auth lookup failed", error=str(e))
                return None

        if response.status_code != HTTPStatus.OK:
            return None
        try:
            data = response.json()
        except ValueError:
            logger.warning("auth lookup returned malformed body")
            return None
        user_id = data.get("id") if isinstance(data, dict) else None
        if not user_id:
            return None
        return AuthSession(user_id=str(user_id), access_token=access_token, email=data.get("email"))

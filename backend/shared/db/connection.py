"""HTTP connection to the hosted backend's REST record store."""

from __future__ import annotations

from http import HTTPStatus
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from shared.dal.errors import PersistenceError

if TYPE_CHECKING:
    from shared.settings import BackendSettings

logger = structlog.get_logger()

_REST_PREFIX = "/rest/v1"


class BackendConnection:
    """Shared httpx client for PostgREST-style table endpoints.

    Row-level security at the backend scopes every request to the owner of
    the bearer token, so callers always pass the session's access token.
    """

    def __init__(
        self,
        settings: BackendSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = settings.url.rstrip("/") + _REST_PREFIX
        self._anon_key = settings.anon_key
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Return the open client or raise if disconnected."""
        if self._client is None:
            raise RuntimeError("Backend connection is not open")
        return self._client

    def connect(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={"apikey": self._anon_key},
                transport=self._transport,
            )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        table: str,
        *,
        access_token: str | None,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
        return_rows: bool = False,
    ) -> Any:  # noqa: ANN401
        """Send one table request and return the decoded JSON body (None when empty).

        Raises PersistenceError on transport failure, non-2xx status or an
        undecodable body.
        """
        headers = {"Authorization": f"Bearer {access_token or self._anon_key}"}
        if return_rows:
            headers["Prefer"] = "return=representation"
        try:
            response = await self.client.request(method, f"/{table}", params=params, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise PersistenceError(f"{method} {table} failed: {e}") from e

        if not response.is_success:
            logger.warning(
                "record store rejected request",
                method=method,
                table=table,
                status_code=response.status_code,
            )
            raise PersistenceError(f"{method} {table} failed with status {response.status_code}")

        if response.status_code == HTTPStatus.NO_CONTENT or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise PersistenceError(f"{method} {table} returned malformed JSON") from e

"""REST-backed server record repository."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from shared.dal.errors import PersistenceError
from shared.dal.models import ServerRecord
from shared.dal.server_repository import ServerRepository

if TYPE_CHECKING:
    from shared.auth.session import SessionContext
    from shared.db.connection import BackendConnection

# Fields the store assigns itself
_SERVER_MANAGED_FIELDS = {"id", "created_at", "updated_at"}


def _parse_rows(rows: Any) -> list[ServerRecord]:  # noqa: ANN401
    if not isinstance(rows, list):
        raise PersistenceError("Expected a list of server rows")
    try:
        return [ServerRecord.model_validate(row) for row in rows]
    except ValidationError as e:
        raise PersistenceError(f"Malformed server row: {e}") from e


class RestServerRepository(ServerRepository):
    """ServerRepository over the ``servers`` table of the hosted backend."""

    def __init__(self, connection: BackendConnection, session: SessionContext, table: str = "servers") -> None:
        self._conn = connection
        self._session = session
        self._table = table

    def _token(self) -> str | None:
        current = self._session.session
        return current.access_token if current is not None else None

    async def list(self, owner_id: str) -> list[ServerRecord]:
        rows = await self._conn.request(
            "GET",
            self._table,
            access_token=self._token(),
            params={"select": "*", "owner_id": f"eq.{owner_id}", "order": "created_at.asc"},
        )
        return _parse_rows(rows or [])

    async def insert(self, record: ServerRecord) -> ServerRecord:
        payload = record.model_dump(mode="json", exclude=_SERVER_MANAGED_FIELDS)
        rows = await self._conn.request(
            "POST",
            self._table,
            access_token=self._token(),
            payload=payload,
            return_rows=True,
        )
        inserted = _parse_rows(rows or [])
        if not inserted:
            raise PersistenceError("Insert returned no rows")
        return inserted[0]

    async def update(self, record_id: str, fields: dict[str, Any]) -> None:
        await self._conn.request(
            "PATCH",
            self._table,
            access_token=self._token(),
            params={"id": f"eq.{record_id}"},
            payload=fields,
        )

    async def delete(self, record_id: str) -> None:
        await self._conn.request(
            "DELETE",
            self._table,
            access_token=self._token(),
            params={"id": f"eq.{record_id}"},
        )

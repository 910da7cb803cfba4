"""REST-backed profile repository."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from shared.dal.errors import PersistenceError
from shared.dal.models import Profile
from shared.dal.profile_repository import ProfileRepository

if TYPE_CHECKING:
    from shared.auth.session import SessionContext
    from shared.db.connection import BackendConnection

_PROFILE_COLUMNS = "id,username,email,avatar_url,is_admin,created_at,updated_at"


class RestProfileRepository(ProfileRepository):
    """ProfileRepository over the ``profiles`` table of the hosted backend."""

    def __init__(self, connection: BackendConnection, session: SessionContext, table: str = "profiles") -> None:
        self._conn = connection
        self._session = session
        self._table = table

    def _token(self) -> str | None:
        current = self._session.session
        return current.access_token if current is not None else None

    async def list_profiles(self) -> list[Profile]:
        rows = await self._conn.request(
            "GET",
            self._table,
            access_token=self._token(),
            params={"select": _PROFILE_COLUMNS, "order": "created_at.desc"},
        )
        if not isinstance(rows, list):
            raise PersistenceError("Expected a list of profile rows")
        try:
            return [Profile.model_validate(row) for row in rows]
        except ValidationError as e:
            raise PersistenceError(f"Malformed profile row: {e}") from e

    async def get_profile(self, user_id: str) -> Profile | None:
        rows = await self._conn.request(
            "GET",
            self._table,
            access_token=self._token(),
            params={"select": _PROFILE_COLUMNS, "id": f"eq.{user_id}"},
        )
        if not rows:
            return None
        if not isinstance(rows, list):
            raise PersistenceError("Expected a list of profile rows")
        try:
            return Profile.model_validate(rows[0])
        except ValidationError as e:
            raise PersistenceError(f"Malformed profile row: {e}") from e

    async def set_admin(self, user_id: str, *, is_admin: bool) -> None:
        await self._conn.request(
            "PATCH",
            self._table,
            access_token=self._token(),
            params={"id": f"eq.{user_id}"},
            payload={"is_admin": is_admin},
        )

    async def delete_profile(self, user_id: str) -> None:
        await self._conn.request(
            "DELETE",
            self._table,
            access_token=self._token(),
            params={"id": f"eq.{user_id}"},
        )

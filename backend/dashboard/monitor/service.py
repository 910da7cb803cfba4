"""Server record management for the signed-in user."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

from dashboard.monitor.reconciler import merge_probe_result
from dashboard.status.types import DEFAULT_GAME_PORT
from shared.dal.models import ServerRecord, ServerStatus

if TYPE_CHECKING:
    from dashboard.monitor.cancellation import CancellationToken
    from dashboard.monitor.reconciler import ServerReconciler
    from dashboard.status.probe import StatusProbe
    from shared.auth.session import SessionContext
    from shared.dal.server_repository import ServerRepository

logger = structlog.get_logger()

# Substituted when a server is added with neither url nor ip. Placeholder
# values only; nothing listens there.
SENTINEL_IP = "0.0.0.0"  # noqa: S104
DEFAULT_PORT = str(DEFAULT_GAME_PORT)


class ServerValidationError(Exception):
    """Submitted server fields are unusable."""


class ServerNotFoundError(Exception):
    pass


_ADDRESS_FIELDS = ("ip", "port", "url")


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class NewServer(BaseModel):
    """Fields a user submits when adding a server."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str = Field(min_length=1, max_length=100)
    ip: str | None = None
    port: str | None = None
    url: str | None = None
    status: ServerStatus = ServerStatus.OFFLINE
    players: int = Field(default=0, ge=0)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("name must not be blank")
        return stripped

    @field_validator("ip", "port", "url")
    @classmethod
    def _normalize_address(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class ServerUpdate(BaseModel):
    """Manual edit of a server record. Only fields that were sent are applied."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str | None = Field(default=None, min_length=1, max_length=100)
    ip: str | None = None
    port: str | None = None
    url: str | None = None
    status: ServerStatus | None = None
    players: int | None = Field(default=None, ge=0)

    @field_validator("ip", "port", "url")
    @classmethod
    def _normalize_address(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class ServerService:
    """List, reconcile, create, edit and delete the current user's servers."""

    def __init__(
        self,
        repository: ServerRepository,
        reconciler: ServerReconciler,
        probe: StatusProbe,
        session: SessionContext,
        *,
        fallback_ip: str = SENTINEL_IP,
        default_port: str = DEFAULT_PORT,
        probe_before_create: bool = True,
    ) -> None:
        self._repository = repository
        self._reconciler = reconciler
        self._probe = probe
        self._session = session
        self._fallback_ip = fallback_ip
        self._default_port = default_port
        self._probe_before_create = probe_before_create

    async def list_servers(self) -> list[ServerRecord]:
        session = self._session.require()
        return await self._repository.list(session.user_id)

    async def fetch_and_reconcile(self, token: CancellationToken | None = None) -> list[ServerRecord]:
        """Load the user's records and run one reconciliation cycle over them.

        With no active session there is nothing to reconcile and the result
        is empty. Read failures propagate as PersistenceError.
        """
        session = self._session.session
        if session is None:
            return []
        records = await self._repository.list(session.user_id)
        if token is not None and token.cancelled:
            return records
        return await self._reconciler.reconcile(records, token)

    async def create_server(self, new_server: NewServer, *, probe_first: bool | None = None) -> ServerRecord:
        session = self._session.require()
        record = ServerRecord(
            name=new_server.name,
            ip=new_server.ip,
            port=new_server.port,
            url=new_server.url,
            status=new_server.status,
            players=new_server.players,
            owner_id=session.user_id,
        )
        record = self._apply_address_fallback(record)

        if probe_first is None:
            probe_first = self._probe_before_create
        if probe_first:
            address = record.probe_address
            if address:
                record = merge_probe_result(record, await self._probe.check(address))

        created = await self._repository.insert(record)
        logger.info("server created", server_id=created.id, owner_id=session.user_id, status=created.status)
        return created

    async def update_server(self, record_id: str, changes: ServerUpdate) -> dict[str, object]:
        """Apply a manual edit and return the fields that were written.

        An edit that clears the address gets the same fallback as creation,
        so a stored record always keeps a url or an ip and port.
        """
        self._session.require()
        fields = changes.model_dump(mode="json", exclude_unset=True)
        if "name" in fields and fields["name"] is None:
            raise ServerValidationError("name must not be empty")
        if any(name in fields for name in _ADDRESS_FIELDS):
            fields.update(await self._edited_address(record_id, fields))
        fields["updated_at"] = datetime.now(tz=UTC).isoformat()
        await self._repository.update(record_id, fields)
        logger.info("server updated", server_id=record_id, fields=sorted(fields))
        return fields

    async def delete_server(self, record_id: str) -> None:
        self._session.require()
        await self._repository.delete(record_id)
        logger.info("server deleted", server_id=record_id)

    async def _edited_address(self, record_id: str, fields: dict[str, object]) -> dict[str, object]:
        current = next((r for r in await self.list_servers() if r.id == record_id), None)
        if current is None:
            raise ServerNotFoundError(record_id)
        edited = current.model_copy(update={name: fields[name] for name in _ADDRESS_FIELDS if name in fields})
        edited = self._apply_address_fallback(edited)
        return {
            name: getattr(edited, name)
            for name in _ADDRESS_FIELDS
            if name in fields or getattr(edited, name) != getattr(current, name)
        }

    def _apply_address_fallback(self, record: ServerRecord) -> ServerRecord:
        if record.url or (record.ip and record.port):
            return record
        if record.ip:
            return record.model_copy(update={"port": self._default_port})
        logger.info("server has no address, using sentinel", name=record.name)
        return record.model_copy(update={"ip": self._fallback_ip, "port": self._default_port})

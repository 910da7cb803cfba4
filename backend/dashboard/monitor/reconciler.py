"""Merge fresh probe results into server records."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from dashboard.monitor.cancellation import CancellationToken
from shared.dal.errors import PersistenceError
from shared.dal.models import ServerStatus

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dashboard.status.probe import StatusProbe
    from dashboard.status.types import ProbeResult
    from shared.dal.models import ServerRecord
    from shared.dal.server_repository import ServerRepository

logger = structlog.get_logger()


def merge_probe_result(record: ServerRecord, result: ProbeResult) -> ServerRecord:
    """Return a copy of record with status and players taken from result."""
    status = ServerStatus.ONLINE if result.online else ServerStatus.OFFLINE
    return record.model_copy(update={"status": status, "players": result.players_online})


class ServerReconciler:
    """Probe every record of a cycle concurrently and merge the results.

    Records whose status changed are written back to the repository. A failed
    write is logged and the merged record is still returned.
    """

    def __init__(self, probe: StatusProbe, repository: ServerRepository) -> None:
        self._probe = probe
        self._repository = repository

    async def reconcile(
        self,
        records: Sequence[ServerRecord],
        token: CancellationToken | None = None,
    ) -> list[ServerRecord]:
        """Return records in input order with status and players refreshed."""
        if token is None:
            token = CancellationToken()
        merged = await asyncio.gather(*(self._reconcile_one(record, token) for record in records))
        return list(merged)

    async def _reconcile_one(self, record: ServerRecord, token: CancellationToken) -> ServerRecord:
        address = record.probe_address
        if not address:
            return record

        result = await self._probe.check(address)
        if token.cancelled:
            logger.debug("discarding probe result of cancelled cycle", server_id=record.id)
            return record

        updated = merge_probe_result(record, result)
        if updated.status != record.status and updated.id is not None:
            await self._persist(updated, token)
        return updated

    async def _persist(self, record: ServerRecord, token: CancellationToken) -> bool:
        """Write the derived fields back. Return False when the write was skipped or failed."""
        if token.cancelled:
            return False
        try:
            await self._repository.update(record.id, {"status": record.status.value, "players": record.players})
        except PersistenceError:
            logger.exception("failed to persist server status", server_id=record.id, status=record.status)
            return False
        logger.info("server status changed", server_id=record.id, status=record.status, players=record.players)
        return True

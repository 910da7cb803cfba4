"""Summary counters shown above the server list."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from shared.dal.models import ServerStatus

if TYPE_CHECKING:
    from collections.abc import Iterable

    from shared.dal.models import ServerRecord


class DashboardStats(BaseModel, frozen=True):
    players_online: int = 0
    servers_online: int = 0
    maintenance_count: int = 0
    issues_count: int = 0


def compute_stats(records: Iterable[ServerRecord]) -> DashboardStats:
    players = online = maintenance = issues = 0
    for record in records:
        players += record.players
        if record.status == ServerStatus.ONLINE:
            online += 1
        elif record.status == ServerStatus.MAINTENANCE:
            maintenance += 1
        elif record.status == ServerStatus.ISSUE:
            issues += 1
    return DashboardStats(
        players_online=players,
        servers_online=online,
        maintenance_count=maintenance,
        issues_count=issues,
    )

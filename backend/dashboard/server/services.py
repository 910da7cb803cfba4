"""Per-session service construction.

Repositories are bound to a ``SessionContext`` so each request or
WebSocket connection reads and writes with its own user's token.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dashboard.admin.service import AdminService
from dashboard.monitor.reconciler import ServerReconciler
from dashboard.monitor.service import ServerService

if TYPE_CHECKING:
    from collections.abc import Callable

    from dashboard.server.settings import DashboardServerSettings
    from dashboard.status.probe import StatusProbe
    from shared.auth.session import SessionContext
    from shared.dal.profile_repository import ProfileRepository
    from shared.dal.server_repository import ServerRepository


class DashboardServices:
    def __init__(
        self,
        settings: DashboardServerSettings,
        probe: StatusProbe,
        server_repository_factory: Callable[[SessionContext], ServerRepository],
        profile_repository_factory: Callable[[SessionContext], ProfileRepository],
    ) -> None:
        self._settings = settings
        self._probe = probe
        self._server_repository_factory = server_repository_factory
        self._profile_repository_factory = profile_repository_factory

    def server_service(self, session: SessionContext) -> ServerService:
        repository = self._server_repository_factory(session)
        return ServerService(
            repository,
            ServerReconciler(self._probe, repository),
            self._probe,
            session,
            fallback_ip=self._settings.fallback_ip,
            default_port=self._settings.default_port,
            probe_before_create=self._settings.probe_before_create,
        )

    def admin_service(self, session: SessionContext) -> AdminService:
        return AdminService(self._profile_repository_factory(session), session)

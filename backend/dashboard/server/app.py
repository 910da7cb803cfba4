from __future__ import annotations

import contextlib
from http import HTTPStatus
from typing import TYPE_CHECKING, cast

import structlog
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware.authentication import AuthenticationMiddleware
from starlette.responses import JSONResponse, Response
from starlette.routing import Route, WebSocketRoute

from dashboard.admin.service import AdminUserNotFoundError
from dashboard.auth.backend import BearerTokenBackend
from dashboard.auth.policy import (
    admin_api,
    authenticated_websocket,
    protected_api,
    public_route,
    validate_route_auth_policy,
)
from dashboard.monitor.service import ServerNotFoundError, ServerValidationError
from dashboard.server.services import DashboardServices
from dashboard.server.settings import DashboardServerSettings
from dashboard.server.websocket import dashboard_websocket
from dashboard.status.probe import StatusProbe
from dashboard.views import admin_handlers, server_handlers
from shared.auth.client import BackendAuthClient
from shared.auth.session import AdminRequiredError, AuthRequiredError
from shared.dal.errors import PersistenceError
from shared.db import BackendConnection, RestProfileRepository, RestServerRepository
from shared.logging import setup_logging
from shared.settings import BackendSettings

logger = structlog.get_logger()

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from starlette.requests import Request


async def health(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


async def _http_error_handler(_request: Request, exc: Exception) -> Response:
    http_exc = cast("HTTPException", exc)
    if http_exc.status_code in {HTTPStatus.NO_CONTENT, HTTPStatus.NOT_MODIFIED}:
        return Response(status_code=http_exc.status_code, headers=http_exc.headers)
    if http_exc.status_code == HTTPStatus.UNAUTHORIZED:
        return JSONResponse({"error": "Authentication required"}, status_code=HTTPStatus.UNAUTHORIZED)
    return JSONResponse({"error": http_exc.detail}, status_code=http_exc.status_code, headers=http_exc.headers)


async def _auth_required_handler(_request: Request, _exc: Exception) -> Response:
    return JSONResponse({"error": "Authentication required"}, status_code=HTTPStatus.UNAUTHORIZED)


async def _admin_required_handler(_request: Request, _exc: Exception) -> Response:
    return JSONResponse({"error": "Admin access required"}, status_code=HTTPStatus.FORBIDDEN)


async def _persistence_error_handler(request: Request, exc: Exception) -> Response:
    logger.warning("record store request failed", path=request.url.path, error=str(exc))
    return JSONResponse({"error": "Record store unavailable"}, status_code=HTTPStatus.BAD_GATEWAY)


async def _validation_error_handler(_request: Request, exc: Exception) -> Response:
    return JSONResponse({"error": str(exc)}, status_code=HTTPStatus.UNPROCESSABLE_ENTITY)


async def _not_found_handler(_request: Request, exc: Exception) -> Response:
    return JSONResponse({"error": f"User {exc} not found"}, status_code=HTTPStatus.NOT_FOUND)


async def _server_not_found_handler(_request: Request, exc: Exception) -> Response:
    return JSONResponse({"error": f"Server {exc} not found"}, status_code=HTTPStatus.NOT_FOUND)


def _rest_services(
    settings: DashboardServerSettings,
    backend_settings: BackendSettings,
    connection: BackendConnection,
) -> DashboardServices:
    return DashboardServices(
        settings,
        StatusProbe(settings.status_api_url),
        lambda session: RestServerRepository(connection, session, backend_settings.servers_table),
        lambda session: RestProfileRepository(connection, session, backend_settings.profiles_table),
    )


def create_app(
    settings: DashboardServerSettings | None = None,
    backend_settings: BackendSettings | None = None,  # required in production (via get_app)
    *,
    services: DashboardServices | None = None,
    auth_client: BackendAuthClient | None = None,
) -> Starlette:
    if settings is None:  # pragma: no cover
        settings = DashboardServerSettings()
    if backend_settings is None:  # pragma: no cover
        backend_settings = BackendSettings()  # type: ignore[call-arg]

    routes = [
        Route("/health", public_route(health), methods=["GET"], name="health"),
        Route("/api/servers", protected_api(server_handlers.list_servers), methods=["GET"], name="list_servers"),
        Route("/api/servers", protected_api(server_handlers.create_server), methods=["POST"], name="create_server"),
        Route(
            "/api/servers/{server_id}",
            protected_api(server_handlers.update_server),
            methods=["PATCH"],
            name="update_server",
        ),
        Route(
            "/api/servers/{server_id}",
            protected_api(server_handlers.delete_server),
            methods=["DELETE"],
            name="delete_server",
        ),
        Route("/api/admin/users", admin_api(admin_handlers.list_users), methods=["GET"], name="admin_list_users"),
        Route(
            "/api/admin/users/{user_id}/toggle-admin",
            admin_api(admin_handlers.toggle_admin),
            methods=["POST"],
            name="admin_toggle_admin",
        ),
        Route(
            "/api/admin/users/{user_id}",
            admin_api(admin_handlers.delete_user),
            methods=["DELETE"],
            name="admin_delete_user",
        ),
        Route("/api/admin/analytics", admin_api(admin_handlers.analytics), methods=["GET"], name="admin_analytics"),
        WebSocketRoute("/ws/dashboard", authenticated_websocket(dashboard_websocket), name="dashboard_ws"),
    ]
    validate_route_auth_policy(routes)

    connection = BackendConnection(backend_settings)
    connection.connect()
    if services is None:
        services = _rest_services(settings, backend_settings, connection)
    if auth_client is None:
        auth_client = BackendAuthClient(backend_settings)

    @contextlib.asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncGenerator[None]:  # pragma: no cover
        yield
        await connection.close()

    app = Starlette(
        routes=routes,
        lifespan=lifespan,
        exception_handlers={
            HTTPException: _http_error_handler,
            AuthRequiredError: _auth_required_handler,
            AdminRequiredError: _admin_required_handler,
            PersistenceError: _persistence_error_handler,
            ServerValidationError: _validation_error_handler,
            AdminUserNotFoundError: _not_found_handler,
            ServerNotFoundError: _server_not_found_handler,
        },
    )
    app.add_middleware(AuthenticationMiddleware, backend=BearerTokenBackend(auth_client))  # type: ignore[arg-type]

    app.state.settings = settings
    app.state.backend_settings = backend_settings
    app.state.connection = connection
    app.state.services = services
    app.state.auth_client = auth_client

    logger.info("dashboard server ready")
    return app


def get_app() -> Starlette:  # pragma: no cover
    """Factory function for uvicorn --factory dashboard.server.app:get_app."""
    settings = DashboardServerSettings()
    backend_settings = BackendSettings()  # type: ignore[call-arg]
    setup_logging(log_dir=settings.log_dir)
    return create_app(settings=settings, backend_settings=backend_settings)

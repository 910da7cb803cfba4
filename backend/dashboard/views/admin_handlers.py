"""JSON handlers for the admin view."""

from __future__ import annotations

from http import HTTPStatus
from typing import TYPE_CHECKING

from starlette.responses import JSONResponse, Response

from dashboard.admin.analytics import TimePeriod
from dashboard.views.server_handlers import session_context

if TYPE_CHECKING:
    from starlette.requests import Request

    from dashboard.admin.service import AdminService
    from dashboard.server.services import DashboardServices


def _admin_service(request: Request) -> AdminService:
    services: DashboardServices = request.app.state.services
    return services.admin_service(session_context(request))


async def list_users(request: Request) -> JSONResponse:
    users = await _admin_service(request).list_users()
    return JSONResponse(
        {"users": [{**u.model_dump(mode="json"), "display_name": u.display_name} for u in users]},
    )


async def toggle_admin(request: Request) -> JSONResponse:
    profile = await _admin_service(request).toggle_admin(request.path_params["user_id"])
    return JSONResponse({"user_id": profile.id, "is_admin": profile.is_admin})


async def delete_user(request: Request) -> Response:
    await _admin_service(request).delete_user(request.path_params["user_id"])
    return Response(status_code=HTTPStatus.NO_CONTENT)


async def analytics(request: Request) -> JSONResponse:
    """GET /api/admin/analytics?period=week|month|year."""
    raw_period = request.query_params.get("period", TimePeriod.WEEK.value)
    try:
        period = TimePeriod(raw_period)
    except ValueError:
        return JSONResponse({"error": f"Invalid period {raw_period!r}"}, status_code=HTTPStatus.UNPROCESSABLE_ENTITY)
    report = await _admin_service(request).analytics(period)
    return JSONResponse(report.model_dump(mode="json"))

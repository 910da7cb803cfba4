"""JSON handlers for the signed-in user's server records."""

from __future__ import annotations

import json
from http import HTTPStatus
from typing import TYPE_CHECKING

from pydantic import ValidationError
from starlette.responses import JSONResponse, Response

from dashboard.monitor.service import NewServer, ServerUpdate
from dashboard.server.websocket import servers_payload
from shared.auth.session import SessionContext

if TYPE_CHECKING:
    from starlette.requests import Request

    from dashboard.monitor.service import ServerService
    from dashboard.server.services import DashboardServices


async def parse_json_body(request: Request) -> dict | None:
    """Parse a JSON object body. Return None on failure."""
    try:
        body = await request.json()
    except (ValueError, json.JSONDecodeError):  # fmt: skip
        return None
    if not isinstance(body, dict):
        return None
    return body


def session_context(request: Request) -> SessionContext:
    return SessionContext(request.user.session)


def _server_service(request: Request) -> ServerService:
    services: DashboardServices = request.app.state.services
    return services.server_service(session_context(request))


async def list_servers(request: Request) -> JSONResponse:
    """GET /api/servers - load and reconcile the user's servers."""
    records = await _server_service(request).fetch_and_reconcile()
    return JSONResponse(servers_payload(records))


async def create_server(request: Request) -> JSONResponse:
    """POST /api/servers - add a server, probing it first unless ``probe=false``."""
    body = await parse_json_body(request)
    if body is None:
        return JSONResponse({"error": "Invalid JSON body"}, status_code=HTTPStatus.UNPROCESSABLE_ENTITY)
    try:
        new_server = NewServer.model_validate(body)
    except ValidationError as e:
        return JSONResponse({"error": str(e)}, status_code=HTTPStatus.UNPROCESSABLE_ENTITY)

    probe_param = request.query_params.get("probe")
    probe_first = None if probe_param is None else probe_param.lower() not in {"0", "false", "no"}
    record = await _server_service(request).create_server(new_server, probe_first=probe_first)
    return JSONResponse({"server": record.model_dump(mode="json")}, status_code=HTTPStatus.CREATED)


async def update_server(request: Request) -> JSONResponse:
    """PATCH /api/servers/{server_id} - manual edit."""
    body = await parse_json_body(request)
    if body is None:
        return JSONResponse({"error": "Invalid JSON body"}, status_code=HTTPStatus.UNPROCESSABLE_ENTITY)
    try:
        changes = ServerUpdate.model_validate(body)
    except ValidationError as e:
        return JSONResponse({"error": str(e)}, status_code=HTTPStatus.UNPROCESSABLE_ENTITY)

    fields = await _server_service(request).update_server(request.path_params["server_id"], changes)
    return JSONResponse({"updated": fields})


async def delete_server(request: Request) -> Response:
    """DELETE /api/servers/{server_id}."""
    await _server_service(request).delete_server(request.path_params["server_id"])
    return Response(status_code=HTTPStatus.NO_CONTENT)

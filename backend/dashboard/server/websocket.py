"""WebSocket handler that keeps a dashboard view in sync with live server status.

Each connection is one mounted dashboard view: it owns a RefreshScheduler
that loads on connect, refreshes on a timer and on ``refresh`` messages,
and is torn down when the socket closes.
"""

from __future__ import annotations

import contextlib
import json
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError
from starlette.websockets import WebSocket, WebSocketDisconnect

from dashboard.monitor.scheduler import RefreshScheduler
from dashboard.monitor.stats import compute_stats
from dashboard.server.messages import (
    AuthMessage,
    PingMessage,
    RefreshMessage,
    SignOutMessage,
    parse_dashboard_message,
)
from shared.auth.session import AuthRequiredError, SessionContext

if TYPE_CHECKING:
    from dashboard.monitor.scheduler import RefreshTrigger
    from dashboard.server.services import DashboardServices
    from dashboard.server.settings import DashboardServerSettings
    from shared.auth.client import BackendAuthClient
    from shared.dal.models import ServerRecord

logger = structlog.get_logger()


async def _send(websocket: WebSocket, message: dict) -> None:
    with contextlib.suppress(ConnectionError, RuntimeError, WebSocketDisconnect):
        await websocket.send_text(json.dumps(message))


def servers_payload(records: list[ServerRecord]) -> dict:
    return {
        "servers": [r.model_dump(mode="json") for r in records],
        "stats": compute_stats(records).model_dump(),
    }


def _check_origin(websocket: WebSocket) -> bool:
    settings: DashboardServerSettings = websocket.app.state.settings
    if not settings.ws_allowed_origin:
        return True
    return websocket.headers.get("origin", "") == settings.ws_allowed_origin


async def dashboard_websocket(websocket: WebSocket) -> None:
    """Handle one dashboard view connection."""
    if not _check_origin(websocket):
        await websocket.close(code=4003, reason="forbidden_origin")
        return

    if not websocket.user.is_authenticated:
        await websocket.close(code=4001, reason="unauthorized")
        return

    await websocket.accept()

    settings: DashboardServerSettings = websocket.app.state.settings
    services: DashboardServices = websocket.app.state.services
    session = SessionContext(websocket.user.session)
    server_service = services.server_service(session)
    log = logger.bind(user_id=session.user_id)

    async def on_update(records: list[ServerRecord], trigger: RefreshTrigger) -> None:
        await _send(websocket, {"type": "servers", "trigger": trigger.value, **servers_payload(records)})

    async def on_error(exc: Exception) -> None:
        if isinstance(exc, AuthRequiredError):
            await _send(websocket, {"type": "error", "message": "auth_required"})
        else:
            await _send(websocket, {"type": "error", "message": "load_failed", "detail": str(exc)})

    scheduler = RefreshScheduler(
        server_service.fetch_and_reconcile,
        interval_seconds=settings.refresh_interval_seconds,
        on_update=on_update,
        on_error=on_error,
    )
    unsubscribe = session.subscribe(lambda _session: scheduler.reload())
    log.info("dashboard view opened")
    scheduler.start()

    try:
        await _message_loop(websocket, scheduler, session)
    except WebSocketDisconnect:
        pass
    except Exception:  # pragma: no cover
        log.exception("unexpected error in dashboard websocket")
    finally:
        unsubscribe()
        await scheduler.teardown()
        log.info("dashboard view closed")


async def _message_loop(websocket: WebSocket, scheduler: RefreshScheduler, session: SessionContext) -> None:
    auth_client: BackendAuthClient = websocket.app.state.auth_client
    while True:
        raw = await websocket.receive_text()
        try:
            message = parse_dashboard_message(raw)
        except (ValueError, ValidationError) as e:
            await _send(websocket, {"type": "error", "message": str(e)})
            continue

        if isinstance(message, RefreshMessage):
            started = scheduler.refresh_now()
            await _send(websocket, {"type": "refresh", "started": started})
        elif isinstance(message, PingMessage):
            await _send(websocket, {"type": "pong"})
        elif isinstance(message, AuthMessage):
            new_session = await auth_client.get_session(message.access_token)
            if new_session is None:
                await _send(websocket, {"type": "error", "message": "auth_required"})
            session.set_session(new_session)
        elif isinstance(message, SignOutMessage):
            session.clear()

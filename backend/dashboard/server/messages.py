"""Typed client-to-server message models for the dashboard WebSocket protocol."""

from __future__ import annotations

import json
from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter

_MAX_WS_MESSAGE_SIZE = 4096


class RefreshMessage(BaseModel):
    type: Literal["refresh"]


class PingMessage(BaseModel):
    type: Literal["ping"]


class AuthMessage(BaseModel):
    """Sent by the client after its access token was refreshed."""

    type: Literal["auth"]
    access_token: str = Field(min_length=1, max_length=4000)


class SignOutMessage(BaseModel):
    type: Literal["sign_out"]


DashboardClientMessage = Annotated[
    RefreshMessage | PingMessage | AuthMessage | SignOutMessage,
    Field(discriminator="type"),
]

_dashboard_message_adapter: TypeAdapter[DashboardClientMessage] = TypeAdapter(DashboardClientMessage)


def parse_dashboard_message(raw: str) -> RefreshMessage | PingMessage | AuthMessage | SignOutMessage:
    """Parse and validate a raw JSON string into a typed dashboard message."""
    byte_len = len(raw.encode("utf-8"))
    if byte_len > _MAX_WS_MESSAGE_SIZE:
        raise ValueError(f"Message too large ({byte_len} bytes, max {_MAX_WS_MESSAGE_SIZE})")
    data = json.loads(raw)
    return _dashboard_message_adapter.validate_python(data)

"""Tests for dashboard WebSocket message parsing."""

import json

import pytest
from pydantic import ValidationError

from dashboard.server.messages import (
    AuthMessage,
    PingMessage,
    RefreshMessage,
    SignOutMessage,
    parse_dashboard_message,
)


class TestParseDashboardMessage:
    def test_parse_refresh(self):
        assert isinstance(parse_dashboard_message('{"type": "refresh"}'), RefreshMessage)

    def test_parse_ping(self):
        assert isinstance(parse_dashboard_message('{"type": "ping"}'), PingMessage)

    def test_parse_sign_out(self):
        assert isinstance(parse_dashboard_message('{"type": "sign_out"}'), SignOutMessage)

    def test_parse_auth(self):
        msg = parse_dashboard_message('{"type": "auth", "access_token": "tok-2"}')
        assert isinstance(msg, AuthMessage)
        assert msg.access_token == "tok-2"

    def test_auth_requires_token(self):
        with pytest.raises(ValidationError, match="access_token"):
            parse_dashboard_message('{"type": "auth", "access_token": ""}')

    def test_reject_unknown_type(self):
        with pytest.raises(ValidationError, match="type"):
            parse_dashboard_message('{"type": "unknown"}')

    def test_reject_invalid_json(self):
        with pytest.raises(json.JSONDecodeError):
            parse_dashboard_message("not json")

    def test_reject_oversized_message(self):
        raw = json.dumps({"type": "ping", "x": "a" * 4097})
        with pytest.raises(ValueError, match="Message too large"):
            parse_dashboard_message(raw)

"""Explicit session context shared by components that need the current user.

Components receive a ``SessionContext`` instead of looking up a global
session. Session changes (sign in, token refresh, sign out) are pushed to
subscribers in registration order.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from shared.auth.models import AuthSession

logger = structlog.get_logger()

SessionListener = Callable[["AuthSession | None"], None]


class AuthRequiredError(Exception):
    """An operation on user records was attempted without an active session."""


class AdminRequiredError(Exception):
    """The active session does not belong to an admin account."""


class SessionContext:
    def __init__(self, session: AuthSession | None = None) -> None:
        self._session = session
        self._listeners: list[SessionListener] = []

    @property
    def session(self) -> AuthSession | None:
        return self._session

    @property
    def user_id(self) -> str | None:
        return self._session.user_id if self._session is not None else None

    def require(self) -> AuthSession:
        """Return the active session or raise AuthRequiredError."""
        if self._session is None:
            raise AuthRequiredError("Authentication required")
        return self._session

    def set_session(self, session: AuthSession | None) -> None:
        """Replace the active session and notify subscribers."""
        previous = self._session
        self._session = session
        if previous == session:
            return
        logger.debug(
            "session changed",
            previous_user_id=previous.user_id if previous else None,
            user_id=session.user_id if session else None,
        )
        for listener in list(self._listeners):
            listener(session)

    def clear(self) -> None:
        self.set_session(None)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a change listener. Return a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

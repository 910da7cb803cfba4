"""User model for Starlette AuthenticationMiddleware integration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.authentication import BaseUser

if TYPE_CHECKING:
    from shared.auth.models import AuthSession


class AuthenticatedUser(BaseUser):
    """Request user backed by a session resolved from a bearer token."""

    def __init__(self, session: AuthSession) -> None:
        self._session = session

    @property
    def is_authenticated(self) -> bool:  # pragma: no cover
        return True

    @property
    def display_name(self) -> str:  # pragma: no cover
        return self._session.email or self._session.user_id

    @property
    def identity(self) -> str:  # pragma: no cover
        return self._session.user_id

    @property
    def user_id(self) -> str:
        return self._session.user_id

    @property
    def session(self) -> AuthSession:
        return self._session

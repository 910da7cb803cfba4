"""Session model for users authenticated against the hosted backend."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthSession:
    """An authenticated user as reported by the backend's auth endpoint."""

    user_id: str
    access_token: str  # bearer token forwarded to the record store
    email: str | None = None

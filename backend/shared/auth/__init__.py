"""Session handling for users authenticated by the hosted backend."""

from shared.auth.client import BackendAuthClient
from shared.auth.models import AuthSession
from shared.auth.session import AdminRequiredError, AuthRequiredError, SessionContext

__all__ = [
    "AdminRequiredError",
    "AuthRequiredError",
    "AuthSession",
    "BackendAuthClient",
    "SessionContext",
]

"""Data access layer: repository interfaces and shared persistence models."""

from shared.dal.errors import PersistenceError
from shared.dal.models import Profile, ServerRecord, ServerStatus
from shared.dal.profile_repository import ProfileRepository
from shared.dal.server_repository import ServerRepository

__all__ = [
    "PersistenceError",
    "Profile",
    "ProfileRepository",
    "ServerRecord",
    "ServerRepository",
    "ServerStatus",
]

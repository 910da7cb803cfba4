"""Hosted backend record store: connection management and repository implementations."""

from shared.db.connection import BackendConnection
from shared.db.profile_repository import RestProfileRepository
from shared.db.server_repository import RestServerRepository

__all__ = [
    "BackendConnection",
    "RestProfileRepository",
    "RestServerRepository",
]

"""Persistence models for the data access layer."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ServerStatus(StrEnum):
    ONLINE = "Online"
    OFFLINE = "Offline"
    MAINTENANCE = "Maintenance"
    ISSUE = "Issue"


class ServerRecord(BaseModel):
    """A user-owned game server entry.

    ``status`` and ``players`` are derived from the last probe and get
    overwritten by reconciliation; manual edits stick until then.
    """

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str | None = None  # assigned by the record store on insert
    name: str = ""
    ip: str | None = None
    port: str | None = None
    url: str | None = None
    status: ServerStatus = ServerStatus.OFFLINE
    players: int = Field(default=0, ge=0)
    owner_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def probe_address(self) -> str | None:
        """Address to query: url first, then ip:port, then bare ip."""
        if self.url:
            return self.url
        if self.ip and self.port:
            return f"{self.ip}:{self.port}"
        return self.ip or None


class Profile(BaseModel, frozen=True):
    """User account profile as stored by the backend."""

    id: str
    username: str | None = None
    email: str | None = None
    avatar_url: str | None = None
    is_admin: bool = False
    created_at: datetime
    updated_at: datetime | None = None

    @property
    def display_name(self) -> str:
        return self.username or self.email or "Unnamed User"

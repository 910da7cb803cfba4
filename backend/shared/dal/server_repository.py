"""Abstract interface for server record persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from shared.dal.models import ServerRecord


class ServerRepository(ABC):
    """Abstract interface for server record persistence.

    Implementations are scoped to the authenticated owner and raise
    ``PersistenceError`` on failure.
    """

    @abstractmethod
    async def list(self, owner_id: str) -> list[ServerRecord]: ...

    @abstractmethod
    async def insert(self, record: ServerRecord) -> ServerRecord: ...

    @abstractmethod
    async def update(self, record_id: str, fields: dict[str, Any]) -> None: ...

    @abstractmethod
    async def delete(self, record_id: str) -> None: ...

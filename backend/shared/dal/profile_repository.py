"""Abstract interface for user profile persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shared.dal.models import Profile


class ProfileRepository(ABC):
    @abstractmethod
    async def list_profiles(self) -> list[Profile]: ...

    @abstractmethod
    async def get_profile(self, user_id: str) -> Profile | None: ...

    @abstractmethod
    async def set_admin(self, user_id: str, *, is_admin: bool) -> None: ...

    @abstractmethod
    async def delete_profile(self, user_id: str) -> None: ...

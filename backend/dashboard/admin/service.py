"""Admin-only account management and analytics."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel

from dashboard.admin.analytics import (
    AnalyticsPoint,
    RoleCount,
    TimePeriod,
    build_growth_series,
    role_distribution,
)
from shared.auth.session import AdminRequiredError

if TYPE_CHECKING:
    from shared.auth.session import SessionContext
    from shared.dal.models import Profile
    from shared.dal.profile_repository import ProfileRepository

logger = structlog.get_logger()


class AdminUserNotFoundError(Exception):
    pass


class AnalyticsReport(BaseModel, frozen=True):
    period: TimePeriod
    growth: list[AnalyticsPoint]
    roles: list[RoleCount]


class AdminService:
    def __init__(self, profiles: ProfileRepository, session: SessionContext) -> None:
        self._profiles = profiles
        self._session = session

    async def require_admin(self) -> Profile:
        """Return the caller's profile, or raise unless it is an admin."""
        session = self._session.require()
        profile = await self._profiles.get_profile(session.user_id)
        if profile is None or not profile.is_admin:
            raise AdminRequiredError("Admin access required")
        return profile

    async def list_users(self) -> list[Profile]:
        """All profiles, newest first. Email is only shown for the caller's own account."""
        caller = await self.require_admin()
        profiles = await self._profiles.list_profiles()
        profiles.sort(key=lambda p: p.created_at, reverse=True)
        return [p if p.id == caller.id else p.model_copy(update={"email": None}) for p in profiles]

    async def toggle_admin(self, user_id: str) -> Profile:
        await self.require_admin()
        target = await self._profiles.get_profile(user_id)
        if target is None:
            raise AdminUserNotFoundError(user_id)
        await self._profiles.set_admin(user_id, is_admin=not target.is_admin)
        logger.info("admin status changed", user_id=user_id, is_admin=not target.is_admin)
        return target.model_copy(update={"is_admin": not target.is_admin})

    async def delete_user(self, user_id: str) -> None:
        await self.require_admin()
        await self._profiles.delete_profile(user_id)
        logger.info("user deleted", user_id=user_id)

    async def analytics(self, period: TimePeriod, now: datetime | None = None) -> AnalyticsReport:
        await self.require_admin()
        profiles = await self._profiles.list_profiles()
        return AnalyticsReport(
            period=period,
            growth=build_growth_series(profiles, period, now or datetime.now(tz=UTC)),
            roles=role_distribution(profiles),
        )

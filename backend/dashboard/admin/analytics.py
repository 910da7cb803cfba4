"""User growth and activity aggregation for the admin charts."""

from __future__ import annotations

import calendar
from datetime import UTC, date, datetime, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from shared.dal.models import Profile


class TimePeriod(StrEnum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class BucketInterval(StrEnum):
    DAY = "day"
    MONTH = "month"


class AnalyticsPoint(BaseModel, frozen=True):
    date: str
    new_users: int
    active_users: int


class RoleCount(BaseModel, frozen=True):
    role: str
    count: int


def add_months(day: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


def date_range(period: TimePeriod, today: date) -> tuple[date, date, BucketInterval]:
    """Return (start, end, interval) covering the period up to and including today."""
    if period is TimePeriod.WEEK:
        return today - timedelta(days=7), today, BucketInterval.DAY
    if period is TimePeriod.MONTH:
        return add_months(today, -1), today, BucketInterval.DAY
    return add_months(today, -12), today, BucketInterval.MONTH


def _next_bucket(start: date, interval: BucketInterval) -> date:
    if interval is BucketInterval.DAY:
        return start + timedelta(days=1)
    return add_months(start, 1)


def format_bucket(start: date, interval: BucketInterval) -> str:
    if interval is BucketInterval.DAY:
        return f"{start:%b} {start.day}"
    return f"{start:%b %Y}"


def bucket_starts(start: date, end: date, interval: BucketInterval) -> list[date]:
    starts = []
    current = start
    while current <= end:
        starts.append(current)
        current = _next_bucket(current, interval)
    return starts


def _utc_date(stamp: datetime) -> date:
    if stamp.tzinfo is None:
        return stamp.date()
    return stamp.astimezone(UTC).date()


def _count_between(stamps: Sequence[date], lower: date, upper: date) -> int:
    return sum(1 for stamp in stamps if lower <= stamp < upper)


def build_growth_series(profiles: Iterable[Profile], period: TimePeriod, now: datetime) -> list[AnalyticsPoint]:
    """Count sign-ups and profile activity per bucket.

    A profile counts as new in the bucket holding its creation date and as
    active in the bucket holding its last update. Dates compare in UTC.
    """
    start, end, interval = date_range(period, _utc_date(now))
    created: list[date] = []
    updated: list[date] = []
    for profile in profiles:
        created.append(_utc_date(profile.created_at))
        if profile.updated_at is not None:
            updated.append(_utc_date(profile.updated_at))

    series = []
    for bucket_start in bucket_starts(start, end, interval):
        bucket_end = _next_bucket(bucket_start, interval)
        series.append(
            AnalyticsPoint(
                date=format_bucket(bucket_start, interval),
                new_users=_count_between(created, bucket_start, bucket_end),
                active_users=_count_between(updated, bucket_start, bucket_end),
            ),
        )
    return series


def role_distribution(profiles: Iterable[Profile]) -> list[RoleCount]:
    total = admins = 0
    for profile in profiles:
        total += 1
        if profile.is_admin:
            admins += 1
    return [RoleCount(role="Admins", count=admins), RoleCount(role="Users", count=total - admins)]

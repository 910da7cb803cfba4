"""Admin view: account management and growth analytics."""

from dashboard.admin.analytics import TimePeriod, build_growth_series, role_distribution
from dashboard.admin.service import AdminService, AdminUserNotFoundError, AnalyticsReport

__all__ = [
    "AdminService",
    "AdminUserNotFoundError",
    "AnalyticsReport",
    "TimePeriod",
    "build_growth_series",
    "role_distribution",
]

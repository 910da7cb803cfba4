"""Server status polling: reconciliation, refresh scheduling and record management."""

from dashboard.monitor.cancellation import CancellationToken
from dashboard.monitor.reconciler import ServerReconciler
from dashboard.monitor.scheduler import RefreshScheduler, RefreshTrigger, SchedulerState
from dashboard.monitor.service import (
    NewServer,
    ServerNotFoundError,
    ServerService,
    ServerUpdate,
    ServerValidationError,
)
from dashboard.monitor.stats import DashboardStats, compute_stats

__all__ = [
    "CancellationToken",
    "DashboardStats",
    "NewServer",
    "RefreshScheduler",
    "RefreshTrigger",
    "SchedulerState",
    "ServerNotFoundError",
    "ServerReconciler",
    "ServerService",
    "ServerUpdate",
    "ServerValidationError",
    "compute_stats",
]

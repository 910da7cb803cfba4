"""Status API client and result models."""

from dashboard.status.probe import StatusProbe
from dashboard.status.types import ProbeResult

__all__ = ["ProbeResult", "StatusProbe"]

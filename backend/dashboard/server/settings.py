"""Dashboard server configuration via environment variables."""

from pydantic_settings import BaseSettings

from dashboard.monitor.scheduler import DEFAULT_REFRESH_INTERVAL_SECONDS
from dashboard.monitor.service import DEFAULT_PORT, SENTINEL_IP
from dashboard.status.probe import DEFAULT_STATUS_API_URL


class DashboardServerSettings(BaseSettings):
    model_config = {"env_prefix": "DASHBOARD_"}

    log_dir: str = "backend/logs/dashboard"
    status_api_url: str = DEFAULT_STATUS_API_URL
    refresh_interval_seconds: float = DEFAULT_REFRESH_INTERVAL_SECONDS
    fallback_ip: str = SENTINEL_IP
    default_port: str = DEFAULT_PORT
    probe_before_create: bool = True
    ws_allowed_origin: str | None = "http://localhost:8080"

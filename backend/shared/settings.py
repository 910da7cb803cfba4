"""Connection settings for the hosted backend (auth + record store)."""

from pydantic import Field
from pydantic_settings import BaseSettings


class BackendSettings(BaseSettings):
    model_config = {"env_prefix": "BACKEND_"}

    # Project base URL, e.g. https://<project>.supabase.co
    url: str = Field(min_length=1)

    # Public (anon) API key sent as the ``apikey`` header -- required, no default.
    anon_key: str = Field(min_length=1)

    servers_table: str = "servers"
    profiles_table: str = "profiles"

"""Central environment-driven settings for the payments API.

The process loads this once at startup. Behavior is controlled by environment
variables (see `.env.example`).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class CommonSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "payments-api"
    log_level: str = "INFO"
    database_url: str = "sqlite:///./payments.db"
    create_tables_on_startup: bool = True
    cache_ttl_seconds: float = 60.0
    cache_max_entries: int = 10
    tracing_enabled: bool = False
    otel_exporter_otlp_endpoint: str = "http://otel-collector:4318/v1/traces"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = CommonSettings()

"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration.

    Values are read from environment variables (or a `.env` file).
    """

    # Supabase
    supabase_url: str
    supabase_service_key: str
    supabase_http_max_connections: int = 100
    supabase_http_max_keepalive_connections: int = 50
    supabase_postgrest_timeout_seconds: int = 30

    # App
    app_name: str = "Bookmark Ledger API"
    app_version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "INFO"
    allowed_origins: str = "*"
    enable_scheduler: bool = True

    # Scheduling
    timezone: str = "UTC"

    # Sessions
    session_secret_key: str = "change-me"
    session_ttl_seconds: int = 7 * 24 * 3600

    # System operations (rewards engine, airdrops). Empty disables them.
    system_operation_key: str = ""

    # Ledger
    ledger_backend: str = "supabase"
    ledger_recent_transactions_limit: int = 10

    # Static data
    bisac_data_path: str | None = None
    metadata_http_timeout_seconds: int = 10

    # Performance tuning
    slow_request_log_threshold_ms: int = 0
    slow_query_log_threshold_ms: int = 0
    user_cache_ttl_seconds: int = 30
    data_cache_max_entries: int = 5000

    @property
    def is_production(self) -> bool:
        """Return True when running in production."""
        return self.environment == "production"

    @property
    def origins_list(self) -> list[str]:
        """Parse comma-separated ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def system_operations_enabled(self) -> bool:
        """Return True when a shared key for system callers is configured."""
        return bool(self.system_operation_key.strip())

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()  # type: ignore[call-arg]

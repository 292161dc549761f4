"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    api_token: str
    allowed_client_ids: str | None = None
    snapshot_history_limit: int = 20
    undo_debounce_seconds: float = 0.5
    realtime_guard_release_seconds: float = 0.5
    slow_operation_seconds: float = 1.0
    slow_success_notice_seconds: float = 0.5
    failure_notice_seconds: float = 5.0
    optimization_timeout_seconds: float = 180.0
    optimization_retry_attempts: int = 2
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_csv_ids(raw: str | None) -> set[str] | None:
    """Parse a comma-separated allow list of ids from env."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return None
    ids: set[str] = set()
    for chunk in cleaned.split(","):
        value = chunk.strip()
        if value:
            ids.add(value)
    return ids or None

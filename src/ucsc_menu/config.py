"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

STORE_BACKENDS = frozenset({"none", "file", "supabase"})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    base_url: str = "https://nutrition.sa.ucsc.edu/"
    refresh_interval_minutes: int = 15
    days_to_fetch: int = 10
    rate_limit_per_second: float = 20.0
    max_jitter_seconds: float = 2.0
    request_timeout_seconds: float = 30.0
    store_backend: str = "none"
    cache_file: str = "menu_cache.json"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    admin_token: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_store_backend(raw: str | None) -> str:
    """Normalize the configured snapshot store backend name."""
    if raw is None:
        return "none"
    cleaned = raw.strip().lower()
    if cleaned in {"", "adhoc", "memory"}:
        return "none"
    if cleaned in {"local", "json"}:
        return "file"
    if cleaned not in STORE_BACKENDS:
        raise ValueError(f"Unknown store backend: {raw}")
    return cleaned

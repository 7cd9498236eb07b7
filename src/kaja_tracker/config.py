"""Application configuration."""

import os
from datetime import date

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    profile_webhook_secret: str | None = None
    site_url: str = "http://localhost:3000"
    timezone: str = "Europe/Budapest"
    floor_date: date = date(2026, 1, 1)
    window_padding_months: int = 3
    calendar_horizon_months: int = 12
    calendar_ttl_seconds: float = 300.0
    fetch_timeout_seconds: float = 10.0
    auth_timeout_seconds: float = 10.0
    session_ttl_seconds: int = 300
    resend_api_key: str | None = None
    reminder_from_address: str = "onboarding@resend.dev"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def auth_redirect_url(site_url: str) -> str:
    """Return the post-auth redirect target for the configured site."""
    return f"{site_url.rstrip('/')}/auth/callback"

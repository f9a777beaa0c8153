"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_anon_key: str
    view_cookie_name: str = "eatin_view"
    cookie_secure: bool = False
    view_idle_seconds: int = 1800
    max_views: int = 1000
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def show_debug(self) -> bool:
        """Return True when error notices should carry debug detail."""
        return self.environment == "local"

"""
Mise - Configuration and settings.

All runtime knobs come from the environment (or a local .env file).
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """
    Application settings.

    Supabase fields are only required when storage_backend or
    auth_enabled point at Supabase.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_parse_none_str="null",
    )

    # Application
    mise_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    cors_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    # Storage
    storage_backend: Literal["memory", "supabase"] = "memory"

    # Supabase
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    supabase_service_role_key: str | None = None

    # Auth - when disabled every request acts as the dev user
    auth_enabled: bool = False
    dev_user_id: str = "local"

    # Scraping
    scrape_timeout_seconds: float | None = 20.0  # None = wait indefinitely
    scrape_user_agent: str = DEFAULT_USER_AGENT

    @property
    def is_development(self) -> bool:
        return self.mise_env == "development"

    @property
    def is_production(self) -> bool:
        return self.mise_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: Settings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()

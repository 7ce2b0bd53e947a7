"""Application settings and environment loading."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized application settings."""

    app_name: str = "Dahira Dashboard"
    app_env: Literal["development", "test", "production"] = "development"
    app_debug: bool = False
    secret_key: str = "change-me"
    log_level: str = "INFO"

    database_url: str = "sqlite:///./dahira.db"

    # Accounts signing in with this address skip the profile lookup entirely.
    super_admin_email: str = "superadmin@dahira.sn"
    super_admin_password: str = "change-me-now"

    members_page_size: int = 8

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def normalized_super_admin_email(self) -> str:
        return self.super_admin_email.strip().lower()


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()

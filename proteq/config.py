"""Application configuration settings."""
from __future__ import annotations

import os
from functools import lru_cache

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Runtime toggles -----------------------------------------------------
# Deployment environment: "dev" | "staging" | "prod"
ENV = os.getenv("PROTEQ_ENV", "dev").lower()

# Legacy shared key, only honoured in dev environments
DEV_API_KEY = os.getenv("DEV_API_KEY") or os.getenv("API_KEY") or "dev-secret-key"
DEV_API_KEY_ALLOWED = ENV in {"dev", "local", "dev_local"}


class Settings(BaseSettings):
    """Environment configuration for the ProteQ backend."""

    app_env: str = ENV
    database_url: str = "sqlite:///proteq.db"
    SECRET_KEY: str = "change-me"
    DEV_API_KEY: str | None = Field(
        default=DEV_API_KEY,
        validation_alias=AliasChoices("DEV_API_KEY", "API_KEY"),
    )
    ALLOW_DB_CREATE_ALL: bool = False
    CORS_ALLOW_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    SENTRY_DSN: str | None = None
    PROMETHEUS_ENABLED: bool = True
    LOG_LEVEL: str = "INFO"

    # --- One-time passwords ---------------------------------------------
    OTP_TTL_SECONDS: int = 600
    OTP_MAX_ATTEMPTS: int = 3
    OTP_SWEEP_ENABLED: bool = True
    OTP_SWEEP_INTERVAL_SECONDS: int = 300

    # --- Activity log ------------------------------------------------------
    ACTIVITY_LOG_MAX_LIMIT: int = 100

    # --- Outgoing mail ---------------------------------------------------
    MAIL_ENABLED: bool = False
    MAIL_FROM: str | None = None
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_STARTTLS: bool = True
    SMTP_TIMEOUT_SECONDS: int = 10

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("SMTP_HOST", "SMTP_USER", "SMTP_PASSWORD", "MAIL_FROM")
    @classmethod
    def _strip_empty(cls, value: str | None) -> str | None:
        """Normalise blank SMTP values to ``None``."""

        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None


class AppInfo(BaseModel):
    name: str = "proteq-backend"
    version: str = "0.1.0"


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return settings


__all__ = [
    "ENV",
    "DEV_API_KEY",
    "DEV_API_KEY_ALLOWED",
    "Settings",
    "AppInfo",
    "settings",
    "get_settings",
]

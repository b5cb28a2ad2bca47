"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key for signing JWT tokens", min_length=1
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Number of minutes before access tokens expire",
        gt=0,
    )
    public_base_url: str = Field(
        default="http://localhost:3000",
        description="Public origin of the web client, used to build push target URLs",
    )
    vapid_public_key: str | None = Field(
        default=None,
        description="VAPID public key handed to browsers when they subscribe",
    )
    vapid_private_key: str | None = Field(
        default=None,
        description="VAPID private key; web push stays disabled while it is unset",
    )
    vapid_subject: str = Field(
        default="mailto:support@clario.app",
        description="Contact URI sent in the VAPID claims",
    )
    web_push_ttl_seconds: int = Field(
        default=86400,
        description="Time-to-live requested from the web push service",
        ge=0,
    )
    expo_push_enabled: bool = Field(
        default=True,
        description="Deliver notifications to registered Expo push tokens",
    )
    expo_push_url: str = Field(
        default="https://exp.host/--/api/v2/push/send",
        description="Expo push API endpoint",
    )
    expo_access_token: str | None = Field(
        default=None,
        description="Optional access token for the Expo push API",
    )
    push_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout applied to each outbound push request",
        gt=0,
    )

    @model_validator(mode="after")
    def _validate_vapid_subject(self) -> "Settings":
        subject = self.vapid_subject.strip()
        if not subject.startswith(("mailto:", "https://")):
            raise ValueError("VAPID_SUBJECT must be a mailto: or https:// URI")
        self.vapid_subject = subject
        self.public_base_url = self.public_base_url.rstrip("/")
        return self

    @property
    def web_push_configured(self) -> bool:
        return bool(self.vapid_private_key)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]

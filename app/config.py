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
        default="sqlite:///./notifications.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        default="change-me",
        description="Secret key used to verify websocket JWT tokens",
        min_length=1,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used when storing naive timestamps in the database",
    )
    redis_url: str | None = Field(
        default=None,
        description="Redis URL for the event bus; unset or memory:// keeps it in-process",
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending notification emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of notification emails",
        min_length=3,
    )
    twilio_account_sid: str | None = Field(
        default=None, description="Twilio account SID used for SMS delivery"
    )
    twilio_auth_token: str | None = Field(
        default=None, description="Twilio auth token used for SMS delivery"
    )
    twilio_from_number: str | None = Field(
        default=None, description="Sender phone number for SMS notifications"
    )
    preferences_cache_ttl_seconds: float = Field(
        default=300.0,
        description="Seconds a cached preferences record is considered fresh",
        gt=0,
    )
    preferences_cache_max_entries: int = Field(
        default=1024,
        description="Maximum number of users kept in the preferences cache",
        gt=0,
    )
    event_dedupe_ttl_seconds: float = Field(
        default=600.0,
        description="Seconds an incoming domain event id is remembered for deduplication",
        ge=0,
    )
    delivery_max_attempts: int = Field(
        default=3, description="Attempts per email/SMS delivery", gt=0
    )
    delivery_initial_delay_seconds: float = Field(
        default=1.0, description="Initial retry delay for email/SMS delivery", ge=0
    )
    delivery_max_delay_seconds: float = Field(
        default=10.0, description="Upper bound for the retry delay", ge=0
    )

    @model_validator(mode="after")
    def _validate_provider_credentials(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        twilio_values = (
            self.twilio_account_sid,
            self.twilio_auth_token,
            self.twilio_from_number,
        )
        if any(twilio_values) and not all(twilio_values):
            raise ValueError(
                "TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN and TWILIO_FROM_NUMBER must be provided together"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]

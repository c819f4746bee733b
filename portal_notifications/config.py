"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

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
        default="sqlite+aiosqlite:///./portal_notifications.db",
        description="Async SQLAlchemy URL of the database holding notifications and profiles",
        min_length=1,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used to timestamp persisted records",
    )

    email_provider: Literal["sendgrid", "smtp", "console"] = Field(
        default="console",
        description="Email provider selected once at startup",
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending transactional emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of transactional messages",
        min_length=3,
    )
    smtp_host: str | None = Field(default=None, description="SMTP relay host name")
    smtp_port: int = Field(default=587, description="SMTP relay port", gt=0)
    smtp_username: str | None = Field(default=None, description="SMTP login user")
    smtp_password: str | None = Field(default=None, description="SMTP login password")
    smtp_sender: str | None = Field(
        default=None, description="Sender address used by the SMTP provider"
    )
    smtp_use_tls: bool = Field(default=False, description="Use implicit TLS for SMTP")

    sms_provider: Literal["twilio", "console"] = Field(
        default="console",
        description="SMS provider selected once at startup",
    )
    twilio_account_sid: str | None = Field(default=None, description="Twilio account SID")
    twilio_auth_token: str | None = Field(default=None, description="Twilio auth token")
    twilio_from_phone: str | None = Field(
        default=None, description="Default E.164 sender number for outgoing SMS"
    )
    twilio_api_base_url: str = Field(
        default="https://api.twilio.com",
        description="Base URL of the Twilio REST API",
    )
    twilio_content_sid: str | None = Field(
        default=None,
        description="Twilio content template wrapping outgoing messages; plain bodies are sent when empty",
    )
    twilio_timeout_seconds: float = Field(
        default=10.0, description="Timeout applied to Twilio API requests", gt=0
    )
    default_phone_region: str = Field(
        default="US",
        description="Region assumed when reformatting phone numbers without a country code",
        min_length=2,
    )

    handler_timeout_seconds: float = Field(
        default=30.0,
        description="Upper bound for a single event handler invocation; 0 disables it",
        ge=0,
    )
    notification_retention_days: int = Field(
        default=60,
        description="Days after which stored notifications are purged",
        gt=0,
    )
    scheduler_enabled: bool = Field(
        default=True, description="Start the alert schedulers with the application"
    )
    scheduler_timezone: str = Field(
        default="America/Los_Angeles",
        description="Timezone used by cron-style alert schedules",
    )

    portal_base_url: str = Field(
        default="http://localhost:3000",
        description="Public URL of the portal used to build links inside messages",
    )
    auth_base_url: str = Field(
        default="http://localhost:3000/auth",
        description="URL of the authentication frontend (verification and reset links)",
    )
    support_email: str = Field(
        default="support@example.com",
        description="Support address included in transactional emails",
    )
    logo_url: str | None = Field(
        default=None, description="Logo rendered in transactional email templates"
    )

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]

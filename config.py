"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

OTP timings default to the values the FirstLight backend has always used:
6-digit codes valid for 10 minutes, a 60 second resend cooldown and at most
5 codes per email per hour.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "firstlight"


class RedisSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Optional: without Redis the resend cooldown is tracked per process
    redis_uri: Optional[str] = None
    redis_key_prefix: str = "firstlight"


class OtpSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    otp_code_length: int = Field(default=6, ge=4, le=10)
    otp_validity_minutes: int = Field(default=10, gt=0)
    otp_cooldown_seconds: int = Field(default=60, ge=0)
    otp_hourly_limit: int = Field(default=5, gt=0)
    otp_abuse_window_hours: int = Field(default=1, gt=0)
    otp_retention_hours: int = Field(default=24, gt=0)
    # 0 disables the background reaper
    otp_reaper_interval_seconds: int = Field(default=3600, ge=0)

    # HMAC key for stored code digests; keep it out of the database
    otp_hash_key: str = ""

    # Development affordance: echo generated codes in API responses.
    # Never honoured when ENV=production (see AppSettings.expose_otp_details).
    otp_expose_in_response: bool = False


class EmailSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    zepto_api_token: str = ""
    zepto_from_email: str = "noreply@firstlight.com"
    zepto_from_name: str = "FirstLight Apartments"
    email_timeout_seconds: float = 10.0

    support_email: str = "support@firstlight.com"
    security_email: str = "security@firstlight.com"


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_name: str = "FirstLight Apartments"

    # Base URL of the web client, used for links inside emails
    client_url: str = "http://localhost:3000"

    cors_origins: list[str] = ["http://localhost:3000"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    redis: Optional[RedisSettings] = None
    otp: Optional[OtpSettings] = None
    email: Optional[EmailSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        # Populate sub-configs from the same env/dotenv source
        if self.db is None:
            self.db = DatabaseSettings()
        if self.redis is None:
            self.redis = RedisSettings()
        if self.otp is None:
            self.otp = OtpSettings()
        if self.email is None:
            self.email = EmailSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def expose_otp_details(self) -> bool:
        return self.otp.otp_expose_in_response and not self.is_production

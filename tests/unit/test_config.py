"""Unit tests for AppSettings and sub-configs."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from config import (
    AppSettings,
    DatabaseSettings,
    EmailSettings,
    OtpSettings,
    RedisSettings,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def with_mongo(monkeypatch):
    """Set the required MONGODB_URI so AppSettings can be instantiated."""
    monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
    return monkeypatch


# ---------------------------------------------------------------------------
# DatabaseSettings
# ---------------------------------------------------------------------------


class TestDatabaseSettings:
    def test_loads_mongodb_uri(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        assert DatabaseSettings().mongodb_uri == "mongodb://localhost:27017/"

    def test_default_db_name(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        monkeypatch.delenv("DB_NAME", raising=False)
        assert DatabaseSettings().db_name == "firstlight"

    def test_missing_mongodb_uri_raises(self, monkeypatch):
        monkeypatch.delenv("MONGODB_URI", raising=False)
        with pytest.raises(PydanticValidationError):
            DatabaseSettings()


# ---------------------------------------------------------------------------
# RedisSettings
# ---------------------------------------------------------------------------


class TestRedisSettings:
    def test_redis_uri_optional(self, monkeypatch):
        monkeypatch.delenv("REDIS_URI", raising=False)
        assert RedisSettings().redis_uri is None

    def test_redis_uri_loaded(self, monkeypatch):
        monkeypatch.setenv("REDIS_URI", "redis://localhost:6379")
        assert RedisSettings().redis_uri == "redis://localhost:6379"


# ---------------------------------------------------------------------------
# OtpSettings
# ---------------------------------------------------------------------------

_OTP_VARS = (
    "OTP_CODE_LENGTH",
    "OTP_VALIDITY_MINUTES",
    "OTP_COOLDOWN_SECONDS",
    "OTP_HOURLY_LIMIT",
    "OTP_ABUSE_WINDOW_HOURS",
    "OTP_RETENTION_HOURS",
    "OTP_REAPER_INTERVAL_SECONDS",
    "OTP_EXPOSE_IN_RESPONSE",
    "OTP_HASH_KEY",
)


class TestOtpSettings:
    def test_defaults(self, monkeypatch):
        for var in _OTP_VARS:
            monkeypatch.delenv(var, raising=False)
        s = OtpSettings()
        assert s.otp_code_length == 6
        assert s.otp_validity_minutes == 10
        assert s.otp_cooldown_seconds == 60
        assert s.otp_hourly_limit == 5
        assert s.otp_abuse_window_hours == 1
        assert s.otp_retention_hours == 24
        assert s.otp_reaper_interval_seconds == 3600
        assert s.otp_expose_in_response is False
        assert s.otp_hash_key == ""

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("OTP_VALIDITY_MINUTES", "5")
        monkeypatch.setenv("OTP_HOURLY_LIMIT", "3")
        s = OtpSettings()
        assert s.otp_validity_minutes == 5
        assert s.otp_hourly_limit == 3

    def test_hash_key_from_env(self, monkeypatch):
        monkeypatch.setenv("OTP_HASH_KEY", "pepper")
        assert OtpSettings().otp_hash_key == "pepper"

    @pytest.mark.parametrize(
        "var, value",
        [
            ("OTP_VALIDITY_MINUTES", "0"),
            ("OTP_HOURLY_LIMIT", "0"),
            ("OTP_COOLDOWN_SECONDS", "-1"),
            ("OTP_CODE_LENGTH", "3"),
        ],
    )
    def test_rejects_out_of_range(self, monkeypatch, var, value):
        monkeypatch.setenv(var, value)
        with pytest.raises(PydanticValidationError):
            OtpSettings()


class TestEmailSettings:
    def test_defaults(self, monkeypatch):
        for var in ("ZEPTO_API_TOKEN", "ZEPTO_FROM_EMAIL", "ZEPTO_FROM_NAME"):
            monkeypatch.delenv(var, raising=False)
        s = EmailSettings()
        assert s.zepto_api_token == ""
        assert s.zepto_from_email == "noreply@firstlight.com"
        assert s.zepto_from_name == "FirstLight Apartments"


# ---------------------------------------------------------------------------
# AppSettings
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "env, expected",
    [("production", True), ("development", False)],
    ids=["production", "development"],
)
def test_is_production(with_mongo, env, expected):
    with_mongo.setenv("ENV", env)
    assert AppSettings().is_production is expected


@pytest.mark.parametrize(
    "env, expose, expected",
    [
        ("development", "true", True),
        ("development", "false", False),
        ("production", "true", False),
    ],
    ids=["dev_on", "dev_off", "production_never"],
)
def test_expose_otp_details(with_mongo, env, expose, expected):
    with_mongo.setenv("ENV", env)
    with_mongo.setenv("OTP_EXPOSE_IN_RESPONSE", expose)
    assert AppSettings().expose_otp_details is expected


class TestAppSettings:
    def test_sub_configs_populated(self, with_mongo):
        s = AppSettings()
        for attr in ("db", "redis", "otp", "email", "logging", "sentry"):
            assert getattr(s, attr) is not None, f"sub-config '{attr}' is None"

    def test_cors_origins_default(self, with_mongo):
        with_mongo.delenv("CORS_ORIGINS", raising=False)
        assert AppSettings().cors_origins == ["http://localhost:3000"]

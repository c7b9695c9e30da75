"""Unit tests for AppError hierarchy and the JSON error handlers."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

from errors import (
    AppError,
    ConflictError,
    DeliveryFailedError,
    InvalidOtpError,
    NotFoundError,
    OtpAbuseThresholdError,
    OtpCooldownError,
    PersistenceError,
    RateLimitError,
    ValidationError,
    register_error_handlers,
)


class TestAppErrorSubclasses:
    @pytest.mark.parametrize(
        "cls, status, code",
        [
            (ValidationError, 400, "validation_error"),
            (InvalidOtpError, 400, "invalid_otp"),
            (NotFoundError, 404, "not_found"),
            (ConflictError, 409, "conflict"),
            (RateLimitError, 429, "rate_limit_exceeded"),
            (OtpCooldownError, 429, "otp_cooldown"),
            (OtpAbuseThresholdError, 429, "otp_abuse_threshold"),
            (DeliveryFailedError, 502, "delivery_failed"),
            (PersistenceError, 503, "persistence_error"),
        ],
    )
    def test_status_and_code(self, cls, status, code):
        e = cls("boom")
        assert e.status_code == status
        assert e.error_code == code
        assert e.message == "boom"
        assert isinstance(e, AppError)

    def test_otp_rate_errors_are_rate_limit_errors(self):
        assert issubclass(OtpCooldownError, RateLimitError)
        assert issubclass(OtpAbuseThresholdError, RateLimitError)

    def test_invalid_otp_is_validation_error(self):
        assert issubclass(InvalidOtpError, ValidationError)

    def test_delivery_failed_carries_otp_id(self):
        e = DeliveryFailedError("email down", otp_id="abc")
        assert e.otp_id == "abc"
        assert "otp_id" not in e.to_dict()


class TestAppErrorToDict:
    def test_basic(self):
        e = NotFoundError("user not found")
        assert e.to_dict() == {"error": "user not found", "code": "not_found"}

    @pytest.mark.parametrize(
        "kwargs, key, value",
        [
            ({"field": "otp"}, "field", "otp"),
            ({"details": {"retry_after_seconds": 60}}, "details", {"retry_after_seconds": 60}),
        ],
        ids=["with_field", "with_details"],
    )
    def test_optional_key_present(self, kwargs, key, value):
        e = ValidationError("invalid", **kwargs)
        assert e.to_dict()[key] == value

    def test_no_optional_keys_when_absent(self):
        d = NotFoundError("missing").to_dict()
        assert "field" not in d
        assert "details" not in d


class _Body(BaseModel):
    email: str


def _app() -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/cooldown")
    async def cooldown():
        raise OtpCooldownError("wait", details={"retry_after_seconds": 60})

    @app.get("/boom")
    async def boom():
        raise RuntimeError("unexpected")

    @app.post("/body")
    async def body(payload: _Body):
        return {"email": payload.email}

    return app


class TestErrorHandlers:
    def test_app_error_rendered(self):
        with TestClient(_app()) as client:
            resp = client.get("/cooldown")
        assert resp.status_code == 429
        assert resp.json() == {
            "error": "wait",
            "code": "otp_cooldown",
            "details": {"retry_after_seconds": 60},
        }

    def test_request_validation_is_400(self):
        with TestClient(_app()) as client:
            resp = client.post("/body", json={})
        assert resp.status_code == 400
        data = resp.json()
        assert data["code"] == "validation_error"
        assert data["field"] == "email"

    def test_unhandled_exception_is_500(self):
        with TestClient(_app(), raise_server_exceptions=False) as client:
            resp = client.get("/boom")
        assert resp.status_code == 500
        assert resp.json()["code"] == "internal_error"

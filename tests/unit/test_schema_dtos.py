"""Unit tests for request and response DTOs."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from schemas.dto.requests.auth import RegisterRequest
from schemas.dto.requests.otp import (
    EmailOtpRequest,
    ResendOtpRequest,
    ResetPasswordRequest,
    VerifyOtpRequest,
)
from schemas.dto.responses.otp import OtpDetails, OtpSentResponse
from schemas.models.otp import OtpPurpose


# ── Requests ──────────────────────────────────────────────────────────────────


class TestEmailOtpRequest:
    def test_valid(self):
        assert EmailOtpRequest.model_validate({"email": "u@example.com"}).email == "u@example.com"

    @pytest.mark.parametrize("payload", [{}, {"email": ""}])
    def test_email_required(self, payload):
        with pytest.raises(ValidationError):
            EmailOtpRequest.model_validate(payload)


class TestVerifyOtpRequest:
    def test_valid(self):
        req = VerifyOtpRequest.model_validate({"email": "u@example.com", "otp": "123456"})
        assert req.otp == "123456"

    def test_requires_otp(self):
        with pytest.raises(ValidationError):
            VerifyOtpRequest.model_validate({"email": "u@example.com"})


class TestResetPasswordRequest:
    def test_camel_case_password(self):
        req = ResetPasswordRequest.model_validate(
            {"email": "u@example.com", "otp": "123456", "newPassword": "newpass1"}
        )
        assert req.new_password == "newpass1"

    def test_snake_case_password_accepted(self):
        req = ResetPasswordRequest.model_validate(
            {"email": "u@example.com", "otp": "123456", "new_password": "newpass1"}
        )
        assert req.new_password == "newpass1"

    def test_all_fields_required(self):
        with pytest.raises(ValidationError):
            ResetPasswordRequest.model_validate({"email": "u@example.com"})


class TestResendOtpRequest:
    def test_defaults_to_password_reset(self):
        req = ResendOtpRequest.model_validate({"email": "u@example.com"})
        assert req.purpose is OtpPurpose.PASSWORD_RESET

    def test_explicit_purpose(self):
        req = ResendOtpRequest.model_validate(
            {"email": "u@example.com", "purpose": "two_factor_auth"}
        )
        assert req.purpose is OtpPurpose.TWO_FACTOR_AUTH

    def test_unknown_purpose_rejected(self):
        with pytest.raises(ValidationError):
            ResendOtpRequest.model_validate({"email": "u@example.com", "purpose": "login"})


class TestRegisterRequest:
    def test_phone_optional(self):
        req = RegisterRequest.model_validate(
            {"name": "Asha", "email": "u@example.com", "password": "pass1234"}
        )
        assert req.phone is None

    def test_requires_name(self):
        with pytest.raises(ValidationError):
            RegisterRequest.model_validate({"email": "u@example.com", "password": "x"})


# ── Responses ─────────────────────────────────────────────────────────────────


class TestOtpSentResponse:
    def test_otp_omitted_when_none(self):
        body = OtpSentResponse(success=True, message="sent").model_dump(exclude_none=True)
        assert body == {"success": True, "message": "sent"}

    def test_otp_included(self):
        details = OtpDetails(
            id="abc",
            email="u@example.com",
            code="123456",
            purpose="password_reset",
            expires_at="2024-06-01T12:10:00+00:00",
        )
        body = OtpSentResponse(success=True, message="sent", otp=details).model_dump(
            exclude_none=True
        )
        assert body["otp"]["code"] == "123456"

"""
Request DTOs for OTP endpoints.

EmailOtpRequest       — POST /api/otp/send-verification-otp, send-password-reset-otp,
                        change-password, send-2fa-otp
VerifyOtpRequest      — POST /api/otp/verify-email-otp, verify-2fa-otp
ResetPasswordRequest  — POST /api/otp/verify-password-reset-otp
ResendOtpRequest      — POST /api/otp/resend-otp

Field names match what the web client already sends (``otp``, ``newPassword``).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from schemas.models.otp import OtpPurpose


class EmailOtpRequest(BaseModel):
    """Request body for endpoints that only need the recipient."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(min_length=1)


class VerifyOtpRequest(BaseModel):
    """Request body for code verification endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(min_length=1)
    otp: str = Field(min_length=1)


class ResetPasswordRequest(BaseModel):
    """Request body for POST /api/otp/verify-password-reset-otp."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(min_length=1)
    otp: str = Field(min_length=1)
    new_password: str = Field(alias="newPassword")


class ResendOtpRequest(BaseModel):
    """Request body for POST /api/otp/resend-otp.

    ``purpose`` defaults to password_reset, the flow the resend button serves.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(min_length=1)
    purpose: OtpPurpose = OtpPurpose.PASSWORD_RESET

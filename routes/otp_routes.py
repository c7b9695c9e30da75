"""
OTP endpoints.

POST /api/otp/send-verification-otp      — email verification code for an existing user
POST /api/otp/verify-email-otp           — consume it and mark the user verified
POST /api/otp/send-password-reset-otp    — reset code; same reply for unknown emails
POST /api/otp/change-password            — alias of send-password-reset-otp
POST /api/otp/verify-password-reset-otp  — consume the reset code, store new password
POST /api/otp/resend-otp                 — mint a fresh code for the given purpose
POST /api/otp/send-2fa-otp               — two-factor code for an existing user
POST /api/otp/verify-2fa-otp             — consume a two-factor code

Errors are raised as AppError subclasses and rendered by the global handler.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from config import AppSettings
from dependencies import get_account_service, get_settings
from schemas.dto.requests.otp import (
    EmailOtpRequest,
    ResendOtpRequest,
    ResetPasswordRequest,
    VerifyOtpRequest,
)
from schemas.dto.responses.common import ErrorResponse, MessageResponse
from schemas.dto.responses.otp import OtpDetails, OtpSentResponse
from services.account_service import PASSWORD_RESET_SENT_MESSAGE, AccountService
from services.otp_issuance import OtpIssue

router = APIRouter(
    prefix="/api/otp",
    tags=["otp"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)


def otp_details(issue: Optional[OtpIssue], settings: AppSettings) -> Optional[OtpDetails]:
    if issue is None or not settings.expose_otp_details:
        return None
    return OtpDetails(**issue.public_details())


def _sent(message: str, issue: Optional[OtpIssue], settings: AppSettings) -> JSONResponse:
    body = OtpSentResponse(
        success=True, message=message, otp=otp_details(issue, settings)
    )
    return JSONResponse(content=body.model_dump(exclude_none=True))


def _ok(message: str) -> JSONResponse:
    return JSONResponse(content=MessageResponse(success=True, message=message).model_dump())


@router.post("/send-verification-otp")
async def send_verification_otp(
    body: EmailOtpRequest,
    accounts: AccountService = Depends(get_account_service),
    settings: AppSettings = Depends(get_settings),
) -> JSONResponse:
    issue = await accounts.send_verification(body.email)
    return _sent("Verification OTP sent successfully", issue, settings)


@router.post("/verify-email-otp")
async def verify_email_otp(
    body: VerifyOtpRequest,
    accounts: AccountService = Depends(get_account_service),
) -> JSONResponse:
    await accounts.verify_email(body.email, body.otp)
    return _ok("Email verified successfully")


@router.post("/send-password-reset-otp")
@router.post("/change-password")
async def send_password_reset_otp(
    body: EmailOtpRequest,
    accounts: AccountService = Depends(get_account_service),
    settings: AppSettings = Depends(get_settings),
) -> JSONResponse:
    issue = await accounts.request_password_reset(body.email)
    return _sent(PASSWORD_RESET_SENT_MESSAGE, issue, settings)


@router.post("/verify-password-reset-otp")
async def verify_password_reset_otp(
    body: ResetPasswordRequest,
    accounts: AccountService = Depends(get_account_service),
) -> JSONResponse:
    await accounts.reset_password(body.email, body.otp, body.new_password)
    return _ok("Password reset successfully")


@router.post("/resend-otp")
async def resend_otp(
    body: ResendOtpRequest,
    accounts: AccountService = Depends(get_account_service),
    settings: AppSettings = Depends(get_settings),
) -> JSONResponse:
    issue = await accounts.resend(body.email, body.purpose)
    return _sent("A new OTP has been sent", issue, settings)


@router.post("/send-2fa-otp")
async def send_two_factor_otp(
    body: EmailOtpRequest,
    accounts: AccountService = Depends(get_account_service),
    settings: AppSettings = Depends(get_settings),
) -> JSONResponse:
    issue = await accounts.send_two_factor(body.email)
    return _sent("2FA OTP sent successfully", issue, settings)


@router.post("/verify-2fa-otp")
async def verify_two_factor_otp(
    body: VerifyOtpRequest,
    accounts: AccountService = Depends(get_account_service),
) -> JSONResponse:
    await accounts.verify_two_factor(body.email, body.otp)
    return _ok("2FA code verified successfully")

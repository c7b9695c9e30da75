"""
Account endpoints.

POST /api/users/register — create an unverified account and email a verification code.
A failed send still returns 201 with verification_sent=false; the client
offers a resend.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from config import AppSettings
from dependencies import get_account_service, get_settings
from routes.otp_routes import otp_details
from schemas.dto.requests.auth import RegisterRequest
from schemas.dto.responses.auth import RegisterResponse, UserProfileResponse
from schemas.dto.responses.common import ErrorResponse
from services.account_service import AccountService

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)


@router.post("/register", status_code=201)
async def register(
    body: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
    settings: AppSettings = Depends(get_settings),
) -> JSONResponse:
    result = await accounts.register(body.name, body.email, body.password, body.phone)
    user = result.user
    response = RegisterResponse(
        message="User created successfully. Please verify your email.",
        user=UserProfileResponse(
            id=user.id_str,
            name=user.name,
            email=user.email,
            phone=user.phone,
            role=user.role,
            is_verified=user.is_verified,
        ),
        verification_sent=result.verification_sent,
        otp=otp_details(result.verification, settings),
    )
    return JSONResponse(status_code=201, content=response.model_dump(exclude_none=True))

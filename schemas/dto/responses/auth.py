"""
Response DTOs for account endpoints.

UserProfileResponse — public view of a user
RegisterResponse    — POST /api/users/register  (201)
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from schemas.dto.responses.otp import OtpDetails


class UserProfileResponse(BaseModel):
    """User fields safe to return to the client."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    phone: Optional[str] = None
    role: str
    is_verified: bool


class RegisterResponse(BaseModel):
    """Response body for POST /api/users/register (201)."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    user: UserProfileResponse
    verification_sent: bool
    otp: Optional[OtpDetails] = None

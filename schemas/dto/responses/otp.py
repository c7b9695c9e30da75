"""
Response DTOs for OTP endpoints.

OtpDetails       — issued code, only present when OTP_EXPOSE_IN_RESPONSE is on
                   outside production
OtpSentResponse  — every send/resend endpoint (200)
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from schemas.dto.responses.common import MessageResponse


class OtpDetails(BaseModel):
    """Development view of an issued code."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: str
    code: str
    purpose: str
    expires_at: str  # ISO 8601 string


class OtpSentResponse(MessageResponse):
    """Response body for send/resend endpoints.

    ``otp`` is absent from the JSON when None (routes use exclude_none=True).
    """

    otp: Optional[OtpDetails] = None

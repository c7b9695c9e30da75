"""
OTP record document model.

Maps to the `otps` MongoDB collection.

One document per issued code. code_hash stores SHA-256(code); the plaintext
code only ever exists in memory between generation and delivery. `used` flips
to True exactly once, either on successful verification or when a newer code
for the same (email, purpose) supersedes it.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import field_validator

from schemas.models.base import MongoBaseModel
from shared.datetime_utils import as_utc


class OtpPurpose(str, Enum):
    """Closed set of namespaces a code can be issued for."""

    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"
    TWO_FACTOR_AUTH = "two_factor_auth"


class OtpDoc(MongoBaseModel):
    """Document model for the `otps` collection."""

    email: str
    code_hash: str
    purpose: OtpPurpose
    used: bool = False
    used_at: Optional[datetime] = None
    expires_at: datetime
    created_at: datetime

    @field_validator("used_at", "expires_at", "created_at")
    @classmethod
    def _aware(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)

    def is_valid_at(self, now: datetime) -> bool:
        return not self.used and self.expires_at > now

"""
OTP lifecycle: generation, verification, volume stats and cleanup.

A code is bound to an (email, purpose) pair. Issuing a new one supersedes
every unconsumed code for the pair, verification consumes the matching code
exactly once, and expired or consumed records stay in the store until the
reaper deletes them.

Verification failures all report the same message so callers cannot tell a
wrong code from an expired or already-used one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from pymongo.errors import DuplicateKeyError

from errors import PersistenceError, ValidationError
from repositories.otp_repository import OtpRepository
from schemas.models.otp import OtpDoc, OtpPurpose
from shared.crypto import hash_otp_code
from shared.datetime_utils import Clock, utc_now
from shared.generators import generate_otp_code
from shared.logging import get_logger
from shared.validators import is_well_formed_otp, normalize_email, normalize_otp_code

log = get_logger(__name__)

INVALID_OTP_MESSAGE = "Invalid or expired OTP"
VERIFIED_OTP_MESSAGE = "OTP verified successfully"

DEFAULT_VALIDITY_MINUTES = 10


@dataclass(frozen=True)
class VerificationResult:
    valid: bool
    message: str


@dataclass(frozen=True)
class GeneratedOtp:
    """A freshly persisted record plus the plaintext code it was issued for."""

    record: OtpDoc
    code: str

    @property
    def otp_id(self) -> str:
        return str(self.record.id)

    def to_dict(self) -> dict:
        return {
            "id": self.otp_id,
            "email": self.record.email,
            "code": self.code,
            "purpose": self.record.purpose,
            "expires_at": self.record.expires_at.isoformat(),
        }


def parse_purpose(purpose: OtpPurpose | str) -> OtpPurpose:
    try:
        return OtpPurpose(purpose)
    except ValueError as e:
        raise ValidationError(f"Invalid OTP purpose: {purpose!r}", field="purpose") from e


class OtpService:
    def __init__(
        self,
        repository: OtpRepository,
        code_length: int = 6,
        default_validity_minutes: int = DEFAULT_VALIDITY_MINUTES,
        clock: Clock = utc_now,
        max_insert_attempts: int = 3,
        code_hash_key: str = "",
    ) -> None:
        self._repo = repository
        self._code_hash_key = code_hash_key
        self._code_length = code_length
        self._default_validity = default_validity_minutes
        self._clock = clock
        self._max_insert_attempts = max_insert_attempts

    async def generate(
        self,
        email: str,
        purpose: OtpPurpose | str,
        validity_minutes: Optional[int] = None,
    ) -> GeneratedOtp:
        """Invalidate live codes for (email, purpose), then persist a new one.

        The partial unique index on unconsumed records makes the invalidate
        and insert pair safe under concurrency: a request that loses the race
        sees DuplicateKeyError and starts over.
        """
        email = normalize_email(email)
        if not email:
            raise ValidationError("Email is required", field="email")
        purpose = parse_purpose(purpose)
        if validity_minutes is None:
            validity_minutes = self._default_validity
        if (
            isinstance(validity_minutes, bool)
            or not isinstance(validity_minutes, int)
            or validity_minutes <= 0
        ):
            raise ValidationError(
                "validity_minutes must be a positive integer", field="validity_minutes"
            )

        for attempt in range(1, self._max_insert_attempts + 1):
            now = self._clock()
            invalidated = await self._repo.invalidate_active(email, purpose, now)
            code = generate_otp_code(self._code_length)
            doc = OtpDoc(
                email=email,
                code_hash=hash_otp_code(code, self._code_hash_key),
                purpose=purpose,
                expires_at=now + timedelta(minutes=validity_minutes),
                created_at=now,
            )
            try:
                record = await self._repo.insert(doc)
            except DuplicateKeyError:
                log.warning(
                    "otp_generate_conflict",
                    email=email,
                    purpose=purpose.value,
                    attempt=attempt,
                )
                continue

            log.info(
                "otp_generated",
                email=email,
                purpose=purpose.value,
                otp_id=str(record.id),
                invalidated=invalidated,
                expires_at=record.expires_at.isoformat(),
            )
            return GeneratedOtp(record=record, code=code)

        log.error("otp_generate_exhausted", email=email, purpose=purpose.value)
        raise PersistenceError("Could not issue a new OTP, please try again")

    async def verify(
        self, email: str, code: str, purpose: OtpPurpose | str
    ) -> VerificationResult:
        """Consume the newest live record matching email, code and purpose."""
        email = normalize_email(email)
        code = normalize_otp_code(code)
        purpose = parse_purpose(purpose)

        if not email or not is_well_formed_otp(code, self._code_length):
            log.info(
                "otp_verification_failed",
                email=email,
                purpose=purpose.value,
                reason="malformed",
            )
            return VerificationResult(valid=False, message=INVALID_OTP_MESSAGE)

        now = self._clock()
        record = await self._repo.find_valid(
            email, hash_otp_code(code, self._code_hash_key), purpose, now
        )
        if record is None:
            log.info(
                "otp_verification_failed",
                email=email,
                purpose=purpose.value,
                reason="no_match",
            )
            return VerificationResult(valid=False, message=INVALID_OTP_MESSAGE)

        if not await self._repo.consume(record.id, now):
            log.warning(
                "otp_verification_failed",
                email=email,
                purpose=purpose.value,
                otp_id=str(record.id),
                reason="already_consumed",
            )
            return VerificationResult(valid=False, message=INVALID_OTP_MESSAGE)

        log.info(
            "otp_verified",
            email=email,
            purpose=purpose.value,
            otp_id=str(record.id),
        )
        return VerificationResult(valid=True, message=VERIFIED_OTP_MESSAGE)

    async def get_stats(self, email: str, window_hours: int = 1) -> int:
        """Number of codes created for *email*, any purpose, in the trailing window."""
        since = self._clock() - timedelta(hours=window_hours)
        return await self._repo.count_created_since(normalize_email(email), since)

    async def count_valid(self, email: str, purpose: OtpPurpose | str) -> int:
        return await self._repo.count_valid(
            normalize_email(email), parse_purpose(purpose), self._clock()
        )

    async def cleanup_expired(self, retention: timedelta = timedelta(days=1)) -> int:
        """Hard-delete records that expired more than *retention* ago."""
        cutoff: datetime = self._clock() - retention
        deleted = await self._repo.delete_expired_before(cutoff)
        log.info("otp_cleanup_completed", deleted=deleted, cutoff=cutoff.isoformat())
        return deleted

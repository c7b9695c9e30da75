"""
Account flows built on OTP issuance and verification.

register               — create an unverified user and send a verification code
send_verification      — (re)send the email verification code
verify_email           — consume the code and mark the user verified
request_password_reset — send a reset code; unknown emails get the same reply
reset_password         — consume the reset code and store the new password
send_two_factor        — send a two-factor code to an existing user
verify_two_factor      — consume a two-factor code
resend                 — mint a fresh code for any purpose
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pymongo.errors import DuplicateKeyError

from errors import (
    ConflictError,
    DeliveryFailedError,
    InvalidOtpError,
    NotFoundError,
    PersistenceError,
    RateLimitError,
    ValidationError,
)
from repositories.user_repository import UserRepository
from schemas.models.otp import OtpPurpose
from schemas.models.user import UserDoc
from services.otp_issuance import OtpIssuanceService, OtpIssue
from services.otp_service import parse_purpose
from shared.crypto import hash_password
from shared.datetime_utils import Clock, utc_now
from shared.logging import get_logger
from shared.validators import normalize_email, validate_email, validate_password

log = get_logger(__name__)

PASSWORD_RESET_SENT_MESSAGE = (
    "If an account exists with this email, a password reset OTP has been sent"
)


@dataclass(frozen=True)
class RegistrationResult:
    user: UserDoc
    verification: Optional[OtpIssue] = None

    @property
    def verification_sent(self) -> bool:
        return self.verification is not None


def _check_password(password: str, field: str = "password") -> None:
    ok, missing = validate_password(password)
    if not ok:
        raise ValidationError(
            "Password does not meet requirements", field=field, details=missing
        )


class AccountService:
    def __init__(
        self,
        users: UserRepository,
        issuance: OtpIssuanceService,
        clock: Clock = utc_now,
    ) -> None:
        self._users = users
        self._issuance = issuance
        self._clock = clock

    async def _require_user(self, email: str) -> UserDoc:
        user = await self._users.find_by_email(normalize_email(email))
        if user is None:
            raise NotFoundError("User not found with this email", field="email")
        return user

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        phone: Optional[str] = None,
    ) -> RegistrationResult:
        email = normalize_email(email)
        name = (name or "").strip()
        if not validate_email(email):
            raise ValidationError("A valid email is required", field="email")
        if not name:
            raise ValidationError("Name is required", field="name")
        _check_password(password)

        if await self._users.find_by_email(email) is not None:
            raise ConflictError("User already exists with this email", field="email")

        now = self._clock()
        try:
            user = await self._users.create(
                UserDoc(
                    email=email,
                    name=name,
                    password_hash=hash_password(password),
                    phone=phone,
                    created_at=now,
                    updated_at=now,
                )
            )
        except DuplicateKeyError as e:
            raise ConflictError("User already exists with this email", field="email") from e

        log.info("user_registered", user_id=user.id_str, email=email)

        # The account exists either way; a failed issue or send is reported, not fatal.
        try:
            issue = await self._issuance.send_email_verification_otp(email, name)
        except (DeliveryFailedError, PersistenceError, RateLimitError) as e:
            log.warning(
                "registration_verification_not_sent",
                user_id=user.id_str,
                email=email,
                error_code=e.error_code,
            )
            issue = None

        return RegistrationResult(user=user, verification=issue)

    async def send_verification(self, email: str) -> OtpIssue:
        user = await self._require_user(email)
        if user.is_verified:
            raise ValidationError("Email is already verified", field="email")
        return await self._issuance.send_email_verification_otp(user.email, user.name)

    async def verify_email(self, email: str, code: str) -> None:
        result = await self._issuance.verify_otp(
            email, code, OtpPurpose.EMAIL_VERIFICATION
        )
        if not result.valid:
            raise InvalidOtpError(result.message, field="otp")

        user = await self._users.find_by_email(normalize_email(email))
        if user is not None:
            await self._users.set_verified(user.id, self._clock())
            log.info("user_email_verified", user_id=user.id_str, email=user.email)

    async def request_password_reset(self, email: str) -> Optional[OtpIssue]:
        """Send a reset code, or return None when nothing was sent.

        Unknown emails, throttled requests and failed deliveries all return
        None; callers give the same reply for each.
        """
        email = normalize_email(email)
        user = await self._users.find_by_email(email)
        if user is None:
            log.info("password_reset_unknown_email", email=email)
            return None
        try:
            return await self._issuance.send_password_reset_otp(user.email, user.name)
        except (DeliveryFailedError, RateLimitError) as e:
            log.warning(
                "password_reset_not_sent",
                email=user.email,
                purpose=OtpPurpose.PASSWORD_RESET.value,
                error_code=e.error_code,
            )
            return None

    async def reset_password(self, email: str, code: str, new_password: str) -> None:
        # Validate before verifying so a weak password does not burn the code
        _check_password(new_password, field="new_password")

        result = await self._issuance.verify_otp(email, code, OtpPurpose.PASSWORD_RESET)
        if not result.valid:
            raise InvalidOtpError(result.message, field="otp")

        user = await self._users.find_by_email(normalize_email(email))
        if user is not None:
            await self._users.update_password(
                user.id, hash_password(new_password), self._clock()
            )
            log.info("user_password_reset", user_id=user.id_str, email=user.email)

    async def send_two_factor(self, email: str) -> OtpIssue:
        user = await self._require_user(email)
        return await self._issuance.send_two_factor_otp(user.email, user.name)

    async def verify_two_factor(self, email: str, code: str) -> None:
        result = await self._issuance.verify_otp(email, code, OtpPurpose.TWO_FACTOR_AUTH)
        if not result.valid:
            raise InvalidOtpError(result.message, field="otp")

    async def resend(
        self, email: str, purpose: OtpPurpose | str = OtpPurpose.PASSWORD_RESET
    ) -> Optional[OtpIssue]:
        purpose = parse_purpose(purpose)
        if purpose is OtpPurpose.EMAIL_VERIFICATION:
            return await self.send_verification(email)
        if purpose is OtpPurpose.TWO_FACTOR_AUTH:
            return await self.send_two_factor(email)
        return await self.request_password_reset(email)

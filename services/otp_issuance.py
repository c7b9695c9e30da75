"""
OTP issuance: the single entry point routes use to send a code.

send_otp() runs, in order:
  1. pacing check    (OtpCooldownError, nothing written)
  2. volume check    (OtpAbuseThresholdError, nothing written)
  3. generate        (supersedes older codes for the same purpose)
  4. render + send   (DeliveryFailedError, the new code stays valid)

A resend is just another send_otp() call: it mints a new code rather than
re-delivering the old one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from errors import DeliveryFailedError, OtpAbuseThresholdError, OtpCooldownError
from infrastructure.email.protocol import NotificationSender
from infrastructure.email.renderer import OtpEmailRenderer
from schemas.models.otp import OtpPurpose
from services.otp_service import GeneratedOtp, OtpService, VerificationResult, parse_purpose
from services.rate_limiter import OtpRateLimiter
from shared.logging import get_logger, log_with_context
from shared.validators import normalize_email

log = get_logger(__name__)

COOLDOWN_MESSAGE = "Please wait before requesting another OTP"
ABUSE_MESSAGE = "Too many OTP requests. Please try again later."
DELIVERY_FAILED_MESSAGE = "OTP was generated but the email could not be sent"


@dataclass(frozen=True)
class OtpIssue:
    """Outcome of a successful send."""

    generated: GeneratedOtp
    message_id: Optional[str] = None

    @property
    def otp_id(self) -> str:
        return self.generated.otp_id

    @property
    def expires_at(self) -> datetime:
        return self.generated.record.expires_at

    def public_details(self) -> dict:
        """Development-only view of the issued code."""
        return self.generated.to_dict()


class OtpIssuanceService:
    def __init__(
        self,
        otp_service: OtpService,
        rate_limiter: OtpRateLimiter,
        sender: NotificationSender,
        renderer: OtpEmailRenderer,
        validity_minutes: int = 10,
    ) -> None:
        self._otp = otp_service
        self._limiter = rate_limiter
        self._sender = sender
        self._renderer = renderer
        self._validity_minutes = validity_minutes

    async def send_otp(
        self, email: str, user_name: Optional[str], purpose: OtpPurpose | str
    ) -> OtpIssue:
        email = normalize_email(email)
        purpose = parse_purpose(purpose)
        bound = log_with_context(log, email=email, purpose=purpose.value)

        if not await self._limiter.check_rate_limit(email, purpose):
            retry_after = await self._limiter.retry_after(email, purpose)
            bound.warning("otp_send_rejected", reason="cooldown", retry_after=retry_after)
            raise OtpCooldownError(
                COOLDOWN_MESSAGE,
                details={"retry_after_seconds": retry_after},
            )

        if not await self._limiter.check_volume(email):
            bound.warning(
                "otp_send_rejected",
                reason="hourly_limit",
                limit=self._limiter.hourly_limit,
            )
            raise OtpAbuseThresholdError(ABUSE_MESSAGE)

        generated = await self._otp.generate(email, purpose, self._validity_minutes)

        rendered = self._renderer.render(
            purpose, user_name, generated.code, self._validity_minutes
        )
        result = await self._sender.send(
            email, rendered.subject, rendered.html, rendered.text, to_name=user_name
        )
        if not result.success:
            bound.error(
                "otp_delivery_failed", otp_id=generated.otp_id, error=result.error
            )
            raise DeliveryFailedError(DELIVERY_FAILED_MESSAGE, otp_id=generated.otp_id)

        bound.info("otp_sent", otp_id=generated.otp_id, message_id=result.message_id)
        return OtpIssue(generated=generated, message_id=result.message_id)

    async def send_email_verification_otp(
        self, email: str, user_name: Optional[str]
    ) -> OtpIssue:
        return await self.send_otp(email, user_name, OtpPurpose.EMAIL_VERIFICATION)

    async def send_password_reset_otp(
        self, email: str, user_name: Optional[str]
    ) -> OtpIssue:
        return await self.send_otp(email, user_name, OtpPurpose.PASSWORD_RESET)

    async def send_two_factor_otp(self, email: str, user_name: Optional[str]) -> OtpIssue:
        return await self.send_otp(email, user_name, OtpPurpose.TWO_FACTOR_AUTH)

    async def verify_otp(
        self, email: str, code: str, purpose: OtpPurpose | str
    ) -> VerificationResult:
        return await self._otp.verify(email, code, purpose)

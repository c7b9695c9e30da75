"""
OTP request throttling.

Two independent checks:
- pacing: one permitted request per (email, purpose) per cooldown window,
  tracked in a CooldownStore (process memory or Redis)
- volume: codes created for an email in the trailing window, counted from
  the durable OTP store and shared by all purposes
"""

from __future__ import annotations

from infrastructure.cache.protocol import CooldownStore
from schemas.models.otp import OtpPurpose
from services.otp_service import OtpService
from shared.validators import normalize_email


class OtpRateLimiter:
    def __init__(
        self,
        cooldown_store: CooldownStore,
        otp_service: OtpService,
        cooldown_seconds: int = 60,
        hourly_limit: int = 5,
        window_hours: int = 1,
    ) -> None:
        self._store = cooldown_store
        self._otp_service = otp_service
        self.cooldown_seconds = cooldown_seconds
        self.hourly_limit = hourly_limit
        self.window_hours = window_hours

    @staticmethod
    def cooldown_key(email: str, purpose: OtpPurpose | str) -> str:
        return f"{normalize_email(email)}:{OtpPurpose(purpose).value}"

    async def check_rate_limit(self, email: str, purpose: OtpPurpose | str) -> bool:
        """True (and the cooldown restarts) unless a request was permitted recently."""
        return await self._store.allow(
            self.cooldown_key(email, purpose), self.cooldown_seconds
        )

    async def retry_after(self, email: str, purpose: OtpPurpose | str) -> int:
        """Seconds left on the cooldown for (email, purpose)."""
        return await self._store.remaining(
            self.cooldown_key(email, purpose), self.cooldown_seconds
        )

    async def check_volume(self, email: str) -> bool:
        """True while the email is under its cap for the trailing window."""
        recent = await self._otp_service.get_stats(email, self.window_hours)
        return recent < self.hourly_limit

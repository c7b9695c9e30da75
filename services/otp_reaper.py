"""Periodic deletion of OTP records past the retention window.

Maintenance only: verification never depends on rows being deleted, so a
failed sweep is logged and retried on the next tick.
"""

from __future__ import annotations

import asyncio
import contextlib
from datetime import timedelta
from typing import Optional

from services.otp_service import OtpService
from shared.logging import get_logger

log = get_logger(__name__)


class OtpReaper:
    def __init__(
        self,
        otp_service: OtpService,
        interval_seconds: int = 3600,
        retention: timedelta = timedelta(days=1),
    ) -> None:
        self._otp = otp_service
        self.interval_seconds = interval_seconds
        self.retention = retention
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        return await self._otp.cleanup_expired(self.retention)

    async def _loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception as e:
                log.error(
                    "otp_reaper_sweep_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        if self.interval_seconds <= 0:
            log.info("otp_reaper_disabled")
            return
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        log.info(
            "otp_reaper_started",
            interval_seconds=self.interval_seconds,
            retention_hours=self.retention.total_seconds() / 3600,
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        log.info("otp_reaper_stopped")

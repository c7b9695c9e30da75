"""Process-local cooldown store.

Suitable for single-instance deployments. State is lost on restart, which only
means pending cooldowns are forgotten; the durable hourly cap still applies.
"""

from __future__ import annotations

import math
import time
from threading import Lock
from typing import Callable, Dict

from shared.logging import get_logger

log = get_logger(__name__)


class InMemoryCooldownStore:
    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 10_000,
    ) -> None:
        self._clock = clock
        self._max_entries = max_entries
        self._last_allowed: Dict[str, float] = {}
        self._lock = Lock()

    async def allow(self, key: str, cooldown_seconds: int) -> bool:
        now = self._clock()
        with self._lock:
            last = self._last_allowed.get(key)
            if last is not None and now - last < cooldown_seconds:
                return False
            self._last_allowed[key] = now
            if len(self._last_allowed) > self._max_entries:
                self._evict(now, cooldown_seconds)
            return True

    async def remaining(self, key: str, cooldown_seconds: int) -> int:
        now = self._clock()
        with self._lock:
            last = self._last_allowed.get(key)
        if last is None:
            return 0
        return max(0, math.ceil(cooldown_seconds - (now - last)))

    def _evict(self, now: float, cooldown_seconds: int) -> None:
        """Drop keys whose cooldown has elapsed. Caller holds the lock."""
        cutoff = now - cooldown_seconds
        stale = [k for k, ts in self._last_allowed.items() if ts <= cutoff]
        for k in stale:
            del self._last_allowed[k]
        log.debug("cooldown_store_evicted", evicted=len(stale), remaining=len(self._last_allowed))

    def __len__(self) -> int:
        return len(self._last_allowed)

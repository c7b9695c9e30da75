"""CooldownStore protocol — the rate limiter depends on this, not on a backend."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class CooldownStore(Protocol):
    async def allow(self, key: str, cooldown_seconds: int) -> bool:
        """Return True and start a cooldown for *key* unless one is running."""
        ...

    async def remaining(self, key: str, cooldown_seconds: int) -> int:
        """Whole seconds until *key* may be allowed again; 0 when it may now."""
        ...

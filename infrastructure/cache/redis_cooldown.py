"""Redis-backed cooldown store shared by every app instance.

One key per (email, purpose) written with SET NX EX: the first writer inside
the window wins, Redis expires the key when the cooldown ends.

If Redis is unreachable the store fails open. Pacing is advisory; the
durable hourly cap in MongoDB still bounds volume.
"""

from __future__ import annotations

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from shared.logging import get_logger

log = get_logger(__name__)


class RedisCooldownStore:
    def __init__(self, redis_client: aioredis.Redis, prefix: str = "firstlight") -> None:
        self._redis = redis_client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}:otp_cooldown:{key}"

    async def allow(self, key: str, cooldown_seconds: int) -> bool:
        if cooldown_seconds <= 0:
            return True
        try:
            result = await self._redis.set(
                self._key(key), "1", nx=True, ex=cooldown_seconds
            )
        except RedisError as e:
            log.warning(
                "cooldown_store_unavailable",
                error=str(e),
                error_type=type(e).__name__,
            )
            return True
        return bool(result)

    async def remaining(self, key: str, cooldown_seconds: int) -> int:
        try:
            ttl = await self._redis.ttl(self._key(key))
        except RedisError as e:
            log.warning(
                "cooldown_store_unavailable",
                error=str(e),
                error_type=type(e).__name__,
            )
            return cooldown_seconds
        # TTL is -2 for a missing key, -1 for a key without expiry
        if ttl == -2:
            return 0
        if ttl < 0:
            return cooldown_seconds
        return min(int(ttl), cooldown_seconds)

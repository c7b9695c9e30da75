"""
GET /health

mongodb       ok | error     error makes the service "unhealthy" (503): no code
                             can be issued or verified without the store
rate_limiter  redis | memory which cooldown backend this instance uses
redis         ok | error     only reported with the redis backend; an error is
                             "degraded" (200) since cooldowns then fail open
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from dependencies import get_db, get_redis
from schemas.dto.responses.common import HealthResponse

router = APIRouter(tags=["health"])


async def _ping(probe) -> str:
    try:
        await probe()
    except Exception:
        return "error"
    return "ok"


@router.get("/health", response_model=HealthResponse)
async def health_check(db=Depends(get_db), redis=Depends(get_redis)) -> JSONResponse:
    checks = {"mongodb": await _ping(lambda: db.client.admin.command("ping"))}
    checks["rate_limiter"] = "memory" if redis is None else "redis"
    if redis is not None:
        checks["redis"] = await _ping(redis.ping)

    if checks["mongodb"] != "ok":
        status, status_code = "unhealthy", 503
    elif checks.get("redis", "ok") != "ok":
        status, status_code = "degraded", 200
    else:
        status, status_code = "healthy", 200

    return JSONResponse(
        status_code=status_code,
        content=HealthResponse(status=status, checks=checks).model_dump(),
    )

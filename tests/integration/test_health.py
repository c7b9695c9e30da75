"""Integration tests for GET /health."""

from contextlib import asynccontextmanager
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from errors import register_error_handlers
from routes.health_routes import router as health_router


def _mongo(ok: bool) -> MagicMock:
    db = MagicMock()
    db.client.admin.command = AsyncMock(
        return_value={"ok": 1} if ok else None,
        side_effect=None if ok else Exception("connection refused"),
    )
    return db


def _redis(ok: Optional[bool]):
    """None means Redis is not configured."""
    if ok is None:
        return None
    r = AsyncMock()
    r.ping = AsyncMock(
        return_value=True if ok else None,
        side_effect=None if ok else Exception("redis down"),
    )
    return r


def _get_health(mongo_ok: bool, redis_ok: Optional[bool]):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.db = _mongo(mongo_ok)
        app.state.redis = _redis(redis_ok)
        yield

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(health_router)
    with TestClient(app) as client:
        return client.get("/health")


@pytest.mark.parametrize(
    "mongo_ok, redis_ok, status_code, status",
    [
        (True, True, 200, "healthy"),
        (True, None, 200, "healthy"),
        (True, False, 200, "degraded"),
        (False, True, 503, "unhealthy"),
        (False, None, 503, "unhealthy"),
        (False, False, 503, "unhealthy"),
    ],
    ids=[
        "redis_ok",
        "memory_backend",
        "redis_down",
        "mongo_down",
        "mongo_down_memory",
        "both_down",
    ],
)
def test_overall_status(mongo_ok, redis_ok, status_code, status):
    resp = _get_health(mongo_ok, redis_ok)
    assert resp.status_code == status_code
    assert resp.json()["status"] == status


class TestHealthChecks:
    def test_redis_backend_reports_ping(self):
        checks = _get_health(True, True).json()["checks"]
        assert checks == {"mongodb": "ok", "rate_limiter": "redis", "redis": "ok"}

    def test_memory_backend_has_no_redis_check(self):
        checks = _get_health(True, None).json()["checks"]
        assert checks == {"mongodb": "ok", "rate_limiter": "memory"}

    def test_failed_checks_marked_error(self):
        checks = _get_health(False, False).json()["checks"]
        assert checks["mongodb"] == "error"
        assert checks["redis"] == "error"

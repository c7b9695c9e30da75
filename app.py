"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, Optional

import redis.asyncio as aioredis
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.mongo_client import AsyncMongoClient
from pymongo.errors import DuplicateKeyError

from config import AppSettings
from errors import PersistenceError, register_error_handlers
from infrastructure.cache.memory_cooldown import InMemoryCooldownStore
from infrastructure.cache.protocol import CooldownStore
from infrastructure.cache.redis_cooldown import RedisCooldownStore
from infrastructure.email.protocol import NotificationSender
from infrastructure.email.renderer import OtpEmailRenderer
from infrastructure.email.zeptomail import ZeptoMailSender
from repositories.otp_repository import OtpRepository
from repositories.user_repository import UserRepository
from routes.health_routes import router as health_router
from routes.otp_routes import router as otp_router
from routes.user_routes import router as user_router
from services.account_service import AccountService
from services.otp_issuance import OtpIssuanceService
from services.otp_reaper import OtpReaper
from services.otp_service import OtpService
from services.rate_limiter import OtpRateLimiter
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def attach_services(
    app: FastAPI,
    settings: AppSettings,
    *,
    otp_repository: OtpRepository,
    user_repository: UserRepository,
    cooldown_store: CooldownStore,
    sender: NotificationSender,
    renderer: Optional[OtpEmailRenderer] = None,
) -> None:
    """Build the service graph and store it on app.state."""
    otp_settings = settings.otp
    if renderer is None:
        renderer = OtpEmailRenderer(
            app_name=settings.app_name,
            client_url=settings.client_url,
            support_email=settings.email.support_email,
            security_email=settings.email.security_email,
        )

    otp_service = OtpService(
        otp_repository,
        code_length=otp_settings.otp_code_length,
        default_validity_minutes=otp_settings.otp_validity_minutes,
        code_hash_key=otp_settings.otp_hash_key,
    )
    rate_limiter = OtpRateLimiter(
        cooldown_store,
        otp_service,
        cooldown_seconds=otp_settings.otp_cooldown_seconds,
        hourly_limit=otp_settings.otp_hourly_limit,
        window_hours=otp_settings.otp_abuse_window_hours,
    )
    issuance = OtpIssuanceService(
        otp_service,
        rate_limiter,
        sender,
        renderer,
        validity_minutes=otp_settings.otp_validity_minutes,
    )

    app.state.settings = settings
    app.state.otp_service = otp_service
    app.state.issuance_service = issuance
    app.state.account_service = AccountService(user_repository, issuance)
    app.state.reaper = OtpReaper(
        otp_service,
        interval_seconds=otp_settings.otp_reaper_interval_seconds,
        retention=timedelta(hours=otp_settings.otp_retention_hours),
    )


async def ensure_indexes(*repositories, strict: bool = False) -> None:
    """Create each repository's indexes. With *strict* the first failure is re-raised."""
    for repository in repositories:
        try:
            await repository.ensure_indexes()
        except (PersistenceError, DuplicateKeyError) as e:
            log.error(
                "ensure_indexes_failed",
                repository=type(repository).__name__,
                error=str(e),
                error_type=type(e).__name__,
                strict=strict,
                exc_info=e,
            )
            if strict:
                raise


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(
        log_level=settings.logging.log_level,
        log_format=settings.logging.log_format,
        env=settings.env,
    )

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            environment=settings.env,
        )

    if settings.is_production and not settings.otp.otp_hash_key:
        log.warning("otp_hash_key_missing")

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(
            settings.db.mongodb_uri, tz_aware=True
        )
        db = mongo_client[settings.db.db_name]
        app.state.mongo_client = mongo_client
        app.state.db = db

        # Redis is optional; without it cooldowns are tracked per process
        redis_client = None
        if settings.redis.redis_uri:
            redis_client = aioredis.from_url(
                settings.redis.redis_uri,
                encoding="utf-8",
                decode_responses=True,
            )
        app.state.redis = redis_client

        otp_repository = OtpRepository(db["otps"])
        user_repository = UserRepository(db["users"])
        await ensure_indexes(
            otp_repository, user_repository, strict=settings.is_production
        )

        if redis_client is not None:
            cooldown_store: CooldownStore = RedisCooldownStore(
                redis_client, prefix=settings.redis.redis_key_prefix
            )
        else:
            cooldown_store = InMemoryCooldownStore()

        sender = ZeptoMailSender(settings.email)
        attach_services(
            app,
            settings,
            otp_repository=otp_repository,
            user_repository=user_repository,
            cooldown_store=cooldown_store,
            sender=sender,
        )
        app.state.reaper.start()
        log.info(
            "app_started",
            env=settings.env,
            rate_limiter="redis" if redis_client is not None else "memory",
        )

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await app.state.reaper.stop()
        await sender.aclose()
        await mongo_client.close()
        if redis_client is not None:
            await redis_client.aclose()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(user_router)
    app.include_router(otp_router)

    return app

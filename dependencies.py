"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Services are built once in the app lifespan and
stored on app.state; these providers only hand them out.
"""

from __future__ import annotations

from fastapi import Request

from config import AppSettings
from services.account_service import AccountService


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


async def get_db(request: Request):
    """Return the async MongoDB database from app.state."""
    return request.app.state.db


async def get_redis(request: Request):
    """Return the async Redis client from app.state (may be None if not configured)."""
    return request.app.state.redis


def get_account_service(request: Request) -> AccountService:
    """Return the AccountService built during startup."""
    return request.app.state.account_service

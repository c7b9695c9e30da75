"""
Request DTOs for account endpoints.

RegisterRequest — POST /api/users/register
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class RegisterRequest(BaseModel):
    """Request body for POST /api/users/register."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    email: str
    password: str
    phone: Optional[str] = None

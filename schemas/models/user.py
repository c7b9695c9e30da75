"""
User document model.

Maps to the `users` MongoDB collection. Only the fields the OTP flows read
or write are modelled; listing and profile data live elsewhere.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from schemas.models.base import MongoBaseModel


class UserDoc(MongoBaseModel):
    """
    Document model for the `users` collection.

    role values: "tenant" (default), "landlord"
    """

    email: str
    name: str
    password_hash: Optional[str] = None
    phone: Optional[str] = None
    role: str = "tenant"
    is_verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

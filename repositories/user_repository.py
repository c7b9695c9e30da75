"""
User directory backed by the `users` MongoDB collection.

Only the lookups and mutations the OTP flows need: find by email or id,
create an unverified account, flip the verified flag, replace the password.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from bson import ObjectId
from pymongo import ASCENDING
from pymongo.asynchronous.collection import AsyncCollection

from repositories.base import translate_errors
from schemas.models.user import UserDoc


class UserRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    @translate_errors("users.ensure_indexes")
    async def ensure_indexes(self) -> None:
        await self._col.create_index([("email", ASCENDING)], name="uq_users_email", unique=True)

    @translate_errors("users.find_by_email")
    async def find_by_email(self, email: str) -> Optional[UserDoc]:
        return UserDoc.from_mongo(await self._col.find_one({"email": email}))

    @translate_errors("users.find_by_id")
    async def find_by_id(self, user_id: ObjectId) -> Optional[UserDoc]:
        return UserDoc.from_mongo(await self._col.find_one({"_id": user_id}))

    @translate_errors("users.create")
    async def create(self, user: UserDoc) -> UserDoc:
        """Insert *user*. Raises DuplicateKeyError if the email is taken."""
        result = await self._col.insert_one(user.to_mongo())
        return user.model_copy(update={"id": result.inserted_id})

    @translate_errors("users.set_verified")
    async def set_verified(self, user_id: ObjectId, now: datetime) -> bool:
        result = await self._col.update_one(
            {"_id": user_id},
            {"$set": {"is_verified": True, "updated_at": now}},
        )
        return result.matched_count == 1

    @translate_errors("users.update_password")
    async def update_password(
        self, user_id: ObjectId, password_hash: str, now: datetime
    ) -> bool:
        result = await self._col.update_one(
            {"_id": user_id},
            {"$set": {"password_hash": password_hash, "updated_at": now}},
        )
        return result.matched_count == 1

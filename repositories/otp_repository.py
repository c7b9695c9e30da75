"""
OTP record store backed by the `otps` MongoDB collection.

All methods take an explicit `now` so the service layer owns the clock.

Index layout:
- (email, purpose, code_hash)  verification lookup
- (email, created_at)          hourly volume count
- expires_at                   reaper sweep
- (email, purpose) unique, partial on used=false
      at most one unconsumed code per key; a concurrent second insert fails
      with DuplicateKeyError instead of leaving two live codes behind
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.asynchronous.collection import AsyncCollection

from repositories.base import translate_errors
from schemas.models.otp import OtpDoc, OtpPurpose

ACTIVE_KEY_INDEX = "uq_otps_active_email_purpose"


def _purpose_value(purpose: OtpPurpose | str) -> str:
    return OtpPurpose(purpose).value


class OtpRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    @translate_errors("otps.ensure_indexes")
    async def ensure_indexes(self) -> None:
        await self._col.create_index(
            [("email", ASCENDING), ("purpose", ASCENDING), ("code_hash", ASCENDING)],
            name="ix_otps_lookup",
        )
        await self._col.create_index(
            [("email", ASCENDING), ("created_at", DESCENDING)],
            name="ix_otps_email_created_at",
        )
        await self._col.create_index([("expires_at", ASCENDING)], name="ix_otps_expires_at")
        await self._col.create_index(
            [("email", ASCENDING), ("purpose", ASCENDING)],
            name=ACTIVE_KEY_INDEX,
            unique=True,
            partialFilterExpression={"used": False},
        )

    @translate_errors("otps.invalidate_active")
    async def invalidate_active(
        self, email: str, purpose: OtpPurpose, now: datetime
    ) -> int:
        """Mark every unconsumed code for (email, purpose) as used."""
        result = await self._col.update_many(
            {"email": email, "purpose": _purpose_value(purpose), "used": False},
            {"$set": {"used": True, "used_at": now}},
        )
        return result.modified_count

    @translate_errors("otps.insert")
    async def insert(self, doc: OtpDoc) -> OtpDoc:
        result = await self._col.insert_one(doc.to_mongo())
        return doc.model_copy(update={"id": result.inserted_id})

    @translate_errors("otps.find_valid")
    async def find_valid(
        self, email: str, code_hash: str, purpose: OtpPurpose, now: datetime
    ) -> Optional[OtpDoc]:
        """Most recent unused, unexpired record matching all of the inputs."""
        raw = await self._col.find_one(
            {
                "email": email,
                "code_hash": code_hash,
                "purpose": _purpose_value(purpose),
                "used": False,
                "expires_at": {"$gt": now},
            },
            sort=[("created_at", DESCENDING)],
        )
        return OtpDoc.from_mongo(raw)

    @translate_errors("otps.consume")
    async def consume(self, otp_id: ObjectId, now: datetime) -> bool:
        """Flip used=false to used=true. False if someone else got there first."""
        result = await self._col.update_one(
            {"_id": otp_id, "used": False},
            {"$set": {"used": True, "used_at": now}},
        )
        return result.modified_count == 1

    @translate_errors("otps.count_created_since")
    async def count_created_since(self, email: str, since: datetime) -> int:
        return await self._col.count_documents(
            {"email": email, "created_at": {"$gt": since}}
        )

    @translate_errors("otps.count_valid")
    async def count_valid(self, email: str, purpose: OtpPurpose, now: datetime) -> int:
        return await self._col.count_documents(
            {
                "email": email,
                "purpose": _purpose_value(purpose),
                "used": False,
                "expires_at": {"$gt": now},
            }
        )

    @translate_errors("otps.delete_expired_before")
    async def delete_expired_before(self, cutoff: datetime) -> int:
        result = await self._col.delete_many({"expires_at": {"$lt": cutoff}})
        return result.deleted_count

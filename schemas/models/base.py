"""
Shared base for the MongoDB document models.

Documents keep their primary key under `_id`; models expose it as `id`.
ObjectIds are accepted as bson.ObjectId or as their 24 character hex form,
stay ObjectIds in python-mode dumps (what pymongo wants) and become hex
strings in JSON.
"""

from __future__ import annotations

from typing import Annotated, Any, Optional, TypeVar

from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer


def coerce_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise ValueError(f"Invalid ObjectId: {value!r}")


PyObjectId = Annotated[
    ObjectId,
    BeforeValidator(coerce_object_id),
    PlainSerializer(str, when_used="json"),
]

M = TypeVar("M", bound="MongoBaseModel")


class MongoBaseModel(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        use_enum_values=True,
    )

    id: Optional[PyObjectId] = Field(default=None, alias="_id")

    @property
    def id_str(self) -> Optional[str]:
        return str(self.id) if self.id is not None else None

    def to_mongo(self) -> dict:
        """Document for insert_one; `_id` is left out until one is assigned."""
        exclude = {"id"} if self.id is None else None
        return self.model_dump(by_alias=True, exclude=exclude)

    @classmethod
    def from_mongo(cls: type[M], data: Optional[dict]) -> Optional[M]:
        if data is None:
            return None
        return cls.model_validate(data)

"""Item model — one typed record inside an inventory."""

import uuid
from datetime import datetime

from pydantic import Field as PydField
from sqlmodel import Field, SQLModel

from stockroom.models.base import ApiModel, Int32, TimestampMixin, Version, new_uuid
from stockroom.models.inventory import Permissions

ITEM_VALUE_FIELDS = (
    "string1", "string2", "string3",
    "int1", "int2", "int3",
    "bool1", "bool2", "bool3",
)


class Item(TimestampMixin, SQLModel, table=True):
    __tablename__ = "items"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    inventory_id: uuid.UUID = Field(foreign_key="inventories.id", nullable=False, index=True)
    created_by_id: uuid.UUID = Field(foreign_key="users.id", nullable=False)

    custom_id: str = Field(max_length=255, nullable=False)
    version: int = Field(default=1, nullable=False)

    string1: str | None = Field(default=None, max_length=1000)
    string2: str | None = Field(default=None, max_length=1000)
    string3: str | None = Field(default=None, max_length=1000)
    int1: int | None = Field(default=None)
    int2: int | None = Field(default=None)
    int3: int | None = Field(default=None)
    bool1: bool | None = Field(default=None)
    bool2: bool | None = Field(default=None)
    bool3: bool | None = Field(default=None)


# ── API schemas ──────────────────────────────────────────────

class ItemValues(ApiModel):
    string1: str | None = PydField(default=None, max_length=1000)
    string2: str | None = PydField(default=None, max_length=1000)
    string3: str | None = PydField(default=None, max_length=1000)
    int1: Int32 | None = None
    int2: Int32 | None = None
    int3: Int32 | None = None
    bool1: bool | None = None
    bool2: bool | None = None
    bool3: bool | None = None


class ItemCreate(ItemValues):
    custom_id: str = PydField(min_length=1, max_length=255)


class ItemUpdate(ItemValues):
    """Field patch guarded by the caller's expected ``version``."""

    version: Version
    custom_id: str | None = PydField(default=None, min_length=1, max_length=255)

    def to_patch(self) -> dict:
        data = self.model_dump(exclude_unset=True, exclude={"version"})
        if data.get("custom_id", "") is None:
            data.pop("custom_id")
        return data


class ItemRead(ItemValues):
    id: uuid.UUID
    inventory_id: uuid.UUID
    custom_id: str
    version: int
    created_by_id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class ItemList(ApiModel):
    items: list[ItemRead]
    permissions: Permissions

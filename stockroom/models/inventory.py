"""Inventory model — an owned, shareable collection with a custom item schema."""

import json
import uuid
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, Field as PydField, StrictBool, field_validator
from sqlalchemy import Text
from sqlmodel import Column, Field, SQLModel

from stockroom.models.base import ApiModel, TimestampMixin, Version, new_uuid
from stockroom.models.user import UserSummary


class Inventory(TimestampMixin, SQLModel, table=True):
    __tablename__ = "inventories"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    creator_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)

    title: str = Field(max_length=255, nullable=False)
    description: str = Field(default="", sa_column=Column(Text, nullable=False, server_default=""))
    category: str = Field(default="Other", max_length=100)

    # JSON arrays of strings stored as text
    tags: str = Field(default="[]", sa_column=Column(Text, nullable=False, server_default="[]"))
    custom_id_format: str = Field(
        default="[]", sa_column=Column(Text, nullable=False, server_default="[]")
    )

    is_public: bool = Field(default=False)
    is_read_only: bool = Field(default=False)

    # Optimistic-concurrency token; bumped by exactly one on every write.
    version: int = Field(default=1, nullable=False)

    # Custom item schema: which typed item columns are in use and their labels.
    string_field1_name: str | None = Field(default=None, max_length=100)
    string_field1_active: bool = Field(default=False)
    string_field2_name: str | None = Field(default=None, max_length=100)
    string_field2_active: bool = Field(default=False)
    string_field3_name: str | None = Field(default=None, max_length=100)
    string_field3_active: bool = Field(default=False)
    int_field1_name: str | None = Field(default=None, max_length=100)
    int_field1_active: bool = Field(default=False)
    int_field2_name: str | None = Field(default=None, max_length=100)
    int_field2_active: bool = Field(default=False)
    int_field3_name: str | None = Field(default=None, max_length=100)
    int_field3_active: bool = Field(default=False)
    bool_field1_name: str | None = Field(default=None, max_length=100)
    bool_field1_active: bool = Field(default=False)
    bool_field2_name: str | None = Field(default=None, max_length=100)
    bool_field2_active: bool = Field(default=False)
    bool_field3_name: str | None = Field(default=None, max_length=100)
    bool_field3_active: bool = Field(default=False)


JSON_LIST_FIELDS = ("tags", "custom_id_format")


# ── API schemas ──────────────────────────────────────────────

def _non_blank(v: str | None) -> str | None:
    if v is not None and not v.strip():
        raise ValueError("must not be blank")
    return v.strip() if v is not None else v


Title = Annotated[str, PydField(max_length=255), AfterValidator(_non_blank)]


class InventoryCreate(ApiModel):
    title: Title
    description: str = ""
    category: str = PydField(default="Other", max_length=100)
    tags: list[str] = []
    custom_id_format: list[str] = []


class InventoryUpdate(ApiModel):
    """Metadata patch. ``version`` is the caller's expected current version."""

    version: Version

    title: Title | None = None
    description: str | None = None
    category: str | None = PydField(default=None, max_length=100)
    tags: list[str] | None = None
    custom_id_format: list[str] | None = None
    is_read_only: StrictBool | None = None

    string_field1_name: str | None = None
    string_field1_active: StrictBool | None = None
    string_field2_name: str | None = None
    string_field2_active: StrictBool | None = None
    string_field3_name: str | None = None
    string_field3_active: StrictBool | None = None
    int_field1_name: str | None = None
    int_field1_active: StrictBool | None = None
    int_field2_name: str | None = None
    int_field2_active: StrictBool | None = None
    int_field3_name: str | None = None
    int_field3_active: StrictBool | None = None
    bool_field1_name: str | None = None
    bool_field1_active: StrictBool | None = None
    bool_field2_name: str | None = None
    bool_field2_active: StrictBool | None = None
    bool_field3_name: str | None = None
    bool_field3_active: StrictBool | None = None

    def to_patch(self) -> dict:
        """Column values to write; JSON list fields are serialized."""
        data = self.model_dump(exclude_unset=True, exclude={"version"})
        # a nullable column left out is "unchanged", never "cleared"
        for key in ("title", "description", "category", "is_read_only"):
            if key in data and data[key] is None:
                data.pop(key)
        for key in JSON_LIST_FIELDS:
            if key in data:
                if data[key] is None:
                    data.pop(key)
                else:
                    data[key] = json.dumps(data[key])
        for key in [k for k in data if k.endswith("_active")]:
            if data[key] is None:
                data.pop(key)
        return data


class PublicUpdate(ApiModel):
    is_public: StrictBool
    version: Version


class Permissions(ApiModel):
    can_view: bool
    can_edit: bool
    can_edit_items: bool


class InventoryRead(ApiModel):
    id: uuid.UUID
    title: str
    description: str
    category: str
    tags: list[str]
    custom_id_format: list[str]
    is_public: bool
    is_read_only: bool
    version: int
    creator_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    string_field1_name: str | None
    string_field1_active: bool
    string_field2_name: str | None
    string_field2_active: bool
    string_field3_name: str | None
    string_field3_active: bool
    int_field1_name: str | None
    int_field1_active: bool
    int_field2_name: str | None
    int_field2_active: bool
    int_field3_name: str | None
    int_field3_active: bool
    bool_field1_name: str | None
    bool_field1_active: bool
    bool_field2_name: str | None
    bool_field2_active: bool
    bool_field3_name: str | None
    bool_field3_active: bool

    creator: UserSummary | None = None
    permissions: Permissions | None = None

    @field_validator(*JSON_LIST_FIELDS, mode="before")
    @classmethod
    def _decode_json(cls, v):
        return json.loads(v) if isinstance(v, str) else v

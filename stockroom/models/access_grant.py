"""AccessGrant model — per-user sharing of one inventory."""

import uuid
from datetime import datetime
from enum import StrEnum

from pydantic import EmailStr, field_validator
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from stockroom.models.base import ApiModel, TimestampMixin, new_uuid
from stockroom.models.user import UserSummary, normalize_email


class AccessLevel(StrEnum):
    VIEWER = "VIEWER"
    EDITOR = "EDITOR"


class AccessGrant(TimestampMixin, SQLModel, table=True):
    __tablename__ = "access_grants"
    __table_args__ = (
        UniqueConstraint("inventory_id", "user_id", name="uq_access_grants_inventory_user"),
    )

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    inventory_id: uuid.UUID = Field(foreign_key="inventories.id", nullable=False, index=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    access_level: AccessLevel = Field(default=AccessLevel.VIEWER)


# ── API schemas ──────────────────────────────────────────────

class AccessGrantCreate(ApiModel):
    email: EmailStr
    access_level: AccessLevel = AccessLevel.VIEWER

    @field_validator("email", mode="before")
    @classmethod
    def _normalize(cls, v):
        return normalize_email(v) if isinstance(v, str) else v


class AccessGrantUpdate(ApiModel):
    access_level: AccessLevel


class AccessGrantRead(ApiModel):
    id: uuid.UUID
    inventory_id: uuid.UUID
    user_id: uuid.UUID
    access_level: AccessLevel
    created_at: datetime
    user: UserSummary | None = None

"""User model — created on first sign-in, never hard-deleted."""

import uuid
from enum import StrEnum

from pydantic import EmailStr, Field as PydField, field_validator
from sqlmodel import Field, SQLModel

from stockroom.models.base import ApiModel, TimestampMixin, new_uuid


class UserRole(StrEnum):
    USER = "USER"
    ADMIN = "ADMIN"


class Theme(StrEnum):
    LIGHT = "LIGHT"
    DARK = "DARK"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class User(TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    email: str = Field(max_length=320, nullable=False, unique=True, index=True)
    name: str | None = Field(default=None, max_length=255)
    role: UserRole = Field(default=UserRole.USER)
    theme: Theme = Field(default=Theme.LIGHT)
    language: str = Field(default="en", max_length=10)
    is_active: bool = Field(default=True)


# ── API schemas ──────────────────────────────────────────────

class UserCreate(ApiModel):
    email: EmailStr
    name: str | None = PydField(default=None, max_length=255)

    @field_validator("email", mode="before")
    @classmethod
    def _normalize(cls, v):
        return normalize_email(v) if isinstance(v, str) else v


class UserRead(ApiModel):
    id: uuid.UUID
    email: str
    name: str | None
    role: UserRole
    theme: Theme
    language: str
    is_active: bool


class UserSummary(ApiModel):
    id: uuid.UUID
    name: str | None
    email: str


class LanguageUpdate(ApiModel):
    # ISO 639-1 code, optionally with a region: "en", "pt-BR"
    language: str = PydField(pattern=r"^[a-z]{2}(-[A-Z]{2})?$")


class ThemeUpdate(ApiModel):
    theme: Theme

"""Import all models so SQLModel.metadata picks them up."""

from stockroom.models.access_grant import (
    AccessGrant,
    AccessGrantCreate,
    AccessGrantRead,
    AccessGrantUpdate,
    AccessLevel,
)
from stockroom.models.inventory import (
    Inventory,
    InventoryCreate,
    InventoryRead,
    InventoryUpdate,
    Permissions,
    PublicUpdate,
)
from stockroom.models.item import Item, ItemCreate, ItemList, ItemRead, ItemUpdate
from stockroom.models.user import (
    LanguageUpdate,
    Theme,
    ThemeUpdate,
    User,
    UserCreate,
    UserRead,
    UserRole,
    UserSummary,
)

__all__ = [
    "AccessGrant",
    "AccessGrantCreate",
    "AccessGrantRead",
    "AccessGrantUpdate",
    "AccessLevel",
    "Inventory",
    "InventoryCreate",
    "InventoryRead",
    "InventoryUpdate",
    "Item",
    "ItemCreate",
    "ItemList",
    "ItemRead",
    "ItemUpdate",
    "LanguageUpdate",
    "Permissions",
    "PublicUpdate",
    "Theme",
    "ThemeUpdate",
    "User",
    "UserCreate",
    "UserRead",
    "UserRole",
    "UserSummary",
]

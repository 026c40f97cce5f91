"""Permission engine: who may view, edit, or edit items of an inventory.

Design:
  - A caller is either ``Anonymous`` or ``Authenticated(id, role)``; handlers
    pass it explicitly, nothing is read off the request.
  - ``classify`` maps (caller, inventory) to one ``Actor`` and one
    ``Visibility``.
  - ``CAPABILITY_MATRIX`` is the only place the policy lives; every
    predicate below is a lookup into it.

Policy:
  - canEdit (metadata, visibility, sharing): ADMIN, creator, EDITOR grantee.
  - canEditItems: canEdit, or any signed-in user when the inventory is
    public and not read-only.
  - Anonymous callers never edit anything.

Pure functions only: no I/O, no database access.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import NamedTuple

from stockroom.models.access_grant import AccessGrant, AccessLevel
from stockroom.models.inventory import Inventory, Permissions
from stockroom.models.user import UserRole


# ── Caller identity ─────────────────────────────────────────

@dataclass(frozen=True)
class Anonymous:
    is_authenticated = False


@dataclass(frozen=True)
class Authenticated:
    id: uuid.UUID
    role: UserRole = UserRole.USER
    is_authenticated = True


Caller = Anonymous | Authenticated

ANONYMOUS = Anonymous()


# ── Inventory view ──────────────────────────────────────────

@dataclass(frozen=True)
class InventoryAccess:
    """The slice of an inventory the engine needs."""

    creator_id: uuid.UUID
    is_public: bool
    is_read_only: bool = False
    grants: Mapping[uuid.UUID, AccessLevel] = field(default_factory=dict)

    @classmethod
    def of(cls, inventory: Inventory, grants: Iterable[AccessGrant] = ()) -> InventoryAccess:
        return cls(
            creator_id=inventory.creator_id,
            is_public=inventory.is_public,
            is_read_only=inventory.is_read_only,
            grants={g.user_id: g.access_level for g in grants if g.inventory_id == inventory.id},
        )


# ── Capability matrix ───────────────────────────────────────

class Actor(StrEnum):
    ANONYMOUS = "anonymous"
    OUTSIDER = "outsider"  # signed in, no grant
    VIEWER = "viewer"
    EDITOR = "editor"
    OWNER = "owner"
    ADMIN = "admin"


class Visibility(StrEnum):
    PRIVATE = "private"
    PUBLIC = "public"
    PUBLIC_READ_ONLY = "public_read_only"


class Capabilities(NamedTuple):
    can_view: bool
    can_edit: bool
    can_edit_items: bool

    def as_permissions(self) -> Permissions:
        return Permissions(
            can_view=self.can_view,
            can_edit=self.can_edit,
            can_edit_items=self.can_edit_items,
        )


NONE = Capabilities(False, False, False)
READ = Capabilities(True, False, False)
READ_AND_ITEMS = Capabilities(True, False, True)
FULL = Capabilities(True, True, True)

CAPABILITY_MATRIX: dict[Visibility, dict[Actor, Capabilities]] = {
    Visibility.PRIVATE: {
        Actor.ANONYMOUS: NONE,
        Actor.OUTSIDER: NONE,
        Actor.VIEWER: READ,
        Actor.EDITOR: FULL,
        Actor.OWNER: FULL,
        Actor.ADMIN: FULL,
    },
    Visibility.PUBLIC: {
        Actor.ANONYMOUS: READ,
        Actor.OUTSIDER: READ_AND_ITEMS,
        Actor.VIEWER: READ_AND_ITEMS,
        Actor.EDITOR: FULL,
        Actor.OWNER: FULL,
        Actor.ADMIN: FULL,
    },
    Visibility.PUBLIC_READ_ONLY: {
        Actor.ANONYMOUS: READ,
        Actor.OUTSIDER: READ,
        Actor.VIEWER: READ,
        Actor.EDITOR: FULL,
        Actor.OWNER: FULL,
        Actor.ADMIN: FULL,
    },
}


def classify_actor(caller: Caller, inventory: InventoryAccess) -> Actor:
    if not isinstance(caller, Authenticated):
        return Actor.ANONYMOUS
    if caller.role == UserRole.ADMIN:
        return Actor.ADMIN
    if caller.id == inventory.creator_id:
        return Actor.OWNER
    level = inventory.grants.get(caller.id)
    if level == AccessLevel.EDITOR:
        return Actor.EDITOR
    if level == AccessLevel.VIEWER:
        return Actor.VIEWER
    return Actor.OUTSIDER


def classify_visibility(inventory: InventoryAccess) -> Visibility:
    if not inventory.is_public:
        return Visibility.PRIVATE
    if inventory.is_read_only:
        return Visibility.PUBLIC_READ_ONLY
    return Visibility.PUBLIC


def capabilities(caller: Caller, inventory: InventoryAccess) -> Capabilities:
    visibility = classify_visibility(inventory)
    return CAPABILITY_MATRIX[visibility][classify_actor(caller, inventory)]


def can_view(caller: Caller, inventory: InventoryAccess) -> bool:
    return capabilities(caller, inventory).can_view


def can_edit(caller: Caller, inventory: InventoryAccess) -> bool:
    return capabilities(caller, inventory).can_edit


def can_edit_items(caller: Caller, inventory: InventoryAccess) -> bool:
    return capabilities(caller, inventory).can_edit_items

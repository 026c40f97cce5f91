"""Inventory endpoints — creation, listing, and version-guarded edits."""

import json
import logging
import uuid

from fastapi import APIRouter, status

from stockroom.api.deps import CurrentCaller, CurrentUser, Store
from stockroom.core.errors import Unauthorized
from stockroom.models.inventory import (
    Inventory,
    InventoryCreate,
    InventoryRead,
    InventoryUpdate,
    PublicUpdate,
)
from stockroom.models.user import User, UserSummary
from stockroom.services import concurrency, permissions
from stockroom.services.permissions import Caller, Capabilities, InventoryAccess
from stockroom.services.store import ResourceStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inventories", tags=["inventories"])


def to_read(
    inv: Inventory,
    caps: Capabilities | None = None,
    creator: User | None = None,
) -> InventoryRead:
    read = InventoryRead.model_validate(inv)
    if caps is not None:
        read.permissions = caps.as_permissions()
    if creator is not None:
        read.creator = UserSummary.model_validate(creator)
    return read


async def annotate(
    store: ResourceStore, caller: Caller, inventories: list[Inventory]
) -> list[tuple[Inventory, Capabilities]]:
    """Pair each inventory with the caller's capabilities on it."""
    grants = await store.list_grants(inv.id for inv in inventories)
    return [
        (inv, permissions.capabilities(caller, InventoryAccess.of(inv, grants)))
        for inv in inventories
    ]


async def _read_with_permissions(
    store: ResourceStore, caller: Caller, inv: Inventory
) -> InventoryRead:
    [(inv, caps)] = await annotate(store, caller, [inv])
    return to_read(inv, caps)


@router.post("", response_model=InventoryRead, status_code=status.HTTP_201_CREATED)
async def create_inventory(
    body: InventoryCreate,
    caller: CurrentUser,
    store: Store,
) -> InventoryRead:
    creator = await store.get_user(caller.id)
    if creator is None:
        raise Unauthorized("Unknown user")

    inv = Inventory(
        creator_id=creator.id,
        title=body.title,
        description=body.description,
        category=body.category,
        tags=json.dumps(body.tags),
        custom_id_format=json.dumps(body.custom_id_format),
        version=1,
    )
    inv = await store.create(inv)
    logger.info("User %s created inventory %s", creator.id, inv.id)
    return to_read(inv, permissions.capabilities(caller, InventoryAccess.of(inv)), creator)


@router.get("", response_model=list[InventoryRead])
async def list_inventories(
    caller: CurrentCaller,
    store: Store,
) -> list[InventoryRead]:
    """Every inventory the caller can view, with their permissions on it."""
    visible = [
        (inv, caps)
        for inv, caps in await annotate(store, caller, await store.list_inventories())
        if caps.can_view
    ]
    creators = await store.get_users(inv.creator_id for inv, _ in visible)
    return [to_read(inv, caps, creators.get(inv.creator_id)) for inv, caps in visible]


@router.get("/{inventory_id}", response_model=InventoryRead)
async def get_inventory(
    inventory_id: uuid.UUID,
    caller: CurrentCaller,
    store: Store,
) -> InventoryRead:
    inv, caps = await concurrency.authorize(store, caller, inventory_id, "can_view")
    creator = await store.get_user(inv.creator_id)
    return to_read(inv, caps, creator)


@router.put("/{inventory_id}", response_model=InventoryRead)
async def update_inventory(
    inventory_id: uuid.UUID,
    body: InventoryUpdate,
    caller: CurrentUser,
    store: Store,
) -> InventoryRead:
    """Update metadata. 409 with both versions when ``version`` is stale."""
    inv = await concurrency.update_inventory(
        store, caller, inventory_id, body.to_patch(), body.version
    )
    return await _read_with_permissions(store, caller, inv)


@router.patch("/{inventory_id}/public", response_model=InventoryRead)
async def set_inventory_public(
    inventory_id: uuid.UUID,
    body: PublicUpdate,
    caller: CurrentUser,
    store: Store,
) -> InventoryRead:
    inv = await concurrency.set_public(
        store, caller, inventory_id, body.is_public, body.version
    )
    return await _read_with_permissions(store, caller, inv)

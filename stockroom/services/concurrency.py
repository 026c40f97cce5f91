"""Optimistic concurrency controller.

Every versioned mutation goes through the same three checks, in order:

1. the resource exists            → ``NotFound``
2. the caller may perform it      → ``Forbidden``
3. ``expected_version`` is current → ``Conflict``

Step 3 is not a read followed by a write: it is the store's single
conditional UPDATE, so two writers holding the same version can never both
succeed. A rejected write changes nothing, so resubmitting the same stale
version yields the same ``Conflict``.
"""

from __future__ import annotations

import logging
import uuid

from stockroom.core.errors import Conflict, Forbidden, NotFound
from stockroom.models.inventory import Inventory
from stockroom.models.item import Item
from stockroom.services import permissions
from stockroom.services.permissions import Caller, Capabilities, InventoryAccess
from stockroom.services.store import ResourceStore

logger = logging.getLogger(__name__)


async def load_inventory(
    store: ResourceStore, inventory_id: uuid.UUID
) -> tuple[Inventory, InventoryAccess]:
    inventory = await store.get_inventory(inventory_id)
    if inventory is None:
        raise NotFound("Inventory not found")
    grants = await store.list_grants([inventory.id])
    return inventory, InventoryAccess.of(inventory, grants)


async def authorize(
    store: ResourceStore,
    caller: Caller,
    inventory_id: uuid.UUID,
    capability: str,
) -> tuple[Inventory, Capabilities]:
    """Load an inventory and require one capability (``can_view`` etc.).

    An anonymous caller who may not view the inventory gets ``NotFound``:
    from their side a private inventory does not exist.
    """
    inventory, access = await load_inventory(store, inventory_id)
    caps = permissions.capabilities(caller, access)
    if not getattr(caps, capability):
        if not caps.can_view and not caller.is_authenticated:
            raise NotFound("Inventory not found")
        logger.info(
            "Denied %s on inventory %s for %s", capability, inventory_id, caller
        )
        raise Forbidden()
    return inventory, caps


def _conflict_or_missing(
    current: Inventory | Item | None,
    expected_version: int,
    label: str,
) -> Conflict:
    if current is None:
        raise NotFound(f"{label} not found")
    logger.info(
        "Version conflict on %s %s: stored %d, caller had %d",
        label.lower(), current.id, current.version, expected_version,
    )
    return Conflict(current_version=current.version, your_version=expected_version)


async def update_inventory(
    store: ResourceStore,
    caller: Caller,
    inventory_id: uuid.UUID,
    patch: dict,
    expected_version: int,
) -> Inventory:
    """Write metadata fields; the stored version becomes ``expected_version + 1``."""
    await authorize(store, caller, inventory_id, "can_edit")

    updated = await store.conditional_update(Inventory, inventory_id, expected_version, patch)
    if updated is None:
        current = await store.get_inventory(inventory_id)
        raise _conflict_or_missing(current, expected_version, "Inventory")
    logger.debug("Inventory %s now at version %d", inventory_id, updated.version)
    return updated


async def set_public(
    store: ResourceStore,
    caller: Caller,
    inventory_id: uuid.UUID,
    is_public: bool,
    expected_version: int,
) -> Inventory:
    """Toggle visibility; competes with metadata edits on the same version."""
    return await update_inventory(
        store, caller, inventory_id, {"is_public": is_public}, expected_version
    )


async def update_item(
    store: ResourceStore,
    caller: Caller,
    inventory_id: uuid.UUID,
    item_id: uuid.UUID,
    patch: dict,
    expected_version: int,
) -> Item:
    """Write item fields under the item's own version.

    Items never touch their inventory's version counter.
    """
    await authorize(store, caller, inventory_id, "can_edit_items")
    if await store.get_item(inventory_id, item_id) is None:
        raise NotFound("Item not found")

    updated = await store.conditional_update(
        Item, item_id, expected_version, patch, Item.inventory_id == inventory_id
    )
    if updated is None:
        current = await store.get_item(inventory_id, item_id)
        raise _conflict_or_missing(current, expected_version, "Item")
    return updated

"""Item endpoints — nested under their inventory."""

import uuid

from fastapi import APIRouter, status

from stockroom.api.deps import CurrentCaller, CurrentUser, Store
from stockroom.core.errors import NotFound
from stockroom.models.item import Item, ItemCreate, ItemList, ItemRead, ItemUpdate
from stockroom.services import concurrency

router = APIRouter(prefix="/inventories/{inventory_id}/items", tags=["items"])


@router.post("", response_model=ItemRead, status_code=status.HTTP_201_CREATED)
async def create_item(
    inventory_id: uuid.UUID,
    body: ItemCreate,
    caller: CurrentUser,
    store: Store,
) -> ItemRead:
    await concurrency.authorize(store, caller, inventory_id, "can_edit_items")
    item = Item(
        inventory_id=inventory_id,
        created_by_id=caller.id,
        version=1,
        **body.model_dump(),
    )
    item = await store.create(item)
    return ItemRead.model_validate(item)


@router.get("", response_model=ItemList)
async def list_items(
    inventory_id: uuid.UUID,
    caller: CurrentCaller,
    store: Store,
) -> ItemList:
    _, caps = await concurrency.authorize(store, caller, inventory_id, "can_view")
    items = await store.list_items(inventory_id)
    return ItemList(
        items=[ItemRead.model_validate(i) for i in items],
        permissions=caps.as_permissions(),
    )


@router.get("/{item_id}", response_model=ItemRead)
async def get_item(
    inventory_id: uuid.UUID,
    item_id: uuid.UUID,
    caller: CurrentCaller,
    store: Store,
) -> ItemRead:
    await concurrency.authorize(store, caller, inventory_id, "can_view")
    item = await store.get_item(inventory_id, item_id)
    if item is None:
        raise NotFound("Item not found")
    return ItemRead.model_validate(item)


@router.put("/{item_id}", response_model=ItemRead)
async def update_item(
    inventory_id: uuid.UUID,
    item_id: uuid.UUID,
    body: ItemUpdate,
    caller: CurrentUser,
    store: Store,
) -> ItemRead:
    """Update item fields. 409 with both versions when ``version`` is stale."""
    item = await concurrency.update_item(
        store, caller, inventory_id, item_id, body.to_patch(), body.version
    )
    return ItemRead.model_validate(item)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    inventory_id: uuid.UUID,
    item_id: uuid.UUID,
    caller: CurrentUser,
    store: Store,
) -> None:
    await concurrency.authorize(store, caller, inventory_id, "can_edit_items")
    item = await store.get_item(inventory_id, item_id)
    if item is None:
        raise NotFound("Item not found")
    await store.delete(item)

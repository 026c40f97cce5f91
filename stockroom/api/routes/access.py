"""Access grants — share an inventory with other users.

Grants are not version-guarded: the last write wins, and changing a grant
never bumps the inventory's version.
"""

import logging
import uuid

from fastapi import APIRouter, status

from stockroom.api.deps import CurrentUser, Store
from stockroom.core.errors import AlreadyExists, NotFound, ValidationError
from stockroom.models.access_grant import (
    AccessGrant,
    AccessGrantCreate,
    AccessGrantRead,
    AccessGrantUpdate,
)
from stockroom.models.user import User, UserSummary
from stockroom.services import concurrency
from stockroom.services.store import ResourceStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inventories/{inventory_id}/access", tags=["access"])


def _to_read(grant: AccessGrant, user: User | None = None) -> AccessGrantRead:
    read = AccessGrantRead.model_validate(grant)
    if user is not None:
        read.user = UserSummary.model_validate(user)
    return read


@router.get("", response_model=list[AccessGrantRead])
async def list_access(
    inventory_id: uuid.UUID,
    caller: CurrentUser,
    store: Store,
) -> list[AccessGrantRead]:
    await concurrency.authorize(store, caller, inventory_id, "can_edit")
    grants = await store.list_grants([inventory_id])
    users = await store.get_users(g.user_id for g in grants)
    return [_to_read(g, users.get(g.user_id)) for g in grants]


@router.post("", response_model=AccessGrantRead, status_code=status.HTTP_201_CREATED)
async def grant_access(
    inventory_id: uuid.UUID,
    body: AccessGrantCreate,
    caller: CurrentUser,
    store: Store,
) -> AccessGrantRead:
    inv, _ = await concurrency.authorize(store, caller, inventory_id, "can_edit")

    user = await store.get_user_by_email(body.email)
    if user is None:
        raise NotFound("User not found")
    if user.id == inv.creator_id:
        raise ValidationError("The owner already has full access")
    if await store.get_grant(inventory_id, user.id) is not None:
        raise AlreadyExists("User already has access")

    grant = await store.create(
        AccessGrant(inventory_id=inventory_id, user_id=user.id, access_level=body.access_level)
    )
    logger.info(
        "Granted %s on inventory %s to user %s", grant.access_level, inventory_id, user.id
    )
    return _to_read(grant, user)


@router.patch("/{user_id}", response_model=AccessGrantRead)
async def update_access(
    inventory_id: uuid.UUID,
    user_id: uuid.UUID,
    body: AccessGrantUpdate,
    caller: CurrentUser,
    store: Store,
) -> AccessGrantRead:
    await concurrency.authorize(store, caller, inventory_id, "can_edit")
    grant = await _get_or_404(inventory_id, user_id, store)
    grant.access_level = body.access_level
    grant = await store.save(grant)
    return _to_read(grant, await store.get_user(user_id))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_access(
    inventory_id: uuid.UUID,
    user_id: uuid.UUID,
    caller: CurrentUser,
    store: Store,
) -> None:
    await concurrency.authorize(store, caller, inventory_id, "can_edit")
    grant = await _get_or_404(inventory_id, user_id, store)
    await store.delete(grant)
    logger.info("Revoked access on inventory %s from user %s", inventory_id, user_id)


# ── Internal helper ───────────────────────────────────────────

async def _get_or_404(
    inventory_id: uuid.UUID, user_id: uuid.UUID, store: ResourceStore
) -> AccessGrant:
    grant = await store.get_grant(inventory_id, user_id)
    if grant is None:
        raise NotFound("Access grant not found")
    return grant

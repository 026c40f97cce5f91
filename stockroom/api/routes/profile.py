"""Profile page data and language preference."""

from fastapi import APIRouter

from stockroom.api.deps import CurrentUser, Store
from stockroom.api.routes.inventories import annotate, to_read
from stockroom.core.errors import NotFound
from stockroom.models.base import ApiModel
from stockroom.models.inventory import InventoryRead
from stockroom.models.user import LanguageUpdate, UserRead

router = APIRouter(prefix="/profile", tags=["profile"])


class ProfileData(ApiModel):
    my_inventories: list[InventoryRead]
    accessible_inventories: list[InventoryRead]


@router.get("", response_model=ProfileData)
async def get_profile(caller: CurrentUser, store: Store) -> ProfileData:
    """Inventories the caller owns, and those shared with them."""
    owned = await annotate(store, caller, await store.list_inventories_by_creator(caller.id))
    shared = await annotate(store, caller, await store.list_inventories_shared_with(caller.id))
    return ProfileData(
        my_inventories=[to_read(inv, caps) for inv, caps in owned],
        accessible_inventories=[to_read(inv, caps) for inv, caps in shared],
    )


@router.put("/language", response_model=UserRead)
async def update_language(
    body: LanguageUpdate, caller: CurrentUser, store: Store
) -> UserRead:
    user = await store.get_user(caller.id)
    if user is None:
        raise NotFound("User not found")
    user.language = body.language
    user = await store.save(user)
    return UserRead.model_validate(user)

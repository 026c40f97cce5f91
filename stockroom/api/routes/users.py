"""User bootstrap, lookup and theme preference."""

from fastapi import APIRouter, Query, status

from stockroom.api.deps import CurrentUser, Store
from stockroom.core.errors import AlreadyExists, NotFound, ValidationError
from stockroom.models.user import (
    ThemeUpdate,
    User,
    UserCreate,
    UserRead,
    UserSummary,
    normalize_email,
)

router = APIRouter(tags=["users"])


@router.post("/users", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate, store: Store) -> UserRead:
    """Called by the auth service on first sign-in."""
    if await store.get_user_by_email(body.email) is not None:
        raise AlreadyExists("User with this email already exists")
    user = await store.create(User(email=body.email, name=body.name))
    return UserRead.model_validate(user)


@router.get("/users/by-email", response_model=UserSummary)
async def get_user_by_email(
    store: Store,
    email: str | None = Query(default=None),
) -> UserSummary:
    if not email or not email.strip():
        raise ValidationError("Email is required")
    user = await store.get_user_by_email(normalize_email(email))
    if user is None:
        raise NotFound("User not found")
    return UserSummary.model_validate(user)


@router.put("/user/theme", response_model=UserRead)
async def update_theme(body: ThemeUpdate, caller: CurrentUser, store: Store) -> UserRead:
    user = await store.get_user(caller.id)
    if user is None:
        raise NotFound("User not found")
    user.theme = body.theme
    user = await store.save(user)
    return UserRead.model_validate(user)

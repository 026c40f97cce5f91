"""Session contract endpoint."""

from fastapi import APIRouter

from stockroom.api.deps import CurrentSessionUser

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/session")
async def get_session_info(user: CurrentSessionUser) -> dict:
    """``{"user": {...}}`` for a signed-in caller, ``{}`` otherwise."""
    if user is None:
        return {}
    return {"user": user.model_dump(mode="json")}

"""API router aggregation."""

from fastapi import APIRouter

from stockroom.api.routes.access import router as access_router
from stockroom.api.routes.auth import router as auth_router
from stockroom.api.routes.inventories import router as inventories_router
from stockroom.api.routes.items import router as items_router
from stockroom.api.routes.profile import router as profile_router
from stockroom.api.routes.users import router as users_router

api_router = APIRouter(prefix="/api")
api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(inventories_router)
api_router.include_router(items_router)
api_router.include_router(access_router)
api_router.include_router(profile_router)

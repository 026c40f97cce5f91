"""FastAPI dependencies for caller identity and store access."""

import logging
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from stockroom.core.database import get_session
from stockroom.core.errors import Unauthorized, UpstreamAuthError
from stockroom.services.permissions import ANONYMOUS, Authenticated, Caller
from stockroom.services.session_oracle import SessionOracle, SessionUser
from stockroom.services.store import ResourceStore

logger = logging.getLogger(__name__)


def get_oracle(request: Request) -> SessionOracle:
    return request.app.state.session_oracle


async def get_session_user(
    request: Request,
    oracle: Annotated[SessionOracle, Depends(get_oracle)],
) -> SessionUser | None:
    """Resolve the session; an unreachable or confused oracle means guest."""
    try:
        return await oracle.fetch(request.cookies, request.headers)
    except UpstreamAuthError as exc:
        logger.warning("Session lookup failed, continuing as guest: %s", exc.message)
        return None


async def get_caller(
    user: Annotated[SessionUser | None, Depends(get_session_user)],
) -> Caller:
    if user is None:
        return ANONYMOUS
    return Authenticated(id=user.id, role=user.role)


def get_store(session: Annotated[AsyncSession, Depends(get_session)]) -> ResourceStore:
    return ResourceStore(session)


async def require_user(
    caller: Annotated[Caller, Depends(get_caller)],
    store: Annotated[ResourceStore, Depends(get_store)],
) -> Authenticated:
    """A signed-in caller whose account exists and is active."""
    if not isinstance(caller, Authenticated):
        raise Unauthorized()
    user = await store.get_user(caller.id)
    if user is None or not user.is_active:
        raise Unauthorized("Account is disabled")
    return caller


# Typed shorthand for use in route signatures
CurrentCaller = Annotated[Caller, Depends(get_caller)]
CurrentUser = Annotated[Authenticated, Depends(require_user)]
CurrentSessionUser = Annotated[SessionUser | None, Depends(get_session_user)]
Store = Annotated[ResourceStore, Depends(get_store)]

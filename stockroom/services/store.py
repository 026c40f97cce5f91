"""Resource store — persistence for users, inventories, grants and items.

A ``ResourceStore`` wraps one ``AsyncSession``; a fresh one is built per
request by ``stockroom.api.deps.get_store``. The only concurrency primitive
is ``conditional_update``: a single ``UPDATE ... WHERE id = :id AND
version = :expected`` that bumps ``version`` in the same statement.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from typing import TypeVar

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from stockroom.core.errors import AlreadyExists, StoreError
from stockroom.models.access_grant import AccessGrant
from stockroom.models.base import utcnow
from stockroom.models.inventory import Inventory
from stockroom.models.item import Item
from stockroom.models.user import User

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=SQLModel)


class ResourceStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def _guard(self, action: str) -> AsyncIterator[None]:
        try:
            yield
        except IntegrityError as exc:
            await self.session.rollback()
            logger.info("Integrity violation during %s: %s", action, exc.orig)
            raise AlreadyExists() from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.exception("Store failure during %s", action)
            raise StoreError() from exc

    # ── Generic writes ───────────────────────────────────────

    async def create(self, obj: M) -> M:
        async with self._guard(f"create {type(obj).__name__}"):
            self.session.add(obj)
            await self.session.commit()
            await self.session.refresh(obj)
        return obj

    async def save(self, obj: M) -> M:
        """Unguarded last-write-wins update."""
        async with self._guard(f"save {type(obj).__name__}"):
            if hasattr(obj, "updated_at"):
                obj.updated_at = utcnow()
            self.session.add(obj)
            await self.session.commit()
            await self.session.refresh(obj)
        return obj

    async def delete(self, obj: SQLModel) -> None:
        async with self._guard(f"delete {type(obj).__name__}"):
            await self.session.delete(obj)
            await self.session.commit()

    async def conditional_update(
        self,
        model: type[M],
        obj_id: uuid.UUID,
        expected_version: int,
        values: dict,
        *where,
    ) -> M | None:
        """Apply ``values`` and bump ``version`` iff it still equals ``expected_version``.

        Returns the refreshed row, or ``None`` when no row matched (missing
        row or stale version; the caller re-reads to tell them apart).
        """
        stmt = (
            update(model)
            .where(
                model.id == obj_id,  # type: ignore[attr-defined]
                model.version == expected_version,  # type: ignore[attr-defined]
                *where,
            )
            .values(
                **values,
                version=model.version + 1,  # type: ignore[attr-defined]
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        async with self._guard(f"conditional update {model.__name__}"):
            result = await self.session.execute(stmt)
            # a no-match changed nothing; committing keeps loaded rows unexpired
            await self.session.commit()
            if result.rowcount != 1:
                return None
            return await self.session.get(model, obj_id, populate_existing=True)

    # ── Reads ────────────────────────────────────────────────

    # populate_existing: a conditional UPDATE bypasses the identity map
    async def _first(self, stmt):
        async with self._guard("read"):
            result = await self.session.execute(stmt.execution_options(populate_existing=True))
            return result.scalar_one_or_none()

    async def _all(self, stmt) -> list:
        async with self._guard("read"):
            result = await self.session.execute(stmt.execution_options(populate_existing=True))
            return list(result.scalars().all())

    async def get_user(self, user_id: uuid.UUID) -> User | None:
        return await self._first(select(User).where(User.id == user_id))

    async def get_user_by_email(self, email: str) -> User | None:
        return await self._first(select(User).where(User.email == email))

    async def get_users(self, user_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, User]:
        ids = set(user_ids)
        if not ids:
            return {}
        users = await self._all(select(User).where(User.id.in_(ids)))  # type: ignore[union-attr]
        return {u.id: u for u in users}

    async def get_inventory(self, inventory_id: uuid.UUID) -> Inventory | None:
        return await self._first(select(Inventory).where(Inventory.id == inventory_id))

    async def list_inventories(self) -> list[Inventory]:
        return await self._all(
            select(Inventory).order_by(Inventory.created_at.desc())  # type: ignore[union-attr]
        )

    async def list_inventories_by_creator(self, user_id: uuid.UUID) -> list[Inventory]:
        return await self._all(
            select(Inventory)
            .where(Inventory.creator_id == user_id)
            .order_by(Inventory.created_at.desc())  # type: ignore[union-attr]
        )

    async def list_inventories_shared_with(self, user_id: uuid.UUID) -> list[Inventory]:
        return await self._all(
            select(Inventory)
            .join(AccessGrant, AccessGrant.inventory_id == Inventory.id)
            .where(AccessGrant.user_id == user_id)
            .order_by(Inventory.created_at.desc())  # type: ignore[union-attr]
        )

    async def list_grants(self, inventory_ids: Iterable[uuid.UUID]) -> list[AccessGrant]:
        ids = set(inventory_ids)
        if not ids:
            return []
        return await self._all(
            select(AccessGrant)
            .where(AccessGrant.inventory_id.in_(ids))  # type: ignore[union-attr]
            .order_by(AccessGrant.created_at.asc())  # type: ignore[union-attr]
        )

    async def get_grant(self, inventory_id: uuid.UUID, user_id: uuid.UUID) -> AccessGrant | None:
        return await self._first(
            select(AccessGrant).where(
                AccessGrant.inventory_id == inventory_id,
                AccessGrant.user_id == user_id,
            )
        )

    async def get_item(self, inventory_id: uuid.UUID, item_id: uuid.UUID) -> Item | None:
        return await self._first(
            select(Item).where(Item.id == item_id, Item.inventory_id == inventory_id)
        )

    async def list_items(self, inventory_id: uuid.UUID) -> list[Item]:
        return await self._all(
            select(Item)
            .where(Item.inventory_id == inventory_id)
            .order_by(Item.created_at.asc())  # type: ignore[union-attr]
        )

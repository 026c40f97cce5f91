"""Single-item editing with shallow field-level merge on conflict."""

from __future__ import annotations

import logging
import uuid

from stockroom.client.api import StockroomClient, VersionConflict
from stockroom.client.autosave import SaveState
from stockroom.models.item import ITEM_VALUE_FIELDS

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("customId", *ITEM_VALUE_FIELDS)


class ItemEditor:
    """Edits one item against the version it was loaded at.

    ``base`` is the server state the user started from. On a 409 the editor
    keeps the pending changes and the server's newer state; ``merge()``
    combines them and resubmits.
    """

    def __init__(self, client: StockroomClient, inventory_id: uuid.UUID | str, item: dict) -> None:
        self.client = client
        self.inventory_id = str(inventory_id)
        self.item_id = str(item["id"])
        self.base = _fields(item)
        self.version: int = item["version"]
        self.item = item
        self.pending: dict = {}
        self.latest: dict | None = None
        self.state = SaveState.IDLE

    async def save(self, changes: dict) -> dict | None:
        """Submit ``changes``; returns the saved item, or None on conflict.

        While a conflict is pending nothing is sent: the changes are added
        to the pending ones and go out with ``merge()``.
        """
        changes = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
        if self.state is SaveState.CONFLICT_PENDING:
            self.pending = {**self.pending, **changes}
            return None
        self.pending = changes
        return await self._submit()

    async def _submit(self) -> dict | None:
        self.state = SaveState.SAVING
        try:
            saved = await self.client.update_item(
                self.inventory_id, self.item_id, version=self.version, **self.pending
            )
        except VersionConflict as exc:
            logger.info(
                "Item %s conflict: server at %s, we had %s",
                self.item_id, exc.current_version, exc.your_version,
            )
            self.state = SaveState.CONFLICT_PENDING
            self.latest = await self.client.fetch_item(self.inventory_id, self.item_id)
            return None
        except Exception:
            self.state = SaveState.IDLE
            raise

        self._reset(saved)
        return saved

    def _reset(self, item: dict) -> None:
        self.item = item
        self.base = _fields(item)
        self.version = item["version"]
        self.pending = {}
        self.latest = None
        self.state = SaveState.IDLE

    def merged(self, server: dict) -> dict:
        """Fields the user changed from ``base`` keep the user's value; the rest follow the server."""
        theirs = _fields(server)
        mine = {**self.base, **self.pending}
        return {
            name: mine[name] if mine[name] != self.base[name] else theirs[name]
            for name in EDITABLE_FIELDS
        }

    async def merge(self) -> dict | None:
        if self.state is not SaveState.CONFLICT_PENDING:
            return None
        server = self.latest or await self.client.fetch_item(self.inventory_id, self.item_id)
        merged = self.merged(server)
        self.base = _fields(server)
        self.version = server["version"]
        self.pending = {k: v for k, v in merged.items() if v != self.base[k]}
        if not self.pending:
            self._reset(server)
            return server
        return await self._submit()


def _fields(item: dict) -> dict:
    return {name: item.get(name) for name in EDITABLE_FIELDS}

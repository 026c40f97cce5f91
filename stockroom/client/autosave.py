"""Inventory autosave — periodic background saves that respect the version token.

The saver keeps a local buffer of ``{title, description, version}`` seeded
from the server. Every ``interval`` seconds it submits the buffer, unless the
user is mid-edit, a save is already in flight, a conflict is waiting for the
user, or nothing changed since the last confirmed save.

On a 409 it freezes: the user's text stays in the buffer, the latest server
state is kept in ``latest``, and nothing is sent until ``merge()`` is called.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

import httpx

from stockroom.client.api import ApiError, StockroomClient, VersionConflict
from stockroom.core.config import get_settings

logger = logging.getLogger(__name__)


class SaveState(StrEnum):
    IDLE = "idle"
    SAVING = "saving"
    CONFLICT_PENDING = "conflict_pending"


@dataclass
class EditBuffer:
    title: str
    description: str
    version: int

    def text(self) -> tuple[str, str]:
        return self.title, self.description


class InventoryAutosaver:
    def __init__(
        self,
        client: StockroomClient,
        inventory_id: uuid.UUID | str,
        *,
        interval: float | None = None,
        on_notice: Callable[[str], None] | None = None,
    ) -> None:
        self.client = client
        self.inventory_id = str(inventory_id)
        if interval is None:
            interval = get_settings().autosave_interval_seconds
        self.interval = interval
        self.on_notice = on_notice

        self.buffer: EditBuffer | None = None
        self.server: dict = {}  # last server state adopted into the buffer
        self.latest: dict | None = None  # server state seen on conflict
        self.state = SaveState.IDLE
        self.is_editing = False
        self.notices: list[str] = []

        self._confirmed: tuple[str, str] | None = None
        self._task: asyncio.Task | None = None

    # ── Buffer ───────────────────────────────────────────────

    async def load(self) -> EditBuffer:
        inv = await self.client.fetch_inventory(self.inventory_id)
        self._adopt(inv, keep_text=False)
        return self.buffer  # type: ignore[return-value]

    def _adopt(self, inv: dict, *, keep_text: bool) -> None:
        title = inv.get("title", "")
        description = inv.get("description") or ""
        if keep_text and self.buffer is not None:
            self.buffer.version = inv["version"]
        else:
            self.buffer = EditBuffer(title=title, description=description, version=inv["version"])
        self.server = inv
        self._confirmed = (title, description)

    def edit(self, *, title: str | None = None, description: str | None = None) -> None:
        if self.buffer is None:
            raise RuntimeError("load() the inventory before editing")
        if title is not None:
            self.buffer.title = title
        if description is not None:
            self.buffer.description = description

    def begin_edit(self) -> None:
        """Field focused."""
        self.is_editing = True

    def end_edit(self) -> None:
        """Field blurred."""
        self.is_editing = False

    @property
    def dirty(self) -> bool:
        return self.buffer is not None and self.buffer.text() != self._confirmed

    # ── Saving ───────────────────────────────────────────────

    async def tick(self) -> bool:
        """One timer firing. Returns True when a save was attempted."""
        if (
            self.buffer is None
            or self.is_editing
            or self.state is not SaveState.IDLE
            or not self.dirty
        ):
            return False
        await self._save()
        return True

    async def _save(self) -> None:
        assert self.buffer is not None
        self.state = SaveState.SAVING
        title, description = sent = self.buffer.text()
        version = self.buffer.version
        try:
            updated = await self.client.update_inventory(
                self.inventory_id, version=version, title=title, description=description
            )
        except VersionConflict as exc:
            logger.info(
                "Autosave conflict on %s: server at %s, we had %s",
                self.inventory_id, exc.current_version, exc.your_version,
            )
            self.state = SaveState.CONFLICT_PENDING
            self._notice("Another user has modified this inventory. Merge to continue.")
            await self._refresh_latest()
            return
        except (ApiError, httpx.HTTPError) as exc:
            logger.warning("Autosave of %s failed: %s", self.inventory_id, exc)
            self.state = SaveState.IDLE
            self._notice(f"Could not save changes: {exc}")
            return

        self.buffer.version = updated["version"]
        self.server = updated
        self._confirmed = sent
        self.state = SaveState.IDLE
        logger.debug("Autosaved %s at version %d", self.inventory_id, self.buffer.version)

    async def _refresh_latest(self) -> None:
        try:
            self.latest = await self.client.fetch_inventory(self.inventory_id)
        except (ApiError, httpx.HTTPError) as exc:
            logger.warning("Could not fetch latest %s after conflict: %s", self.inventory_id, exc)
            self.latest = None

    async def merge(self) -> None:
        """Adopt the server's version and fields, keep the user's text, resubmit."""
        if self.state is not SaveState.CONFLICT_PENDING:
            return
        latest = await self.client.fetch_inventory(self.inventory_id)
        self._adopt(latest, keep_text=True)
        self.latest = None
        self.state = SaveState.IDLE
        if self.dirty:
            await self._save()

    def _notice(self, message: str) -> None:
        self.notices.append(message)
        if self.on_notice is not None:
            self.on_notice(message)

    # ── Background loop ──────────────────────────────────────

    async def run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.tick()

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        """Cancel the timer and any save it has in flight."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        if self.state is SaveState.SAVING:
            self.state = SaveState.IDLE

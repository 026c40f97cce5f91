"""Async HTTP client for the Stockroom API.

Bodies are plain JSON dicts with the API's camelCase keys. A 409 raises
``VersionConflict``; any other non-2xx raises ``ApiError``.
"""

from __future__ import annotations

import uuid
from typing import Any

import httpx

DEFAULT_COOKIE_NAME = "stockroom.session"


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, body: dict | None = None) -> None:
        self.status_code = status_code
        self.message = message
        self.body = body or {}
        super().__init__(f"HTTP {status_code}: {message}")


class VersionConflict(ApiError):
    """The server holds a newer version than the one submitted."""

    def __init__(self, current_version: int | None, your_version: int | None, body: dict) -> None:
        self.current_version = current_version
        self.your_version = your_version
        super().__init__(409, body.get("message", "Version conflict"), body)


class StockroomClient:
    def __init__(
        self,
        base_url: str,
        *,
        session_token: str | None = None,
        cookie_name: str = DEFAULT_COOKIE_NAME,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        cookies = {cookie_name: session_token} if session_token else None
        self._http = httpx.AsyncClient(
            base_url=base_url,
            cookies=cookies,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> StockroomClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, body: dict | None = None) -> Any:
        resp = await self._http.request(method, path, json=body)
        if resp.status_code == 409:
            data = _json_or_empty(resp)
            if "currentVersion" in data:
                raise VersionConflict(data.get("currentVersion"), data.get("yourVersion"), data)
        if not resp.is_success:
            data = _json_or_empty(resp)
            raise ApiError(resp.status_code, data.get("message") or resp.reason_phrase, data)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    # ── Session / profile ────────────────────────────────────

    async def fetch_session(self) -> dict:
        return await self._request("GET", "/api/auth/session")

    async def fetch_profile(self) -> dict:
        return await self._request("GET", "/api/profile")

    # ── Inventories ──────────────────────────────────────────

    async def list_inventories(self) -> list[dict]:
        return await self._request("GET", "/api/inventories")

    async def create_inventory(self, title: str, description: str = "", **fields: Any) -> dict:
        return await self._request(
            "POST", "/api/inventories", {"title": title, "description": description, **fields}
        )

    async def fetch_inventory(self, inventory_id: uuid.UUID | str) -> dict:
        return await self._request("GET", f"/api/inventories/{inventory_id}")

    async def update_inventory(
        self, inventory_id: uuid.UUID | str, *, version: int, **fields: Any
    ) -> dict:
        return await self._request(
            "PUT", f"/api/inventories/{inventory_id}", {**fields, "version": version}
        )

    async def set_public(
        self, inventory_id: uuid.UUID | str, is_public: bool, *, version: int
    ) -> dict:
        return await self._request(
            "PATCH",
            f"/api/inventories/{inventory_id}/public",
            {"isPublic": is_public, "version": version},
        )

    # ── Items ────────────────────────────────────────────────

    async def list_items(self, inventory_id: uuid.UUID | str) -> dict:
        return await self._request("GET", f"/api/inventories/{inventory_id}/items")

    async def fetch_item(self, inventory_id: uuid.UUID | str, item_id: uuid.UUID | str) -> dict:
        return await self._request("GET", f"/api/inventories/{inventory_id}/items/{item_id}")

    async def add_item(self, inventory_id: uuid.UUID | str, custom_id: str, **fields: Any) -> dict:
        return await self._request(
            "POST",
            f"/api/inventories/{inventory_id}/items",
            {"customId": custom_id, **fields},
        )

    async def update_item(
        self,
        inventory_id: uuid.UUID | str,
        item_id: uuid.UUID | str,
        *,
        version: int,
        **fields: Any,
    ) -> dict:
        return await self._request(
            "PUT",
            f"/api/inventories/{inventory_id}/items/{item_id}",
            {**fields, "version": version},
        )

    async def delete_item(self, inventory_id: uuid.UUID | str, item_id: uuid.UUID | str) -> None:
        await self._request("DELETE", f"/api/inventories/{inventory_id}/items/{item_id}")


def _json_or_empty(resp: httpx.Response) -> dict:
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}

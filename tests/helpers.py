"""Bootstrap helpers shared by the API tests."""

from httpx import AsyncClient

from stockroom.core.security import create_session_token


async def make_user(
    client: AsyncClient, email: str, *, name: str | None = None, role: str = "USER"
) -> tuple[dict, dict]:
    """Create a user and return (cookie headers, user data)."""
    resp = await client.post("/api/users", json={"email": email, "name": name or email})
    assert resp.status_code == 201, resp.text
    user = resp.json()
    headers = {"Cookie": f"stockroom.session={session_token(user, role=role)}"}
    return headers, user


def session_token(user: dict, *, role: str = "USER") -> str:
    return create_session_token(user["id"], email=user["email"], name=user["name"], role=role)


async def make_inventory(client: AsyncClient, headers: dict, **fields) -> dict:
    body = {"title": "Tools", "description": "Workshop tools", **fields}
    resp = await client.post("/api/inventories", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def share(
    client: AsyncClient, headers: dict, inventory_id: str, email: str, level: str
) -> dict:
    resp = await client.post(
        f"/api/inventories/{inventory_id}/access",
        json={"email": email, "accessLevel": level},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def make_public(client: AsyncClient, headers: dict, inv: dict) -> dict:
    resp = await client.patch(
        f"/api/inventories/{inv['id']}/public",
        json={"isPublic": True, "version": inv["version"]},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    return resp.json()

"""Tests for inventory endpoints and the version-guarded update protocol."""

import uuid

import pytest
from helpers import make_inventory, make_public, make_user, share
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_inventory(client: AsyncClient):
    headers, owner = await make_user(client, "owner@inv-create.com")

    resp = await client.post("/api/inventories", json={
        "title": "  Lab equipment ",
        "description": "Shared lab",
        "category": "Equipment",
        "tags": ["lab", "shared"],
        "customIdFormat": ["PREFIX", "SEQ"],
    }, headers=headers)
    assert resp.status_code == 201
    data = resp.json()
    assert data["title"] == "Lab equipment"
    assert data["version"] == 1
    assert data["isPublic"] is False
    assert data["tags"] == ["lab", "shared"]
    assert data["customIdFormat"] == ["PREFIX", "SEQ"]
    assert data["creatorId"] == owner["id"]
    assert data["permissions"] == {"canView": True, "canEdit": True, "canEditItems": True}


@pytest.mark.asyncio
async def test_create_inventory_missing_title(client: AsyncClient):
    headers, _ = await make_user(client, "owner@inv-notitle.com")

    resp = await client.post("/api/inventories", json={"description": "x"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "ValidationError"

    resp = await client.post("/api/inventories", json={"title": "   "}, headers=headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_create_inventory_requires_session(client: AsyncClient):
    resp = await client.post("/api/inventories", json={"title": "Nope"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Unauthorized"


@pytest.mark.asyncio
async def test_scenario_a_stale_writer_gets_conflict(client: AsyncClient):
    """Owner writes v1 -> v2; a second session still holding v1 gets 409."""
    headers, _ = await make_user(client, "owner@inv-scenario-a.com")
    inv = await make_inventory(client, headers)
    assert inv["version"] == 1
    assert inv["isPublic"] is False

    resp = await client.put(
        f"/api/inventories/{inv['id']}", json={"title": "X", "version": 1}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["version"] == 2
    assert resp.json()["title"] == "X"

    resp = await client.put(
        f"/api/inventories/{inv['id']}", json={"title": "Y", "version": 1}, headers=headers
    )
    assert resp.status_code == 409
    body = resp.json()
    assert body["error"] == "Conflict"
    assert body["currentVersion"] == 2
    assert body["yourVersion"] == 1
    assert body["message"]


@pytest.mark.asyncio
async def test_cas_exclusivity_two_writers_same_version(client: AsyncClient):
    """Owner and an EDITOR both read v; exactly one write lands."""
    owner_h, _ = await make_user(client, "owner@inv-cas.com")
    editor_h, editor = await make_user(client, "editor@inv-cas.com")
    inv = await make_inventory(client, owner_h)
    await share(client, owner_h, inv["id"], editor["email"], "EDITOR")

    v = (await client.get(f"/api/inventories/{inv['id']}", headers=owner_h)).json()["version"]
    seen_by_editor = (
        await client.get(f"/api/inventories/{inv['id']}", headers=editor_h)
    ).json()["version"]
    assert seen_by_editor == v

    first = await client.put(
        f"/api/inventories/{inv['id']}", json={"title": "Owner's", "version": v},
        headers=owner_h,
    )
    second = await client.put(
        f"/api/inventories/{inv['id']}", json={"description": "Editor's", "version": v},
        headers=editor_h,
    )
    assert first.status_code == 200
    assert first.json()["version"] == v + 1
    assert second.status_code == 409
    assert second.json()["currentVersion"] == v + 1
    assert second.json()["yourVersion"] == v

    # the losing write left nothing behind
    current = (await client.get(f"/api/inventories/{inv['id']}", headers=owner_h)).json()
    assert current["title"] == "Owner's"
    assert current["description"] == "Workshop tools"


@pytest.mark.asyncio
async def test_version_increments_by_one(client: AsyncClient):
    headers, _ = await make_user(client, "owner@inv-monotonic.com")
    inv = await make_inventory(client, headers)

    version = inv["version"]
    for i in range(5):
        resp = await client.put(
            f"/api/inventories/{inv['id']}",
            json={"description": f"rev {i}", "version": version},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.json()["version"] == version + 1
        version = resp.json()["version"]
    assert version == 6


@pytest.mark.asyncio
async def test_repeated_stale_submit_yields_same_conflict(client: AsyncClient):
    headers, _ = await make_user(client, "owner@inv-idempotent.com")
    inv = await make_inventory(client, headers)
    await client.put(
        f"/api/inventories/{inv['id']}", json={"title": "A", "version": 1}, headers=headers
    )

    bodies = []
    for _ in range(3):
        resp = await client.put(
            f"/api/inventories/{inv['id']}", json={"title": "B", "version": 1}, headers=headers
        )
        assert resp.status_code == 409
        bodies.append(resp.json())
    assert all(b["currentVersion"] == 2 for b in bodies)

    current = (await client.get(f"/api/inventories/{inv['id']}", headers=headers)).json()
    assert current["version"] == 2
    assert current["title"] == "A"


@pytest.mark.asyncio
async def test_update_missing_inventory(client: AsyncClient):
    headers, _ = await make_user(client, "owner@inv-missing.com")
    resp = await client.put(
        f"/api/inventories/{uuid.uuid4()}", json={"title": "X", "version": 1}, headers=headers
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_requires_version(client: AsyncClient):
    headers, _ = await make_user(client, "owner@inv-noversion.com")
    inv = await make_inventory(client, headers)
    resp = await client.put(
        f"/api/inventories/{inv['id']}", json={"title": "X"}, headers=headers
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_scenario_b_anonymous_reads(client: AsyncClient):
    """Private inventories do not exist for guests; public ones are read-only."""
    headers, _ = await make_user(client, "owner@inv-scenario-b.com")
    inv = await make_inventory(client, headers)

    resp = await client.get(f"/api/inventories/{inv['id']}")
    assert resp.status_code == 404

    await make_public(client, headers, inv)

    resp = await client.get(f"/api/inventories/{inv['id']}")
    assert resp.status_code == 200
    perms = resp.json()["permissions"]
    assert perms["canView"] is True
    assert perms["canEdit"] is False
    assert perms["canEditItems"] is False


@pytest.mark.asyncio
async def test_private_inventory_forbidden_for_outsider(client: AsyncClient):
    owner_h, _ = await make_user(client, "owner@inv-outsider.com")
    outsider_h, _ = await make_user(client, "someone@inv-outsider.com")
    inv = await make_inventory(client, owner_h)

    resp = await client.get(f"/api/inventories/{inv['id']}", headers=outsider_h)
    assert resp.status_code == 403

    resp = await client.put(
        f"/api/inventories/{inv['id']}", json={"title": "X", "version": 1}, headers=outsider_h
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_viewer_cannot_edit_metadata(client: AsyncClient):
    owner_h, _ = await make_user(client, "owner@inv-viewer.com")
    viewer_h, viewer = await make_user(client, "viewer@inv-viewer.com")
    inv = await make_inventory(client, owner_h)
    await share(client, owner_h, inv["id"], viewer["email"], "VIEWER")

    resp = await client.get(f"/api/inventories/{inv['id']}", headers=viewer_h)
    assert resp.status_code == 200
    assert resp.json()["permissions"]["canEdit"] is False

    resp = await client.put(
        f"/api/inventories/{inv['id']}", json={"title": "X", "version": 1}, headers=viewer_h
    )
    assert resp.status_code == 403

    # nothing was written
    current = (await client.get(f"/api/inventories/{inv['id']}", headers=owner_h)).json()
    assert current["version"] == 1


@pytest.mark.asyncio
async def test_admin_can_edit_any_inventory(client: AsyncClient):
    owner_h, _ = await make_user(client, "owner@inv-admin.com")
    admin_h, _ = await make_user(client, "root@inv-admin.com", role="ADMIN")
    inv = await make_inventory(client, owner_h)

    resp = await client.put(
        f"/api/inventories/{inv['id']}", json={"title": "Admin", "version": 1}, headers=admin_h
    )
    assert resp.status_code == 200
    assert resp.json()["version"] == 2


@pytest.mark.asyncio
async def test_scenario_d_grant_changes_do_not_bump_version(client: AsyncClient):
    owner_h, _ = await make_user(client, "owner@inv-scenario-d.com")
    editor_h, editor = await make_user(client, "editor@inv-scenario-d.com")
    _, viewer = await make_user(client, "viewer@inv-scenario-d.com")
    inv = await make_inventory(client, owner_h)
    await share(client, owner_h, inv["id"], editor["email"], "EDITOR")
    await share(client, owner_h, inv["id"], viewer["email"], "VIEWER")

    resp = await client.put(
        f"/api/inventories/{inv['id']}", json={"title": "T", "version": 1}, headers=owner_h
    )
    assert resp.json()["version"] == 2

    resp = await client.patch(
        f"/api/inventories/{inv['id']}/public",
        json={"isPublic": True, "version": 2},
        headers=owner_h,
    )
    assert resp.status_code == 200
    assert resp.json()["version"] == 3
    assert resp.json()["isPublic"] is True

    resp = await client.patch(
        f"/api/inventories/{inv['id']}/access/{viewer['id']}",
        json={"accessLevel": "EDITOR"},
        headers=editor_h,
    )
    assert resp.status_code == 200

    current = (await client.get(f"/api/inventories/{inv['id']}", headers=owner_h)).json()
    assert current["version"] == 3


@pytest.mark.asyncio
async def test_public_toggle_competes_with_metadata_edits(client: AsyncClient):
    headers, _ = await make_user(client, "owner@inv-toggle.com")
    inv = await make_inventory(client, headers)

    resp = await client.put(
        f"/api/inventories/{inv['id']}", json={"title": "New", "version": 1}, headers=headers
    )
    assert resp.status_code == 200

    resp = await client.patch(
        f"/api/inventories/{inv['id']}/public",
        json={"isPublic": True, "version": 1},
        headers=headers,
    )
    assert resp.status_code == 409
    assert resp.json()["currentVersion"] == 2


@pytest.mark.asyncio
async def test_public_toggle_rejects_non_boolean(client: AsyncClient):
    headers, _ = await make_user(client, "owner@inv-nonbool.com")
    inv = await make_inventory(client, headers)

    resp = await client.patch(
        f"/api/inventories/{inv['id']}/public",
        json={"isPublic": "yes", "version": 1},
        headers=headers,
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_list_filters_by_visibility(client: AsyncClient):
    owner_h, owner = await make_user(client, "owner@inv-list.com", name="Owner")
    other_h, _ = await make_user(client, "other@inv-list.com")
    private = await make_inventory(client, owner_h, title="Private list")
    public = await make_public(
        client, owner_h, await make_inventory(client, owner_h, title="Public list")
    )

    resp = await client.get("/api/inventories", headers=other_h)
    assert resp.status_code == 200
    ids = {i["id"] for i in resp.json()}
    assert public["id"] in ids
    assert private["id"] not in ids

    listed = next(i for i in resp.json() if i["id"] == public["id"])
    assert listed["creator"] == {"id": owner["id"], "name": "Owner", "email": owner["email"]}
    assert listed["permissions"]["canEditItems"] is True

    resp = await client.get("/api/inventories")
    assert resp.status_code == 200
    guest_ids = {i["id"] for i in resp.json()}
    assert public["id"] in guest_ids
    assert private["id"] not in guest_ids


@pytest.mark.asyncio
async def test_update_custom_schema_fields(client: AsyncClient):
    headers, _ = await make_user(client, "owner@inv-schema.com")
    inv = await make_inventory(client, headers)

    resp = await client.put(f"/api/inventories/{inv['id']}", json={
        "version": 1,
        "stringField1Name": "Serial",
        "stringField1Active": True,
        "intField1Name": "Quantity",
        "intField1Active": True,
        "tags": ["power"],
        "isReadOnly": True,
    }, headers=headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["stringField1Name"] == "Serial"
    assert data["stringField1Active"] is True
    assert data["intField1Active"] is True
    assert data["boolField1Active"] is False
    assert data["tags"] == ["power"]
    assert data["isReadOnly"] is True
    # untouched fields survive
    assert data["title"] == "Tools"


@pytest.mark.asyncio
async def test_oversized_version_is_a_validation_error(client: AsyncClient):
    headers, _ = await make_user(client, "owner@inv-bigversion.com")
    inv = await make_inventory(client, headers)

    resp = await client.put(
        f"/api/inventories/{inv['id']}", json={"title": "X", "version": 2**70}, headers=headers
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "ValidationError"

    resp = await client.patch(
        f"/api/inventories/{inv['id']}/public",
        json={"isPublic": True, "version": 2**31},
        headers=headers,
    )
    assert resp.status_code == 400

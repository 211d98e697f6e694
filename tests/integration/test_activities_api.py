import pytest
from httpx import AsyncClient

from tests.conftest import register_and_login


async def _create_activity(client, headers, name="Quiz", description=None):
    r = await client.post("/api/v1/activities", json={"name": name, "description": description}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


@pytest.mark.asyncio
async def test_create_and_list_activities(client: AsyncClient):
    _, headers = await register_and_login(client)
    created = await _create_activity(client, headers, "Sports Day", "Spring")

    r = await client.get("/api/v1/activities", headers=headers)
    assert r.status_code == 200
    assert [a["id"] for a in r.json()["items"]] == [created["id"]]
    assert created["deleted"] is False


@pytest.mark.asyncio
async def test_duplicate_activity_returns_conflict_with_field(client: AsyncClient):
    _, headers = await register_and_login(client)
    await _create_activity(client, headers)

    r = await client.post("/api/v1/activities", json={"name": "Quiz"}, headers=headers)
    assert r.status_code == 409
    error = r.json()["error"]
    assert error["code"] == "E002"
    assert error["details"]["field"] == "name"


@pytest.mark.asyncio
async def test_hide_and_restore(client: AsyncClient):
    _, headers = await register_and_login(client)
    activity = await _create_activity(client, headers)

    r = await client.post(f"/api/v1/activities/{activity['id']}/hide", headers=headers)
    assert r.status_code == 200
    assert r.json()["deleted"] is True

    r = await client.get("/api/v1/activities", headers=headers)
    assert r.json()["items"] == []
    r = await client.get("/api/v1/activities?include_hidden=true", headers=headers)
    assert len(r.json()["items"]) == 1

    r = await client.post(f"/api/v1/activities/{activity['id']}/restore", headers=headers)
    assert r.status_code == 200
    assert r.json()["deleted"] is False
    assert r.json()["pin"] == activity["pin"]


@pytest.mark.asyncio
async def test_join_by_pin_and_view_access(client: AsyncClient):
    _, owner_headers = await register_and_login(client, "Owner")
    _, member_headers = await register_and_login(client, "Member")
    _, stranger_headers = await register_and_login(client, "Stranger")
    activity = await _create_activity(client, owner_headers)

    r = await client.get(f"/api/v1/activities/{activity['id']}", headers=member_headers)
    assert r.status_code == 403
    assert r.json()["error"]["message"] == "Not permitted"

    for _ in range(2):
        r = await client.post("/api/v1/activities/join", json={"pin": activity["pin"]}, headers=member_headers)
        assert r.status_code == 200
        assert r.json()["id"] == activity["id"]

    r = await client.get("/api/v1/activities/joined", headers=member_headers)
    assert [a["id"] for a in r.json()["items"]] == [activity["id"]]

    r = await client.get(f"/api/v1/activities/{activity['id']}", headers=member_headers)
    assert r.status_code == 200

    r = await client.get(f"/api/v1/activities/{activity['id']}", headers=stranger_headers)
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_join_with_unknown_or_malformed_pin(client: AsyncClient):
    _, headers = await register_and_login(client)

    r = await client.post("/api/v1/activities/join", json={"pin": "12ab"}, headers=headers)
    assert r.status_code == 400

    r = await client.get("/api/v1/activities/joined", headers=headers)
    assert r.json()["items"] == []


@pytest.mark.asyncio
async def test_non_owner_cannot_update(client: AsyncClient):
    _, owner_headers = await register_and_login(client, "Owner")
    _, other_headers = await register_and_login(client, "Other")
    activity = await _create_activity(client, owner_headers)

    r = await client.patch(
        f"/api/v1/activities/{activity['id']}",
        json={"name": "Renamed"},
        headers=other_headers,
    )
    assert r.status_code == 403

    r = await client.patch(
        f"/api/v1/activities/{activity['id']}",
        json={"name": "Renamed", "description": "Finals"},
        headers=owner_headers,
    )
    assert r.status_code == 200
    assert r.json()["name"] == "Renamed"
    assert r.json()["description"] == "Finals"


@pytest.mark.asyncio
async def test_unknown_activity_is_not_found(client: AsyncClient):
    _, headers = await register_and_login(client)
    r = await client.get("/api/v1/activities/00000000-0000-0000-0000-000000000000", headers=headers)
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "E001"

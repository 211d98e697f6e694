import pytest
from httpx import AsyncClient

from tests.conftest import register_and_login


async def _activity(client, headers):
    r = await client.post("/api/v1/activities", json={"name": "Quiz"}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


@pytest.mark.asyncio
async def test_participants_with_totals(client: AsyncClient):
    _, headers = await register_and_login(client)
    activity = await _activity(client, headers)
    base = f"/api/v1/activities/{activity['id']}"

    r = await client.post(f"{base}/participants", json={"name": "Alice"}, headers=headers)
    assert r.status_code == 201
    alice = r.json()

    r = await client.post(f"{base}/participants", json={"name": "ALICE"}, headers=headers)
    assert r.status_code == 409
    assert r.json()["error"]["details"]["field"] == "name"

    r = await client.post(f"{base}/participants/batch", json={"names": ["Bob", "alice", "", "Carol"]}, headers=headers)
    assert r.status_code == 200
    assert [p["name"] for p in r.json()["created"]] == ["Bob", "Carol"]
    assert r.json()["skipped"] == 1

    for points in (5, -2):
        r = await client.post(
            f"/api/v1/participants/{alice['id']}/scores",
            json={"points": points, "reason": "answer"},
            headers=headers,
        )
        assert r.status_code == 201

    r = await client.get(f"{base}/participants", headers=headers)
    assert r.status_code == 200
    totals = {p["name"]: p["total"] for p in r.json()["items"]}
    assert totals == {"Alice": 3, "Bob": 0, "Carol": 0}

    r = await client.get(f"/api/v1/participants/{alice['id']}", headers=headers)
    assert r.json()["total"] == 3

    r = await client.get(f"/api/v1/participants/{alice['id']}/scores", headers=headers)
    body = r.json()
    assert body["total"] == 3
    assert len(body["items"]) == 2


@pytest.mark.asyncio
async def test_score_points_must_be_integers(client: AsyncClient):
    _, headers = await register_and_login(client)
    activity = await _activity(client, headers)
    r = await client.post(f"/api/v1/activities/{activity['id']}/participants", json={"name": "Alice"}, headers=headers)
    pid = r.json()["id"]

    for bad in (True, 1.5, "3"):
        r = await client.post(
            f"/api/v1/participants/{pid}/scores",
            json={"points": bad, "reason": "x"},
            headers=headers,
        )
        assert r.status_code == 422
        assert r.json()["error"]["code"] == "E004"


@pytest.mark.asyncio
async def test_edit_score_and_delete_participant(client: AsyncClient):
    _, headers = await register_and_login(client)
    activity = await _activity(client, headers)
    r = await client.post(f"/api/v1/activities/{activity['id']}/participants", json={"name": "Alice"}, headers=headers)
    pid = r.json()["id"]

    r = await client.post(f"/api/v1/participants/{pid}/scores", json={"points": 1, "reason": "typo"}, headers=headers)
    score = r.json()

    r = await client.patch(f"/api/v1/scores/{score['id']}", json={"points": 10, "reason": "fixed"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["points"] == 10
    assert r.json()["created_at"] == score["created_at"]

    r = await client.delete(f"/api/v1/participants/{pid}", headers=headers)
    assert r.status_code == 204

    r = await client.get(f"/api/v1/participants/{pid}", headers=headers)
    assert r.status_code == 404
    r = await client.get(f"/api/v1/scores/{score['id']}", headers=headers)
    assert r.status_code == 404

    r = await client.get(f"/api/v1/activities/{activity['id']}/scores", headers=headers)
    assert r.json()["items"] == []


@pytest.mark.asyncio
async def test_import_participants_csv(client: AsyncClient):
    _, headers = await register_and_login(client)
    activity = await _activity(client, headers)

    r = await client.post(
        f"/api/v1/activities/{activity['id']}/participants/import",
        json={"filename": "roster.csv", "content": "姓名\n張三\n李四\n張三\n"},
        headers=headers,
    )
    assert r.status_code == 200
    assert [p["name"] for p in r.json()["created"]] == ["張三", "李四"]
    assert r.json()["skipped"] == 1

    r = await client.post(
        f"/api/v1/activities/{activity['id']}/participants/import",
        json={"filename": "roster.txt", "content": "Amy\n"},
        headers=headers,
    )
    assert r.status_code == 400
    assert r.json()["error"]["details"]["field"] == "filename"


@pytest.mark.asyncio
async def test_batch_scores_for_selected_participants(client: AsyncClient):
    _, headers = await register_and_login(client)
    activity = await _activity(client, headers)
    other = await _activity(client, headers)
    base = f"/api/v1/activities/{activity['id']}"

    r = await client.post(f"{base}/participants/batch", json={"names": ["Alice", "Bob", "Carol"]}, headers=headers)
    alice, bob, _carol = r.json()["created"]
    r = await client.post(f"/api/v1/activities/{other['id']}/participants", json={"name": "Stranger"}, headers=headers)
    stranger = r.json()

    r = await client.post(
        f"{base}/scores/batch",
        json={"participant_ids": [alice["id"], stranger["id"]], "points": 4, "reason": "team bonus"},
        headers=headers,
    )
    assert r.status_code == 400
    assert r.json()["error"]["details"]["field"] == "participant_ids"

    r = await client.get(f"{base}/scores", headers=headers)
    assert r.json()["items"] == []

    r = await client.post(
        f"{base}/scores/batch",
        json={"participant_ids": [bob["id"], alice["id"]], "points": 4, "reason": "team bonus"},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    assert [s["participant_id"] for s in r.json()["items"]] == [bob["id"], alice["id"]]

    r = await client.get(f"{base}/participants", headers=headers)
    totals = {p["name"]: p["total"] for p in r.json()["items"]}
    assert totals == {"Alice": 4, "Bob": 4, "Carol": 0}

    r = await client.post(
        f"{base}/scores/batch",
        json={"participant_ids": [alice["id"]], "points": "4", "reason": "string points"},
        headers=headers,
    )
    assert r.status_code == 422

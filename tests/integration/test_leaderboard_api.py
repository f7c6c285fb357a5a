"""GET /api/leaderboard — public ranking."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def _complete_cycle(client: AsyncClient, token: str) -> None:
    headers = {"Authorization": f"Bearer {token}"}
    for juz in range(1, 31):
        await client.post("/api/readings", json={"juzNumber": juz, "isCompleted": True}, headers=headers)
    response = await client.post("/api/khatmah/complete", headers=headers)
    assert response.status_code == 200


async def test_empty(client: AsyncClient):
    response = await client.get("/api/leaderboard")
    assert response.status_code == 200
    assert response.json() == []


async def test_public_and_includes_zero_counts(client: AsyncClient, register):
    await register("zainab", displayName="Zainab")
    await register("bilal", displayName="Bilal")

    response = await client.get("/api/leaderboard")

    assert response.status_code == 200
    board = response.json()
    assert [e["username"] for e in board] == ["bilal", "zainab"]
    assert board[0] == {
        "rank": 1,
        "id": board[0]["id"],
        "username": "bilal",
        "displayName": "Bilal",
        "completedCount": 0,
    }


async def test_ranked_by_count_then_username(client: AsyncClient, register):
    users = {name: await register(name) for name in ("ahmed", "fatima", "omar", "aisha")}
    await _complete_cycle(client, users["omar"]["accessToken"])
    await _complete_cycle(client, users["omar"]["accessToken"])
    await _complete_cycle(client, users["fatima"]["accessToken"])
    await _complete_cycle(client, users["ahmed"]["accessToken"])

    board = (await client.get("/api/leaderboard")).json()

    assert [(e["username"], e["completedCount"]) for e in board] == [
        ("omar", 2),
        ("ahmed", 1),
        ("fatima", 1),
        ("aisha", 0),
    ]
    assert [e["rank"] for e in board] == [1, 2, 3, 4]


async def test_completion_moves_user_by_exactly_one(client: AsyncClient, register):
    ahmed = await register("ahmed")
    fatima = await register("fatima")
    await _complete_cycle(client, ahmed["accessToken"])

    before = {e["username"]: e for e in (await client.get("/api/leaderboard")).json()}
    assert before["ahmed"]["rank"] == 1

    await _complete_cycle(client, fatima["accessToken"])
    await _complete_cycle(client, fatima["accessToken"])

    after = {e["username"]: e for e in (await client.get("/api/leaderboard")).json()}
    assert after["fatima"]["completedCount"] == before["fatima"]["completedCount"] + 2
    assert after["ahmed"]["completedCount"] == before["ahmed"]["completedCount"]
    assert after["fatima"]["rank"] == 1
    assert after["ahmed"]["rank"] == 2


async def test_reading_leaderboard_changes_nothing(client: AsyncClient, registered_user: dict):
    headers = {"Authorization": f"Bearer {registered_user['accessToken']}"}
    await client.post("/api/readings", json={"juzNumber": 2, "isCompleted": True}, headers=headers)

    for _ in range(3):
        await client.get("/api/leaderboard")

    readings = (await client.get("/api/readings", headers=headers)).json()
    assert [r["juzNumber"] for r in readings if r["isCompleted"]] == [2]

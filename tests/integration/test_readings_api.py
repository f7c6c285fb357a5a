"""GET/POST /api/readings and GET /api/progress."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


class TestListReadings:
    async def test_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/readings")
        assert response.status_code == 401

    async def test_thirty_ordered_parts(self, authed_client: AsyncClient, registered_user: dict):
        response = await authed_client.get("/api/readings")
        assert response.status_code == 200
        readings = response.json()
        assert [r["juzNumber"] for r in readings] == list(range(1, 31))
        assert {r["userId"] for r in readings} == {registered_user["user"]["id"]}
        assert set(readings[0]) == {"id", "userId", "juzNumber", "isCompleted", "completedAt"}


class TestUpdateReading:
    async def test_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/readings", json={"juzNumber": 1, "isCompleted": True})
        assert response.status_code == 401

    async def test_mark_complete(self, authed_client: AsyncClient):
        response = await authed_client.post("/api/readings", json={"juzNumber": 12, "isCompleted": True})
        assert response.status_code == 200
        data = response.json()
        assert data["juzNumber"] == 12
        assert data["isCompleted"] is True
        assert data["completedAt"] is not None

    async def test_mark_then_unmark(self, authed_client: AsyncClient):
        await authed_client.post("/api/readings", json={"juzNumber": 4, "isCompleted": True})
        await authed_client.post("/api/readings", json={"juzNumber": 9, "isCompleted": True})
        response = await authed_client.post("/api/readings", json={"juzNumber": 4, "isCompleted": False})
        assert response.json()["isCompleted"] is False

        readings = (await authed_client.get("/api/readings")).json()
        completed = [r["juzNumber"] for r in readings if r["isCompleted"]]
        assert completed == [9]

    @pytest.mark.parametrize(
        ("body", "fragment"),
        [
            ({"juzNumber": 0, "isCompleted": True}, "greater than or equal to 1"),
            ({"juzNumber": 31, "isCompleted": True}, "less than or equal to 30"),
            ({"juzNumber": "5", "isCompleted": True}, "valid integer"),
            ({"juzNumber": 5.5, "isCompleted": True}, "valid integer"),
            ({"juzNumber": 5, "isCompleted": 1}, "valid boolean"),
            ({"juzNumber": 5, "isCompleted": "yes"}, "valid boolean"),
            ({"isCompleted": True}, "Field required"),
            ({"juzNumber": 5}, "Field required"),
        ],
    )
    async def test_malformed_body(self, authed_client: AsyncClient, body: dict, fragment: str):
        response = await authed_client.post("/api/readings", json=body)
        assert response.status_code == 400
        assert fragment in response.json()["message"]

    async def test_first_violation_names_the_field(self, authed_client: AsyncClient):
        response = await authed_client.post("/api/readings", json={"juzNumber": 99, "isCompleted": True})
        assert response.json()["message"].startswith("juzNumber")

    async def test_storage_failure_is_generic_500(self, authed_client: AsyncClient, monkeypatch):
        from khatmah.errors import StorageError
        from khatmah.storage.sql import SqlStorage

        async def _fail(self, user_id, juz_number, is_completed):
            raise StorageError("Storage operation failed: upsert_reading")

        monkeypatch.setattr(SqlStorage, "upsert_reading", _fail)

        response = await authed_client.post("/api/readings", json={"juzNumber": 1, "isCompleted": True})
        assert response.status_code == 500
        assert response.json() == {"message": "Internal Server Error"}


class TestProgress:
    async def test_summary(self, authed_client: AsyncClient):
        for juz in (1, 2, 3):
            await authed_client.post("/api/readings", json={"juzNumber": juz, "isCompleted": True})

        response = await authed_client.get("/api/progress")
        assert response.status_code == 200
        assert response.json() == {
            "completedParts": 3,
            "totalParts": 30,
            "percentComplete": 10.0,
            "khatmahCount": 0,
        }

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/progress")
        assert response.status_code == 401

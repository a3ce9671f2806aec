"""Tests for the leaderboard HTTP endpoints."""

from collections.abc import AsyncIterator

import pytest_asyncio
from conftest import FakePlayerReader, make_service
from httpx import ASGITransport, AsyncClient

from app.main import app
from app.services.leaderboard import get_leaderboard_service


@pytest_asyncio.fixture
async def client() -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def use_service(service) -> None:
    app.dependency_overrides[get_leaderboard_service] = lambda: service


class TestLeaderboardEndpoint:
    async def test_first_page_envelope(self, client, roster):
        """The page is wrapped with pagination info."""
        use_service(make_service(roster))

        response = await client.get("/api/leaderboard/", params={"limit": 3})
        body = response.json()

        assert response.status_code == 200
        assert body["status"] == "success"
        assert [p["id"] for p in body["data"]["players"]] == ["x", "p0", "p1"]
        assert body["data"]["count"] == len(roster)
        assert body["pagination"] == {
            "offset": 0,
            "limit": 3,
            "total_items": len(roster),
            "has_more": True,
        }

    async def test_last_page(self, client, roster):
        use_service(make_service(roster))

        response = await client.get("/api/leaderboard/", params={"offset": 15, "limit": 10})
        body = response.json()

        assert len(body["data"]["players"]) == 3
        assert body["pagination"]["has_more"] is False

    async def test_player_fields(self, client, roster):
        use_service(make_service(roster))

        response = await client.get("/api/leaderboard/", params={"offset": 6, "limit": 1})
        player = response.json()["data"]["players"][0]

        assert player["id"] == "r00"
        assert player["primary_role"] == "Member"
        assert player["badges"] == []
        assert player["influence"] is None
        assert player["summary"]["deaths"] == 0

    async def test_rejects_zero_limit(self, client, roster):
        use_service(make_service(roster))

        response = await client.get("/api/leaderboard/", params={"limit": 0})

        assert response.status_code == 422
        assert response.json()["status"] == "error"

    async def test_rejects_oversized_limit(self, client, roster):
        use_service(make_service(roster))

        response = await client.get("/api/leaderboard/", params={"limit": 500})

        assert response.status_code == 422

    async def test_identity_failure_is_503(self, client, roster):
        """An unreadable players table makes the leaderboard unavailable."""
        use_service(make_service(roster, reader=FakePlayerReader(roster, fail=True)))

        response = await client.get("/api/leaderboard/")

        assert response.status_code == 503
        assert response.json()["message"] == "Leaderboard is temporarily unavailable"


class TestCacheEndpoint:
    async def test_reports_both_caches(self, client, roster):
        service = make_service(roster)
        use_service(service)
        await client.get("/api/leaderboard/", params={"limit": 50})

        response = await client.get("/api/leaderboard/cache")
        stats = {entry["name"]: entry for entry in response.json()["data"]}

        assert set(stats) == {"player_stats", "player_badges"}
        assert stats["player_stats"]["size"] == 6
        assert stats["player_badges"]["misses"] == 6
        assert stats["player_badges"]["hit_rate"] == 0.0


async def test_healthz(client):
    response = await client.get("/")

    assert response.json() == "OK"

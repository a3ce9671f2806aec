"""Shared fixtures and in-memory fakes for the leaderboard test suite."""

import asyncio
import os
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime, timedelta

os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")

import pytest  # noqa: E402

from app.core.errors import IdentitySourceError
from app.core.ranking import RankingConfig
from app.models.player import Player
from app.schemas.leaderboard import Badge, InfluenceRecord
from app.services.batch_cache import BatchCache
from app.services.leaderboard import LeaderboardService
from app.services.priority import PriorityScorer
from app.services.resident import InfluenceResolver

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)

BADGE_WEIGHTS = {
    "Admin": 100,
    "Moderator": 90,
    "Helper": 80,
    "Golden Kala": 70,
    "Fancy Kala": 60,
    "Kala": 50,
    "VIP": 40,
    "Former Supporter": 30,
    "Member": 20,
    "Player": 10,
}


def make_ranking(
    *, always_first: str | None = "x", pinned: Sequence[str] = ("p0", "p1", "y", "p3", "p4")
) -> RankingConfig:
    return RankingConfig(
        always_first=always_first,
        pinned=list(pinned),
        badge_weights=BADGE_WEIGHTS,
        role_weights={kind.lower(): weight for kind, weight in BADGE_WEIGHTS.items()},
    )


def make_player(player_id: str, name: str | None = None, *, seen_hours_ago: int = 1) -> Player:
    return Player(
        id=player_id,
        name=name or player_id,
        created_at=NOW - timedelta(days=30),
        last_seen=NOW - timedelta(hours=seen_hours_ago),
    )


def make_badge(
    player_id: str, badge_type: str, *, verified: bool = False, days_ago: int = 1
) -> Badge:
    return Badge(
        player_id=player_id,
        badge_type=badge_type,
        is_verified=verified,
        assigned_at=NOW - timedelta(days=days_ago),
    )


class FakePlayerReader:
    """Mimics PlayerReader over a list, ordered by most recently seen then ID."""

    def __init__(self, players: Iterable[Player], *, fail: bool = False) -> None:
        self.players = sorted(
            players, key=lambda p: (-(p.last_seen.timestamp() if p.last_seen else 0), p.id)
        )
        self.fail = fail
        self.excluded: list[tuple[str, ...]] = []

    def _check(self, operation: str) -> None:
        if self.fail:
            raise IdentitySourceError(operation)

    async def list_players(
        self, *, offset: int, limit: int, exclude_ids: Sequence[str] = ()
    ) -> tuple[list[Player], int]:
        self._check("list_players")
        self.excluded.append(tuple(exclude_ids))
        rest = [p for p in self.players if p.id not in set(exclude_ids)]
        return rest[offset : offset + limit], len(self.players)

    async def get_players(self, ids: Sequence[str]) -> list[Player]:
        self._check("get_players")
        by_id = {p.id: p for p in self.players}
        return [by_id[player_id] for player_id in ids if player_id in by_id]

    async def count_players(self, ids: Sequence[str] | None = None) -> int:
        self._check("count_players")
        if ids is None:
            return len(self.players)
        return sum(1 for p in self.players if p.id in set(ids))


class RecordingSource[V]:
    """A detail or badge source that records every fetch it serves."""

    def __init__(
        self,
        data: dict[str, V],
        default: Callable[[], V],
        *,
        fail_batch: bool = False,
        failing_ids: Iterable[str] = (),
        gate: asyncio.Event | None = None,
    ) -> None:
        self.data = data
        self.default = default
        self.fail_batch = fail_batch
        self.failing_ids = set(failing_ids)
        self.gate = gate
        self.batch_calls: list[list[str]] = []
        self.single_calls: list[str] = []

    async def fetch_many(self, ids: Sequence[str]) -> dict[str, V]:
        self.batch_calls.append(list(ids))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_batch:
            msg = "stats backend unreachable"
            raise ConnectionError(msg)
        return {player_id: self.data[player_id] for player_id in ids if player_id in self.data}

    async def fetch_one(self, player_id: str) -> V:
        self.single_calls.append(player_id)
        if player_id in self.failing_ids:
            msg = f"no route for {player_id}"
            raise ConnectionError(msg)
        return self.data.get(player_id, self.default())

    def cache(self, name: str = "test") -> BatchCache[V]:
        return BatchCache(
            name, fetch_many=self.fetch_many, fetch_one=self.fetch_one, default=self.default
        )


class FakeInfluence:
    def __init__(
        self, records: Iterable[InfluenceRecord] = (), *, gate: asyncio.Event | None = None
    ) -> None:
        self.records = {record.name: record for record in records}
        self.gate = gate
        self.calls = 0

    async def load_all(self) -> dict[str, InfluenceRecord]:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        return dict(self.records)


def make_service(
    players: Iterable[Player],
    *,
    ranking: RankingConfig | None = None,
    stats: dict[str, dict[str, int | float]] | None = None,
    badges: dict[str, list[Badge]] | None = None,
    influence: FakeInfluence | InfluenceResolver | None = None,
    reader: FakePlayerReader | None = None,
    stats_source: RecordingSource[dict[str, int | float]] | None = None,
    badge_source: RecordingSource[list[Badge]] | None = None,
) -> LeaderboardService:
    stats_source = stats_source or RecordingSource(stats or {}, dict)
    badge_source = badge_source or RecordingSource(badges or {}, list)
    return LeaderboardService(
        players=reader or FakePlayerReader(players),
        detail_cache=stats_source.cache("player_stats"),
        badge_cache=badge_source.cache("player_badges"),
        influence=influence or FakeInfluence(),
        scorer=PriorityScorer(ranking or make_ranking()),
    )


@pytest.fixture
def ranking() -> RankingConfig:
    return make_ranking()


@pytest.fixture
def roster() -> list[Player]:
    """Six pinned-segment players plus twelve regulars, all seen at different times."""
    ids = ["x", "p0", "p1", "y", "p3", "p4"] + [f"r{i:02d}" for i in range(12)]
    return [make_player(player_id, seen_hours_ago=hours) for hours, player_id in enumerate(ids, 1)]

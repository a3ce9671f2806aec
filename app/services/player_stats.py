from collections.abc import Callable, Mapping, Sequence

from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.models.player_stats import PlayerStats
from app.schemas.leaderboard import PlayerSummary

type Detail = dict[str, int | float]

# Minecraft stores time_since_death in ticks
TICKS_PER_DAY = 24000


def clean_stats(raw: Mapping[str, object] | None) -> Detail:
    """Keep numeric measurements only, with booleans counted as 0 or 1."""
    if not raw:
        return {}

    stats: Detail = {}
    for key, value in raw.items():
        if isinstance(value, bool):
            stats[key] = int(value)
        elif isinstance(value, int | float):
            stats[key] = value
    return stats


def summarize_stats(stats: Mapping[str, int | float]) -> PlayerSummary:
    def stat(key: str) -> int:
        return max(0, int(stats.get(key, 0)))

    return PlayerSummary(
        blocks_placed=stat("use_dirt"),
        blocks_broken=stat("mine_ground"),
        mob_kills=stat("kill_any"),
        deaths=stat("death"),
        survival_streak=stat("time_since_death") // TICKS_PER_DAY,
    )


class PlayerStatsSource:
    """Reads computed per-player statistics from player_stats."""

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory

    async def fetch_many(self, ids: Sequence[str]) -> dict[str, Detail]:
        """Fetch stats for all ``ids`` in one query. Players without a row are omitted."""
        async with self._session_factory() as session:
            result = await session.exec(
                select(PlayerStats).where(col(PlayerStats.player_id).in_(ids))
            )
            return {row.player_id: clean_stats(row.stats) for row in result.all()}

    async def fetch_one(self, player_id: str) -> Detail:
        async with self._session_factory() as session:
            result = await session.exec(
                select(PlayerStats).where(col(PlayerStats.player_id) == player_id)
            )
            row = result.first()
        return clean_stats(row.stats) if row else {}

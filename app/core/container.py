from collections.abc import Callable

from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.ranking import RankingConfig
from app.schemas.leaderboard import Badge
from app.services.batch_cache import BatchCache
from app.services.leaderboard import LeaderboardService
from app.services.player import PlayerReader
from app.services.player_badge import PlayerBadgeSource
from app.services.player_stats import Detail, PlayerStatsSource
from app.services.priority import PriorityScorer
from app.services.resident import InfluenceResolver


def build_leaderboard_service(
    ranking: RankingConfig, session_factory: Callable[[], AsyncSession]
) -> LeaderboardService:
    """Wire the leaderboard with fresh caches. Call once per process."""
    stats_source = PlayerStatsSource(session_factory)
    badge_source = PlayerBadgeSource(session_factory)

    detail_cache: BatchCache[Detail] = BatchCache(
        "player_stats",
        fetch_many=stats_source.fetch_many,
        fetch_one=stats_source.fetch_one,
        default=dict,
    )
    badge_cache: BatchCache[list[Badge]] = BatchCache(
        "player_badges",
        fetch_many=badge_source.fetch_many,
        fetch_one=badge_source.fetch_one,
        default=list,
    )

    return LeaderboardService(
        players=PlayerReader(session_factory),
        detail_cache=detail_cache,
        badge_cache=badge_cache,
        influence=InfluenceResolver(session_factory),
        scorer=PriorityScorer(ranking),
    )

import asyncio
from collections.abc import Sequence
from typing import Annotated

from fastapi import Depends, Request
from loguru import logger

from app.models.player import Player
from app.schemas.leaderboard import (
    Badge,
    CacheStats,
    InfluenceRecord,
    LeaderboardPage,
    RankedPlayer,
)
from app.services.batch_cache import BatchCache
from app.services.player import PlayerReader
from app.services.player_stats import Detail, summarize_stats
from app.services.priority import PriorityScorer, rank_sort_key
from app.services.resident import InfluenceResolver

MAX_PAGE_SIZE = 100


class LeaderboardService:
    """Serves leaderboard pages.

    Page 0 holds the pinned segment: the always-first player, then the curated
    pinned list, in order. Later pages walk the rest of the players by most
    recently seen, with the pinned IDs excluded in SQL. Callers advance
    ``offset`` by the number of players they have received.

    Within a remainder page players are sorted by priority, but pages are cut
    before sorting. A high-priority player can therefore appear on a later page
    than a lower-priority one. This avoids scoring every player on each request;
    switching to a precomputed global ranking would change what callers see.
    """

    def __init__(
        self,
        *,
        players: PlayerReader,
        detail_cache: BatchCache[Detail],
        badge_cache: BatchCache[list[Badge]],
        influence: InfluenceResolver,
        scorer: PriorityScorer,
    ) -> None:
        self.players = players
        self.detail_cache = detail_cache
        self.badge_cache = badge_cache
        self.influence = influence
        self.scorer = scorer

    @property
    def pinned_ids(self) -> tuple[str, ...]:
        return self.scorer.config.pinned_segment

    async def get_page(
        self, *, offset: int, limit: int, include_details: bool = True
    ) -> LeaderboardPage:
        if offset < 0:
            msg = f"offset must not be negative, got {offset}"
            raise ValueError(msg)
        if not 1 <= limit <= MAX_PAGE_SIZE:
            msg = f"limit must be between 1 and {MAX_PAGE_SIZE}, got {limit}"
            raise ValueError(msg)

        if offset == 0:
            rows, total_items = await self._pinned_rows(limit)
        else:
            rows, total_items = await self._remainder_rows(offset, limit)

        ranked = await self._rank(rows, include_details=include_details)
        logger.debug(
            f"Leaderboard page offset={offset} limit={limit}: "
            f"{len(ranked)} of {total_items} players"
        )
        return LeaderboardPage(players=ranked, count=total_items, offset=offset, limit=limit)

    def cache_stats(self) -> list[CacheStats]:
        return [self.detail_cache.stats(), self.badge_cache.stats()]

    async def warm_pinned(self, *, chunk_size: int = 20) -> None:
        """Preload details and badges for the pinned segment."""
        ids = list(self.pinned_ids)
        await self.detail_cache.warm(ids, chunk_size=chunk_size)
        await self.badge_cache.warm(ids, chunk_size=chunk_size)

    async def _pinned_rows(self, limit: int) -> tuple[list[Player], int]:
        pinned, total_items = await asyncio.gather(
            self.players.get_players(self.pinned_ids), self.players.count_players()
        )
        if not pinned:
            # Nothing pinned exists, so the first page is the start of the remainder
            rest, total_items = await self.players.list_players(
                offset=0, limit=limit, exclude_ids=self.pinned_ids
            )
            return list(rest), total_items
        return pinned[:limit], total_items

    async def _remainder_rows(self, offset: int, limit: int) -> tuple[list[Player], int]:
        pinned_present = await self.players.count_players(self.pinned_ids)
        adjusted_offset = offset - pinned_present

        rows: list[Player] = []
        if adjusted_offset < 0:
            # Page 0 was cut short by its limit, finish the pinned segment first
            pinned = await self.players.get_players(self.pinned_ids)
            rows = pinned[offset : offset + limit]
            adjusted_offset = 0

        remaining = limit - len(rows)
        if remaining <= 0:
            return rows, await self.players.count_players()

        rest, total_items = await self.players.list_players(
            offset=adjusted_offset, limit=remaining, exclude_ids=self.pinned_ids
        )
        return [*rows, *rest], total_items

    async def _rank(
        self, rows: Sequence[Player], *, include_details: bool
    ) -> list[RankedPlayer]:
        if not rows:
            return []

        ids = [player.id for player in rows]
        details, badges, influence = await asyncio.gather(
            self._details(ids, include_details=include_details),
            self.badge_cache.resolve_batch(ids),
            self.influence.load_all(),
        )

        ranked = [
            self._ranked_player(
                player,
                details.get(player.id, {}),
                badges.get(player.id, []),
                influence.get(player.name),
            )
            for player in rows
        ]
        ranked.sort(key=rank_sort_key)
        return ranked

    async def _details(self, ids: list[str], *, include_details: bool) -> dict[str, Detail]:
        if not include_details:
            return {}
        return await self.detail_cache.resolve_batch(ids)

    def _ranked_player(
        self,
        player: Player,
        detail: Detail,
        badges: list[Badge],
        influence: InfluenceRecord | None,
    ) -> RankedPlayer:
        return RankedPlayer(
            id=player.id,
            name=player.name,
            created_at=player.created_at,
            last_seen=player.last_seen,
            score=self.scorer.score(player.id, badges, influence),
            primary_role=self.scorer.primary_role(badges),
            badges=badges,
            influence=influence,
            stats=detail,
            summary=summarize_stats(detail),
        )


def get_leaderboard_service(request: Request) -> LeaderboardService:
    return request.app.state.leaderboard


LeaderboardServiceDep = Annotated[LeaderboardService, Depends(get_leaderboard_service)]

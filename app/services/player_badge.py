from collections import defaultdict
from collections.abc import Callable, Sequence

from sqlalchemy import ColumnElement
from sqlmodel import col, desc, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.models.player_badge import PlayerBadge
from app.schemas.leaderboard import Badge


class PlayerBadgeSource:
    """Reads awarded badges, verified first and then most recently assigned."""

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory

    async def fetch_many(self, ids: Sequence[str]) -> dict[str, list[Badge]]:
        """Fetch badges for ``ids`` in one query. Every ID gets an entry, possibly empty."""
        badges: dict[str, list[Badge]] = defaultdict(list)
        for row in await self._select(col(PlayerBadge.player_id).in_(ids)):
            badges[row.player_id].append(Badge.model_validate(row, from_attributes=True))
        return {player_id: badges.get(player_id, []) for player_id in ids}

    async def fetch_one(self, player_id: str) -> list[Badge]:
        rows = await self._select(col(PlayerBadge.player_id) == player_id)
        return [Badge.model_validate(row, from_attributes=True) for row in rows]

    async def _select(self, condition: ColumnElement[bool]) -> Sequence[PlayerBadge]:
        async with self._session_factory() as session:
            result = await session.exec(
                select(PlayerBadge)
                .where(condition)
                .order_by(desc(col(PlayerBadge.is_verified)), desc(col(PlayerBadge.assigned_at)))
            )
            return result.all()

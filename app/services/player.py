from collections.abc import Callable, Sequence

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, desc, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.errors import IdentitySourceError
from app.models.player import Player


class PlayerReader:
    """Reads player identity rows. Any database failure here is fatal to the request."""

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_players(
        self, *, offset: int, limit: int, exclude_ids: Sequence[str] = ()
    ) -> tuple[Sequence[Player], int]:
        """List players by most recently seen, skipping ``exclude_ids`` in SQL.

        Returns:
            The requested slice and the total number of players, exclusions included.
        """
        query = select(Player)
        if exclude_ids:
            query = query.where(col(Player.id).not_in(exclude_ids))
        query = (
            query.order_by(desc(col(Player.last_seen)).nulls_last(), col(Player.id))
            .offset(offset)
            .limit(limit)
        )

        try:
            async with self._session_factory() as session:
                players = (await session.exec(query)).all()
                total_items = (await session.exec(select(func.count()).select_from(Player))).one()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list players at offset {offset}: {e}")
            raise IdentitySourceError("list_players") from e

        return players, total_items

    async def get_players(self, ids: Sequence[str]) -> list[Player]:
        """Fetch players by ID, in the order of ``ids``. Unknown IDs are dropped."""
        if not ids:
            return []

        try:
            async with self._session_factory() as session:
                result = await session.exec(select(Player).where(col(Player.id).in_(ids)))
                players = {player.id: player for player in result.all()}
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch {len(ids)} players by ID: {e}")
            raise IdentitySourceError("get_players") from e

        return [players[player_id] for player_id in ids if player_id in players]

    async def count_players(self, ids: Sequence[str] | None = None) -> int:
        """Count all players, or only those among ``ids`` when given."""
        query = select(func.count()).select_from(Player)
        if ids is not None:
            if not ids:
                return 0
            query = query.where(col(Player.id).in_(ids))

        try:
            async with self._session_factory() as session:
                return (await session.exec(query)).one()
        except SQLAlchemyError as e:
            logger.error(f"Failed to count players: {e}")
            raise IdentitySourceError("count_players") from e

from collections.abc import Callable

from loguru import logger
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.models.resident import Resident
from app.schemas.leaderboard import InfluenceRecord


class InfluenceResolver:
    """Loads every resident's influence, keyed by Minecraft username.

    The table is small, so it is read whole on each ranking pass and never cached.
    Influence is a soft signal: a failed read yields an empty map, not an error.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory

    async def load_all(self) -> dict[str, InfluenceRecord]:
        try:
            async with self._session_factory() as session:
                result = await session.exec(select(Resident).order_by(col(Resident.name)))
                residents = result.all()
        except Exception as e:  # noqa: BLE001
            logger.warning(f"Failed to load residents, ranking without influence: {e}")
            return {}

        return {
            resident.name: InfluenceRecord.model_validate(resident, from_attributes=True)
            for resident in residents
        }

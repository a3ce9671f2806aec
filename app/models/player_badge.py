from datetime import datetime

import sqlmodel

from app.utils.misc import get_utc_now

from ._base import BaseModel


class PlayerBadge(BaseModel, table=True):
    __tablename__: str = "player_badges"

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    player_id: str = sqlmodel.Field(foreign_key="players.id", index=True, max_length=36)
    badge_type: str = sqlmodel.Field(max_length=50)
    badge_color: str | None = sqlmodel.Field(default=None, nullable=True)
    icon: str | None = sqlmodel.Field(default=None, nullable=True)
    is_verified: bool = False
    assigned_at: datetime = sqlmodel.Field(
        default_factory=get_utc_now, sa_type=sqlmodel.DateTime(timezone=True)
    )

from datetime import datetime

import sqlmodel

from ._base import BaseModel


class Player(BaseModel, table=True):
    __tablename__: str = "players"

    id: str = sqlmodel.Field(primary_key=True, max_length=36)
    """Minecraft UUID"""
    name: str = sqlmodel.Field(index=True, max_length=32)
    """Current Minecraft username, may change on rename"""
    last_seen: datetime | None = sqlmodel.Field(
        default=None, nullable=True, index=True, sa_type=sqlmodel.DateTime(timezone=True)
    )

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"

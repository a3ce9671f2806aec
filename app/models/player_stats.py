import sqlmodel

from ._base import BaseModel


class PlayerStats(BaseModel, table=True):
    __tablename__: str = "player_stats"

    player_id: str = sqlmodel.Field(foreign_key="players.id", primary_key=True, max_length=36)
    stats: dict = sqlmodel.Field(
        default_factory=dict, sa_column=sqlmodel.Column(sqlmodel.JSON, nullable=False)
    )

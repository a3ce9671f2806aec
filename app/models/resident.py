import sqlmodel

from ._base import BaseModel


class Resident(BaseModel, table=True):
    __tablename__: str = "residents"

    name: str = sqlmodel.Field(primary_key=True, max_length=32)
    """Minecraft username, matched against players.name"""
    activity_score: int = 0
    """Influence: 50 very inactive, 100 inactive, 200 joins sometimes, 400 active"""
    nation_name: str | None = sqlmodel.Field(default=None, nullable=True)
    town_name: str | None = sqlmodel.Field(default=None, nullable=True)
    is_king: bool = False
    is_mayor: bool = False

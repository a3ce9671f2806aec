from datetime import datetime

from pydantic import BaseModel, Field, computed_field


class Badge(BaseModel):
    """An award attached to a player, as read from player_badges."""

    player_id: str
    badge_type: str
    is_verified: bool = False
    assigned_at: datetime
    badge_color: str | None = None
    icon: str | None = None


class InfluenceRecord(BaseModel):
    """Resident standing, keyed by Minecraft username."""

    name: str
    activity_score: int = 0
    nation_name: str | None = None
    town_name: str | None = None
    is_king: bool = False
    is_mayor: bool = False


class PlayerSummary(BaseModel):
    """Headline numbers derived from a player's detailed stats."""

    blocks_placed: int = 0
    blocks_broken: int = 0
    mob_kills: int = 0
    deaths: int = 0
    survival_streak: int = Field(default=0, description="In-game days since the last death")


class RankedPlayer(BaseModel):
    id: str
    name: str
    created_at: datetime
    last_seen: datetime | None = None

    score: int
    primary_role: str
    badges: list[Badge] = Field(default_factory=list)
    influence: InfluenceRecord | None = None
    stats: dict[str, int | float] = Field(default_factory=dict)
    summary: PlayerSummary = Field(default_factory=PlayerSummary)

    @property
    def influence_score(self) -> int:
        return self.influence.activity_score if self.influence else 0


class LeaderboardPage(BaseModel):
    players: list[RankedPlayer]
    count: int
    """Total number of players, not the page size"""
    offset: int
    limit: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.players) < self.count


class CacheStats(BaseModel):
    name: str
    size: int
    hits: int
    misses: int
    inflight_joins: int
    """Lookups that waited on another caller's fetch"""
    batch_fetches: int
    fallback_fetches: int
    failures: int

    @computed_field
    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses + self.inflight_joins
        return self.hits / lookups if lookups else 0.0

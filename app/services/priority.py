from collections.abc import Sequence

from app.core.ranking import RankingConfig
from app.schemas.leaderboard import Badge, InfluenceRecord, RankedPlayer


def primary_badge(badges: Sequence[Badge]) -> Badge | None:
    """The most recent verified badge, else the most recently assigned one."""
    if not badges:
        return None
    return max(badges, key=lambda badge: (badge.is_verified, badge.assigned_at))


def rank_sort_key(player: RankedPlayer) -> tuple[int, str, str]:
    """Highest score first, then case-insensitive name, then ID."""
    return (-player.score, player.name.casefold(), player.id)


class PriorityScorer:
    def __init__(self, config: RankingConfig) -> None:
        self.config = config

    def primary_role(self, badges: Sequence[Badge]) -> str:
        badge = primary_badge(badges)
        return badge.badge_type if badge else self.config.default_role

    def score(
        self, player_id: str, badges: Sequence[Badge], influence: InfluenceRecord | None
    ) -> int:
        """Compute a player's priority.

        The always-first player and pinned players get fixed scores above anything
        reachable otherwise, so pinned players keep their curated order. Everyone
        else is scored on influence (only at or above the threshold), their best
        badge and their primary role.
        """
        config = self.config

        if player_id == config.always_first:
            return config.always_first_score

        pinned_rank = config.pinned_index.get(player_id)
        if pinned_rank is not None:
            return config.base_pinned_score - pinned_rank

        priority = 0

        influence_score = influence.activity_score if influence else 0
        if influence_score >= config.influence_threshold:
            priority += min(influence_score, config.max_influence)

        if badges:
            highest = max(config.badge_weight(badge.badge_type) for badge in badges)
            priority += highest * config.badge_multiplier

        priority += config.role_weight(self.primary_role(badges)) * config.role_multiplier

        return priority

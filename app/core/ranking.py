from functools import cached_property
from pathlib import Path
from typing import Self

from loguru import logger
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from app.core.enums import BadgeKind
from app.core.errors import RankingConfigError


class RankingConfig(BaseModel):
    """Pinned list and weight tables used by the priority scorer."""

    always_first: str | None = None
    """Player ID that is always ranked at index 0"""
    pinned: list[str] = Field(default_factory=list)
    """Curated player IDs, best first"""

    badge_weights: dict[str, int] = Field(default_factory=dict)
    role_weights: dict[str, int] = Field(default_factory=dict)
    default_role: str = BadgeKind.MEMBER

    always_first_score: int = 2_000_000
    base_pinned_score: int = 1_000_000
    influence_threshold: int = 200
    max_influence: int = 100_000
    badge_multiplier: int = 1000
    role_multiplier: int = 500

    model_config = ConfigDict(frozen=True)

    @field_validator("badge_weights")
    @classmethod
    def known_badge_kinds(cls, value: dict[str, int]) -> dict[str, int]:
        unknown = sorted(set(value) - {kind.value for kind in BadgeKind})
        if unknown:
            msg = f"unknown badge kinds: {', '.join(unknown)}"
            raise ValueError(msg)
        return value

    @field_validator("role_weights")
    @classmethod
    def lowercase_roles(cls, value: dict[str, int]) -> dict[str, int]:
        roles = {role.lower(): weight for role, weight in value.items()}
        unknown = sorted(set(roles) - {kind.value.lower() for kind in BadgeKind})
        if unknown:
            msg = f"unknown roles: {', '.join(unknown)}"
            raise ValueError(msg)
        return roles

    @field_validator("pinned")
    @classmethod
    def reject_duplicates(cls, value: list[str]) -> list[str]:
        if len(set(value)) != len(value):
            msg = "pinned list contains duplicate player IDs"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def check_score_bands(self) -> Self:
        lowest_pinned = self.base_pinned_score - max(len(self.pinned) - 1, 0)
        if lowest_pinned <= self.max_unpinned_score:
            msg = (
                f"base_pinned_score {self.base_pinned_score} leaves pinned players at "
                f"{lowest_pinned}, not above the unpinned maximum {self.max_unpinned_score}"
            )
            raise ValueError(msg)
        if self.always_first_score <= self.base_pinned_score:
            msg = "always_first_score must exceed base_pinned_score"
            raise ValueError(msg)
        return self

    @property
    def max_unpinned_score(self) -> int:
        return (
            self.max_influence
            + max(self.badge_weights.values(), default=0) * self.badge_multiplier
            + max(self.role_weights.values(), default=0) * self.role_multiplier
        )

    @cached_property
    def pinned_segment(self) -> tuple[str, ...]:
        """Always-first player followed by the pinned list, without repeats."""
        ids = [self.always_first, *self.pinned] if self.always_first else self.pinned
        return tuple(dict.fromkeys(ids))

    @cached_property
    def pinned_index(self) -> dict[str, int]:
        return {player_id: idx for idx, player_id in enumerate(self.pinned)}

    def badge_weight(self, badge_type: str) -> int:
        return self.badge_weights.get(badge_type, 0)

    def role_weight(self, role: str) -> int:
        return self.role_weights.get(role.lower(), 0)


def load_ranking_config(path: Path) -> RankingConfig:
    try:
        config = RankingConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except OSError as e:
        msg = f"Cannot read ranking config {path}: {e}"
        raise RankingConfigError(msg) from e
    except ValidationError as e:
        msg = f"Invalid ranking config {path}: {e}"
        raise RankingConfigError(msg) from e

    logger.info(
        f"Loaded ranking config from {path} ({len(config.pinned)} pinned, "
        f"{len(config.badge_weights)} badge kinds)"
    )
    return config

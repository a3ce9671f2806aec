class LeaderboardError(Exception):
    """Base class for errors raised by the ranking engine."""


class IdentitySourceError(LeaderboardError):
    """The players table could not be read, so there is nothing to rank."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"Identity source unavailable during {operation}")
        self.operation = operation


class RankingConfigError(LeaderboardError):
    """The ranking configuration file is missing or inconsistent."""

"""ORM models."""

from models.base import Base
from models.match import MatchPlayerStats, MatchReport
from models.player_stats import PlayerGameStat, PlayerGameStatValue

__all__ = [
    "Base",
    "MatchPlayerStats",
    "MatchReport",
    "PlayerGameStat",
    "PlayerGameStatValue",
]

"""Shared protocols for ranking strategies and consumed directories."""

from __future__ import annotations

from typing import Protocol, runtime_checkable
from uuid import UUID

from domain.common import GameConfig, PlayerGameStats, TeamRoster, TournamentInfo


@runtime_checkable
class RankingStrategy(Protocol):
    """Scoring algorithm turning one aggregate into a scalar ranking score."""

    def calculate(self, stats: PlayerGameStats, game: GameConfig) -> float: ...

    def supports_game(self, game_key: str) -> bool: ...


class GameDirectory(Protocol):
    def get_game(self, game_id: UUID) -> GameConfig:
        """Return the game config or raise ``GameNotFoundError``."""
        ...


class TeamDirectory(Protocol):
    def get_roster(self, team_id: UUID) -> TeamRoster:
        """Return captain and members or raise ``TeamNotFoundError``."""
        ...


class TournamentDirectory(Protocol):
    def get_tournament(self, tournament_id: UUID) -> TournamentInfo:
        """Return lifecycle state or raise ``TournamentNotFoundError``."""
        ...


__all__ = [
    "GameDirectory",
    "RankingStrategy",
    "TeamDirectory",
    "TournamentDirectory",
]

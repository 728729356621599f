"""Leaderboard queries."""

from domain.leaderboard.service import LeaderboardService

__all__ = ["LeaderboardService"]

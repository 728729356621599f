"""Read-only leaderboard projections over the Stat Store."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session, sessionmaker

from db import session_scope
from domain.common import (
    LeaderboardEntry,
    LeaderboardPage,
    PlayerGameStats,
    PlayerRank,
    Tier,
    TierDistribution,
)
from domain.protocol import GameDirectory
from domain.ranking.tiers import calculate_percentile
from repositories.stats_repository import STATS_REPOSITORY, StatsRepository


class LeaderboardService:
    """Ranked, paginated and tier-filtered views of one game's population.

    Ordering is ``ranking_score`` descending with ties broken by ``player_id``
    ascending. Limit/offset are used as given; clamping is the caller's job.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        games: GameDirectory,
        repository: StatsRepository = STATS_REPOSITORY,
    ) -> None:
        self.session_factory = session_factory
        self.games = games
        self.repository = repository

    def get_leaderboard(self, game_id: UUID, limit: int, offset: int = 0) -> LeaderboardPage:
        game = self.games.get_game(game_id)
        with session_scope(self.session_factory) as session:
            entries = self.repository.leaderboard(session, game_id, limit=limit, offset=offset)
            total = self.repository.count_by_game(session, game_id)
        return LeaderboardPage(
            game_id=game_id,
            game_name=game.name,
            entries=tuple(entries),
            total=total,
            limit=limit,
            offset=offset,
        )

    def get_leaderboard_by_tier(self, game_id: UUID, tier: Tier | str, limit: int) -> list[LeaderboardEntry]:
        """Top players of exactly one tier, ranked 1.. within the tier."""
        tier = Tier(tier)
        with session_scope(self.session_factory) as session:
            return self.repository.leaderboard(session, game_id, limit=limit, tier=tier)

    def get_player_rank(self, player_id: UUID, game_id: UUID) -> PlayerRank:
        """Competition rank: players with equal scores share a rank."""
        with session_scope(self.session_factory) as session:
            stats = self.repository.get_by_player_and_game(session, player_id, game_id)
            rank = self.repository.count_above(session, game_id, stats.ranking_score) + 1
            total = self.repository.count_by_game(session, game_id)
        return PlayerRank(
            player_id=player_id,
            game_id=game_id,
            rank=rank,
            ranking_score=stats.ranking_score,
            tier=stats.tier,
            percentile=calculate_percentile(rank, total),
        )

    def get_tier_distribution(self, game_id: UUID) -> TierDistribution:
        with session_scope(self.session_factory) as session:
            counts = self.repository.tier_counts(session, game_id)
        return TierDistribution(game_id=game_id, counts=counts, total=sum(counts.values()))

    def get_player_stats(self, player_id: UUID) -> list[PlayerGameStats]:
        """Every game aggregate a player has."""
        with session_scope(self.session_factory) as session:
            return self.repository.list_by_player(session, player_id)


__all__ = ["LeaderboardService"]

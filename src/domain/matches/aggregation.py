"""Fold verified matches into per-player aggregates and re-derive rankings."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from db import session_scope
from domain.common import GameConfig, Match, PlayerGameStats, PlayerMatchEntry, StatValue, Tier
from domain.errors import TourneyRankError
from domain.ranking.registry import StrategyRegistry
from domain.ranking.tiers import calculate_percentile, classify_tier
from repositories.stats_repository import STATS_REPOSITORY, StatsRepository

logger = logging.getLogger(__name__)

ACCUMULATED_COUNTERS = {
    "kills": "total_kills",
    "damage": "total_damage",
    "assists": "total_assists",
    "deaths": "total_deaths",
    "downs": "total_downs",
}
RESERVED_STAT_KEYS = frozenset(ACCUMULATED_COUNTERS.values())


@dataclass(frozen=True)
class AggregationFailure:
    """One player's aggregate could not be updated during verification."""

    player_id: UUID
    error: str
    retryable: bool


@dataclass(frozen=True)
class RescoreSummary:
    game_id: UUID
    rescored: int
    tier_counts: dict[Tier, int]


def stats_to_add(entry: PlayerMatchEntry) -> dict[str, StatValue]:
    """Counters to fold into the aggregate for one player's match entry."""
    additions: dict[str, StatValue] = {
        ACCUMULATED_COUNTERS[name]: value for name, value in entry.counters().items()
    }
    for key, value in entry.custom_stats.items():
        if key in RESERVED_STAT_KEYS or isinstance(value, bool):
            continue
        additions[key] = value
    return additions


class StatsAggregator:
    """Applies verified matches to the Stat Store, one transaction per player."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        registry: StrategyRegistry,
        repository: StatsRepository = STATS_REPOSITORY,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.registry = registry
        self.repository = repository
        self.clock = clock or _utcnow

    def apply_match(
        self,
        match: Match,
        game: GameConfig,
    ) -> tuple[list[PlayerGameStats], list[AggregationFailure]]:
        """Best-effort update of every player's aggregate.

        Players are updated independently; a failure for one player is recorded
        and the remaining players are still processed. Nothing is rolled back
        for players that already succeeded.
        """
        played_at = match.verified_at or self.clock()
        applied: list[PlayerGameStats] = []
        failures: list[AggregationFailure] = []
        for entry in match.entries:
            try:
                applied.append(self.apply_entry(entry, game=game, played_at=played_at))
            except (TourneyRankError, SQLAlchemyError, TypeError, ValueError) as exc:
                logger.exception(
                    "aggregate update failed match=%s player=%s game=%s",
                    match.match_id,
                    entry.player_id,
                    game.slug,
                )
                failures.append(
                    AggregationFailure(
                        player_id=entry.player_id,
                        error=str(exc),
                        retryable=bool(getattr(exc, "retryable", False)),
                    )
                )
        return applied, failures

    def apply_entry(self, entry: PlayerMatchEntry, *, game: GameConfig, played_at: datetime) -> PlayerGameStats:
        with session_scope(self.session_factory) as session:
            stats = self.repository.get_or_create(session, entry.player_id, game.game_id)
            self.repository.increment_stats(session, stats.stats_id, stats_to_add(entry), played_at=played_at)
            return self.rescore(session, stats.stats_id, game)

    def rescore(self, session: Session, stats_id: int, game: GameConfig) -> PlayerGameStats:
        """Recompute score from the stored raw stats, then the tier from the new rank."""
        stats = self.repository.get_by_id(session, stats_id)
        score = self.registry.calculate(stats, game)
        rank = self.repository.count_above(session, game.game_id, score, exclude_stats_id=stats_id) + 1
        total = self.repository.count_by_game(session, game.game_id)
        tier = classify_tier(calculate_percentile(rank, total))
        self.repository.update_ranking(session, stats_id, score=score, tier=tier)
        logger.info(
            "rescored player=%s game=%s matches=%d score=%.4f rank=%d/%d tier=%s",
            stats.player_id,
            game.slug,
            stats.matches_played,
            score,
            rank,
            total,
            tier.value,
        )
        return self.repository.get_by_id(session, stats_id)

    def rescore_game(self, game: GameConfig) -> RescoreSummary:
        """Re-derive score and tier for every aggregate of a game from stored raw stats."""
        with session_scope(self.session_factory) as session:
            aggregates = self.repository.list_by_game(session, game.game_id)
            scores = {stats.stats_id: self.registry.calculate(stats, game) for stats in aggregates}
            ordered = sorted(scores.values(), reverse=True)
            total = len(ordered)
            tier_counts = {tier: 0 for tier in Tier}
            for stats_id, score in scores.items():
                rank = _count_strictly_greater(ordered, score) + 1
                tier = classify_tier(calculate_percentile(rank, total))
                tier_counts[tier] += 1
                self.repository.update_ranking(session, stats_id, score=score, tier=tier)
        logger.info("rescored game=%s aggregates=%d", game.slug, total)
        return RescoreSummary(game_id=game.game_id, rescored=total, tier_counts=tier_counts)


def _count_strictly_greater(descending: list[float], score: float) -> int:
    count = 0
    for value in descending:
        if value <= score:
            break
        count += 1
    return count


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


__all__ = [
    "AggregationFailure",
    "RescoreSummary",
    "StatsAggregator",
    "stats_to_add",
]

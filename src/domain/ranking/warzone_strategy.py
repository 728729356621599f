"""Warzone ranking: blend of K/D, average kills, average damage and consistency."""

from __future__ import annotations

from dataclasses import dataclass

from domain.common import GameConfig, PlayerGameStats
from domain.ranking.default_strategy import DAMAGE_KEY, KILLS_KEY, kd_ratio, per_match


@dataclass(frozen=True)
class WarzoneParameters:
    kd_weight: float = 0.40
    avg_kills_weight: float = 0.30
    avg_damage_weight: float = 0.20
    consistency_weight: float = 0.10
    # Per-match history is not kept, so consistency is a fixed baseline.
    consistency_baseline: float = 70.0
    score_scale: float = 10.0


class WarzoneRankingStrategy:
    """Score in the 0-1000 range; each component is normalized to 0-100 first."""

    slug = "warzone"

    def __init__(self, params: WarzoneParameters | None = None) -> None:
        self.params = params or WarzoneParameters()

    def calculate(self, stats: PlayerGameStats, game: GameConfig) -> float:
        if stats.matches_played == 0:
            return 0.0

        # 5.0 K/D, 20 kills and 3000 damage per match each cap at 100 points.
        kd_score = min(kd_ratio(stats) * 20.0, 100.0)
        avg_kills_score = min(per_match(stats, KILLS_KEY) * 5.0, 100.0)
        avg_damage_score = min(per_match(stats, DAMAGE_KEY) / 30.0, 100.0)
        consistency_score = self.params.consistency_baseline

        weights = game.ranking_weights
        score = (
            kd_score * weights.get("kd_ratio", self.params.kd_weight)
            + avg_kills_score * weights.get("avg_kills", self.params.avg_kills_weight)
            + avg_damage_score * weights.get("avg_damage", self.params.avg_damage_weight)
            + consistency_score * weights.get("consistency", self.params.consistency_weight)
        )
        return score * self.params.score_scale

    def supports_game(self, game_key: str) -> bool:
        return game_key == self.slug


__all__ = ["WarzoneParameters", "WarzoneRankingStrategy"]

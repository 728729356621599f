"""Generic weighted-sum ranking used for games without a dedicated strategy."""

from __future__ import annotations

from collections.abc import Callable

from domain.common import GameConfig, PlayerGameStats, stat_as_float

KILLS_KEY = "total_kills"
DEATHS_KEY = "total_deaths"
DAMAGE_KEY = "total_damage"
ASSISTS_KEY = "total_assists"


def kd_ratio(stats: PlayerGameStats) -> float:
    """Kills per death; with zero deaths the ratio is the kill count itself."""
    kills = stat_as_float(stats.stats, KILLS_KEY)
    deaths = stat_as_float(stats.stats, DEATHS_KEY)
    if deaths == 0:
        return kills
    return kills / deaths


def per_match(stats: PlayerGameStats, key: str) -> float:
    if stats.matches_played <= 0:
        return 0.0
    return stat_as_float(stats.stats, key) / stats.matches_played


DERIVED_METRICS: dict[str, Callable[[PlayerGameStats], float]] = {
    "kd_ratio": kd_ratio,
    "avg_kills": lambda stats: per_match(stats, KILLS_KEY),
    "avg_damage": lambda stats: per_match(stats, DAMAGE_KEY),
    "avg_assists": lambda stats: per_match(stats, ASSISTS_KEY),
    "matches_played": lambda stats: float(stats.matches_played),
}


def metric_value(stats: PlayerGameStats, key: str) -> float:
    """Resolve a weight key to a derived metric or a raw accumulated stat."""
    derived = DERIVED_METRICS.get(key)
    if derived is not None:
        return derived(stats)
    return stat_as_float(stats.stats, key)


class DefaultRankingStrategy:
    """Weighted sum over the game's configured ranking weights.

    Games that configure no weights fall back to ``kd_ratio * 100 + matches_played``.
    """

    def calculate(self, stats: PlayerGameStats, game: GameConfig) -> float:
        if stats.matches_played == 0:
            return 0.0
        if not game.ranking_weights:
            return kd_ratio(stats) * 100.0 + float(stats.matches_played)
        return sum(
            weight * metric_value(stats, key)
            for key, weight in sorted(game.ranking_weights.items())
        )

    def supports_game(self, game_key: str) -> bool:
        return True


__all__ = ["DefaultRankingStrategy", "kd_ratio", "metric_value", "per_match"]

"""Ranking strategies, registry and tier classification."""

from domain.ranking.default_strategy import DefaultRankingStrategy
from domain.ranking.registry import StrategyRegistry, build_default_registry
from domain.ranking.tiers import calculate_percentile, classify_tier
from domain.ranking.warzone_strategy import WarzoneParameters, WarzoneRankingStrategy

__all__ = [
    "DefaultRankingStrategy",
    "StrategyRegistry",
    "WarzoneParameters",
    "WarzoneRankingStrategy",
    "build_default_registry",
    "calculate_percentile",
    "classify_tier",
]

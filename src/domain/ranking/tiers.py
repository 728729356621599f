"""Percentile and tier classification."""

from __future__ import annotations

from domain.common import Tier

ELITE_PERCENTILE = 95.0
ADVANCED_PERCENTILE = 80.0
INTERMEDIATE_PERCENTILE = 50.0


def classify_tier(percentile: float) -> Tier:
    """Map a 0-100 percentile (higher is better) to a tier."""
    if percentile >= ELITE_PERCENTILE:
        return Tier.ELITE
    if percentile >= ADVANCED_PERCENTILE:
        return Tier.ADVANCED
    if percentile >= INTERMEDIATE_PERCENTILE:
        return Tier.INTERMEDIATE
    return Tier.BEGINNER


def calculate_percentile(rank: int, total: int) -> float:
    """Position of ``rank`` within ``total`` players, clamped to [0, 100]."""
    if total <= 0:
        return 0.0
    percentile = (total - rank + 1) / total * 100.0
    return min(max(percentile, 0.0), 100.0)


__all__ = ["calculate_percentile", "classify_tier"]

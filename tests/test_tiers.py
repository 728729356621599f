"""Unit tests for percentile and tier classification."""

from __future__ import annotations

import pytest

from domain.common import Tier
from domain.ranking.tiers import calculate_percentile, classify_tier


@pytest.mark.parametrize(
    ("percentile", "expected"),
    [
        (100.0, Tier.ELITE),
        (95.0, Tier.ELITE),
        (94.999, Tier.ADVANCED),
        (80.0, Tier.ADVANCED),
        (79.999, Tier.INTERMEDIATE),
        (50.0, Tier.INTERMEDIATE),
        (49.999, Tier.BEGINNER),
        (0.0, Tier.BEGINNER),
    ],
)
def test_classify_tier_boundaries_are_inclusive(percentile: float, expected: Tier) -> None:
    assert classify_tier(percentile) is expected


def test_single_player_is_top_percentile() -> None:
    assert calculate_percentile(1, 1) == pytest.approx(100.0)


def test_last_of_ten_is_tenth_percentile() -> None:
    assert calculate_percentile(10, 10) == pytest.approx(10.0)


def test_percentile_is_zero_for_empty_population() -> None:
    assert calculate_percentile(1, 0) == pytest.approx(0.0)
    assert calculate_percentile(1, -3) == pytest.approx(0.0)


def test_percentile_is_clamped_to_range() -> None:
    assert calculate_percentile(0, 10) == pytest.approx(100.0)
    assert calculate_percentile(50, 10) == pytest.approx(0.0)


def test_percentile_drops_as_rank_grows() -> None:
    values = [calculate_percentile(rank, 20) for rank in range(1, 21)]
    assert values == sorted(values, reverse=True)
    assert classify_tier(values[0]) is Tier.ELITE
    assert classify_tier(values[-1]) is Tier.BEGINNER

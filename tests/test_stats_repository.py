"""Tests for the Stat Store primitives."""

from __future__ import annotations

import uuid
from datetime import datetime

import pytest

from conftest import GENERIC_GAME
from db import session_scope
from domain.common import Tier
from domain.errors import StatsNotFoundError
from repositories import STATS_REPOSITORY

PLAYED_AT = datetime(2026, 2, 1, 18, 30, 0)


def test_get_or_create_is_idempotent(session_factory) -> None:
    player_id = uuid.uuid4()
    with session_scope(session_factory) as session:
        first = STATS_REPOSITORY.get_or_create(session, player_id, GENERIC_GAME.game_id)
    with session_scope(session_factory) as session:
        second = STATS_REPOSITORY.get_or_create(session, player_id, GENERIC_GAME.game_id)
        assert STATS_REPOSITORY.count_by_game(session, GENERIC_GAME.game_id) == 1

    assert first.stats_id == second.stats_id
    assert second.matches_played == 0
    assert second.ranking_score == pytest.approx(0.0)
    assert second.tier is Tier.BEGINNER
    assert second.stats == {}
    assert second.last_match_at is None


def test_increment_adds_numbers_and_replaces_text(session_factory) -> None:
    player_id = uuid.uuid4()
    with session_scope(session_factory) as session:
        stats = STATS_REPOSITORY.get_or_create(session, player_id, GENERIC_GAME.game_id)
        STATS_REPOSITORY.increment_stats(
            session, stats.stats_id, {"total_kills": 4, "accuracy": 0.25, "legend": "wraith"}, played_at=PLAYED_AT
        )
    with session_scope(session_factory) as session:
        STATS_REPOSITORY.increment_stats(
            session, stats.stats_id, {"total_kills": 6, "accuracy": 0.5, "legend": "horizon"}, played_at=PLAYED_AT
        )
        updated = STATS_REPOSITORY.get_by_player_and_game(session, player_id, GENERIC_GAME.game_id)

    assert updated.matches_played == 2
    assert updated.stats["total_kills"] == pytest.approx(10.0)
    assert updated.stats["accuracy"] == pytest.approx(0.75)
    assert updated.stats["legend"] == "horizon"
    assert updated.last_match_at == PLAYED_AT


def test_increment_rejects_booleans(session_factory) -> None:
    with session_scope(session_factory) as session:
        stats = STATS_REPOSITORY.get_or_create(session, uuid.uuid4(), GENERIC_GAME.game_id)
    with pytest.raises(TypeError, match="bool"):
        with session_scope(session_factory) as session:
            STATS_REPOSITORY.increment_stats(session, stats.stats_id, {"mvp": True}, played_at=PLAYED_AT)
    with session_scope(session_factory) as session:
        assert STATS_REPOSITORY.get_by_id(session, stats.stats_id).matches_played == 0


def test_update_ranking_replaces_score_and_tier(session_factory) -> None:
    with session_scope(session_factory) as session:
        stats = STATS_REPOSITORY.get_or_create(session, uuid.uuid4(), GENERIC_GAME.game_id)
        STATS_REPOSITORY.update_ranking(session, stats.stats_id, score=812.5, tier=Tier.ADVANCED)
        updated = STATS_REPOSITORY.get_by_id(session, stats.stats_id)
    assert updated.ranking_score == pytest.approx(812.5)
    assert updated.tier is Tier.ADVANCED


def test_missing_aggregate_raises(session_factory) -> None:
    with session_scope(session_factory) as session:
        with pytest.raises(StatsNotFoundError):
            STATS_REPOSITORY.get_by_player_and_game(session, uuid.uuid4(), GENERIC_GAME.game_id)
        with pytest.raises(StatsNotFoundError):
            STATS_REPOSITORY.update_ranking(session, 987654, score=1.0, tier=Tier.ELITE)
        with pytest.raises(StatsNotFoundError):
            STATS_REPOSITORY.increment_stats(session, 987654, {"total_kills": 1}, played_at=PLAYED_AT)


def test_count_above_can_exclude_one_aggregate(session_factory) -> None:
    with session_scope(session_factory) as session:
        ids = []
        for score in (10.0, 20.0, 30.0):
            stats = STATS_REPOSITORY.get_or_create(session, uuid.uuid4(), GENERIC_GAME.game_id)
            STATS_REPOSITORY.update_ranking(session, stats.stats_id, score=score, tier=Tier.BEGINNER)
            ids.append(stats.stats_id)

        assert STATS_REPOSITORY.count_above(session, GENERIC_GAME.game_id, 15.0) == 2
        assert STATS_REPOSITORY.count_above(session, GENERIC_GAME.game_id, 15.0, exclude_stats_id=ids[2]) == 1
        assert STATS_REPOSITORY.count_above(session, GENERIC_GAME.game_id, 30.0) == 0

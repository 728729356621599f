"""Tests for unit-of-work error mapping."""

from __future__ import annotations

import uuid
from pathlib import Path

import pytest
from sqlalchemy import text

from conftest import GENERIC_GAME
from db import create_db_engine, create_session_factory, session_scope
from domain.errors import StoreUnavailableError
from repositories import STATS_REPOSITORY, SqlTeamDirectory, SqlTournamentDirectory


def test_unreachable_store_is_retryable(tmp_path: Path) -> None:
    engine = create_db_engine(f"sqlite+pysqlite:///{tmp_path / 'missing' / 'dir' / 'store.db'}")
    session_factory = create_session_factory(engine)

    with pytest.raises(StoreUnavailableError) as exc_info:
        with session_scope(session_factory) as session:
            session.execute(text("SELECT 1"))
    assert exc_info.value.retryable is True
    engine.dispose()


def test_failed_unit_of_work_is_rolled_back(session_factory) -> None:
    player_id = uuid.uuid4()
    with pytest.raises(RuntimeError, match="abort"):
        with session_scope(session_factory) as session:
            STATS_REPOSITORY.get_or_create(session, player_id, GENERIC_GAME.game_id)
            raise RuntimeError("abort")

    with session_scope(session_factory) as session:
        assert STATS_REPOSITORY.count_by_game(session, GENERIC_GAME.game_id) == 0


def test_directory_lookups_map_unreachable_store(tmp_path: Path) -> None:
    engine = create_db_engine(f"sqlite+pysqlite:///{tmp_path / 'missing' / 'dir' / 'store.db'}")
    session_factory = create_session_factory(engine)

    with pytest.raises(StoreUnavailableError):
        SqlTournamentDirectory(session_factory).get_tournament(uuid.uuid4())
    with pytest.raises(StoreUnavailableError):
        SqlTeamDirectory(session_factory).get_roster(uuid.uuid4())
    engine.dispose()

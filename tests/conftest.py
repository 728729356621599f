"""Shared fixtures: a throwaway SQLite store, directories and a small game catalog."""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from uuid import UUID

import pytest
from sqlalchemy import insert
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db import create_db_engine, create_session_factory
from domain.common import GameConfig, PlayerMatchEntry, StatField, TournamentStatus
from domain.games import GameCatalog
from domain.leaderboard import LeaderboardService
from domain.matches import MatchLifecycleService, SubmitMatchRequest
from domain.ranking import build_default_registry
from repositories import DIRECTORY_METADATA, SqlTeamDirectory, SqlTournamentDirectory, ensure_schema
from repositories.directory import players_table, team_members_table, teams_table, tournaments_table

GENERIC_GAME = GameConfig(
    game_id=UUID("00000000-0000-4000-8000-000000000001"),
    slug="generic",
    name="Generic Shooter",
    ranking_weights={"kd_ratio": 0.5, "total_kills": 0.5},
)
WARZONE_GAME = GameConfig(
    game_id=UUID("00000000-0000-4000-8000-000000000002"),
    slug="warzone",
    name="Warzone",
    ranking_weights={"kd_ratio": 0.4, "avg_kills": 0.3, "avg_damage": 0.2, "consistency": 0.1},
)
SCHEMA_GAME = GameConfig(
    game_id=UUID("00000000-0000-4000-8000-000000000003"),
    slug="schema",
    name="Schema Shooter",
    stat_schema={
        "kills": StatField(type="integer", min=0, max=60),
        "accuracy": StatField(type="float", min=0, max=1),
        "legend": StatField(type="string"),
    },
    ranking_weights={"kd_ratio": 1.0},
)
ARCHIVED_GAME = GameConfig(
    game_id=UUID("00000000-0000-4000-8000-000000000004"),
    slug="archived",
    name="Archived Shooter",
    active=False,
)


class SteppingClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2026, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@dataclass
class Team:
    tournament_id: UUID
    team_id: UUID
    captain_id: UUID
    member_ids: list[UUID]


@pytest.fixture
def engine(tmp_path: Path) -> Iterator[Engine]:
    engine = create_db_engine(f"sqlite+pysqlite:///{tmp_path / 'test.db'}")
    ensure_schema(engine)
    DIRECTORY_METADATA.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture
def catalog() -> GameCatalog:
    return GameCatalog([GENERIC_GAME, WARZONE_GAME, SCHEMA_GAME, ARCHIVED_GAME])


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def lifecycle(
    session_factory: sessionmaker[Session],
    catalog: GameCatalog,
    clock: SteppingClock,
) -> MatchLifecycleService:
    return MatchLifecycleService(
        session_factory,
        games=catalog,
        teams=SqlTeamDirectory(session_factory),
        tournaments=SqlTournamentDirectory(session_factory),
        registry=build_default_registry(),
        clock=clock,
    )


@pytest.fixture
def leaderboard(session_factory: sessionmaker[Session], catalog: GameCatalog) -> LeaderboardService:
    return LeaderboardService(session_factory, games=catalog)


@pytest.fixture
def make_team(session_factory: sessionmaker[Session]):
    """Insert a tournament with one team of ``size`` players; the first member captains."""

    def _make_team(
        *,
        size: int = 4,
        status: TournamentStatus = TournamentStatus.ACTIVE,
        game: GameConfig = GENERIC_GAME,
        names: list[str] | None = None,
    ) -> Team:
        tournament_id = uuid.uuid4()
        team_id = uuid.uuid4()
        member_ids = [uuid.uuid4() for _ in range(size)]
        with session_factory() as session:
            session.execute(
                insert(tournaments_table).values(id=tournament_id, game_id=game.game_id, status=status.value)
            )
            session.execute(
                insert(teams_table).values(id=team_id, tournament_id=tournament_id, captain_id=member_ids[0])
            )
            for index, player_id in enumerate(member_ids):
                session.execute(insert(team_members_table).values(team_id=team_id, player_id=player_id))
                display_name = names[index] if names else f"player-{index + 1}"
                session.execute(insert(players_table).values(id=player_id, display_name=display_name))
            session.commit()
        return Team(
            tournament_id=tournament_id,
            team_id=team_id,
            captain_id=member_ids[0],
            member_ids=member_ids,
        )

    return _make_team


def build_request(
    team: Team,
    *,
    game: GameConfig = GENERIC_GAME,
    placement: int = 1,
    team_kills: int = 10,
    entries: list[PlayerMatchEntry] | None = None,
    kills: int = 2,
    deaths: int = 1,
    damage: int = 500,
) -> SubmitMatchRequest:
    if entries is None:
        entries = [
            PlayerMatchEntry(player_id=player_id, kills=kills, deaths=deaths, damage=damage)
            for player_id in team.member_ids
        ]
    return SubmitMatchRequest(
        tournament_id=team.tournament_id,
        team_id=team.team_id,
        game_id=game.game_id,
        team_placement=placement,
        team_kills=team_kills,
        entries=tuple(entries),
        evidence_ref="https://example.invalid/screenshot.png",
    )

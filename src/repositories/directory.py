"""Read-only lookups over externally owned tournament, team and player tables."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Column, ForeignKey, MetaData, String, Table, Uuid, select
from sqlalchemy.orm import Session, sessionmaker

from db import session_scope
from domain.common import TeamRoster, TournamentInfo, TournamentStatus
from domain.errors import TeamNotFoundError, TournamentNotFoundError

# Tournament/team CRUD owns these tables; only the columns read here are declared.
DIRECTORY_METADATA = MetaData()

tournaments_table = Table(
    "tournaments",
    DIRECTORY_METADATA,
    Column("id", Uuid, primary_key=True),
    Column("game_id", Uuid),
    Column("status", String(32), nullable=False),
)

teams_table = Table(
    "teams",
    DIRECTORY_METADATA,
    Column("id", Uuid, primary_key=True),
    Column("tournament_id", Uuid, ForeignKey("tournaments.id")),
    Column("captain_id", Uuid, nullable=False),
)

team_members_table = Table(
    "team_members",
    DIRECTORY_METADATA,
    Column("team_id", Uuid, ForeignKey("teams.id"), primary_key=True),
    Column("player_id", Uuid, primary_key=True),
)

players_table = Table(
    "players",
    DIRECTORY_METADATA,
    Column("id", Uuid, primary_key=True),
    Column("display_name", String(128)),
)


class SqlTournamentDirectory:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def get_tournament(self, tournament_id: UUID) -> TournamentInfo:
        with session_scope(self.session_factory) as session:
            row = session.execute(
                select(tournaments_table.c.id, tournaments_table.c.game_id, tournaments_table.c.status).where(
                    tournaments_table.c.id == tournament_id
                )
            ).one_or_none()
        if row is None:
            raise TournamentNotFoundError(tournament_id)
        return TournamentInfo(
            tournament_id=row.id,
            status=TournamentStatus(row.status),
            game_id=row.game_id,
        )


class SqlTeamDirectory:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def get_roster(self, team_id: UUID) -> TeamRoster:
        with session_scope(self.session_factory) as session:
            team = session.execute(
                select(teams_table.c.id, teams_table.c.tournament_id, teams_table.c.captain_id).where(
                    teams_table.c.id == team_id
                )
            ).one_or_none()
            if team is None:
                raise TeamNotFoundError(team_id)
            member_ids = session.scalars(
                select(team_members_table.c.player_id)
                .where(team_members_table.c.team_id == team_id)
                .order_by(team_members_table.c.player_id)
            ).all()
        return TeamRoster(
            team_id=team.id,
            captain_id=team.captain_id,
            member_ids=tuple(member_ids),
            tournament_id=team.tournament_id,
        )


__all__ = [
    "DIRECTORY_METADATA",
    "SqlTeamDirectory",
    "SqlTournamentDirectory",
    "players_table",
    "team_members_table",
    "teams_table",
    "tournaments_table",
]

"""Database repository helpers."""

from sqlalchemy.engine import Engine

from models import Base
from repositories.directory import DIRECTORY_METADATA, SqlTeamDirectory, SqlTournamentDirectory
from repositories.match_repository import MATCH_REPOSITORY, MatchRepository
from repositories.stats_repository import STATS_REPOSITORY, StatsRepository


def ensure_schema(engine: Engine) -> None:
    """Create the match and stat tables and indexes when missing."""
    with engine.begin() as connection:
        Base.metadata.create_all(bind=connection, checkfirst=True)


__all__ = [
    "DIRECTORY_METADATA",
    "MATCH_REPOSITORY",
    "MatchRepository",
    "STATS_REPOSITORY",
    "SqlTeamDirectory",
    "SqlTournamentDirectory",
    "StatsRepository",
    "ensure_schema",
]

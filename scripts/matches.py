#!/usr/bin/env python3
"""Submit, review and list tournament match reports."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated, NoReturn
from uuid import UUID

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import create_db_engine, create_session_factory
from domain.common import Match
from domain.errors import TourneyRankError
from domain.games import GameCatalog
from domain.matches import MatchLifecycleService, SubmitMatchRequest, VerificationResult
from domain.ranking import build_default_registry
from repositories import SqlTeamDirectory, SqlTournamentDirectory, ensure_schema
from settings import configure_logging, load_app_config

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Match report submission and review commands.",
)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="App config TOML. Defaults to configs/tourneyrank.toml."),
]
DbUrlOption = Annotated[
    str | None,
    typer.Option("--db-url", help="Database URL. Defaults to [database].url from the app config."),
]
GamesDirOption = Annotated[
    Path | None,
    typer.Option("--games-dir", help="Optional override for the game definitions directory."),
]


def build_service(config_path: Path | None, db_url: str | None, games_dir: Path | None) -> MatchLifecycleService:
    config = load_app_config(config_path)
    configure_logging(config.log_level)

    engine = create_db_engine(db_url or config.db_url)
    ensure_schema(engine)
    session_factory = create_session_factory(engine)
    return MatchLifecycleService(
        session_factory,
        games=GameCatalog.from_directory(games_dir or config.games_dir),
        teams=SqlTeamDirectory(session_factory),
        tournaments=SqlTournamentDirectory(session_factory),
        registry=build_default_registry(),
    )


def _echo_match(match: Match) -> None:
    typer.echo(
        f"match={match.match_id} "
        f"status={match.status.value} "
        f"tournament={match.tournament_id} "
        f"team={match.team_id} "
        f"placement={match.team_placement} "
        f"team_kills={match.team_kills} "
        f"players={len(match.entries)} "
        f"created_at={match.created_at:%Y-%m-%d %H:%M:%S}"
    )


def _echo_result(result: VerificationResult) -> None:
    _echo_match(result.match)
    for stats in result.applied:
        typer.echo(
            f"  player={stats.player_id} "
            f"matches={stats.matches_played} "
            f"score={stats.ranking_score:.2f} "
            f"tier={stats.tier.value}"
        )
    for failure in result.failures:
        typer.echo(
            f"  failed player={failure.player_id} retryable={failure.retryable} error={failure.error}",
            err=True,
        )


def _fail(exc: TourneyRankError) -> NoReturn:
    typer.echo(f"error={type(exc).__name__} retryable={exc.retryable} message={exc}", err=True)
    raise typer.Exit(code=1)


@app.command()
def submit(
    report_path: Annotated[
        Path,
        typer.Argument(
            help=(
                "JSON match report (tournament_id, team_id, game_id, team_placement, team_kills, "
                "players or player_stats)."
            )
        ),
    ],
    captain_id: Annotated[UUID, typer.Option("--captain-id", help="Submitting captain's player id.")],
    config_path: ConfigOption = None,
    db_url: DbUrlOption = None,
    games_dir: GamesDirOption = None,
) -> None:
    """Validate a match report and store it as a draft."""
    try:
        raw = json.loads(report_path.read_text())
        request = SubmitMatchRequest.from_dict(raw)
    except (OSError, ValueError, TypeError) as exc:
        raise typer.BadParameter(f"Could not read match report: {exc}", param_hint="report_path") from exc

    service = build_service(config_path, db_url, games_dir)
    try:
        match = service.submit_match(request, submitted_by=captain_id)
    except TourneyRankError as exc:
        _fail(exc)
    _echo_match(match)


@app.command()
def verify(
    match_id: Annotated[UUID, typer.Argument(help="Draft match id.")],
    reviewer_id: Annotated[UUID, typer.Option("--reviewer-id", help="Reviewing admin's id.")],
    config_path: ConfigOption = None,
    db_url: DbUrlOption = None,
    games_dir: GamesDirOption = None,
) -> None:
    """Approve a draft and update every player's aggregate."""
    service = build_service(config_path, db_url, games_dir)
    try:
        result = service.verify_match(match_id, reviewer_id)
    except TourneyRankError as exc:
        _fail(exc)
    _echo_result(result)
    if result.partially_applied:
        raise typer.Exit(code=2)


@app.command()
def reject(
    match_id: Annotated[UUID, typer.Argument(help="Draft match id.")],
    reviewer_id: Annotated[UUID, typer.Option("--reviewer-id", help="Reviewing admin's id.")],
    reason: Annotated[str, typer.Option("--reason", help="Why the report was rejected.")],
    config_path: ConfigOption = None,
    db_url: DbUrlOption = None,
    games_dir: GamesDirOption = None,
) -> None:
    """Reject a draft; stats are left untouched."""
    service = build_service(config_path, db_url, games_dir)
    try:
        match = service.reject_match(match_id, reviewer_id, reason)
    except TourneyRankError as exc:
        _fail(exc)
    _echo_match(match)


@app.command()
def pending(
    tournament_id: Annotated[
        UUID | None,
        typer.Option("--tournament-id", help="Only drafts of this tournament."),
    ] = None,
    limit: Annotated[int, typer.Option("--limit", help="Page size (max 100).")] = 20,
    offset: Annotated[int, typer.Option("--offset", help="Rows to skip.")] = 0,
    config_path: ConfigOption = None,
    db_url: DbUrlOption = None,
    games_dir: GamesDirOption = None,
) -> None:
    """List drafts awaiting review, oldest first."""
    service = build_service(config_path, db_url, games_dir)
    page = service.list_pending(limit=limit, offset=offset, tournament_id=tournament_id)
    typer.echo(f"pending={page.total} limit={page.limit} offset={page.offset}")
    for match in page.matches:
        _echo_match(match)


@app.command()
def history(
    player_id: Annotated[UUID, typer.Argument(help="Player id.")],
    limit: Annotated[int, typer.Option("--limit", help="Page size (max 100).")] = 10,
    offset: Annotated[int, typer.Option("--offset", help="Rows to skip.")] = 0,
    config_path: ConfigOption = None,
    db_url: DbUrlOption = None,
    games_dir: GamesDirOption = None,
) -> None:
    """List verified matches a player took part in, newest first."""
    service = build_service(config_path, db_url, games_dir)
    page = service.player_history(player_id, limit=limit, offset=offset)
    typer.echo(f"player={player_id} matches={page.total} limit={page.limit} offset={page.offset}")
    for match in page.matches:
        entry = next(entry for entry in match.entries if entry.player_id == player_id)
        typer.echo(
            f"match={match.match_id} "
            f"placement={match.team_placement} "
            f"kills={entry.kills} "
            f"deaths={entry.deaths} "
            f"damage={entry.damage} "
            f"assists={entry.assists} "
            f"verified_at={match.verified_at}"
        )


if __name__ == "__main__":
    app()

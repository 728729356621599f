#!/usr/bin/env python3
"""Query leaderboards, player ranks and tier distributions; re-derive rankings."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated
from uuid import UUID

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import create_db_engine, create_session_factory
from domain.common import GameConfig, LeaderboardEntry, Tier
from domain.errors import TourneyRankError
from domain.games import GameCatalog
from domain.leaderboard import LeaderboardService
from domain.matches import StatsAggregator
from domain.ranking import build_default_registry
from repositories import ensure_schema
from settings import configure_logging, load_app_config

MAX_LIMIT = 100

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Leaderboard, rank and tier queries per game.",
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


class CliContext:
    def __init__(self, config_path: Path | None, db_url: str | None, games_dir: Path | None) -> None:
        config = load_app_config(config_path)
        configure_logging(config.log_level)
        engine = create_db_engine(db_url or config.db_url)
        ensure_schema(engine)
        self.session_factory = create_session_factory(engine)
        self.catalog = GameCatalog.from_directory(games_dir or config.games_dir)
        self.leaderboard = LeaderboardService(self.session_factory, games=self.catalog)

    def game(self, slug: str) -> GameConfig:
        try:
            return self.catalog.get_by_slug(slug)
        except TourneyRankError as exc:
            available = ", ".join(game.slug for game in self.catalog.games())
            raise typer.BadParameter(
                f"Unknown game '{slug}'. Choose one of: {available}.",
                param_hint="game",
            ) from exc


def _check_limit(limit: int) -> int:
    if limit <= 0 or limit > MAX_LIMIT:
        raise typer.BadParameter(f"--limit must be between 1 and {MAX_LIMIT}")
    return limit


def _echo_entry(entry: LeaderboardEntry) -> None:
    typer.echo(
        f"{entry.rank:>4}. "
        f"{entry.display_name or entry.player_id} "
        f"score={entry.ranking_score:.2f} "
        f"tier={entry.tier.value} "
        f"matches={entry.matches_played}"
    )


@app.command()
def top(
    game: Annotated[str, typer.Argument(help="Game slug (for example: warzone).")],
    limit: Annotated[int, typer.Option("--limit", help="Rows to show (max 100).")] = 20,
    offset: Annotated[int, typer.Option("--offset", help="Rows to skip.")] = 0,
    config_path: ConfigOption = None,
    db_url: DbUrlOption = None,
    games_dir: GamesDirOption = None,
) -> None:
    """Show the global leaderboard of a game."""
    context = CliContext(config_path, db_url, games_dir)
    target = context.game(game)
    page = context.leaderboard.get_leaderboard(target.game_id, _check_limit(limit), max(offset, 0))
    typer.echo(f"game={target.slug} name={page.game_name!r} players={page.total} offset={page.offset}")
    for entry in page.entries:
        _echo_entry(entry)


@app.command()
def tier(
    game: Annotated[str, typer.Argument(help="Game slug.")],
    tier_name: Annotated[Tier, typer.Argument(help="Tier to list.")],
    limit: Annotated[int, typer.Option("--limit", help="Rows to show (max 100).")] = 20,
    config_path: ConfigOption = None,
    db_url: DbUrlOption = None,
    games_dir: GamesDirOption = None,
) -> None:
    """Show the top players of one tier."""
    context = CliContext(config_path, db_url, games_dir)
    target = context.game(game)
    entries = context.leaderboard.get_leaderboard_by_tier(target.game_id, tier_name, _check_limit(limit))
    typer.echo(f"game={target.slug} tier={tier_name.value} shown={len(entries)}")
    for entry in entries:
        _echo_entry(entry)


@app.command()
def rank(
    game: Annotated[str, typer.Argument(help="Game slug.")],
    player_id: Annotated[UUID, typer.Argument(help="Player id.")],
    config_path: ConfigOption = None,
    db_url: DbUrlOption = None,
    games_dir: GamesDirOption = None,
) -> None:
    """Show one player's rank, percentile and tier."""
    context = CliContext(config_path, db_url, games_dir)
    target = context.game(game)
    try:
        player_rank = context.leaderboard.get_player_rank(player_id, target.game_id)
    except TourneyRankError as exc:
        typer.echo(f"error={type(exc).__name__} message={exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(
        f"game={target.slug} "
        f"player={player_rank.player_id} "
        f"rank={player_rank.rank} "
        f"score={player_rank.ranking_score:.2f} "
        f"percentile={player_rank.percentile:.1f} "
        f"tier={player_rank.tier.value}"
    )


@app.command()
def tiers(
    game: Annotated[str, typer.Argument(help="Game slug.")],
    config_path: ConfigOption = None,
    db_url: DbUrlOption = None,
    games_dir: GamesDirOption = None,
) -> None:
    """Show how many players sit in each tier."""
    context = CliContext(config_path, db_url, games_dir)
    target = context.game(game)
    distribution = context.leaderboard.get_tier_distribution(target.game_id)
    typer.echo(f"game={target.slug} players={distribution.total}")
    for tier_value in Tier:
        typer.echo(f"  {tier_value.value}={distribution.counts.get(tier_value, 0)}")


@app.command()
def rescore(
    game: Annotated[str, typer.Argument(help="Game slug.")],
    config_path: ConfigOption = None,
    db_url: DbUrlOption = None,
    games_dir: GamesDirOption = None,
) -> None:
    """Recompute every score and tier of a game from stored stats."""
    context = CliContext(config_path, db_url, games_dir)
    target = context.game(game)
    aggregator = StatsAggregator(context.session_factory, registry=build_default_registry())
    summary = aggregator.rescore_game(target)
    counts = " ".join(f"{tier_value.value}={count}" for tier_value, count in summary.tier_counts.items())
    typer.echo(f"game={target.slug} rescored={summary.rescored} {counts}")


if __name__ == "__main__":
    app()

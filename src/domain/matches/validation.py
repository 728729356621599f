"""Structural checks for submitted match reports."""

from __future__ import annotations

import math
from collections.abc import Sequence
from uuid import UUID

from domain.common import GameConfig, Match, PlayerMatchEntry, TeamRoster
from domain.errors import (
    InvalidKillsError,
    InvalidPlacementError,
    InvalidPlayerStatsError,
    MissingPlayerStatsError,
    NotCaptainError,
    PlayerNotInTeamError,
    TeamSizeMismatchError,
)

MIN_PLACEMENT = 1
MAX_PLACEMENT = 100
# Column widths of player_game_stat_values.stat_key and text_value.
MAX_STAT_KEY_LENGTH = 64
MAX_STAT_TEXT_LENGTH = 256


def check_captain(roster: TeamRoster, submitter_id: UUID) -> None:
    if roster.captain_id != submitter_id:
        raise NotCaptainError(submitter_id, roster.team_id)


def check_roster_completeness(roster: TeamRoster, entries: Sequence[PlayerMatchEntry]) -> None:
    """The entry set must be exactly the roster: no foreign ids, no missing or repeated members."""
    members = set(roster.member_ids)
    for entry in entries:
        if entry.player_id not in members:
            raise PlayerNotInTeamError(entry.player_id, roster.team_id)

    distinct = {entry.player_id for entry in entries}
    if len(entries) != len(members) or len(distinct) != len(members):
        raise TeamSizeMismatchError(expected=len(members), actual=len(entries))


def check_report(team_placement: int, team_kills: int, entries: Sequence[PlayerMatchEntry]) -> None:
    if team_placement < MIN_PLACEMENT or team_placement > MAX_PLACEMENT:
        raise InvalidPlacementError(team_placement)
    if team_kills < 0:
        raise InvalidKillsError(team_kills)
    if not entries:
        raise MissingPlayerStatsError()
    for entry in entries:
        for field, value in entry.counters().items():
            if value < 0:
                raise InvalidPlayerStatsError(entry.player_id, field, value)
        check_custom_stats(entry)


def check_custom_stats(entry: PlayerMatchEntry) -> None:
    """Custom values must be finite numbers or short strings that fit the stat store."""
    for key, value in entry.custom_stats.items():
        if not isinstance(key, str) or not key or len(key) > MAX_STAT_KEY_LENGTH:
            raise InvalidPlayerStatsError(
                entry.player_id, str(key)[:MAX_STAT_KEY_LENGTH], key, f"must be 1-{MAX_STAT_KEY_LENGTH} characters"
            )
        # Booleans are accepted as flags but never stored.
        if isinstance(value, bool):
            continue
        if isinstance(value, str):
            if len(value) > MAX_STAT_TEXT_LENGTH:
                raise InvalidPlayerStatsError(
                    entry.player_id, key, value[:32] + "...", f"must be at most {MAX_STAT_TEXT_LENGTH} characters"
                )
        elif isinstance(value, (int, float)):
            if not math.isfinite(value):
                raise InvalidPlayerStatsError(entry.player_id, key, value, "must be finite")
        else:
            raise InvalidPlayerStatsError(entry.player_id, key, value, "must be a number or a string")


def check_stat_schema(game: GameConfig, entries: Sequence[PlayerMatchEntry]) -> None:
    """Reported values of keys the game declares must have the declared type and bounds."""
    if not game.stat_schema:
        return
    for entry in entries:
        reported = {**entry.custom_stats, **entry.counters()}
        for key, declared in game.stat_schema.items():
            if key not in reported:
                continue
            value = reported[key]
            if not _has_type(value, declared.type):
                raise InvalidPlayerStatsError(entry.player_id, key, value, f"must be of type {declared.type}")
            if declared.type == "string":
                continue
            if declared.min is not None and value < declared.min:
                raise InvalidPlayerStatsError(entry.player_id, key, value, f"must be at least {declared.min:g}")
            if declared.max is not None and value > declared.max:
                raise InvalidPlayerStatsError(entry.player_id, key, value, f"must be at most {declared.max:g}")


def _has_type(value: object, stat_type: str) -> bool:
    if isinstance(value, bool):
        return False
    if stat_type == "integer":
        return isinstance(value, int)
    if stat_type == "float":
        return isinstance(value, (int, float))
    return isinstance(value, str)


def total_team_kills(match: Match) -> int:
    return sum(entry.kills for entry in match.entries)


def team_kd_ratio(match: Match) -> float:
    """Reported team kills per death; with zero deaths the ratio is the kill count."""
    total_deaths = sum(entry.deaths for entry in match.entries)
    if total_deaths == 0:
        return float(match.team_kills)
    return match.team_kills / total_deaths


__all__ = [
    "check_captain",
    "check_custom_stats",
    "check_report",
    "check_roster_completeness",
    "check_stat_schema",
    "team_kd_ratio",
    "total_team_kills",
]

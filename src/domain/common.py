"""Shared types for match ingestion and ranking."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID

StatValue = int | float | str
StatMap = Mapping[str, StatValue]


class Tier(str, Enum):
    """Skill tiers, best first."""

    ELITE = "elite"
    ADVANCED = "advanced"
    INTERMEDIATE = "intermediate"
    BEGINNER = "beginner"


class MatchStatus(str, Enum):
    DRAFT = "draft"
    VERIFIED = "verified"
    REJECTED = "rejected"


class TournamentStatus(str, Enum):
    DRAFT = "draft"
    OPEN = "open"
    ACTIVE = "active"
    FINISHED = "finished"
    CANCELED = "canceled"


def stat_as_float(stats: StatMap, key: str) -> float:
    """Read a numeric stat, treating missing and non-numeric values as 0."""
    value = stats.get(key, 0.0)
    if isinstance(value, bool) or isinstance(value, str):
        return 0.0
    return float(value)


@dataclass(frozen=True)
class StatField:
    """One entry of a game's stat schema."""

    type: str
    label: str | None = None
    min: float | None = None
    max: float | None = None


@dataclass(frozen=True)
class GameConfig:
    """Read-only view of a game's stat schema and ranking weights."""

    game_id: UUID
    slug: str
    name: str
    description: str | None = None
    stat_schema: Mapping[str, StatField] = field(default_factory=dict)
    ranking_weights: Mapping[str, float] = field(default_factory=dict)
    active: bool = True


@dataclass(frozen=True)
class TeamRoster:
    team_id: UUID
    captain_id: UUID
    member_ids: tuple[UUID, ...]
    tournament_id: UUID | None = None


@dataclass(frozen=True)
class TournamentInfo:
    tournament_id: UUID
    status: TournamentStatus
    game_id: UUID | None = None


@dataclass(frozen=True)
class PlayerMatchEntry:
    """Per-player line of a match report."""

    player_id: UUID
    kills: int = 0
    damage: int = 0
    assists: int = 0
    deaths: int = 0
    downs: int = 0
    custom_stats: Mapping[str, StatValue] = field(default_factory=dict)

    def counters(self) -> dict[str, int]:
        return {
            "kills": self.kills,
            "damage": self.damage,
            "assists": self.assists,
            "deaths": self.deaths,
            "downs": self.downs,
        }


@dataclass(frozen=True)
class Match:
    match_id: UUID
    tournament_id: UUID
    team_id: UUID
    game_id: UUID
    status: MatchStatus
    team_placement: int
    team_kills: int
    entries: tuple[PlayerMatchEntry, ...]
    evidence_ref: str
    submitted_by: UUID
    created_at: datetime
    updated_at: datetime
    rejection_reason: str | None = None
    verified_by: UUID | None = None
    verified_at: datetime | None = None

    @property
    def player_ids(self) -> tuple[UUID, ...]:
        return tuple(entry.player_id for entry in self.entries)


@dataclass(frozen=True)
class PlayerGameStats:
    """Per-(player, game) aggregate of accumulated stats and derived ranking."""

    stats_id: int
    player_id: UUID
    game_id: UUID
    stats: Mapping[str, StatValue]
    matches_played: int
    ranking_score: float
    tier: Tier
    last_match_at: datetime | None = None


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    player_id: UUID
    display_name: str | None
    ranking_score: float
    tier: Tier
    matches_played: int
    stats: Mapping[str, StatValue]


@dataclass(frozen=True)
class LeaderboardPage:
    game_id: UUID
    game_name: str
    entries: tuple[LeaderboardEntry, ...]
    total: int
    limit: int
    offset: int


@dataclass(frozen=True)
class PlayerRank:
    player_id: UUID
    game_id: UUID
    rank: int
    ranking_score: float
    tier: Tier
    percentile: float


@dataclass(frozen=True)
class TierDistribution:
    game_id: UUID
    counts: Mapping[Tier, int]
    total: int

"""Match lifecycle: submission, review and the draft -> verified/rejected state machine."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session, sessionmaker

from db import session_scope
from domain.common import (
    Match,
    MatchStatus,
    PlayerGameStats,
    PlayerMatchEntry,
    TournamentStatus,
)
from domain.errors import (
    GameMismatchError,
    GameNotActiveError,
    MatchNotDraftError,
    TeamNotInTournamentError,
    TournamentNotActiveError,
)
from domain.matches.aggregation import AggregationFailure, StatsAggregator
from domain.matches.validation import (
    check_captain,
    check_report,
    check_roster_completeness,
    check_stat_schema,
)
from domain.protocol import GameDirectory, TeamDirectory, TournamentDirectory
from domain.ranking.registry import StrategyRegistry
from repositories.match_repository import MATCH_REPOSITORY, MatchRepository
from repositories.stats_repository import STATS_REPOSITORY, StatsRepository

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
DEFAULT_HISTORY_LIMIT = 10
DEFAULT_LIST_LIMIT = 20


@dataclass(frozen=True)
class SubmitMatchRequest:
    tournament_id: UUID
    team_id: UUID
    game_id: UUID
    team_placement: int
    team_kills: int
    entries: tuple[PlayerMatchEntry, ...]
    evidence_ref: str = ""

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> SubmitMatchRequest:
        """Build a request from a decoded JSON report.

        Per-player lines are read from ``players`` or ``player_stats`` and the
        evidence link from ``evidence_ref`` or ``screenshot_url``.
        """
        try:
            entries = tuple(
                PlayerMatchEntry(
                    player_id=UUID(str(player["player_id"])),
                    kills=int(player.get("kills", 0)),
                    damage=int(player.get("damage", 0)),
                    assists=int(player.get("assists", 0)),
                    deaths=int(player.get("deaths", 0)),
                    downs=int(player.get("downs", 0)),
                    custom_stats=dict(player.get("custom_stats") or {}),
                )
                for player in raw.get("players", raw.get("player_stats", []))
            )
            return cls(
                tournament_id=UUID(str(raw["tournament_id"])),
                team_id=UUID(str(raw["team_id"])),
                game_id=UUID(str(raw["game_id"])),
                team_placement=int(raw["team_placement"]),
                team_kills=int(raw["team_kills"]),
                entries=entries,
                evidence_ref=str(raw.get("evidence_ref", raw.get("screenshot_url", ""))),
            )
        except KeyError as exc:
            raise ValueError(f"match report is missing field {exc.args[0]!r}") from exc


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of resolving a match.

    ``failures`` lists players whose aggregate could not be updated; the match
    stays resolved regardless and those players need reconciliation.
    """

    match: Match
    applied: tuple[PlayerGameStats, ...] = ()
    failures: tuple[AggregationFailure, ...] = ()

    @property
    def partially_applied(self) -> bool:
        return bool(self.failures)


@dataclass(frozen=True)
class MatchPage:
    matches: tuple[Match, ...]
    total: int
    limit: int
    offset: int


def clamp_page(limit: int, offset: int, *, default_limit: int) -> tuple[int, int]:
    if limit <= 0:
        limit = default_limit
    return min(limit, MAX_PAGE_SIZE), max(offset, 0)


class MatchLifecycleService:
    """Validates, stores and resolves match reports.

    Resolution is a check-and-set on ``status = 'draft'``, so concurrent
    reviewers cannot both resolve the same match. Aggregates are updated only
    after the status change has committed.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        games: GameDirectory,
        teams: TeamDirectory,
        tournaments: TournamentDirectory,
        registry: StrategyRegistry,
        matches: MatchRepository = MATCH_REPOSITORY,
        stats: StatsRepository = STATS_REPOSITORY,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.games = games
        self.teams = teams
        self.tournaments = tournaments
        self.matches = matches
        self.clock = clock or _utcnow
        self.aggregator = StatsAggregator(
            session_factory,
            registry=registry,
            repository=stats,
            clock=self.clock,
        )

    def submit_match(self, request: SubmitMatchRequest, *, submitted_by: UUID) -> Match:
        """Validate a captain's report and store it as a draft."""
        tournament = self.tournaments.get_tournament(request.tournament_id)
        if tournament.status is not TournamentStatus.ACTIVE:
            raise TournamentNotActiveError(request.tournament_id, tournament.status.value)

        roster = self.teams.get_roster(request.team_id)
        if roster.tournament_id is not None and roster.tournament_id != request.tournament_id:
            raise TeamNotInTournamentError(request.team_id, request.tournament_id)
        check_captain(roster, submitted_by)
        check_roster_completeness(roster, request.entries)
        check_report(request.team_placement, request.team_kills, request.entries)

        game = self.games.get_game(request.game_id)
        if not game.active:
            raise GameNotActiveError(request.game_id)
        if tournament.game_id is not None and tournament.game_id != request.game_id:
            raise GameMismatchError(request.game_id, request.tournament_id)
        check_stat_schema(game, request.entries)

        now = self.clock()
        draft = Match(
            match_id=uuid.uuid4(),
            tournament_id=request.tournament_id,
            team_id=request.team_id,
            game_id=request.game_id,
            status=MatchStatus.DRAFT,
            team_placement=request.team_placement,
            team_kills=request.team_kills,
            entries=tuple(request.entries),
            evidence_ref=request.evidence_ref,
            submitted_by=submitted_by,
            created_at=now,
            updated_at=now,
        )
        with session_scope(self.session_factory) as session:
            match = self.matches.create(session, draft)

        logger.info(
            "match submitted match=%s tournament=%s team=%s players=%d",
            match.match_id,
            match.tournament_id,
            match.team_id,
            len(match.entries),
        )
        return match

    def verify_match(self, match_id: UUID, reviewer_id: UUID) -> VerificationResult:
        """Approve a draft and fold its entries into each player's aggregate."""
        with session_scope(self.session_factory) as session:
            pending = self.matches.get(session, match_id)
        if pending.status is not MatchStatus.DRAFT:
            raise MatchNotDraftError(match_id, pending.status.value)
        game = self.games.get_game(pending.game_id)

        with session_scope(self.session_factory) as session:
            match = self.matches.transition_from_draft(
                session,
                match_id,
                status=MatchStatus.VERIFIED,
                reviewer_id=reviewer_id,
                at=self.clock(),
            )
        logger.info("match verified match=%s reviewer=%s", match_id, reviewer_id)

        applied, failures = self.aggregator.apply_match(match, game)
        if failures:
            logger.warning(
                "match verified with partially applied aggregates match=%s failed_players=%s",
                match_id,
                [str(failure.player_id) for failure in failures],
            )
        return VerificationResult(match=match, applied=tuple(applied), failures=tuple(failures))

    def reject_match(self, match_id: UUID, reviewer_id: UUID, reason: str) -> Match:
        with session_scope(self.session_factory) as session:
            match = self.matches.transition_from_draft(
                session,
                match_id,
                status=MatchStatus.REJECTED,
                reviewer_id=reviewer_id,
                at=self.clock(),
                rejection_reason=reason,
            )
        logger.info("match rejected match=%s reviewer=%s reason=%r", match_id, reviewer_id, reason)
        return match

    def resolve_match(
        self,
        match_id: UUID,
        *,
        reviewer_id: UUID,
        approve: bool,
        reason: str | None = None,
    ) -> VerificationResult:
        """Approve or reject a draft in one call."""
        if approve:
            return self.verify_match(match_id, reviewer_id)
        return VerificationResult(match=self.reject_match(match_id, reviewer_id, reason or ""))

    def get_match(self, match_id: UUID) -> Match:
        with session_scope(self.session_factory) as session:
            return self.matches.get(session, match_id)

    def list_pending(self, *, limit: int = 0, offset: int = 0, tournament_id: UUID | None = None) -> MatchPage:
        """Drafts awaiting review, oldest first."""
        limit, offset = clamp_page(limit, offset, default_limit=DEFAULT_LIST_LIMIT)
        with session_scope(self.session_factory) as session:
            matches = self.matches.list_by_status(
                session, MatchStatus.DRAFT, limit=limit, offset=offset, tournament_id=tournament_id
            )
            total = self.matches.count_by_status(session, MatchStatus.DRAFT, tournament_id=tournament_id)
        return MatchPage(matches=tuple(matches), total=total, limit=limit, offset=offset)

    def tournament_matches(self, tournament_id: UUID, *, limit: int = 0, offset: int = 0) -> MatchPage:
        """Verified matches of a tournament."""
        limit, offset = clamp_page(limit, offset, default_limit=DEFAULT_LIST_LIMIT)
        with session_scope(self.session_factory) as session:
            matches = self.matches.list_by_status(
                session, MatchStatus.VERIFIED, limit=limit, offset=offset, tournament_id=tournament_id
            )
            total = self.matches.count_by_status(session, MatchStatus.VERIFIED, tournament_id=tournament_id)
        return MatchPage(matches=tuple(matches), total=total, limit=limit, offset=offset)

    def player_history(self, player_id: UUID, *, limit: int = 0, offset: int = 0) -> MatchPage:
        """Verified matches a player took part in, newest first."""
        limit, offset = clamp_page(limit, offset, default_limit=DEFAULT_HISTORY_LIMIT)
        with session_scope(self.session_factory) as session:
            matches = self.matches.list_by_player(
                session, player_id, limit=limit, offset=offset, status=MatchStatus.VERIFIED
            )
            total = self.matches.count_by_player(session, player_id, status=MatchStatus.VERIFIED)
        return MatchPage(matches=tuple(matches), total=total, limit=limit, offset=offset)

    def team_matches(self, team_id: UUID, *, limit: int = 0, offset: int = 0) -> Sequence[Match]:
        """Every report a team submitted, any status, newest first."""
        limit, offset = clamp_page(limit, offset, default_limit=DEFAULT_LIST_LIMIT)
        with session_scope(self.session_factory) as session:
            return self.matches.list_by_team(session, team_id, limit=limit, offset=offset)


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


__all__ = [
    "MatchLifecycleService",
    "MatchPage",
    "SubmitMatchRequest",
    "VerificationResult",
    "clamp_page",
]

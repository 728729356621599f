"""Persistence for submitted match reports."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import exists, func, select, update
from sqlalchemy.orm import Session

from domain.common import Match, MatchStatus, PlayerMatchEntry
from domain.errors import MatchNotDraftError, MatchNotFoundError
from models import MatchPlayerStats, MatchReport


class MatchRepository:
    """Match storage; status changes go through a check-and-set on ``draft``."""

    def create(self, session: Session, match: Match) -> Match:
        report = MatchReport(
            id=match.match_id,
            tournament_id=match.tournament_id,
            team_id=match.team_id,
            game_id=match.game_id,
            status=match.status.value,
            team_placement=match.team_placement,
            team_kills=match.team_kills,
            evidence_ref=match.evidence_ref,
            submitted_by=match.submitted_by,
            created_at=match.created_at,
            updated_at=match.updated_at,
            player_stats=[
                MatchPlayerStats(
                    position=position,
                    player_id=entry.player_id,
                    kills=entry.kills,
                    damage=entry.damage,
                    assists=entry.assists,
                    deaths=entry.deaths,
                    downs=entry.downs,
                    custom_stats=dict(entry.custom_stats),
                )
                for position, entry in enumerate(match.entries)
            ],
        )
        session.add(report)
        session.flush()
        return _to_domain(report)

    def get(self, session: Session, match_id: UUID) -> Match:
        report = session.execute(
            select(MatchReport)
            .where(MatchReport.id == match_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if report is None:
            raise MatchNotFoundError(match_id)
        return _to_domain(report)

    def transition_from_draft(
        self,
        session: Session,
        match_id: UUID,
        *,
        status: MatchStatus,
        reviewer_id: UUID,
        at: datetime,
        rejection_reason: str | None = None,
    ) -> Match:
        """Move a draft match to a terminal status; exactly one caller can win."""
        if status is MatchStatus.DRAFT:
            raise ValueError("draft is not a terminal status")

        result = session.execute(
            update(MatchReport)
            .where(MatchReport.id == match_id, MatchReport.status == MatchStatus.DRAFT.value)
            .values(
                status=status.value,
                verified_by=reviewer_id,
                verified_at=at,
                rejection_reason=rejection_reason,
                updated_at=at,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            current = session.scalar(select(MatchReport.status).where(MatchReport.id == match_id))
            if current is None:
                raise MatchNotFoundError(match_id)
            raise MatchNotDraftError(match_id, current)
        return self.get(session, match_id)

    def list_by_status(
        self,
        session: Session,
        status: MatchStatus,
        *,
        limit: int,
        offset: int,
        tournament_id: UUID | None = None,
    ) -> list[Match]:
        statement = select(MatchReport).where(MatchReport.status == status.value)
        if tournament_id is not None:
            statement = statement.where(MatchReport.tournament_id == tournament_id)
        statement = statement.order_by(MatchReport.created_at, MatchReport.id).offset(offset).limit(limit)
        return _to_domain_list(session.scalars(statement).all())

    def count_by_status(
        self,
        session: Session,
        status: MatchStatus,
        *,
        tournament_id: UUID | None = None,
    ) -> int:
        statement = select(func.count()).select_from(MatchReport).where(MatchReport.status == status.value)
        if tournament_id is not None:
            statement = statement.where(MatchReport.tournament_id == tournament_id)
        return int(session.scalar(statement) or 0)

    def list_by_team(self, session: Session, team_id: UUID, *, limit: int, offset: int) -> list[Match]:
        statement = (
            select(MatchReport)
            .where(MatchReport.team_id == team_id)
            .order_by(MatchReport.created_at.desc(), MatchReport.id)
            .offset(offset)
            .limit(limit)
        )
        return _to_domain_list(session.scalars(statement).all())

    def list_by_player(
        self,
        session: Session,
        player_id: UUID,
        *,
        limit: int,
        offset: int,
        status: MatchStatus | None = None,
    ) -> list[Match]:
        statement = select(MatchReport).where(_involves_player(player_id))
        if status is not None:
            statement = statement.where(MatchReport.status == status.value)
        statement = statement.order_by(MatchReport.created_at.desc(), MatchReport.id).offset(offset).limit(limit)
        return _to_domain_list(session.scalars(statement).all())

    def count_by_player(self, session: Session, player_id: UUID, *, status: MatchStatus | None = None) -> int:
        statement = select(func.count()).select_from(MatchReport).where(_involves_player(player_id))
        if status is not None:
            statement = statement.where(MatchReport.status == status.value)
        return int(session.scalar(statement) or 0)


def _involves_player(player_id: UUID):
    return exists().where(
        MatchPlayerStats.match_id == MatchReport.id,
        MatchPlayerStats.player_id == player_id,
    )


def _to_domain(report: MatchReport) -> Match:
    return Match(
        match_id=report.id,
        tournament_id=report.tournament_id,
        team_id=report.team_id,
        game_id=report.game_id,
        status=MatchStatus(report.status),
        team_placement=report.team_placement,
        team_kills=report.team_kills,
        entries=tuple(
            PlayerMatchEntry(
                player_id=row.player_id,
                kills=row.kills,
                damage=row.damage,
                assists=row.assists,
                deaths=row.deaths,
                downs=row.downs,
                custom_stats=dict(row.custom_stats or {}),
            )
            for row in sorted(report.player_stats, key=lambda row: row.position)
        ),
        evidence_ref=report.evidence_ref,
        submitted_by=report.submitted_by,
        created_at=report.created_at,
        updated_at=report.updated_at,
        rejection_reason=report.rejection_reason,
        verified_by=report.verified_by,
        verified_at=report.verified_at,
    )


def _to_domain_list(reports: Sequence[MatchReport]) -> list[Match]:
    return [_to_domain(report) for report in reports]


MATCH_REPOSITORY = MatchRepository()

__all__ = ["MATCH_REPOSITORY", "MatchRepository"]

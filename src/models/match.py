"""matches and match_player_stats table models."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import JSON_DOCUMENT, Base
from models.mixins import TimestampMixin


class MatchReport(TimestampMixin, Base):
    """One team's submitted result for one tournament match."""

    __tablename__ = "matches"
    __table_args__ = (
        CheckConstraint(
            "team_placement >= 1 AND team_placement <= 100",
            name="ck_matches_team_placement",
        ),
        CheckConstraint("team_kills >= 0", name="ck_matches_team_kills"),
        Index("idx_matches_tournament_status", "tournament_id", "status"),
        Index("idx_matches_team", "team_id"),
        Index("idx_matches_status_created", "status", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tournament_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    team_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    game_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    status: Mapped[str] = mapped_column(
        Enum(
            "draft",
            "verified",
            "rejected",
            name="match_status",
            native_enum=False,
        ),
        nullable=False,
        default="draft",
    )
    team_placement: Mapped[int] = mapped_column(Integer, nullable=False)
    team_kills: Mapped[int] = mapped_column(Integer, nullable=False)
    evidence_ref: Mapped[str] = mapped_column(String(1024), nullable=False, default="")
    submitted_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    rejection_reason: Mapped[str | None] = mapped_column(String(512), nullable=True)
    verified_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    player_stats: Mapped[list[MatchPlayerStats]] = relationship(
        back_populates="match",
        cascade="all, delete-orphan",
        order_by="MatchPlayerStats.position",
        lazy="selectin",
    )


class MatchPlayerStats(Base):
    """Per-player counters reported with a match."""

    __tablename__ = "match_player_stats"
    __table_args__ = (
        CheckConstraint(
            "kills >= 0 AND damage >= 0 AND assists >= 0 AND deaths >= 0 AND downs >= 0",
            name="ck_match_player_stats_counters",
        ),
        Index("idx_match_player_stats_player", "player_id"),
        Index("idx_match_player_stats_match", "match_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    match_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("matches.id", ondelete="CASCADE"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    player_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    kills: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    damage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    assists: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    deaths: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    downs: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    custom_stats: Mapped[dict[str, Any]] = mapped_column(
        JSON_DOCUMENT,
        nullable=False,
        default=dict,
        server_default=text("'{}'"),
    )

    match: Mapped[MatchReport] = relationship(back_populates="player_stats")

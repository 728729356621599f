"""player_game_stats and player_game_stat_values table models."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base
from models.mixins import TimestampMixin


class PlayerGameStat(TimestampMixin, Base):
    """Accumulated stats and derived ranking for one player in one game."""

    __tablename__ = "player_game_stats"
    __table_args__ = (
        UniqueConstraint("player_id", "game_id", name="uq_player_game_stats_player_game"),
        Index("idx_player_game_stats_game_score", "game_id", "ranking_score"),
        Index("idx_player_game_stats_game_tier", "game_id", "tier"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    player_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    game_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    matches_played: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ranking_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    tier: Mapped[str] = mapped_column(
        Enum(
            "elite",
            "advanced",
            "intermediate",
            "beginner",
            name="player_tier",
            native_enum=False,
        ),
        nullable=False,
        default="beginner",
    )
    last_match_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    values: Mapped[list[PlayerGameStatValue]] = relationship(
        back_populates="stats",
        cascade="all, delete-orphan",
    )


class PlayerGameStatValue(Base):
    """One accumulated stat of an aggregate; numeric values add, text values replace."""

    __tablename__ = "player_game_stat_values"
    __table_args__ = (
        UniqueConstraint("stats_id", "stat_key", name="uq_player_game_stat_values_stats_key"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    stats_id: Mapped[int] = mapped_column(
        ForeignKey("player_game_stats.id", ondelete="CASCADE"),
        nullable=False,
    )
    stat_key: Mapped[str] = mapped_column(String(64), nullable=False)
    value: Mapped[float | None] = mapped_column(Float, nullable=True)
    text_value: Mapped[str | None] = mapped_column(String(256), nullable=True)

    stats: Mapped[PlayerGameStat] = relationship(back_populates="values")

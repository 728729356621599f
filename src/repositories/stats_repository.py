"""Persistence for per-(player, game) stat aggregates."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from domain.common import LeaderboardEntry, PlayerGameStats, StatValue, Tier
from domain.errors import StatsNotFoundError
from models import PlayerGameStat, PlayerGameStatValue
from repositories.directory import players_table

_UPSERT_DIALECTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class StatsRepository:
    """Stat Store primitives: get-or-create, atomic increment, replace ranking."""

    def get_or_create(self, session: Session, player_id: UUID, game_id: UUID) -> PlayerGameStats:
        """Return the aggregate for (player, game), creating an empty one if absent."""
        now = _utcnow()
        statement = (
            _insert_for(session, PlayerGameStat)
            .values(
                player_id=player_id,
                game_id=game_id,
                matches_played=0,
                ranking_score=0.0,
                tier=Tier.BEGINNER.value,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(index_elements=["player_id", "game_id"])
        )
        session.execute(statement)
        return self.get_by_player_and_game(session, player_id, game_id)

    def get_by_id(self, session: Session, stats_id: int) -> PlayerGameStats:
        row = session.execute(
            select(PlayerGameStat)
            .where(PlayerGameStat.id == stats_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if row is None:
            raise StatsNotFoundError(stats_id)
        return self._to_domain(session, [row])[0]

    def get_by_player_and_game(self, session: Session, player_id: UUID, game_id: UUID) -> PlayerGameStats:
        row = session.execute(
            select(PlayerGameStat)
            .where(PlayerGameStat.player_id == player_id, PlayerGameStat.game_id == game_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if row is None:
            raise StatsNotFoundError(player_id, game_id)
        return self._to_domain(session, [row])[0]

    def list_by_player(self, session: Session, player_id: UUID) -> list[PlayerGameStats]:
        rows = session.scalars(
            select(PlayerGameStat)
            .where(PlayerGameStat.player_id == player_id)
            .order_by(PlayerGameStat.game_id)
            .execution_options(populate_existing=True)
        ).all()
        return self._to_domain(session, rows)

    def list_by_game(self, session: Session, game_id: UUID) -> list[PlayerGameStats]:
        rows = session.scalars(
            select(PlayerGameStat)
            .where(PlayerGameStat.game_id == game_id)
            .order_by(PlayerGameStat.ranking_score.desc(), PlayerGameStat.player_id)
            .execution_options(populate_existing=True)
        ).all()
        return self._to_domain(session, rows)

    def increment_stats(
        self,
        session: Session,
        stats_id: int,
        stats_to_add: Mapping[str, StatValue],
        *,
        played_at: datetime,
    ) -> None:
        """Add one match into an aggregate in place.

        ``matches_played`` and numeric stats are incremented by the database, so
        concurrent increments of the same aggregate never lose updates. String
        stats replace the stored value.
        """
        result = session.execute(
            update(PlayerGameStat)
            .where(PlayerGameStat.id == stats_id)
            .values(
                matches_played=PlayerGameStat.matches_played + 1,
                last_match_at=played_at,
                updated_at=_utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise StatsNotFoundError(stats_id)

        numeric_rows: list[dict[str, Any]] = []
        text_rows: list[dict[str, Any]] = []
        for key, value in sorted(stats_to_add.items()):
            if isinstance(value, bool):
                raise TypeError(f"stat {key!r} must be a number or string, got bool")
            if isinstance(value, str):
                text_rows.append({"stats_id": stats_id, "stat_key": key, "value": None, "text_value": value})
            else:
                numeric_rows.append(
                    {"stats_id": stats_id, "stat_key": key, "value": float(value), "text_value": None}
                )

        if numeric_rows:
            statement = _insert_for(session, PlayerGameStatValue).values(numeric_rows)
            session.execute(
                statement.on_conflict_do_update(
                    index_elements=["stats_id", "stat_key"],
                    set_={
                        "value": func.coalesce(PlayerGameStatValue.value, 0.0) + statement.excluded.value,
                        "text_value": None,
                    },
                )
            )
        if text_rows:
            statement = _insert_for(session, PlayerGameStatValue).values(text_rows)
            session.execute(
                statement.on_conflict_do_update(
                    index_elements=["stats_id", "stat_key"],
                    set_={"value": None, "text_value": statement.excluded.text_value},
                )
            )

    def update_ranking(self, session: Session, stats_id: int, *, score: float, tier: Tier) -> None:
        """Replace the derived score and tier of one aggregate."""
        result = session.execute(
            update(PlayerGameStat)
            .where(PlayerGameStat.id == stats_id)
            .values(ranking_score=score, tier=tier.value, updated_at=_utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise StatsNotFoundError(stats_id)

    def count_by_game(self, session: Session, game_id: UUID) -> int:
        statement = select(func.count()).select_from(PlayerGameStat).where(PlayerGameStat.game_id == game_id)
        return int(session.scalar(statement) or 0)

    def count_above(
        self,
        session: Session,
        game_id: UUID,
        score: float,
        *,
        exclude_stats_id: int | None = None,
    ) -> int:
        """Number of aggregates in the game with a strictly greater score."""
        statement = (
            select(func.count())
            .select_from(PlayerGameStat)
            .where(PlayerGameStat.game_id == game_id, PlayerGameStat.ranking_score > score)
        )
        if exclude_stats_id is not None:
            statement = statement.where(PlayerGameStat.id != exclude_stats_id)
        return int(session.scalar(statement) or 0)

    def leaderboard(
        self,
        session: Session,
        game_id: UUID,
        *,
        limit: int,
        offset: int = 0,
        tier: Tier | None = None,
    ) -> list[LeaderboardEntry]:
        """Aggregates ordered by score desc then player id; ranks start at offset + 1."""
        statement = (
            select(PlayerGameStat, players_table.c.display_name)
            .outerjoin(players_table, players_table.c.id == PlayerGameStat.player_id)
            .where(PlayerGameStat.game_id == game_id)
        )
        if tier is not None:
            statement = statement.where(PlayerGameStat.tier == tier.value)
        statement = (
            statement.order_by(PlayerGameStat.ranking_score.desc(), PlayerGameStat.player_id)
            .offset(offset)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        rows = session.execute(statement).all()
        values = self._load_values(session, [row.PlayerGameStat.id for row in rows])
        return [
            LeaderboardEntry(
                rank=offset + position,
                player_id=row.PlayerGameStat.player_id,
                display_name=row.display_name,
                ranking_score=row.PlayerGameStat.ranking_score,
                tier=Tier(row.PlayerGameStat.tier),
                matches_played=row.PlayerGameStat.matches_played,
                stats=values.get(row.PlayerGameStat.id, {}),
            )
            for position, row in enumerate(rows, start=1)
        ]

    def tier_counts(self, session: Session, game_id: UUID) -> dict[Tier, int]:
        rows = session.execute(
            select(PlayerGameStat.tier, func.count())
            .where(PlayerGameStat.game_id == game_id)
            .group_by(PlayerGameStat.tier)
        ).all()
        counts = {tier: 0 for tier in Tier}
        for tier_value, count in rows:
            counts[Tier(tier_value)] = int(count)
        return counts

    def _load_values(self, session: Session, stats_ids: Iterable[int]) -> dict[int, dict[str, StatValue]]:
        ids = list(stats_ids)
        if not ids:
            return {}
        rows = session.execute(
            select(
                PlayerGameStatValue.stats_id,
                PlayerGameStatValue.stat_key,
                PlayerGameStatValue.value,
                PlayerGameStatValue.text_value,
            )
            .where(PlayerGameStatValue.stats_id.in_(ids))
            .order_by(PlayerGameStatValue.stats_id, PlayerGameStatValue.stat_key)
        ).all()
        values: dict[int, dict[str, StatValue]] = defaultdict(dict)
        for stats_id, key, value, text_value in rows:
            if text_value is not None:
                values[stats_id][key] = text_value
            elif value is not None:
                values[stats_id][key] = float(value)
        return dict(values)

    def _to_domain(self, session: Session, rows: Sequence[PlayerGameStat]) -> list[PlayerGameStats]:
        values = self._load_values(session, [row.id for row in rows])
        return [
            PlayerGameStats(
                stats_id=row.id,
                player_id=row.player_id,
                game_id=row.game_id,
                stats=values.get(row.id, {}),
                matches_played=row.matches_played,
                ranking_score=row.ranking_score,
                tier=Tier(row.tier),
                last_match_at=row.last_match_at,
            )
            for row in rows
        ]


def _insert_for(session: Session, model: type[Any]):
    bind = session.get_bind()
    try:
        insert_fn = _UPSERT_DIALECTS[bind.dialect.name]
    except KeyError as exc:
        raise RuntimeError(
            f"Upserts are not supported on dialect {bind.dialect.name!r}; "
            f"expected one of {sorted(_UPSERT_DIALECTS)}"
        ) from exc
    return insert_fn(model)


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


STATS_REPOSITORY = StatsRepository()

__all__ = ["STATS_REPOSITORY", "StatsRepository"]

"""Load game definitions (stat schema + ranking weights) from TOML files."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from uuid import UUID

from domain.common import GameConfig, StatField
from domain.config_base import load_configs
from domain.errors import GameNotFoundError

WEIGHT_SUM_TOLERANCE = 0.01
STAT_FIELD_TYPES = frozenset({"integer", "float", "string"})


@dataclass(frozen=True)
class GameDefinition:
    """One parsed game file."""

    name: str
    file_path: Path
    game: GameConfig


class GameCatalog:
    """In-memory game lookup keyed by game id."""

    def __init__(self, games: Iterable[GameConfig]) -> None:
        self._games: dict[UUID, GameConfig] = {}
        for game in games:
            if game.game_id in self._games:
                raise ValueError(f"Duplicate game id registered: {game.game_id}")
            self._games[game.game_id] = game

    @classmethod
    def from_directory(cls, config_dir: Path) -> GameCatalog:
        return cls(definition.game for definition in load_game_definitions(config_dir))

    def get_game(self, game_id: UUID) -> GameConfig:
        try:
            return self._games[game_id]
        except KeyError as exc:
            raise GameNotFoundError(game_id) from exc

    def get_by_slug(self, slug: str) -> GameConfig:
        for game in self._games.values():
            if game.slug == slug:
                return game
        raise GameNotFoundError(slug)

    def games(self) -> list[GameConfig]:
        return sorted(self._games.values(), key=lambda game: game.slug)


def validate_ranking_weights(weights: Mapping[str, float], *, tolerance: float = WEIGHT_SUM_TOLERANCE) -> None:
    """Require non-negative weights summing to 1.0 within tolerance.

    An empty mapping is accepted; such games are scored by the generic fallback.
    """
    if not weights:
        return
    negative = sorted(key for key, weight in weights.items() if weight < 0.0)
    if negative:
        raise ValueError(f"ranking weights must be >= 0: {negative}")
    total = sum(weights.values())
    if abs(total - 1.0) > tolerance:
        raise ValueError(f"ranking weights must sum to 1.0 (+/- {tolerance}), got {total:.4f}")


def load_game_definitions(config_dir: Path) -> list[GameDefinition]:
    """Load and validate all game TOML files in a directory."""
    definitions = load_configs(config_dir, _parse_game_definition, duplicate_name_label="game")
    ids = [definition.game.game_id for definition in definitions]
    if len(ids) != len(set(ids)):
        raise ValueError(f"Duplicate game ids found in {config_dir}")
    slugs = [definition.game.slug for definition in definitions]
    if len(slugs) != len(set(slugs)):
        raise ValueError(f"Duplicate game slugs found in {config_dir}: {slugs}")
    return definitions


def _parse_game_definition(raw: dict[str, Any], file_path: Path) -> GameDefinition:
    game_raw = raw.get("game", {})

    name = str(game_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [game].name is required")

    slug = str(game_raw.get("slug", "")).strip()
    if not slug:
        raise ValueError(f"{file_path}: [game].slug is required")

    raw_id = game_raw.get("id")
    if raw_id is None:
        raise ValueError(f"{file_path}: [game].id is required")
    try:
        game_id = UUID(str(raw_id))
    except ValueError as exc:
        raise ValueError(f"{file_path}: [game].id must be a UUID, got {raw_id!r}") from exc

    description_value = game_raw.get("description")
    description = None if description_value is None else str(description_value)

    stat_schema = {
        str(key): _parse_stat_field(key, field_raw, file_path)
        for key, field_raw in raw.get("stat_schema", {}).items()
    }

    weights_raw = raw.get("ranking_weights", {})
    try:
        ranking_weights = {str(key): float(value) for key, value in weights_raw.items()}
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{file_path}: [ranking_weights] values must be numbers") from exc
    try:
        validate_ranking_weights(ranking_weights)
    except ValueError as exc:
        raise ValueError(f"{file_path}: [ranking_weights] {exc}") from exc

    return GameDefinition(
        name=name,
        file_path=file_path,
        game=GameConfig(
            game_id=game_id,
            slug=slug,
            name=name,
            description=description,
            stat_schema=stat_schema,
            ranking_weights=ranking_weights,
            active=bool(game_raw.get("active", True)),
        ),
    )


def _parse_stat_field(key: str, field_raw: Any, file_path: Path) -> StatField:
    if not isinstance(field_raw, dict):
        raise ValueError(f"{file_path}: [stat_schema.{key}] must be a table")
    field_type = str(field_raw.get("type", "")).strip()
    if field_type not in STAT_FIELD_TYPES:
        raise ValueError(
            f"{file_path}: [stat_schema.{key}].type must be one of {sorted(STAT_FIELD_TYPES)}"
        )
    minimum = field_raw.get("min")
    maximum = field_raw.get("max")
    if minimum is not None and maximum is not None and float(minimum) > float(maximum):
        raise ValueError(f"{file_path}: [stat_schema.{key}] min must be <= max")
    label = field_raw.get("label")
    return StatField(
        type=field_type,
        label=None if label is None else str(label),
        min=None if minimum is None else float(minimum),
        max=None if maximum is None else float(maximum),
    )


__all__ = [
    "GameCatalog",
    "GameDefinition",
    "load_game_definitions",
    "validate_ranking_weights",
]

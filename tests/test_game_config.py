"""Tests for TOML-based game definition loading."""

from __future__ import annotations

from pathlib import Path
from uuid import UUID

import pytest

from domain.errors import GameNotFoundError
from domain.games import GameCatalog, load_game_definitions, validate_ranking_weights

ROOT_DIR = Path(__file__).resolve().parents[1]

GAME_TEMPLATE = """
[game]
id = "{game_id}"
slug = "{slug}"
name = "{name}"

[stat_schema.kills]
type = "integer"
min = 0
label = "Kills"

[ranking_weights]
{weights}
"""


def _write_game(
    directory: Path,
    file_name: str,
    *,
    game_id: str = "11111111-1111-4111-8111-111111111111",
    slug: str = "warzone",
    name: str = "Warzone",
    weights: str = "kd_ratio = 0.6\navg_kills = 0.4",
) -> Path:
    path = directory / file_name
    path.write_text(GAME_TEMPLATE.format(game_id=game_id, slug=slug, name=name, weights=weights).strip())
    return path


def test_load_game_definitions_from_directory(tmp_path: Path) -> None:
    _write_game(tmp_path, "warzone.toml")

    definitions = load_game_definitions(tmp_path)
    assert len(definitions) == 1

    game = definitions[0].game
    assert game.game_id == UUID("11111111-1111-4111-8111-111111111111")
    assert game.slug == "warzone"
    assert game.name == "Warzone"
    assert game.active is True
    assert game.stat_schema["kills"].type == "integer"
    assert game.stat_schema["kills"].min == pytest.approx(0.0)
    assert game.ranking_weights == pytest.approx({"kd_ratio": 0.6, "avg_kills": 0.4})


def test_shipped_game_definitions_load() -> None:
    catalog = GameCatalog.from_directory(ROOT_DIR / "configs" / "games")
    assert catalog.get_by_slug("warzone").ranking_weights["kd_ratio"] == pytest.approx(0.4)
    assert "legend" in catalog.get_by_slug("apex").stat_schema


def test_weights_within_tolerance_are_accepted() -> None:
    validate_ranking_weights({"a": 0.5, "b": 0.505})
    validate_ranking_weights({})


def test_weights_outside_tolerance_are_rejected() -> None:
    with pytest.raises(ValueError, match="must sum to 1.0"):
        validate_ranking_weights({"a": 0.5, "b": 0.52})


def test_negative_weights_are_rejected() -> None:
    with pytest.raises(ValueError, match=">= 0"):
        validate_ranking_weights({"a": 1.5, "b": -0.5})


def test_bad_weight_sum_names_file(tmp_path: Path) -> None:
    _write_game(tmp_path, "bad.toml", weights="kd_ratio = 0.9")
    with pytest.raises(ValueError, match=r"bad\.toml: \[ranking_weights\]"):
        load_game_definitions(tmp_path)


def test_empty_weights_are_allowed(tmp_path: Path) -> None:
    _write_game(tmp_path, "plain.toml", weights="")
    assert load_game_definitions(tmp_path)[0].game.ranking_weights == {}


def test_invalid_game_id_is_rejected(tmp_path: Path) -> None:
    _write_game(tmp_path, "bad.toml", game_id="not-a-uuid")
    with pytest.raises(ValueError, match="must be a UUID"):
        load_game_definitions(tmp_path)


def test_unknown_stat_type_is_rejected(tmp_path: Path) -> None:
    (tmp_path / "bad.toml").write_text(
        """
[game]
id = "11111111-1111-4111-8111-111111111111"
slug = "x"
name = "X"

[stat_schema.kills]
type = "vector"
""".strip()
    )
    with pytest.raises(ValueError, match=r"\[stat_schema.kills\].type"):
        load_game_definitions(tmp_path)


def test_duplicate_names_raise_error(tmp_path: Path) -> None:
    _write_game(tmp_path, "a.toml", game_id="11111111-1111-4111-8111-111111111111", slug="a")
    _write_game(tmp_path, "b.toml", game_id="22222222-2222-4222-8222-222222222222", slug="b")
    with pytest.raises(ValueError, match="Duplicate game names"):
        load_game_definitions(tmp_path)


def test_duplicate_slugs_raise_error(tmp_path: Path) -> None:
    _write_game(tmp_path, "a.toml", game_id="11111111-1111-4111-8111-111111111111", name="A")
    _write_game(tmp_path, "b.toml", game_id="22222222-2222-4222-8222-222222222222", name="B")
    with pytest.raises(ValueError, match="Duplicate game slugs"):
        load_game_definitions(tmp_path)


def test_missing_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_game_definitions(tmp_path / "nope")


def test_empty_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="No .toml config files"):
        load_game_definitions(tmp_path)


def test_catalog_lookup_of_unknown_game_raises(tmp_path: Path) -> None:
    _write_game(tmp_path, "warzone.toml")
    catalog = GameCatalog.from_directory(tmp_path)
    with pytest.raises(GameNotFoundError):
        catalog.get_game(UUID("99999999-9999-4999-8999-999999999999"))
    with pytest.raises(GameNotFoundError):
        catalog.get_by_slug("apex")

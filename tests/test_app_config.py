"""Tests for app config loading and logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from settings import DEFAULT_DB_URL, AppConfig, configure_logging, load_app_config


def test_load_app_config_resolves_games_dir_relative_to_file(tmp_path: Path) -> None:
    config_path = tmp_path / "app.toml"
    config_path.write_text(
        """
[database]
url = "sqlite+pysqlite:///tourney.db"

[games]
config_dir = "games"

[logging]
level = "debug"
""".strip()
    )

    config = load_app_config(config_path)
    assert config.db_url == "sqlite+pysqlite:///tourney.db"
    assert config.games_dir == (tmp_path / "games").resolve()
    assert config.log_level == "DEBUG"


def test_missing_sections_use_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "app.toml"
    config_path.write_text("")
    config = load_app_config(config_path)
    assert config.db_url == DEFAULT_DB_URL
    assert config.log_level == "INFO"


def test_explicit_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_app_config(tmp_path / "missing.toml")


def test_invalid_log_level_is_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "app.toml"
    config_path.write_text('[logging]\nlevel = "chatty"\n')
    with pytest.raises(ValueError, match=r"\[logging\].level"):
        load_app_config(config_path)


def test_invalid_toml_names_file(tmp_path: Path) -> None:
    config_path = tmp_path / "broken.toml"
    config_path.write_text("[database\nurl = ")
    with pytest.raises(ValueError, match="broken.toml: invalid TOML"):
        load_app_config(config_path)


def test_app_config_defaults() -> None:
    assert AppConfig().db_url == DEFAULT_DB_URL


def test_configure_logging_installs_single_handler() -> None:
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        configure_logging("warning")
        configure_logging("debug")
        added = [handler for handler in root.handlers if handler not in before]
        assert len(added) == 1
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(level)
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)

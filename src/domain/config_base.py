"""Shared TOML config-loading utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Protocol, TypeVar
import tomllib


class NamedConfig(Protocol):
    name: str
    file_path: Path


T = TypeVar("T", bound=NamedConfig)


def read_toml(file_path: Path) -> dict[str, Any]:
    """Read one TOML file, naming the file in parse errors."""
    try:
        with file_path.open("rb") as file:
            return tomllib.load(file)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"{file_path}: invalid TOML: {exc}") from exc


def load_configs(
    config_dir: Path,
    parser: Callable[[dict[str, Any], Path], T],
    *,
    duplicate_name_label: str = "config",
) -> list[T]:
    """Load all TOML files in a directory with duplicate-name validation."""
    if not config_dir.exists():
        raise FileNotFoundError(f"Config directory not found: {config_dir}")
    if not config_dir.is_dir():
        raise NotADirectoryError(f"Config path is not a directory: {config_dir}")

    config_files = sorted(config_dir.glob("*.toml"))
    if not config_files:
        raise ValueError(f"No .toml config files found in: {config_dir}")

    configs = [parser(read_toml(file_path), file_path) for file_path in config_files]

    names = [config.name for config in configs]
    if len(names) != len(set(names)):
        raise ValueError(f"Duplicate {duplicate_name_label} names found in {config_dir}: {names}")

    return configs


__all__ = ["NamedConfig", "load_configs", "read_toml"]

"""TOML config loading for pasparse.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_NAME = "pasparse.toml"


@dataclass
class CheckConfig:
    extensions: list[str] = field(default_factory=lambda: [".pas", ".pp", ".dpr"])
    color: bool = True


@dataclass
class ViewConfig:
    locations: bool = False


@dataclass
class PasparseConfig:
    check: CheckConfig = field(default_factory=CheckConfig)
    view: ViewConfig = field(default_factory=ViewConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find pasparse.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> PasparseConfig:
    """Parse a pasparse.toml file into a PasparseConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = PasparseConfig()

    if "check" in data:
        chk = data["check"]
        config.check = CheckConfig(
            extensions=chk.get("extensions", CheckConfig().extensions),
            color=chk.get("color", True),
        )

    if "view" in data:
        config.view = ViewConfig(locations=data["view"].get("locations", False))

    return config


def resolve_config(start_path: Path | None = None) -> PasparseConfig:
    """Load the nearest pasparse.toml, or the defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return PasparseConfig()

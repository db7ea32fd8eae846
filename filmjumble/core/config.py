from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

BUNDLED_DATA_DIR = Path(__file__).resolve().parent.parent / "data"
USER_DIR = Path.home() / ".filmjumble"


@dataclass(frozen=True)
class GameConfig:
    """Economy constants and file locations. Loaded from YAML, defaults match the shipped game."""

    starting_coins: int = 100
    hint_cost: int = 20
    skip_cost: int = 50
    win_reward: int = 10
    data_dir: Path = BUNDLED_DATA_DIR
    packs_file: str = "allLevelDetails_v1.json"
    events_file: str = "event_allLevelDetails_v1.json"
    progress_file: Path = field(default_factory=lambda: USER_DIR / "progress.json")


_INT_KEYS = ("starting_coins", "hint_cost", "skip_cost", "win_reward")
_STR_KEYS = ("packs_file", "events_file")
_PATH_KEYS = ("data_dir", "progress_file")


def load_config(path: Path) -> GameConfig:
    """Read a YAML config file. Missing keys keep their defaults."""
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        return GameConfig()
    if not isinstance(raw, dict):
        raise ValueError(f"{path.name}: expected a YAML mapping")

    known = {f.name for f in fields(GameConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"{path.name}: unknown keys {', '.join(unknown)}")

    values = {}
    for key in _INT_KEYS:
        if key in raw:
            value = raw[key]
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{path.name}: '{key}' must be a non-negative integer")
            values[key] = value
    for key in _STR_KEYS:
        if key in raw:
            value = raw[key]
            if not value or not isinstance(value, str):
                raise ValueError(f"{path.name}: missing or invalid '{key}'")
            values[key] = value.strip()
    for key in _PATH_KEYS:
        if key in raw:
            value = raw[key]
            if not value or not isinstance(value, str):
                raise ValueError(f"{path.name}: missing or invalid '{key}'")
            p = Path(value).expanduser()
            # relative paths are resolved against the config file
            values[key] = p if p.is_absolute() else (path.parent / p).resolve()
    return replace(GameConfig(), **values)


def find_config(user_dir: Optional[Path] = None) -> GameConfig:
    """Use ~/.filmjumble/config.yaml when present, else the bundled config.yaml."""
    candidates = [(user_dir or USER_DIR) / "config.yaml", BUNDLED_DATA_DIR / "config.yaml"]
    for candidate in candidates:
        if candidate.exists():
            logger.info("Loading config from %s", candidate)
            return load_config(candidate)
    return GameConfig()

"""Shared fixtures: a throwaway data directory with packs, events and word lists."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from filmjumble.core.catalog import Catalog
from filmjumble.core.config import GameConfig
from filmjumble.core.progress import ProgressStore
from filmjumble.core.progression import ProgressionController


DEFAULT_PACKS = [
    {"name": "Classic", "lvls": 3},
    {"name": "Stars", "lvls": 2, "is_star": True},
    {"name": "Gated", "lvls": 2, "star": 2},
]
DEFAULT_EVENTS = [
    {"id": "diwali", "name": "Diwali Special", "lvls": 2, "is_star": True},
]
DEFAULT_WORDS = {
    "Classic": ["Raja", "Sholay", "Dil Se"],
    "Stars": ["Border", "Satya"],
    "Gated": ["Lagaan", "Golmaal"],
    "Events/Diwali Special": ["Om Shanti Om", "Don"],
}


def write_data_dir(
    root: Path,
    packs: Optional[List[dict]] = None,
    events: Optional[List[dict]] = None,
    words: Optional[Dict[str, object]] = None,
) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / "allLevelDetails_v1.json").write_text(
        json.dumps(DEFAULT_PACKS if packs is None else packs), encoding="utf-8"
    )
    (root / "event_allLevelDetails_v1.json").write_text(
        json.dumps(DEFAULT_EVENTS if events is None else events), encoding="utf-8"
    )
    for rel, units in (DEFAULT_WORDS if words is None else words).items():
        d = root / rel
        d.mkdir(parents=True, exist_ok=True)
        (d / "units.json").write_text(json.dumps(units), encoding="utf-8")
    return root


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    return write_data_dir(tmp_path / "data")


@pytest.fixture()
def catalog(data_dir: Path) -> Catalog:
    c = Catalog(data_dir)
    c.load()
    return c


@pytest.fixture()
def store(tmp_path: Path, catalog: Catalog) -> ProgressStore:
    """ProgressStore backed by a temp file so tests don't touch ~/.filmjumble."""
    s = ProgressStore(tmp_path / "progress" / "progress.json")
    s.ensure_packs(p.id for p in catalog.all_packs())
    return s


@pytest.fixture()
def controller(catalog: Catalog, store: ProgressStore) -> ProgressionController:
    return ProgressionController(catalog, store, GameConfig())


@pytest.fixture()
def make_controller(tmp_path: Path) -> Callable[..., ProgressionController]:
    """Build a controller over custom catalog data."""

    def _make(**kwargs) -> ProgressionController:
        root = write_data_dir(tmp_path / "custom", **kwargs)
        c = Catalog(root)
        c.load()
        s = ProgressStore(tmp_path / "custom_progress.json")
        s.ensure_packs(p.id for p in c.all_packs())
        return ProgressionController(c, s, GameConfig())

    return _make

"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

from filmjumble.core.catalog import Catalog, Pack
from filmjumble.core.progression import ProgressionController


@dataclass
class PackCardState:
    """UI state for one pack row on the home screen."""

    pack: Pack
    unlocked: bool
    progress: float
    cover_path: Path


@dataclass
class LevelTileState:
    """UI state for one level in a pack grid: unlock, completion and focus."""

    index: int
    unlocked: bool
    completed: bool
    image_path: Path
    is_current: bool = False


def build_pack_states(
    packs: List[Pack], catalog: Catalog, controller: ProgressionController
) -> List[PackCardState]:
    return [
        PackCardState(
            pack=pack,
            unlocked=controller.is_pack_unlocked(pack.id),
            progress=controller.pack_progress(pack.id),
            cover_path=catalog.cover_path(pack),
        )
        for pack in packs
    ]


def build_level_states(
    pack: Pack, catalog: Catalog, controller: ProgressionController
) -> List[LevelTileState]:
    """Compute unlock/completion state for every level and mark the first playable one."""
    states = [
        LevelTileState(
            index=i,
            unlocked=controller.can_enter_level(pack.id, i),
            completed=controller.can_replay_as_answer_reveal(pack.id, i),
            image_path=catalog.image_path(pack, i),
        )
        for i in range(pack.lvls)
    ]
    for st in states:
        if st.unlocked and not st.completed:
            st.is_current = True
            break
    return states

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional, Set, Tuple

logger = logging.getLogger(__name__)

DEFAULT_COINS = 100


class ProgressStore:
    """Coins, stars, unlock frontiers and completed levels. Persists to disk across app restarts.

    File: ~/.filmjumble/progress.json unless another path is given. Holds four keys:
    ``coins``, ``stars``, ``unlocked`` (pack id -> highest unlocked level index) and
    ``completed`` (pack id -> {"<level index>": true}). No game rules live here.
    """

    def __init__(self, file_path: Optional[Path] = None, starting_coins: int = DEFAULT_COINS) -> None:
        self._file_path = file_path or Path.home() / ".filmjumble" / "progress.json"
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._starting_coins = starting_coins
        self._batch_depth = 0
        self._dirty = False
        self._coins, self._stars, self._unlocked, self._completed = self._load()

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def coins(self) -> int:
        return self._coins

    @property
    def stars(self) -> int:
        return self._stars

    def unlocked_level(self, pack_id: str) -> int:
        """Highest unlocked level index for the pack (0 when never played)."""
        return self._unlocked.get(pack_id, 0)

    def completed_levels(self, pack_id: str) -> Set[int]:
        return set(self._completed.get(pack_id, set()))

    def is_completed(self, pack_id: str, level_index: int) -> bool:
        return level_index in self._completed.get(pack_id, set())

    def ensure_packs(self, pack_ids: Iterable[str]) -> None:
        """Add default entries for packs that are new since the last run."""
        changed = False
        for pack_id in pack_ids:
            if pack_id not in self._unlocked:
                self._unlocked[pack_id] = 0
                changed = True
            if pack_id not in self._completed:
                self._completed[pack_id] = set()
                changed = True
        if changed:
            self._save()

    def set_coins(self, coins: int) -> None:
        if coins < 0:
            raise ValueError(f"coins cannot be negative: {coins}")
        self._coins = coins
        self._save()

    def set_stars(self, stars: int) -> None:
        if stars < 0:
            raise ValueError(f"stars cannot be negative: {stars}")
        self._stars = stars
        self._save()

    def set_unlocked_level(self, pack_id: str, level_index: int) -> None:
        if level_index < 0:
            raise ValueError(f"unlock frontier cannot be negative: {level_index}")
        self._unlocked[pack_id] = level_index
        self._save()

    def mark_completed(self, pack_id: str, level_index: int) -> None:
        self._completed.setdefault(pack_id, set()).add(level_index)
        self._save()

    @contextmanager
    def batch(self) -> Iterator["ProgressStore"]:
        """Group several writes into a single save on exit."""
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self._dirty:
                self._save()

    def reset(self) -> None:
        """Clear all progress. Only called when user presses reset progress."""
        self._coins = self._starting_coins
        self._stars = 0
        self._unlocked = {key: 0 for key in self._unlocked}
        self._completed = {key: set() for key in self._completed}
        self._save()

    def save(self) -> None:
        """Persist current state to disk (e.g. on app exit)."""
        self._save()

    def _load(self) -> Tuple[int, int, Dict[str, int], Dict[str, Set[int]]]:
        coins, stars = self._starting_coins, 0
        unlocked: Dict[str, int] = {}
        completed: Dict[str, Set[int]] = {}
        if not self._file_path.exists():
            return coins, stars, unlocked, completed
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load progress from %s: %s", self._file_path, e)
            return coins, stars, unlocked, completed
        if not isinstance(payload, dict):
            logger.warning("Ignoring progress file %s: expected an object", self._file_path)
            return coins, stars, unlocked, completed

        try:
            coins = max(0, int(payload.get("coins", coins)))
            stars = max(0, int(payload.get("stars", 0)))
        except (TypeError, ValueError) as e:
            logger.warning("Bad coin/star values in %s: %s", self._file_path, e)
            coins, stars = self._starting_coins, 0

        raw_unlocked = payload.get("unlocked", {})
        if isinstance(raw_unlocked, dict):
            for key, value in raw_unlocked.items():
                try:
                    unlocked[key] = max(0, int(value))
                except (TypeError, ValueError):
                    logger.warning("Ignoring unlock value %r for %s", value, key)

        raw_completed = payload.get("completed", {})
        if isinstance(raw_completed, dict):
            for key, value in raw_completed.items():
                completed[key] = _parse_completed(value)
        return coins, stars, unlocked, completed

    def _save(self) -> None:
        if self._batch_depth:
            self._dirty = True
            return
        self._dirty = False
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "coins": self._coins,
            "stars": self._stars,
            "unlocked": dict(self._unlocked),
            "completed": {
                key: {str(i): True for i in sorted(levels)} for key, levels in self._completed.items()
            },
        }
        try:
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save progress to %s: %s", self._file_path, e)


def _parse_completed(value: object) -> Set[int]:
    # accepts {"0": true, "3": true} and [0, 3]
    if isinstance(value, dict):
        items = [k for k, done in value.items() if done]
    elif isinstance(value, list):
        items = value
    else:
        return set()
    levels: Set[int] = set()
    for item in items:
        try:
            levels.add(int(item))
        except (TypeError, ValueError):
            continue
    return levels

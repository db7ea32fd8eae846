from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from filmjumble.core.errors import DataUnavailable

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Guess the movie!"


class PackCategory(enum.Enum):
    STANDARD = "pack"
    EVENT = "event"


@dataclass(frozen=True)
class Pack:
    id: str
    name: str
    lvls: int
    category: PackCategory
    cover: int = 0
    star: Optional[int] = None
    is_star_eligible: bool = False
    description: str = DEFAULT_DESCRIPTION

    @property
    def is_gated(self) -> bool:
        return self.star is not None and self.star > 0


@dataclass(frozen=True)
class CatalogData:
    packs: List[Pack]
    events: List[Pack]


class Catalog:
    """Pack metadata and per-pack word lists read from a data directory.

    Layout::

        <data_dir>/allLevelDetails_v1.json
        <data_dir>/event_allLevelDetails_v1.json
        <data_dir>/<name>/units.json
        <data_dir>/Events/<name>/units.json

    Word lists are cached for the lifetime of the instance.
    """

    def __init__(
        self,
        data_dir: Path,
        packs_file: str = "allLevelDetails_v1.json",
        events_file: str = "event_allLevelDetails_v1.json",
    ) -> None:
        self._data_dir = Path(data_dir)
        self._packs_file = packs_file
        self._events_file = events_file
        self._packs: List[Pack] = []
        self._events: List[Pack] = []
        self._words: Dict[str, List[str]] = {}
        self._error: Optional[str] = None

    @property
    def packs(self) -> List[Pack]:
        return list(self._packs)

    @property
    def events(self) -> List[Pack]:
        return list(self._events)

    @property
    def error(self) -> Optional[str]:
        """Message of the last failed load, or None."""
        return self._error

    def all_packs(self) -> List[Pack]:
        return self._packs + self._events

    def load(self) -> CatalogData:
        """Read both metadata documents. Raises DataUnavailable; nothing is kept on failure."""
        try:
            packs = self._read_sequence(self._data_dir / self._packs_file, PackCategory.STANDARD)
            events = self._read_sequence(self._data_dir / self._events_file, PackCategory.EVENT)
        except DataUnavailable as e:
            self._error = str(e)
            logger.error("Failed to load game data: %s", e)
            raise
        self._packs, self._events = packs, events
        self._error = None
        logger.info("Catalog loaded: %d packs, %d events", len(packs), len(events))
        return CatalogData(packs=list(packs), events=list(events))

    def resolve(self, pack_id: str) -> Optional[Pack]:
        for pack in self._packs:
            if pack.id == pack_id:
                return pack
        for pack in self._events:
            if pack.id == pack_id:
                return pack
        return None

    def load_words(self, pack_id: str) -> List[str]:
        """Return the answer list of a pack, reading it on first use. Never raises."""
        cached = self._words.get(pack_id)
        if cached is not None:
            return list(cached)
        pack = self.resolve(pack_id)
        if pack is None:
            logger.warning("Unknown pack %r, no words to load", pack_id)
            return []
        path = self.pack_dir(pack) / "units.json"
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.error("Failed to load levels for %s from %s: %s", pack_id, path, e)
            return []
        if not isinstance(payload, list):
            logger.error("%s: expected a list of answers", path)
            return []
        words = [item if isinstance(item, str) else "" for item in payload]
        if any(not isinstance(item, str) for item in payload):
            logger.warning("%s: non-string answers treated as missing", path)
        if len(words) != pack.lvls:
            logger.warning("%s has %d answers for %d levels", pack.id, len(words), pack.lvls)
        self._words[pack_id] = words
        return list(words)

    def pack_dir(self, pack: Pack) -> Path:
        if pack.category is PackCategory.EVENT:
            return self._data_dir / "Events" / pack.name
        return self._data_dir / pack.name

    def image_path(self, pack: Pack, level_index: int) -> Path:
        return self.pack_dir(pack) / "img" / f"{level_index + 1}.webp"

    def cover_path(self, pack: Pack) -> Path:
        return self.image_path(pack, pack.cover)

    def _read_sequence(self, path: Path, category: PackCategory) -> List[Pack]:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            raise DataUnavailable(f"{path.name}: {e}") from e
        if not isinstance(payload, list):
            raise DataUnavailable(f"{path.name}: expected a list of packs")

        packs: List[Pack] = []
        seen: set = set()
        for i, raw in enumerate(payload):
            if not isinstance(raw, dict):
                raise DataUnavailable(f"{path.name}[{i}]: expected an object")
            pack = _parse_pack(raw, category, f"{path.name}[{i}]")
            if pack.name in seen:
                raise DataUnavailable(f"{path.name}: duplicate pack name {pack.name!r}")
            seen.add(pack.name)
            packs.append(pack)
        return packs


def _parse_pack(raw: dict, category: PackCategory, where: str) -> Pack:
    name = raw.get("name")
    if not name or not isinstance(name, str):
        raise DataUnavailable(f"{where}: missing or invalid 'name'")
    lvls = raw.get("lvls")
    if isinstance(lvls, bool) or not isinstance(lvls, int) or lvls <= 0:
        raise DataUnavailable(f"{where}: 'lvls' must be a positive integer")
    star = raw.get("star")
    if star is not None and (isinstance(star, bool) or not isinstance(star, int) or star < 0):
        raise DataUnavailable(f"{where}: 'star' must be a non-negative integer")
    cover = raw.get("cover", 0)
    if isinstance(cover, bool) or not isinstance(cover, int) or not 0 <= cover < lvls:
        cover = 0
    return Pack(
        id=str(raw.get("id") or name),
        name=name,
        lvls=lvls,
        category=category,
        cover=cover,
        star=star,
        is_star_eligible=bool(raw.get("is_star", False)),
        description=str(raw.get("description") or DEFAULT_DESCRIPTION),
    )

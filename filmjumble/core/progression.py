from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from filmjumble.core.catalog import Catalog, Pack
from filmjumble.core.config import GameConfig
from filmjumble.core.errors import AccessDenied, InvalidLevelData
from filmjumble.core.progress import ProgressStore
from filmjumble.core.puzzle import normalize_word

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LevelTicket:
    """Everything needed to start playing a level."""

    pack: Pack
    level_index: int
    raw_word: str
    image_path: Path


@dataclass(frozen=True)
class AnswerReveal:
    pack: Pack
    level_index: int
    raw_word: str
    image_path: Path


@dataclass(frozen=True)
class WinReward:
    coins: int
    star_awarded: bool
    first_completion: bool
    frontier_advanced: bool


@dataclass(frozen=True)
class NextLevel:
    level_index: int


@dataclass(frozen=True)
class PackComplete:
    pack_id: str


Advance = Union[NextLevel, PackComplete]


class ProgressionController:
    """Level access rules, win bookkeeping and the coin/star economy.

    The only writer of the ProgressStore.
    """

    def __init__(self, catalog: Catalog, store: ProgressStore, config: Optional[GameConfig] = None) -> None:
        self._catalog = catalog
        self._store = store
        self._config = config or GameConfig()

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def coins(self) -> int:
        return self._store.coins

    @property
    def stars(self) -> int:
        return self._store.stars

    def is_pack_unlocked(self, pack_id: str) -> bool:
        pack = self._catalog.resolve(pack_id)
        if pack is None:
            return False
        if pack.star is None:
            return True
        return self._store.stars >= pack.star

    def is_level_unlocked(self, pack_id: str, level_index: int) -> bool:
        return level_index >= 0 and self._store.unlocked_level(pack_id) >= level_index

    def can_enter_level(self, pack_id: str, level_index: int) -> bool:
        pack = self._catalog.resolve(pack_id)
        if pack is None or not 0 <= level_index < pack.lvls:
            return False
        return self.is_pack_unlocked(pack_id) and self.is_level_unlocked(pack_id, level_index)

    def can_replay_as_answer_reveal(self, pack_id: str, level_index: int) -> bool:
        return self._store.is_completed(pack_id, level_index)

    def pack_progress(self, pack_id: str) -> float:
        """Unlock frontier as a fraction of the pack's levels, clamped to 0..1."""
        pack = self._catalog.resolve(pack_id)
        if pack is None:
            return 0.0
        return max(0.0, min(1.0, self._store.unlocked_level(pack_id) / pack.lvls))

    def enter_level(self, pack_id: str, level_index: int) -> LevelTicket:
        """Check access and fetch the answer. Completed levels can only be revealed."""
        pack = self._catalog.resolve(pack_id)
        if pack is None:
            raise AccessDenied(f"unknown pack {pack_id!r}")
        if not self.can_enter_level(pack_id, level_index):
            logger.warning("Denied entry to %s level %d", pack_id, level_index)
            raise AccessDenied(f"{pack.name} level {level_index + 1} is locked")
        if self._store.is_completed(pack_id, level_index):
            raise AccessDenied(f"{pack.name} level {level_index + 1} is already solved")
        raw_word = self._word_for(pack, level_index)
        return LevelTicket(
            pack=pack,
            level_index=level_index,
            raw_word=raw_word,
            image_path=self._catalog.image_path(pack, level_index),
        )

    def reveal_answer(self, pack_id: str, level_index: int) -> AnswerReveal:
        pack = self._catalog.resolve(pack_id)
        if pack is None or not self.can_replay_as_answer_reveal(pack_id, level_index):
            raise AccessDenied(f"level {level_index + 1} of {pack_id!r} is not solved yet")
        return AnswerReveal(
            pack=pack,
            level_index=level_index,
            raw_word=self._word_for(pack, level_index),
            image_path=self._catalog.image_path(pack, level_index),
        )

    def on_win(self, pack_id: str, level_index: int) -> WinReward:
        """Record a solved (or skipped) level and pay the win reward."""
        pack = self._catalog.resolve(pack_id)
        if pack is None:
            raise AccessDenied(f"unknown pack {pack_id!r}")
        first_completion = not self._store.is_completed(pack_id, level_index)
        star_awarded = first_completion and pack.is_star_eligible
        frontier_advanced = self._store.unlocked_level(pack_id) == level_index
        reward = self._config.win_reward

        with self._store.batch():
            self._store.mark_completed(pack_id, level_index)
            if frontier_advanced:
                self._store.set_unlocked_level(pack_id, level_index + 1)
            if star_awarded:
                self._store.set_stars(self._store.stars + 1)
            # paid on every win, repeats included
            self._store.set_coins(self._store.coins + reward)

        logger.info(
            "Won %s level %d: +%d coins%s",
            pack_id,
            level_index,
            reward,
            ", +1 star" if star_awarded else "",
        )
        return WinReward(
            coins=reward,
            star_awarded=star_awarded,
            first_completion=first_completion,
            frontier_advanced=frontier_advanced,
        )

    def spend_for_hint(self) -> bool:
        return self._spend(self._config.hint_cost, "hint")

    def spend_for_skip(self, pack_id: str, level_index: int) -> bool:
        """Pay the skip cost and complete the level as if it had been solved."""
        if self._catalog.resolve(pack_id) is None:
            raise AccessDenied(f"unknown pack {pack_id!r}")
        if not self._spend(self._config.skip_cost, "skip"):
            return False
        self.on_win(pack_id, level_index)
        return True

    def advance_or_finish(self, pack_id: str, level_index: int) -> Advance:
        pack = self._catalog.resolve(pack_id)
        if pack is not None and level_index + 1 < pack.lvls:
            return NextLevel(level_index + 1)
        return PackComplete(pack_id)

    def _spend(self, cost: int, reason: str) -> bool:
        balance = self._store.coins
        if balance < cost:
            logger.info("Not enough coins for %s: need %d, have %d", reason, cost, balance)
            return False
        self._store.set_coins(balance - cost)
        logger.info("Spent %d coins on %s", cost, reason)
        return True

    def _word_for(self, pack: Pack, level_index: int) -> str:
        words = self._catalog.load_words(pack.id)
        if not 0 <= level_index < len(words) or not normalize_word(words[level_index]):
            raise InvalidLevelData(f"no answer for {pack.name} level {level_index + 1}")
        return words[level_index]

from __future__ import annotations

import enum
import itertools
import logging
import random
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from filmjumble.core.errors import InvalidLevelData, InvalidMove, NoEmptySlot

logger = logging.getLogger(__name__)

_pool_ids = itertools.count(1)


def normalize_word(raw_word: str) -> str:
    """Strip all whitespace and upper-case: "Sholay " -> "SHOLAY"."""
    return re.sub(r"\s+", "", raw_word).upper()


class Verdict(enum.Enum):
    INCOMPLETE = "incomplete"
    MISMATCH = "mismatch"
    WIN = "win"


@dataclass(frozen=True)
class PoolTile:
    """One scrambled letter. ``pool_id`` keeps duplicate letters apart."""

    letter: str
    pool_id: int


@dataclass
class Attempt:
    raw_word: str
    target_word: str
    pool: Tuple[PoolTile, ...]
    slots: List[Optional[int]]


@dataclass(frozen=True)
class HintResult:
    """``slot_index`` is None when every slot already holds the right letter."""

    slot_index: Optional[int]
    verdict: Verdict

    @property
    def applied(self) -> bool:
        return self.slot_index is not None


class PuzzleEngine:
    """State machine for one level attempt.

    The pool is a shuffled permutation of the answer's letters. Each slot is either
    empty (None) or holds the id of exactly one pool tile, and a tile sits in at most
    one slot. The attempt moves Empty -> PartiallyFilled -> Full; a full board either
    matches (won, terminal) or mismatches and stays editable.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self._attempt: Optional[Attempt] = None
        self._won = False

    @property
    def attempt(self) -> Attempt:
        if self._attempt is None:
            raise InvalidMove("no attempt in progress")
        return self._attempt

    @property
    def has_attempt(self) -> bool:
        return self._attempt is not None

    @property
    def is_won(self) -> bool:
        return self._won

    @property
    def verdict(self) -> Verdict:
        return self.evaluate_win()

    def start_attempt(self, raw_word: str) -> Attempt:
        """Normalize ``raw_word`` and build a freshly shuffled, empty attempt."""
        target = normalize_word(raw_word)
        if not target:
            raise InvalidLevelData(f"empty answer: {raw_word!r}")
        letters = list(target)
        self._rng.shuffle(letters)
        pool = tuple(PoolTile(letter=ch, pool_id=next(_pool_ids)) for ch in letters)
        self._attempt = Attempt(
            raw_word=raw_word,
            target_word=target,
            pool=pool,
            slots=[None] * len(target),
        )
        self._won = False
        return self._attempt

    def reset_attempt(self) -> Attempt:
        return self.start_attempt(self.attempt.raw_word)

    def select_letter(self, pool_id: int) -> Verdict:
        """Place a tile in the first empty slot (left to right) and evaluate."""
        attempt = self._mutable_attempt()
        self._tile(pool_id)
        if pool_id in attempt.slots:
            raise InvalidMove(f"tile {pool_id} is already placed")
        try:
            slot_index = attempt.slots.index(None)
        except ValueError:
            raise NoEmptySlot("all slots are filled") from None
        attempt.slots[slot_index] = pool_id
        return self._evaluate()

    def deselect_letter(self, slot_index: int) -> None:
        attempt = self._mutable_attempt()
        if not 0 <= slot_index < len(attempt.slots):
            raise InvalidMove(f"slot {slot_index} out of range")
        attempt.slots[slot_index] = None

    def deselect_last(self) -> Optional[int]:
        """Clear the right-most filled slot. Returns its index, or None if all are empty."""
        attempt = self._mutable_attempt()
        for i in range(len(attempt.slots) - 1, -1, -1):
            if attempt.slots[i] is not None:
                attempt.slots[i] = None
                return i
        return None

    def is_pool_id_placed(self, pool_id: int) -> bool:
        return pool_id in self.attempt.slots

    def find_unplaced(self, letter: str) -> Optional[int]:
        """First tile carrying ``letter`` that is not in any slot."""
        letter = letter.upper()
        for tile in self.attempt.pool:
            if tile.letter == letter and not self.is_pool_id_placed(tile.pool_id):
                return tile.pool_id
        return None

    def letter_for(self, pool_id: int) -> str:
        return self._tile(pool_id).letter

    def placed_word(self) -> str:
        """Letters in slot order; empty slots are skipped."""
        return "".join(self.letter_for(pid) for pid in self.attempt.slots if pid is not None)

    def correct_count(self) -> int:
        attempt = self.attempt
        return sum(
            1
            for i, pid in enumerate(attempt.slots)
            if pid is not None and self.letter_for(pid) == attempt.target_word[i]
        )

    def evaluate_win(self) -> Verdict:
        attempt = self.attempt
        if None in attempt.slots:
            return Verdict.INCOMPLETE
        word = "".join(self.letter_for(pid) for pid in attempt.slots)
        return Verdict.WIN if word == attempt.target_word else Verdict.MISMATCH

    def apply_hint(self) -> HintResult:
        """Put the right letter into the first empty or wrong slot.

        An unplaced tile is preferred. Otherwise a tile is taken from a slot where it
        is wrong, which leaves that slot empty. The letter previously in the target
        slot goes back to the pool.
        """
        attempt = self._mutable_attempt()
        target_slot = self._first_wrong_slot()
        if target_slot is None:
            return HintResult(slot_index=None, verdict=self.evaluate_win())

        needed = attempt.target_word[target_slot]
        chosen: Optional[int] = None
        fallback: Optional[int] = None
        for tile in attempt.pool:
            if tile.letter != needed:
                continue
            if tile.pool_id not in attempt.slots:
                chosen = tile.pool_id
                break
            old_slot = attempt.slots.index(tile.pool_id)
            if attempt.target_word[old_slot] != needed and fallback is None:
                fallback = tile.pool_id
        if chosen is None:
            chosen = fallback
        if chosen is None:
            # the pool is a permutation of the target, so this cannot happen
            raise InvalidMove(f"no tile for letter {needed!r}")

        if chosen in attempt.slots:
            attempt.slots[attempt.slots.index(chosen)] = None
        attempt.slots[target_slot] = chosen
        logger.debug("Hint placed %s in slot %d", needed, target_slot)
        return HintResult(slot_index=target_slot, verdict=self._evaluate())

    def _first_wrong_slot(self) -> Optional[int]:
        attempt = self.attempt
        for i, pid in enumerate(attempt.slots):
            if pid is None or self.letter_for(pid) != attempt.target_word[i]:
                return i
        return None

    def _evaluate(self) -> Verdict:
        verdict = self.evaluate_win()
        if verdict is Verdict.WIN:
            self._won = True
        return verdict

    def _mutable_attempt(self) -> Attempt:
        attempt = self.attempt
        if self._won:
            raise InvalidMove("attempt already solved")
        return attempt

    def _tile(self, pool_id: int) -> PoolTile:
        for tile in self.attempt.pool:
            if tile.pool_id == pool_id:
                return tile
        raise InvalidMove(f"unknown tile {pool_id}")

"""Screen state and command dispatch between the UI and the game core."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from filmjumble.core.errors import (
    AccessDenied,
    GameError,
    InsufficientFunds,
    InvalidLevelData,
    NoEmptySlot,
)
from filmjumble.core.progression import (
    AnswerReveal,
    LevelTicket,
    NextLevel,
    ProgressionController,
)
from filmjumble.core.puzzle import PuzzleEngine, Verdict

logger = logging.getLogger(__name__)


class Screen(enum.Enum):
    HOME = "home"
    PACK = "pack"
    PUZZLE = "puzzle"
    COMPLETED = "completed"
    ANSWER = "answer"


@dataclass(frozen=True)
class SelectLetter:
    pool_id: int


@dataclass(frozen=True)
class TypeLetter:
    letter: str


@dataclass(frozen=True)
class Deselect:
    slot_index: int


@dataclass(frozen=True)
class DeselectLast:
    pass


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class Hint:
    pass


@dataclass(frozen=True)
class Skip:
    pass


@dataclass(frozen=True)
class OpenPack:
    pack_id: str


@dataclass(frozen=True)
class EnterLevel:
    pack_id: str
    level_index: int


@dataclass(frozen=True)
class RevealAnswer:
    pack_id: str
    level_index: int


@dataclass(frozen=True)
class Continue:
    pass


@dataclass(frozen=True)
class Back:
    pass


Command = Union[
    SelectLetter,
    TypeLetter,
    Deselect,
    DeselectLast,
    Reset,
    Hint,
    Skip,
    OpenPack,
    EnterLevel,
    RevealAnswer,
    Continue,
    Back,
]

_PUZZLE_COMMANDS = (SelectLetter, TypeLetter, Deselect, DeselectLast, Reset, Hint, Skip)


class FeedbackKind(enum.Enum):
    IGNORED = "ignored"
    NAVIGATED = "navigated"
    UPDATED = "updated"
    MISMATCH = "mismatch"
    WON = "won"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass(frozen=True)
class Feedback:
    """What happened to a command; the UI re-renders from the router afterwards."""

    kind: FeedbackKind
    screen: Screen
    message: str = ""
    error: Optional[GameError] = None
    payload: Any = None


class InputRouter:
    """Holds the current screen and sends typed commands to the engine or controller."""

    def __init__(self, controller: ProgressionController, engine: Optional[PuzzleEngine] = None) -> None:
        self._controller = controller
        self._engine = engine or PuzzleEngine()
        self._screen = Screen.HOME
        self._pack_id: Optional[str] = None
        self._level_index: Optional[int] = None
        self._ticket: Optional[LevelTicket] = None
        self._reveal: Optional[AnswerReveal] = None

    @property
    def screen(self) -> Screen:
        return self._screen

    @property
    def engine(self) -> PuzzleEngine:
        return self._engine

    @property
    def controller(self) -> ProgressionController:
        return self._controller

    @property
    def pack_id(self) -> Optional[str]:
        return self._pack_id

    @property
    def level_index(self) -> Optional[int]:
        return self._level_index

    @property
    def ticket(self) -> Optional[LevelTicket]:
        return self._ticket

    @property
    def reveal(self) -> Optional[AnswerReveal]:
        return self._reveal

    def dispatch(self, command: Command) -> Feedback:
        try:
            return self._handle(command)
        except (AccessDenied, InvalidLevelData) as e:
            logger.warning("%s: %s", type(e).__name__, e)
            self._redirect_to_safe_screen()
            return Feedback(FeedbackKind.ERROR, self._screen, str(e), error=e)
        except NoEmptySlot as e:
            return Feedback(FeedbackKind.IGNORED, self._screen, str(e), error=e)
        except GameError as e:
            logger.info("%s: %s", type(e).__name__, e)
            return Feedback(FeedbackKind.ERROR, self._screen, str(e), error=e)

    def _handle(self, command: Command) -> Feedback:
        screen = self._screen
        if isinstance(command, _PUZZLE_COMMANDS):
            if screen is not Screen.PUZZLE:
                return self._ignored()
            return self._handle_puzzle(command)
        if isinstance(command, OpenPack):
            if screen is not Screen.HOME:
                return self._ignored()
            return self._open_pack(command.pack_id)
        if isinstance(command, EnterLevel):
            if screen not in (Screen.HOME, Screen.PACK):
                return self._ignored()
            return self._enter_level(command.pack_id, command.level_index)
        if isinstance(command, RevealAnswer):
            if screen is not Screen.PACK:
                return self._ignored()
            self._reveal = self._controller.reveal_answer(command.pack_id, command.level_index)
            self._screen = Screen.ANSWER
            return Feedback(FeedbackKind.NAVIGATED, self._screen, payload=self._reveal)
        if isinstance(command, Continue):
            return self._continue()
        if isinstance(command, Back):
            return self._back()
        return self._ignored()

    def _handle_puzzle(self, command: Command) -> Feedback:
        engine = self._engine
        if isinstance(command, TypeLetter):
            pool_id = engine.find_unplaced(command.letter)
            if pool_id is None:
                return self._ignored()
            command = SelectLetter(pool_id)
        if isinstance(command, SelectLetter):
            return self._after_move(engine.select_letter(command.pool_id))
        if isinstance(command, Deselect):
            engine.deselect_letter(command.slot_index)
            return Feedback(FeedbackKind.UPDATED, self._screen)
        if isinstance(command, DeselectLast):
            if engine.deselect_last() is None:
                return self._ignored()
            return Feedback(FeedbackKind.UPDATED, self._screen)
        if isinstance(command, Reset):
            engine.reset_attempt()
            return Feedback(FeedbackKind.UPDATED, self._screen)
        if isinstance(command, Hint):
            if engine.is_won:
                return self._ignored()
            if not self._controller.spend_for_hint():
                raise InsufficientFunds(self._controller.config.hint_cost, self._controller.coins)
            result = engine.apply_hint()
            return self._after_move(result.verdict, payload=result)
        if isinstance(command, Skip):
            pack_id, level_index = self._current_level()
            if not self._controller.spend_for_skip(pack_id, level_index):
                raise InsufficientFunds(self._controller.config.skip_cost, self._controller.coins)
            self._screen = Screen.COMPLETED
            return Feedback(FeedbackKind.SKIPPED, self._screen, payload=self._ticket)
        return self._ignored()

    def _after_move(self, verdict: Verdict, payload: Any = None) -> Feedback:
        if verdict is Verdict.WIN:
            pack_id, level_index = self._current_level()
            reward = self._controller.on_win(pack_id, level_index)
            self._screen = Screen.COMPLETED
            return Feedback(FeedbackKind.WON, self._screen, payload=reward)
        if verdict is Verdict.MISMATCH:
            return Feedback(FeedbackKind.MISMATCH, self._screen, "Not quite, keep trying", payload=payload)
        return Feedback(FeedbackKind.UPDATED, self._screen, payload=payload)

    def _open_pack(self, pack_id: str) -> Feedback:
        if not self._controller.is_pack_unlocked(pack_id):
            raise AccessDenied(f"pack {pack_id!r} is locked")
        self._pack_id = pack_id
        self._screen = Screen.PACK
        return Feedback(FeedbackKind.NAVIGATED, self._screen)

    def _enter_level(self, pack_id: str, level_index: int) -> Feedback:
        self._pack_id = pack_id
        ticket = self._controller.enter_level(pack_id, level_index)
        self._engine.start_attempt(ticket.raw_word)
        self._ticket = ticket
        self._level_index = level_index
        self._screen = Screen.PUZZLE
        logger.info("Entered %s level %d", pack_id, level_index)
        return Feedback(FeedbackKind.NAVIGATED, self._screen, payload=ticket)

    def _continue(self) -> Feedback:
        if self._screen is Screen.ANSWER:
            self._reveal = None
            self._screen = Screen.PACK
            return Feedback(FeedbackKind.NAVIGATED, self._screen)
        if self._screen is not Screen.COMPLETED:
            return self._ignored()
        pack_id, level_index = self._current_level()
        advance = self._controller.advance_or_finish(pack_id, level_index)
        if isinstance(advance, NextLevel):
            return self._enter_level(pack_id, advance.level_index)
        self._leave_level()
        self._screen = Screen.PACK
        return Feedback(FeedbackKind.NAVIGATED, self._screen, "Pack complete", payload=advance)

    def _back(self) -> Feedback:
        if self._screen in (Screen.PUZZLE, Screen.COMPLETED, Screen.ANSWER):
            self._leave_level()
            self._reveal = None
            self._screen = Screen.PACK
        elif self._screen is Screen.PACK:
            self._pack_id = None
            self._screen = Screen.HOME
        else:
            return self._ignored()
        return Feedback(FeedbackKind.NAVIGATED, self._screen)

    def _redirect_to_safe_screen(self) -> None:
        self._leave_level()
        self._reveal = None
        if self._pack_id is not None and self._controller.is_pack_unlocked(self._pack_id):
            self._screen = Screen.PACK
        else:
            self._pack_id = None
            self._screen = Screen.HOME

    def _leave_level(self) -> None:
        self._ticket = None
        self._level_index = None

    def _current_level(self) -> tuple[str, int]:
        if self._pack_id is None or self._level_index is None:
            raise AccessDenied("no level in progress")
        return self._pack_id, self._level_index

    def _ignored(self) -> Feedback:
        return Feedback(FeedbackKind.IGNORED, self._screen)


def command_for_key(screen: Screen, key: str, text: str = "") -> Optional[Command]:
    """Map a key name ("Backspace", "ArrowUp", "Enter", ...) or typed text to a command."""
    if screen in (Screen.COMPLETED, Screen.ANSWER):
        if key in ("Enter", "Escape"):
            return Continue()
        return None
    if key == "Escape":
        return Back() if screen is not Screen.HOME else None
    if screen is not Screen.PUZZLE:
        return None
    if key == "Backspace":
        return DeselectLast()
    if key == "ArrowUp":
        return Hint()
    if key == "ArrowDown":
        return Reset()
    if key == "ArrowRight":
        return Skip()
    if len(text) == 1 and text.isalnum():
        return TypeLetter(text.upper())
    return None

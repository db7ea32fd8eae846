"""Tests for filmjumble.core.router – screen state, command dispatch and key mapping."""

from __future__ import annotations

import random

import pytest

from filmjumble.core.errors import AccessDenied, InsufficientFunds, InvalidLevelData
from filmjumble.core.progress import ProgressStore
from filmjumble.core.progression import ProgressionController, WinReward
from filmjumble.core.puzzle import PuzzleEngine
from filmjumble.core.router import (
    Back,
    Continue,
    Deselect,
    DeselectLast,
    EnterLevel,
    FeedbackKind,
    Hint,
    InputRouter,
    OpenPack,
    Reset,
    RevealAnswer,
    Screen,
    SelectLetter,
    Skip,
    TypeLetter,
    command_for_key,
)


@pytest.fixture()
def router(controller: ProgressionController) -> InputRouter:
    return InputRouter(controller, PuzzleEngine(rng=random.Random(3)))


def _type(router: InputRouter, letters: str):
    feedback = None
    for ch in letters:
        feedback = router.dispatch(TypeLetter(ch))
    return feedback


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

class TestNavigation:
    def test_starts_home(self, router: InputRouter):
        assert router.screen is Screen.HOME

    def test_open_pack(self, router: InputRouter):
        fb = router.dispatch(OpenPack("Classic"))
        assert fb.kind is FeedbackKind.NAVIGATED
        assert router.screen is Screen.PACK
        assert router.pack_id == "Classic"

    def test_open_locked_pack(self, router: InputRouter):
        fb = router.dispatch(OpenPack("Gated"))
        assert fb.kind is FeedbackKind.ERROR
        assert isinstance(fb.error, AccessDenied)
        assert router.screen is Screen.HOME

    def test_enter_level(self, router: InputRouter):
        router.dispatch(OpenPack("Classic"))
        fb = router.dispatch(EnterLevel("Classic", 0))
        assert fb.kind is FeedbackKind.NAVIGATED
        assert router.screen is Screen.PUZZLE
        assert router.engine.attempt.target_word == "RAJA"
        assert router.ticket.raw_word == "Raja"

    def test_enter_locked_level_redirects_to_pack(self, router: InputRouter):
        router.dispatch(OpenPack("Classic"))
        fb = router.dispatch(EnterLevel("Classic", 2))
        assert isinstance(fb.error, AccessDenied)
        assert router.screen is Screen.PACK
        assert router.ticket is None

    def test_enter_level_in_locked_pack_redirects_home(self, router: InputRouter):
        fb = router.dispatch(EnterLevel("Gated", 0))
        assert isinstance(fb.error, AccessDenied)
        assert router.screen is Screen.HOME
        assert router.pack_id is None

    def test_enter_level_with_bad_data(self, make_controller):
        c = make_controller(packs=[{"name": "Empty", "lvls": 1}], events=[], words={"Empty": [""]})
        router = InputRouter(c)
        router.dispatch(OpenPack("Empty"))
        fb = router.dispatch(EnterLevel("Empty", 0))
        assert isinstance(fb.error, InvalidLevelData)
        assert router.screen is Screen.PACK
        assert not router.engine.has_attempt

    def test_back_chain(self, router: InputRouter):
        router.dispatch(OpenPack("Classic"))
        router.dispatch(EnterLevel("Classic", 0))
        router.dispatch(Back())
        assert router.screen is Screen.PACK
        assert router.level_index is None
        router.dispatch(Back())
        assert router.screen is Screen.HOME
        assert router.dispatch(Back()).kind is FeedbackKind.IGNORED

    def test_puzzle_commands_ignored_off_puzzle(self, router: InputRouter):
        for command in (Hint(), Skip(), Reset(), DeselectLast(), TypeLetter("A"), SelectLetter(1), Deselect(0)):
            assert router.dispatch(command).kind is FeedbackKind.IGNORED
        assert router.controller.coins == 100

    def test_open_pack_ignored_on_puzzle(self, router: InputRouter):
        router.dispatch(EnterLevel("Classic", 0))
        assert router.dispatch(OpenPack("Stars")).kind is FeedbackKind.IGNORED
        assert router.screen is Screen.PUZZLE


# ---------------------------------------------------------------------------
# Playing
# ---------------------------------------------------------------------------

class TestPlaying:
    def test_end_to_end_win(self, router: InputRouter, store: ProgressStore):
        router.dispatch(OpenPack("Classic"))
        router.dispatch(EnterLevel("Classic", 0))
        fb = _type(router, "RAJA")
        assert fb.kind is FeedbackKind.WON
        assert fb.payload == WinReward(coins=10, star_awarded=False, first_completion=True, frontier_advanced=True)
        assert router.screen is Screen.COMPLETED
        assert store.completed_levels("Classic") == {0}
        assert store.unlocked_level("Classic") == 1
        assert store.coins == 110

    def test_select_by_pool_id(self, router: InputRouter):
        router.dispatch(EnterLevel("Classic", 0))
        engine = router.engine
        for ch in "RAJA":
            fb = router.dispatch(SelectLetter(engine.find_unplaced(ch)))
        assert fb.kind is FeedbackKind.WON

    def test_mismatch_keeps_playing(self, router: InputRouter, store: ProgressStore):
        router.dispatch(EnterLevel("Classic", 0))
        fb = _type(router, "AARJ")
        assert fb.kind is FeedbackKind.MISMATCH
        assert router.screen is Screen.PUZZLE
        assert router.engine.placed_word() == "AARJ"
        assert store.completed_levels("Classic") == set()

    def test_typing_unavailable_letter_ignored(self, router: InputRouter):
        router.dispatch(EnterLevel("Classic", 0))
        assert router.dispatch(TypeLetter("Z")).kind is FeedbackKind.IGNORED

    def test_deselect_and_deselect_last(self, router: InputRouter):
        router.dispatch(EnterLevel("Classic", 0))
        _type(router, "RA")
        assert router.dispatch(Deselect(0)).kind is FeedbackKind.UPDATED
        assert router.engine.placed_word() == "A"
        assert router.dispatch(DeselectLast()).kind is FeedbackKind.UPDATED
        assert router.engine.placed_word() == ""
        assert router.dispatch(DeselectLast()).kind is FeedbackKind.IGNORED

    def test_bad_slot_index_is_error_without_mutation(self, router: InputRouter):
        router.dispatch(EnterLevel("Classic", 0))
        _type(router, "R")
        fb = router.dispatch(Deselect(9))
        assert fb.kind is FeedbackKind.ERROR
        assert router.engine.placed_word() == "R"
        assert router.screen is Screen.PUZZLE

    def test_reset_reshuffles(self, router: InputRouter):
        router.dispatch(EnterLevel("Classic", 0))
        old_ids = {t.pool_id for t in router.engine.attempt.pool}
        _type(router, "RA")
        router.dispatch(Reset())
        assert router.engine.placed_word() == ""
        assert old_ids.isdisjoint(t.pool_id for t in router.engine.attempt.pool)

    def test_hint(self, router: InputRouter, store: ProgressStore):
        router.dispatch(EnterLevel("Classic", 0))
        fb = router.dispatch(Hint())
        assert fb.kind is FeedbackKind.UPDATED
        assert fb.payload.slot_index == 0
        assert router.engine.placed_word() == "R"
        assert store.coins == 80

    def test_hint_insufficient_funds(self, router: InputRouter, store: ProgressStore):
        store.set_coins(15)
        router.dispatch(EnterLevel("Classic", 0))
        _type(router, "A")
        before = list(router.engine.attempt.slots)
        fb = router.dispatch(Hint())
        assert fb.kind is FeedbackKind.ERROR
        assert isinstance(fb.error, InsufficientFunds)
        assert fb.error.cost == 20 and fb.error.balance == 15
        assert store.coins == 15
        assert router.engine.attempt.slots == before

    def test_hint_on_solved_board_not_charged(self, router: InputRouter, store: ProgressStore):
        router.dispatch(EnterLevel("Classic", 0))
        for ch in "RAJA":
            router.engine.select_letter(router.engine.find_unplaced(ch))
        assert router.engine.is_won
        assert router.screen is Screen.PUZZLE
        fb = router.dispatch(Hint())
        assert fb.kind is FeedbackKind.IGNORED
        assert store.coins == 100

    def test_hints_can_win(self, router: InputRouter, store: ProgressStore):
        router.dispatch(EnterLevel("Classic", 0))
        _type(router, "RAJ")
        fb = router.dispatch(Hint())
        assert fb.kind is FeedbackKind.WON
        assert store.coins == 100 - 20 + 10

    def test_skip(self, router: InputRouter, store: ProgressStore):
        router.dispatch(EnterLevel("Stars", 0))
        fb = router.dispatch(Skip())
        assert fb.kind is FeedbackKind.SKIPPED
        assert router.screen is Screen.COMPLETED
        assert store.completed_levels("Stars") == {0}
        assert store.stars == 1
        assert store.coins == 100 - 50 + 10

    def test_skip_insufficient_funds(self, router: InputRouter, store: ProgressStore):
        store.set_coins(30)
        router.dispatch(EnterLevel("Classic", 0))
        fb = router.dispatch(Skip())
        assert isinstance(fb.error, InsufficientFunds)
        assert router.screen is Screen.PUZZLE
        assert store.coins == 30
        assert store.completed_levels("Classic") == set()

    def test_puzzle_locked_after_win(self, router: InputRouter):
        router.dispatch(EnterLevel("Classic", 0))
        _type(router, "RAJA")
        assert router.dispatch(Hint()).kind is FeedbackKind.IGNORED
        assert router.dispatch(Reset()).kind is FeedbackKind.IGNORED


# ---------------------------------------------------------------------------
# Continue / reveal
# ---------------------------------------------------------------------------

class TestContinue:
    def test_continue_to_next_level(self, router: InputRouter):
        router.dispatch(OpenPack("Classic"))
        router.dispatch(EnterLevel("Classic", 0))
        _type(router, "RAJA")
        fb = router.dispatch(Continue())
        assert fb.kind is FeedbackKind.NAVIGATED
        assert router.screen is Screen.PUZZLE
        assert router.level_index == 1
        assert router.engine.attempt.target_word == "SHOLAY"

    def test_continue_after_last_level(self, router: InputRouter, store: ProgressStore):
        store.set_unlocked_level("Classic", 2)
        router.dispatch(OpenPack("Classic"))
        router.dispatch(EnterLevel("Classic", 2))
        _type(router, "DILSE")
        router.dispatch(Continue())
        assert router.screen is Screen.PACK
        assert router.pack_id == "Classic"

    def test_continue_ignored_while_playing(self, router: InputRouter):
        router.dispatch(EnterLevel("Classic", 0))
        assert router.dispatch(Continue()).kind is FeedbackKind.IGNORED

    def test_reveal_answer(self, router: InputRouter, controller: ProgressionController):
        controller.on_win("Classic", 0)
        router.dispatch(OpenPack("Classic"))
        fb = router.dispatch(RevealAnswer("Classic", 0))
        assert fb.kind is FeedbackKind.NAVIGATED
        assert router.screen is Screen.ANSWER
        assert router.reveal.raw_word == "Raja"
        router.dispatch(Continue())
        assert router.screen is Screen.PACK
        assert router.reveal is None

    def test_reveal_unsolved_denied(self, router: InputRouter):
        router.dispatch(OpenPack("Classic"))
        fb = router.dispatch(RevealAnswer("Classic", 0))
        assert isinstance(fb.error, AccessDenied)
        assert router.screen is Screen.PACK

    def test_completed_level_entry_denied(self, router: InputRouter, controller: ProgressionController):
        controller.on_win("Classic", 0)
        router.dispatch(OpenPack("Classic"))
        fb = router.dispatch(EnterLevel("Classic", 0))
        assert isinstance(fb.error, AccessDenied)
        assert router.screen is Screen.PACK


# ---------------------------------------------------------------------------
# command_for_key
# ---------------------------------------------------------------------------

class TestCommandForKey:
    @pytest.mark.parametrize(
        "key,expected",
        [
            ("Backspace", DeselectLast()),
            ("ArrowUp", Hint()),
            ("ArrowDown", Reset()),
            ("ArrowRight", Skip()),
            ("Escape", Back()),
        ],
    )
    def test_puzzle_keys(self, key, expected):
        assert command_for_key(Screen.PUZZLE, key) == expected

    def test_letters(self):
        assert command_for_key(Screen.PUZZLE, "", "r") == TypeLetter("R")

    def test_other_text_ignored(self):
        assert command_for_key(Screen.PUZZLE, "", " ") is None
        assert command_for_key(Screen.PUZZLE, "", "") is None

    @pytest.mark.parametrize("screen", [Screen.COMPLETED, Screen.ANSWER])
    @pytest.mark.parametrize("key", ["Enter", "Escape"])
    def test_dialogs(self, screen, key):
        assert command_for_key(screen, key) == Continue()

    def test_dialog_blocks_letters(self):
        assert command_for_key(Screen.COMPLETED, "", "a") is None

    def test_home(self):
        assert command_for_key(Screen.HOME, "Escape") is None
        assert command_for_key(Screen.HOME, "", "a") is None

    def test_pack_escape(self):
        assert command_for_key(Screen.PACK, "Escape") == Back()

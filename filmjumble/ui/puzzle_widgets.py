"""Puzzle UI: answer slots and the scrambled letter pool."""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import QHBoxLayout, QPushButton, QWidget

from filmjumble.core.puzzle import PoolTile
from filmjumble.ui.colors import CinemaColors, slot_colors, tile_colors


def _clear_layout(layout: QHBoxLayout) -> None:
    while layout.count():
        item = layout.takeAt(0)
        w = item.widget()
        if w is not None:
            w.setParent(None)
            w.deleteLater()


class SlotRowWidget(QWidget):
    """Row of answer slots. Clicking a filled slot sends its letter back to the pool."""

    def __init__(self, on_deselect: Callable[[int], None], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._on_deselect = on_deselect
        self._buttons: List[QPushButton] = []
        self._layout = QHBoxLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._layout.setSpacing(8)
        self._layout.setAlignment(Qt.AlignCenter)

    def set_slots(self, letters: Sequence[Optional[str]]) -> None:
        """One entry per slot: the placed letter, or None for an empty slot."""
        _clear_layout(self._layout)
        self._buttons = []
        for i, letter in enumerate(letters):
            button = QPushButton(letter or "")
            button.setFixedSize(48, 56)
            button.setFocusPolicy(Qt.NoFocus)
            button.setStyleSheet(self._style(filled=letter is not None, error=False))
            if letter is not None:
                button.setCursor(Qt.PointingHandCursor)
                button.clicked.connect(lambda _=False, idx=i: self._on_deselect(idx))
            self._layout.addWidget(button)
            self._buttons.append(button)

    def flash_error(self, duration_ms: int = 450) -> None:
        """Briefly outline every slot in red after a wrong full answer."""
        for button in self._buttons:
            button.setStyleSheet(self._style(filled=bool(button.text()), error=True))
        QTimer.singleShot(duration_ms, self._clear_error)

    def _clear_error(self) -> None:
        for button in self._buttons:
            try:
                button.setStyleSheet(self._style(filled=bool(button.text()), error=False))
            except RuntimeError:
                # slot rebuilt while the timer was pending
                pass

    @staticmethod
    def _style(filled: bool, error: bool) -> str:
        bg, fg, border = slot_colors(filled, error)
        return f"""
            QPushButton {{
                background: {bg};
                color: {fg};
                border: 2px solid {border};
                border-radius: 10px;
                font-size: 22px;
                font-weight: 900;
            }}
        """


class TilePoolWidget(QWidget):
    """The scrambled letters. Placed tiles stay in position but are disabled."""

    def __init__(self, on_select: Callable[[int], None], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._on_select = on_select
        self._layout = QHBoxLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._layout.setSpacing(8)
        self._layout.setAlignment(Qt.AlignCenter)

    def set_tiles(self, tiles: Sequence[PoolTile], placed: Callable[[int], bool]) -> None:
        _clear_layout(self._layout)
        for tile in tiles:
            used = placed(tile.pool_id)
            button = QPushButton("" if used else tile.letter)
            button.setFixedSize(48, 48)
            button.setFocusPolicy(Qt.NoFocus)
            button.setEnabled(not used)
            bg, hover = tile_colors(used)
            button.setStyleSheet(
                f"""
                QPushButton {{
                    background: {bg};
                    color: {CinemaColors.TEXT_PRIMARY};
                    border: 1px solid {CinemaColors.CARD_BORDER};
                    border-radius: 10px;
                    font-size: 20px;
                    font-weight: 800;
                }}
                QPushButton:hover {{
                    background: {hover};
                }}
                """
            )
            if not used:
                button.setCursor(Qt.PointingHandCursor)
                button.clicked.connect(lambda _=False, pid=tile.pool_id: self._on_select(pid))
            self._layout.addWidget(button)

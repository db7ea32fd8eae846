from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent, QKeyEvent, QPixmap
from PySide6.QtWidgets import (
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QProgressBar,
    QPushButton,
    QScrollArea,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from filmjumble.core.catalog import Catalog, Pack
from filmjumble.core.errors import InsufficientFunds
from filmjumble.core.progress import ProgressStore
from filmjumble.core.router import (
    Back,
    Command,
    Continue,
    Deselect,
    EnterLevel,
    Feedback,
    FeedbackKind,
    Hint,
    InputRouter,
    OpenPack,
    Reset,
    RevealAnswer,
    Screen,
    SelectLetter,
    Skip,
    command_for_key,
)
from filmjumble.ui.colors import CinemaColors
from filmjumble.ui.models import build_level_states, build_pack_states
from filmjumble.ui.puzzle_widgets import SlotRowWidget, TilePoolWidget

logger = logging.getLogger(__name__)

_KEY_NAMES = {
    Qt.Key.Key_Backspace: "Backspace",
    Qt.Key.Key_Up: "ArrowUp",
    Qt.Key.Key_Down: "ArrowDown",
    Qt.Key.Key_Right: "ArrowRight",
    Qt.Key.Key_Left: "ArrowLeft",
    Qt.Key.Key_Escape: "Escape",
    Qt.Key.Key_Return: "Enter",
    Qt.Key.Key_Enter: "Enter",
}


def _load_pixmap(path: Path, width: int, height: int) -> Optional[QPixmap]:
    pixmap = QPixmap(str(path))
    if pixmap.isNull():
        return None
    return pixmap.scaled(width, height, Qt.KeepAspectRatio, Qt.SmoothTransformation)


class MainWindow(QMainWindow):
    """Home (packs/events), pack level grid, puzzle, completion and answer screens.

    Every user action is turned into a router command; after each command the
    page for ``router.screen`` is rebuilt from the current game state.
    """

    def __init__(self, catalog: Catalog, router: InputRouter, progress_store: ProgressStore) -> None:
        super().__init__()
        self._catalog = catalog
        self._router = router
        self._progress_store = progress_store
        self._home_tab = "packs"

        self.setWindowTitle("Film Jumble")
        self.setFocusPolicy(Qt.StrongFocus)
        self.setStyleSheet(
            f"""
            QMainWindow, QWidget#page {{
                background: qlineargradient(x1:0, y1:0, x2:0, y2:1,
                    stop:0 {CinemaColors.BG_TOP}, stop:1 {CinemaColors.BG_BOTTOM});
            }}
            QLabel {{ color: {CinemaColors.TEXT_PRIMARY}; }}
            QPushButton#action {{
                background: {CinemaColors.CARD_BG};
                color: {CinemaColors.TEXT_PRIMARY};
                border: 1px solid {CinemaColors.CARD_BORDER};
                border-radius: 10px;
                padding: 8px 16px;
                font-weight: 700;
            }}
            QPushButton#action:hover {{ border-color: {CinemaColors.GOLD}; }}
            """
        )

        self._stack = QStackedWidget()
        self._pages: Dict[Screen, QWidget] = {}
        self._page_layouts: Dict[Screen, QVBoxLayout] = {}
        for screen in Screen:
            page = QWidget()
            page.setObjectName("page")
            layout = QVBoxLayout(page)
            layout.setContentsMargins(24, 16, 24, 16)
            layout.setSpacing(14)
            self._pages[screen] = page
            self._page_layouts[screen] = layout
            self._stack.addWidget(page)

        self._wallet_label = QLabel("")
        self._wallet_label.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
        self._wallet_label.setStyleSheet(f"color: {CinemaColors.GOLD}; font-weight: 800; font-size: 15px;")

        central = QWidget()
        central_layout = QVBoxLayout(central)
        central_layout.setContentsMargins(0, 8, 16, 0)
        central_layout.addWidget(self._wallet_label)
        central_layout.addWidget(self._stack, 1)
        self.setCentralWidget(central)

        self._slot_row: Optional[SlotRowWidget] = None
        self._render()

    # ------------------------------------------------------------------
    # command plumbing
    # ------------------------------------------------------------------

    def _send(self, command: Command) -> Feedback:
        feedback = self._router.dispatch(command)
        self._render()
        if feedback.kind is FeedbackKind.MISMATCH and self._slot_row is not None:
            self._slot_row.flash_error()
        elif feedback.kind is FeedbackKind.ERROR:
            if isinstance(feedback.error, InsufficientFunds):
                QMessageBox.information(self, "Film Jumble", "Not enough coins!")
            else:
                QMessageBox.warning(self, "Film Jumble", feedback.message)
        return feedback

    def keyPressEvent(self, event: QKeyEvent) -> None:
        key = _KEY_NAMES.get(event.key(), "")
        command = command_for_key(self._router.screen, key, event.text())
        if command is None:
            super().keyPressEvent(event)
            return
        self._send(command)
        event.accept()

    def closeEvent(self, event: QCloseEvent) -> None:
        """Persist progress when closing the app."""
        self._progress_store.save()
        super().closeEvent(event)

    # ------------------------------------------------------------------
    # rendering
    # ------------------------------------------------------------------

    def _render(self) -> None:
        controller = self._router.controller
        self._wallet_label.setText(f"🪙 {controller.coins}    ⭐ {controller.stars}")
        screen = self._router.screen
        layout = self._page_layouts[screen]
        _clear(layout)
        self._slot_row = None
        if screen is Screen.HOME:
            self._build_home(layout)
        elif screen is Screen.PACK:
            self._build_pack(layout)
        elif screen is Screen.PUZZLE:
            self._build_puzzle(layout)
        elif screen is Screen.COMPLETED:
            self._build_completed(layout)
        elif screen is Screen.ANSWER:
            self._build_answer(layout)
        self._stack.setCurrentWidget(self._pages[screen])
        self.setFocus()

    def _build_home(self, layout: QVBoxLayout) -> None:
        title = QLabel("Film Jumble")
        title.setStyleSheet(f"color: {CinemaColors.GOLD}; font-size: 30px; font-weight: 900;")
        layout.addWidget(title)

        if self._catalog.error:
            error = QLabel(f"Failed to load game data\n\n{self._catalog.error}")
            error.setAlignment(Qt.AlignCenter)
            error.setStyleSheet(f"color: {CinemaColors.ERROR}; font-size: 16px;")
            layout.addWidget(error, 1)
            return

        tabs = QHBoxLayout()
        for key, label in (("packs", "Packs"), ("events", "Events")):
            button = QPushButton(label)
            button.setObjectName("action")
            if key == self._home_tab:
                button.setStyleSheet(f"background: {CinemaColors.GOLD}; color: {CinemaColors.TEXT_ON_GOLD};")
            button.clicked.connect(lambda _=False, k=key: self._switch_tab(k))
            tabs.addWidget(button)
        tabs.addStretch(1)
        layout.addLayout(tabs)

        packs = self._catalog.packs if self._home_tab == "packs" else self._catalog.events
        container = QWidget()
        rows = QVBoxLayout(container)
        rows.setSpacing(10)
        for state in build_pack_states(packs, self._catalog, self._router.controller):
            rows.addWidget(self._pack_row(state.pack, state.unlocked, state.progress, state.cover_path))
        rows.addStretch(1)
        layout.addWidget(_scroll(container), 1)

    def _pack_row(self, pack: Pack, unlocked: bool, progress: float, cover: Path) -> QWidget:
        row = QPushButton()
        row.setObjectName("action")
        row.setMinimumHeight(84)
        row.setCursor(Qt.PointingHandCursor if unlocked else Qt.ForbiddenCursor)
        inner = QHBoxLayout(row)
        thumb = QLabel()
        thumb.setFixedSize(56, 56)
        pixmap = _load_pixmap(cover, 56, 56)
        if pixmap is not None:
            thumb.setPixmap(pixmap)
        inner.addWidget(thumb)

        text = QVBoxLayout()
        name = pack.name + ("  ⭐ Earn Stars" if pack.is_star_eligible else "")
        if not unlocked:
            name += f"  🔒 Requires {pack.star} Stars"
        name_label = QLabel(name)
        name_label.setStyleSheet("font-size: 17px; font-weight: 800;")
        info = QLabel(f"{pack.lvls} Levels • {pack.description}")
        info.setStyleSheet(f"color: {CinemaColors.TEXT_MUTED};")
        bar = QProgressBar()
        bar.setRange(0, 100)
        bar.setValue(int(round(progress * 100)))
        bar.setTextVisible(False)
        bar.setFixedHeight(6)
        text.addWidget(name_label)
        text.addWidget(info)
        text.addWidget(bar)
        inner.addLayout(text, 1)

        row.setEnabled(unlocked)
        row.clicked.connect(lambda _=False, pid=pack.id: self._send(OpenPack(pid)))
        return row

    def _switch_tab(self, tab: str) -> None:
        if tab != self._home_tab:
            self._home_tab = tab
            self._render()

    def _build_pack(self, layout: QVBoxLayout) -> None:
        pack = self._catalog.resolve(self._router.pack_id or "")
        if pack is None:
            layout.addWidget(QLabel("Pack not found"))
            return
        layout.addLayout(self._header(pack.name + ("  ⭐" if pack.is_star_eligible else "")))

        container = QWidget()
        grid = QGridLayout(container)
        grid.setSpacing(10)
        cols = 6
        for state in build_level_states(pack, self._catalog, self._router.controller):
            label = f"{state.index + 1}"
            if state.completed:
                label += " ✓"
            elif not state.unlocked:
                label += " 🔒"
            tile = QPushButton(label)
            tile.setObjectName("action")
            tile.setMinimumSize(96, 96)
            tile.setEnabled(state.unlocked or state.completed)
            if state.is_current:
                tile.setStyleSheet(f"border: 2px solid {CinemaColors.GOLD};")
            if state.completed:
                tile.clicked.connect(lambda _=False, i=state.index: self._send(RevealAnswer(pack.id, i)))
            elif state.unlocked:
                tile.clicked.connect(lambda _=False, i=state.index: self._send(EnterLevel(pack.id, i)))
            grid.addWidget(tile, state.index // cols, state.index % cols)
        layout.addWidget(_scroll(container), 1)

    def _build_puzzle(self, layout: QVBoxLayout) -> None:
        ticket = self._router.ticket
        engine = self._router.engine
        if ticket is None or not engine.has_attempt:
            return
        layout.addLayout(self._header(f"{ticket.pack.name} · Level {ticket.level_index + 1}"))

        image = QLabel("No image")
        image.setAlignment(Qt.AlignCenter)
        pixmap = _load_pixmap(ticket.image_path, 360, 420)
        if pixmap is not None:
            image.setPixmap(pixmap)
        layout.addWidget(image, 1)

        attempt = engine.attempt
        self._slot_row = SlotRowWidget(on_deselect=lambda i: self._send(Deselect(i)))
        self._slot_row.set_slots([engine.letter_for(pid) if pid is not None else None for pid in attempt.slots])
        layout.addWidget(self._slot_row)

        pool = TilePoolWidget(on_select=lambda pid: self._send(SelectLetter(pid)))
        pool.set_tiles(attempt.pool, engine.is_pool_id_placed)
        layout.addWidget(pool)

        config = self._router.controller.config
        actions = QHBoxLayout()
        actions.addStretch(1)
        for text, command in (
            ("Reset", Reset()),
            (f"Hint ({config.hint_cost})", Hint()),
            (f"Skip ({config.skip_cost})", Skip()),
        ):
            button = QPushButton(text)
            button.setObjectName("action")
            button.setFocusPolicy(Qt.NoFocus)
            button.clicked.connect(lambda _=False, c=command: self._send(c))
            actions.addWidget(button)
        actions.addStretch(1)
        layout.addLayout(actions)

    def _build_completed(self, layout: QVBoxLayout) -> None:
        ticket = self._router.ticket
        answer = ticket.raw_word if ticket is not None else ""
        self._dialog(layout, "Level Complete!", answer, "Continue")

    def _build_answer(self, layout: QVBoxLayout) -> None:
        reveal = self._router.reveal
        if reveal is None:
            return
        image = QLabel()
        image.setAlignment(Qt.AlignCenter)
        pixmap = _load_pixmap(reveal.image_path, 360, 420)
        if pixmap is not None:
            image.setPixmap(pixmap)
        layout.addWidget(image, 1)
        self._dialog(layout, f"Level {reveal.level_index + 1}", reveal.raw_word, "Close")

    def _dialog(self, layout: QVBoxLayout, title: str, answer: str, button_text: str) -> None:
        heading = QLabel(title)
        heading.setAlignment(Qt.AlignCenter)
        heading.setStyleSheet(f"color: {CinemaColors.GOLD}; font-size: 28px; font-weight: 900;")
        answer_label = QLabel(answer)
        answer_label.setAlignment(Qt.AlignCenter)
        answer_label.setStyleSheet("font-size: 22px; font-weight: 700;")
        button = QPushButton(button_text)
        button.setObjectName("action")
        button.clicked.connect(lambda: self._send(Continue()))
        layout.addStretch(1)
        layout.addWidget(heading)
        layout.addWidget(answer_label)
        layout.addWidget(button, 0, Qt.AlignHCenter)
        layout.addStretch(1)

    def _header(self, title: str) -> QHBoxLayout:
        header = QHBoxLayout()
        back = QPushButton("← Back")
        back.setObjectName("action")
        back.setFocusPolicy(Qt.NoFocus)
        back.clicked.connect(lambda: self._send(Back()))
        label = QLabel(title)
        label.setStyleSheet("font-size: 22px; font-weight: 900;")
        header.addWidget(back)
        header.addWidget(label, 1)
        return header


def _clear(layout) -> None:
    while layout.count():
        item = layout.takeAt(0)
        w = item.widget()
        if w is not None:
            w.setParent(None)
            w.deleteLater()
        elif item.layout() is not None:
            _clear(item.layout())


def _scroll(content: QWidget) -> QScrollArea:
    area = QScrollArea()
    area.setWidgetResizable(True)
    area.setFrameShape(QScrollArea.NoFrame)
    area.setWidget(content)
    return area

"""Application entry point and setup for Film Jumble."""

import logging
import sys

from PySide6.QtGui import QFont, QGuiApplication
from PySide6.QtWidgets import QApplication

from filmjumble.core.catalog import Catalog
from filmjumble.core.config import GameConfig, find_config
from filmjumble.core.errors import DataUnavailable
from filmjumble.core.progress import ProgressStore
from filmjumble.core.progression import ProgressionController
from filmjumble.core.router import InputRouter
from filmjumble.ui.main_window import MainWindow


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def load_game(config: GameConfig) -> tuple[Catalog, ProgressStore, InputRouter]:
    """Read the catalog and saved progress, then wire the controller and router."""
    catalog = Catalog(config.data_dir, packs_file=config.packs_file, events_file=config.events_file)
    try:
        catalog.load()
    except DataUnavailable:
        # the home screen shows catalog.error instead of the pack list
        pass
    progress_store = ProgressStore(config.progress_file, starting_coins=config.starting_coins)
    progress_store.ensure_packs(pack.id for pack in catalog.all_packs())
    controller = ProgressionController(catalog, progress_store, config)
    return catalog, progress_store, InputRouter(controller)


def run() -> None:
    """Initialize the application, load game data, and start the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Film Jumble")
    app.setApplicationDisplayName("Film Jumble")

    app_font = QFont()
    app_font.setFamilies(["Inter", "Segoe UI", "Noto Sans", "Noto Color Emoji", "Apple Color Emoji"])
    app_font.setPointSize(11)
    app.setFont(app_font)

    try:
        config = find_config()
    except ValueError as e:
        logging.error("Invalid config, using defaults: %s", e)
        config = GameConfig()

    catalog, progress_store, router = load_game(config)

    window = MainWindow(catalog=catalog, router=router, progress_store=progress_store)
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        geometry = screen.availableGeometry()
        window.resize(min(1100, geometry.width()), min(820, geometry.height()))
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()

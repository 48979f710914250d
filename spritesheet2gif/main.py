"""Entry point for the Sprite Sheet to GIF desktop application."""

from __future__ import annotations

import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

from .cli import configure_logging
from .gui.main_window import MainWindow


def run(argv: list[str] | None = None) -> int:
    """Start the Qt event loop, optionally opening a sprite sheet given on the command line."""

    argv = sys.argv if argv is None else argv
    configure_logging("--verbose" in argv or "-v" in argv)
    app = QApplication(argv)
    app.setApplicationName("Sprite Sheet to GIF")

    window = MainWindow()
    window.show()
    sheets = [arg for arg in argv[1:] if not arg.startswith("-")]
    if sheets:
        window.load_image(Path(sheets[0]))

    return app.exec()


if __name__ == "__main__":
    sys.exit(run())

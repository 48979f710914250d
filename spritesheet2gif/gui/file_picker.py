"""Native file picker helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from PySide6.QtWidgets import QFileDialog, QWidget


def open_image_file_dialog(parent: QWidget) -> Optional[Path]:
    """Open a native file dialog and return the selected sprite sheet path."""

    dialog = QFileDialog(parent, caption="Select Sprite Sheet")
    dialog.setFileMode(QFileDialog.ExistingFile)
    dialog.setNameFilters([
        "Images (*.png *.gif *.jpg *.jpeg *.webp *.bmp)",
        "All Files (*.*)",
    ])
    if dialog.exec():
        selected = dialog.selectedFiles()
        if selected:
            return Path(selected[0])
    return None


def save_gif_file_dialog(parent: QWidget, suggested_name: str) -> Optional[Path]:
    """Ask where to save an exported animation."""

    path, _ = QFileDialog.getSaveFileName(parent, "Save Animation", suggested_name, "GIF Images (*.gif)")
    if not path:
        return None
    return Path(path).with_suffix(".gif")

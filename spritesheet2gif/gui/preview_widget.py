"""Qt adapters for the live preview: a QTimer scheduler and a label surface."""

from __future__ import annotations

from typing import Callable, Optional

from PIL import Image
from PySide6.QtCore import QObject, Qt, QTimer
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QSizePolicy, QVBoxLayout, QWidget

DISPLAY_INTERVAL_MS = 16


def pixmap_from_image(image: Image.Image) -> QPixmap:
    """Convert a PIL image to a QPixmap."""

    from PIL.ImageQt import ImageQt

    return QPixmap.fromImage(ImageQt(image.convert("RGBA")))


class _QtScheduledTask:
    def __init__(self, scheduler: "QtFrameScheduler", generation: int):
        self._scheduler = scheduler
        self._generation = generation

    def cancel(self) -> None:
        self._scheduler._cancel(self._generation)


class QtFrameScheduler:
    """Run one pending callback per display refresh on the Qt event loop."""

    def __init__(self, parent: Optional[QObject] = None, interval_ms: int = DISPLAY_INTERVAL_MS):
        self._timer = QTimer(parent)
        self._timer.setSingleShot(True)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._fire)
        self._callback: Optional[Callable[[], None]] = None
        self._generation = 0

    def schedule(self, callback: Callable[[], None]) -> _QtScheduledTask:
        self._generation += 1
        self._callback = callback
        self._timer.start()
        return _QtScheduledTask(self, self._generation)

    def _fire(self) -> None:  # pragma: no cover - Qt timer callback
        callback, self._callback = self._callback, None
        if callback is not None:
            callback()

    def _cancel(self, generation: int) -> None:
        if generation == self._generation:
            self._timer.stop()
            self._callback = None


class PreviewPanel(QWidget):
    """Shows the current preview frame, a frame counter and a play/pause button."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.frame_label = QLabel("Load a sprite sheet to preview", self)
        self.frame_label.setAlignment(Qt.AlignCenter)
        self.frame_label.setMinimumSize(200, 200)
        self.frame_label.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.counter_label = QLabel("-/-", self)
        self.play_button = QPushButton("Pause", self)

        layout = QVBoxLayout(self)
        layout.addWidget(self.frame_label, 1)
        controls = QHBoxLayout()
        controls.addWidget(self.counter_label)
        controls.addStretch(1)
        controls.addWidget(self.play_button)
        layout.addLayout(controls)

    def draw(self, frame: Image.Image, index: int, total: int) -> None:  # pragma: no cover - Qt painting
        pixmap = pixmap_from_image(frame)
        scaled = pixmap.scaled(self.frame_label.size(), Qt.KeepAspectRatio, Qt.FastTransformation)
        self.frame_label.setPixmap(scaled)
        self.counter_label.setText(f"{index + 1}/{total}")

    def set_playing(self, playing: bool) -> None:
        self.play_button.setText("Pause" if playing else "Play")

    def clear(self) -> None:
        self.frame_label.clear()
        self.frame_label.setText("Load a sprite sheet to preview")
        self.counter_label.setText("-/-")

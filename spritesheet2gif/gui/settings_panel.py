"""Settings panel UI for grid layout and export options."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from PySide6.QtCore import QSize, Signal
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QFormLayout,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from ..core import ALLOWED_SCALES, MAX_FPS, MIN_FPS, Direction
from ..core.chroma_key import DETECTORS
from ..core.session import SpriteSession

logger = logging.getLogger(__name__)

MAX_GRID = 64


@dataclass
class PanelValues:
    rows: int
    cols: int
    total_frames: int
    fps: int
    scale: int
    direction: Direction
    auto_transparent: bool
    background_detection: str


class SettingsPanel(QWidget):
    """Collects grid and export settings from the user."""

    changed = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.rows_input = QSpinBox(self)
        self.rows_input.setRange(1, MAX_GRID)
        self.cols_input = QSpinBox(self)
        self.cols_input.setRange(1, MAX_GRID)
        self.frames_input = QSpinBox(self)
        self.frames_input.setRange(1, MAX_GRID * MAX_GRID)
        self.fps_input = QSpinBox(self)
        self.fps_input.setRange(MIN_FPS, MAX_FPS)
        self.direction_input = QComboBox(self)
        self.direction_input.addItem("Horizontal (rows first)", Direction.ROW_MAJOR)
        self.direction_input.addItem("Vertical (columns first)", Direction.COLUMN_MAJOR)
        self.scale_input = QComboBox(self)
        for scale in ALLOWED_SCALES:
            self.scale_input.addItem(f"{scale}x", scale)
        self.auto_transparent_checkbox = QCheckBox("Transparent background", self)
        self.detection_input = QComboBox(self)
        for name in DETECTORS:
            self.detection_input.addItem(name.capitalize(), name)
        self.detection_input.setToolTip("Which pixels decide the background colour to remove")

        self._build_layout()
        for spin_box in (self.rows_input, self.cols_input, self.frames_input, self.fps_input):
            spin_box.valueChanged.connect(self.changed.emit)
        for combo in (self.direction_input, self.scale_input, self.detection_input):
            combo.currentIndexChanged.connect(self.changed.emit)
        self.auto_transparent_checkbox.stateChanged.connect(self.changed.emit)
        self.auto_transparent_checkbox.stateChanged.connect(self._refresh_detection_enabled)

    def _build_layout(self) -> None:
        layout = QVBoxLayout(self)
        form_layout = QFormLayout()
        form_layout.addRow("Rows", self.rows_input)
        form_layout.addRow("Columns", self.cols_input)
        form_layout.addRow("Frames", self.frames_input)
        form_layout.addRow("Order", self.direction_input)
        form_layout.addRow("FPS", self.fps_input)
        form_layout.addRow("Scale", self.scale_input)
        form_layout.addRow("", self.auto_transparent_checkbox)
        form_layout.addRow("Background from", self.detection_input)
        layout.addLayout(form_layout)
        layout.addStretch(1)

    def _refresh_detection_enabled(self) -> None:
        self.detection_input.setEnabled(self.auto_transparent_checkbox.isChecked())

    def values(self) -> PanelValues:
        return PanelValues(
            rows=self.rows_input.value(),
            cols=self.cols_input.value(),
            total_frames=self.frames_input.value(),
            fps=self.fps_input.value(),
            scale=self.scale_input.currentData(),
            direction=self.direction_input.currentData(),
            auto_transparent=self.auto_transparent_checkbox.isChecked(),
            background_detection=self.detection_input.currentData(),
        )

    def sync_from_session(self, session: SpriteSession) -> None:
        """Show the session's settings without emitting ``changed``."""

        widgets = (
            self.rows_input,
            self.cols_input,
            self.frames_input,
            self.fps_input,
            self.direction_input,
            self.scale_input,
            self.auto_transparent_checkbox,
        )
        for widget in widgets:
            widget.blockSignals(True)
        try:
            grid = session.grid
            self.rows_input.setValue(grid.rows)
            self.cols_input.setValue(grid.cols)
            self.frames_input.setMaximum(grid.cell_count)
            self.frames_input.setValue(grid.total_frames)
            self.fps_input.setValue(session.fps)
            self.direction_input.setCurrentIndex(self.direction_input.findData(grid.direction))
            self.scale_input.setCurrentIndex(self.scale_input.findData(session.scale))
            self.auto_transparent_checkbox.setChecked(session.auto_transparent)
        finally:
            for widget in widgets:
                widget.blockSignals(False)
        self._refresh_detection_enabled()

    def sizeHint(self) -> QSize:  # pragma: no cover - Qt paints this
        return QSize(280, 360)

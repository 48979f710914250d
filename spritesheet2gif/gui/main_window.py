"""Main application window wiring the sprite session to the UI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Qt, Signal, Slot
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QProgressBar,
    QPushButton,
    QScrollArea,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)

from ..core import AnimationArtifact, ExportRequest
from ..core.chroma_key import ChromaKeySynthesizer, make_detector
from ..core.errors import SourceUnavailable, ValidationError
from ..core.exporter import AnimationExporter
from ..core.grid_overlay import render_overlay
from ..core.preview_player import LivePreviewPlayer
from ..core.session import SpriteSession
from ..gui.file_picker import open_image_file_dialog, save_gif_file_dialog
from ..gui.preview_widget import PreviewPanel, QtFrameScheduler, pixmap_from_image
from ..gui.settings_panel import SettingsPanel
from ..utils import file_tools, validators
from ..web import image_tools

logger = logging.getLogger(__name__)
MAX_SHEET_HEIGHT = 600


class WorkerSignals(QObject):
    progress = Signal(int)
    finished = Signal(object)  # AnimationArtifact
    error = Signal(str)


class ExportWorker(QRunnable):
    """Background task running one export."""

    def __init__(self, exporter: AnimationExporter, request: ExportRequest):
        super().__init__()
        self.exporter = exporter
        self.request = request
        self.signals = WorkerSignals()

    @Slot()
    def run(self) -> None:  # pragma: no cover - runs in thread pool
        try:
            artifact = self.exporter.export(self.request, self.signals.progress.emit)
        except Exception as exc:
            logger.exception("Export failed")
            self.signals.error.emit(str(exc))
            return
        self.signals.finished.emit(artifact)


class MainWindow(QMainWindow):  # pragma: no cover - Qt widget wiring
    """Primary application window."""

    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Sprite Sheet to GIF")
        self.setMinimumSize(1000, 640)

        self.session = SpriteSession()
        self.thread_pool = QThreadPool.globalInstance()
        self._current_worker: Optional[ExportWorker] = None

        self.status_bar = QStatusBar(self)
        self.setStatusBar(self.status_bar)

        self.open_button = QPushButton("Open Sprite Sheet", self)
        self.export_button = QPushButton("Export GIF", self)
        self.export_button.setEnabled(False)
        self.progress_bar = QProgressBar(self)
        self.settings_panel = SettingsPanel(self)
        self.sheet_label = QLabel("Open a sprite sheet to start", self)
        self.sheet_label.setAlignment(Qt.AlignCenter)
        self.sheet_scroll = QScrollArea(self)
        self.sheet_scroll.setWidget(self.sheet_label)
        self.sheet_scroll.setWidgetResizable(True)
        self.preview_panel = PreviewPanel(self)
        self.history_list = QListWidget(self)
        self.save_button = QPushButton("Save As...", self)
        self.remove_button = QPushButton("Remove", self)

        self.player = LivePreviewPlayer(self.session, self.preview_panel, QtFrameScheduler(self))

        self._build_menu()
        self._build_layout()
        self._wire_signals()
        self.settings_panel.sync_from_session(self.session)

    def _build_menu(self) -> None:
        file_menu = self.menuBar().addMenu("File")
        open_action = QAction("Open", self)
        open_action.triggered.connect(self._on_open)
        exit_action = QAction("Exit", self)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(open_action)
        file_menu.addSeparator()
        file_menu.addAction(exit_action)

        help_menu = self.menuBar().addMenu("Help")
        about_action = QAction("About", self)
        about_action.triggered.connect(self._show_about)
        help_menu.addAction(about_action)

    def _build_layout(self) -> None:
        central = QWidget(self)
        layout = QVBoxLayout(central)

        content_row = QHBoxLayout()
        settings_box = QGroupBox("Grid & Export", self)
        settings_layout = QVBoxLayout(settings_box)
        settings_layout.addWidget(self.open_button)
        settings_layout.addWidget(self.settings_panel)
        content_row.addWidget(settings_box)

        sheet_box = QGroupBox("Sprite Sheet", self)
        sheet_layout = QVBoxLayout(sheet_box)
        sheet_layout.addWidget(self.sheet_scroll)
        content_row.addWidget(sheet_box, 2)

        side_column = QVBoxLayout()
        preview_box = QGroupBox("Preview", self)
        preview_layout = QVBoxLayout(preview_box)
        preview_layout.addWidget(self.preview_panel)
        side_column.addWidget(preview_box, 1)

        history_box = QGroupBox("Exported GIFs", self)
        history_layout = QVBoxLayout(history_box)
        history_layout.addWidget(self.history_list, 1)
        history_buttons = QHBoxLayout()
        history_buttons.addWidget(self.save_button)
        history_buttons.addWidget(self.remove_button)
        history_layout.addLayout(history_buttons)
        side_column.addWidget(history_box, 1)
        content_row.addLayout(side_column, 1)

        layout.addLayout(content_row, 1)
        buttons_row = QHBoxLayout()
        buttons_row.addWidget(self.export_button)
        buttons_row.addWidget(self.progress_bar, 1)
        layout.addLayout(buttons_row)

        self.setCentralWidget(central)

    def _wire_signals(self) -> None:
        self.open_button.clicked.connect(self._on_open)
        self.export_button.clicked.connect(self._on_export)
        self.settings_panel.changed.connect(self._on_settings_changed)
        self.preview_panel.play_button.clicked.connect(self._on_toggle_playback)
        self.save_button.clicked.connect(self._on_save_artifact)
        self.remove_button.clicked.connect(self._on_remove_artifact)
        self.session.subscribe(self._on_session_changed)

    @Slot()
    def _on_open(self) -> None:
        chosen = open_image_file_dialog(self)
        if chosen is None:
            return
        self.load_image(chosen)

    def load_image(self, path: Path) -> None:
        try:
            image = image_tools.load_image(validators.validate_image_path(path))
        except (ValidationError, OSError) as exc:
            QMessageBox.warning(self, "Cannot open image", str(exc))
            return
        self.session.load_source(image)
        self.status_bar.showMessage(f"Loaded {path.name} ({image.width}x{image.height})")

    def _on_session_changed(self, session: SpriteSession) -> None:
        self.settings_panel.sync_from_session(session)
        self.export_button.setEnabled(session.has_source and self._current_worker is None)
        self.preview_panel.set_playing(self.player.is_playing)
        self._refresh_sheet()

    def _refresh_sheet(self) -> None:
        source = self.session.source
        if source is None:
            self.sheet_label.setText("Open a sprite sheet to start")
            self.preview_panel.clear()
            return
        display_size = None
        if source.height > MAX_SHEET_HEIGHT:
            ratio = MAX_SHEET_HEIGHT / source.height
            display_size = (max(1, round(source.width * ratio)), MAX_SHEET_HEIGHT)
        try:
            overlay = render_overlay(source, self.session.grid, display_size)
        except ValidationError as exc:
            self.sheet_label.setText(str(exc))
            return
        self.sheet_label.setPixmap(pixmap_from_image(overlay))

    @Slot()
    def _on_settings_changed(self) -> None:
        values = self.settings_panel.values()
        grid = self.session.grid
        try:
            if (values.rows, values.cols) != (grid.rows, grid.cols):
                self.session.update_grid(rows=values.rows, cols=values.cols, direction=values.direction)
            else:
                self.session.update_grid(total_frames=values.total_frames, direction=values.direction)
            self.session.set_fps(values.fps)
            self.session.set_scale(values.scale)
            self.session.set_auto_transparent(values.auto_transparent)
        except ValidationError as exc:
            self.status_bar.showMessage(str(exc))
            self.settings_panel.sync_from_session(self.session)

    @Slot()
    def _on_toggle_playback(self) -> None:
        self.player.toggle()
        self.preview_panel.set_playing(self.player.is_playing)

    @Slot()
    def _on_export(self) -> None:
        if self._current_worker is not None:
            return
        try:
            request = self.session.snapshot()
        except (SourceUnavailable, ValidationError) as exc:
            QMessageBox.warning(self, "Cannot export", str(exc))
            return

        detection = self.settings_panel.values().background_detection
        exporter = AnimationExporter(
            synthesizer=ChromaKeySynthesizer(make_detector(detection)),
            history=self.session.history,
        )
        worker = ExportWorker(exporter, request)
        worker.signals.progress.connect(self.progress_bar.setValue)
        worker.signals.finished.connect(self._on_export_finished)
        worker.signals.error.connect(self._on_export_error)
        self._current_worker = worker
        self.export_button.setEnabled(False)
        self.progress_bar.setValue(0)
        self.status_bar.showMessage("Rendering GIF...")
        self.thread_pool.start(worker)

    @Slot(object)
    def _on_export_finished(self, artifact: AnimationArtifact) -> None:
        self._current_worker = None
        self.progress_bar.setValue(100)
        self.export_button.setEnabled(self.session.has_source)
        self._populate_history()
        self.status_bar.showMessage(f"Exported {artifact.name} ({artifact.width}x{artifact.height}, {artifact.frame_count} frames)")

    @Slot(str)
    def _on_export_error(self, message: str) -> None:
        self._current_worker = None
        self.progress_bar.setValue(0)
        self.export_button.setEnabled(self.session.has_source)
        QMessageBox.critical(self, "Export failed", f"Failed to generate GIF.\n{message}")
        self.status_bar.showMessage("Export failed")

    def _populate_history(self) -> None:
        self.history_list.clear()
        for artifact in self.session.history:
            created = artifact.created_at.astimezone().strftime("%H:%M:%S")
            item = QListWidgetItem(f"{artifact.name}  {artifact.width}x{artifact.height}  {created}")
            item.setData(Qt.UserRole, artifact.id)
            self.history_list.addItem(item)

    def _selected_artifact(self) -> Optional[AnimationArtifact]:
        item = self.history_list.currentItem()
        if item is None:
            return None
        return self.session.history.get(item.data(Qt.UserRole))

    @Slot()
    def _on_save_artifact(self) -> None:
        artifact = self._selected_artifact()
        if artifact is None:
            return
        target = save_gif_file_dialog(self, artifact.name)
        if target is None:
            return
        try:
            file_tools.write_bytes(target, artifact.data)
        except OSError as exc:
            QMessageBox.critical(self, "Save failed", str(exc))
            return
        self.status_bar.showMessage(f"Saved {target}")

    @Slot()
    def _on_remove_artifact(self) -> None:
        artifact = self._selected_artifact()
        if artifact is None:
            return
        self.session.history.remove(artifact.id)
        self._populate_history()

    def _show_about(self) -> None:
        QMessageBox.information(
            self,
            "About",
            "Sprite Sheet to GIF\nPySide6 UI with Pillow-based frame slicing and GIF export.",
        )

    def closeEvent(self, event) -> None:  # pragma: no cover - Qt lifecycle
        self.player.close()
        super().closeEvent(event)

"""Live, user-editable sprite settings.

The session is the one mutable place where grid and playback settings live.
Exports take an immutable :class:`ExportRequest` snapshot from it; the live
preview reads it afresh on every tick.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Callable, Optional

from PIL import Image

from . import (
    DEFAULT_AUTO_TRANSPARENT,
    DEFAULT_FPS,
    DEFAULT_SCALE,
    Direction,
    ExportRequest,
    FrameGeometry,
    GridSpec,
    validate_fps,
    validate_scale,
)
from .errors import SourceUnavailable
from .history import ArtifactHistory

logger = logging.getLogger(__name__)

Listener = Callable[["SpriteSession"], None]


class SpriteSession:
    """Holds the loaded sprite sheet, its grid, playback settings and export history."""

    def __init__(self, history: Optional[ArtifactHistory] = None):
        self.source: Optional[Image.Image] = None
        self.grid = GridSpec.default()
        self.fps = DEFAULT_FPS
        self.scale = DEFAULT_SCALE
        self.auto_transparent = DEFAULT_AUTO_TRANSPARENT
        self.history = history if history is not None else ArtifactHistory()
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that unregisters it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    @property
    def has_source(self) -> bool:
        return self.source is not None

    @property
    def geometry(self) -> FrameGeometry:
        if self.source is None:
            raise SourceUnavailable()
        return FrameGeometry.from_size(self.source.width, self.source.height, self.grid)

    def load_source(self, image: Image.Image) -> None:
        """Adopt a new sprite sheet and reset all settings to their defaults."""

        self.source = image.convert("RGBA") if image.mode != "RGBA" else image.copy()
        self.grid = GridSpec.default()
        self.fps = DEFAULT_FPS
        self.scale = DEFAULT_SCALE
        self.auto_transparent = DEFAULT_AUTO_TRANSPARENT
        logger.info("Loaded %sx%s sprite sheet", self.source.width, self.source.height)
        self._notify()

    def clear_source(self) -> None:
        self.source = None
        self._notify()

    def update_grid(
        self,
        rows: Optional[int] = None,
        cols: Optional[int] = None,
        total_frames: Optional[int] = None,
        direction: Optional[Direction | str] = None,
    ) -> GridSpec:
        """Replace the grid, keeping the frame count in step with the cell count.

        If the frame count covered every cell before a row/column change, it
        keeps covering every cell; otherwise it is clamped to the new cell
        count. The session is unchanged when the result is invalid.
        """

        current = self.grid
        new_rows = current.rows if rows is None else rows
        new_cols = current.cols if cols is None else cols
        if total_frames is None:
            if current.total_frames == current.cell_count:
                total_frames = new_rows * new_cols
            else:
                total_frames = max(1, min(current.total_frames, new_rows * new_cols))

        self.grid = dataclasses.replace(
            current,
            rows=new_rows,
            cols=new_cols,
            total_frames=total_frames,
            direction=current.direction if direction is None else Direction.parse(direction),
        )
        logger.debug("Grid updated: %s", self.grid)
        self._notify()
        return self.grid

    def set_fps(self, fps: int) -> None:
        self.fps = validate_fps(fps)
        self._notify()

    def set_scale(self, scale: int) -> None:
        self.scale = validate_scale(scale)
        self._notify()

    def set_auto_transparent(self, enabled: bool) -> None:
        self.auto_transparent = bool(enabled)
        self._notify()

    def snapshot(self) -> ExportRequest:
        """Freeze the current settings for an export."""

        if self.source is None:
            raise SourceUnavailable("load a sprite sheet before exporting")
        return ExportRequest(
            source=self.source,
            grid=self.grid,
            scale=self.scale,
            fps=self.fps,
            auto_transparent=self.auto_transparent,
        )

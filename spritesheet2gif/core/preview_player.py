"""Real-time preview that plays the sprite sheet cell by cell."""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Optional, Protocol

from PIL import Image

from . import frame_extractor
from .errors import ValidationError
from .scheduling import FrameScheduler, ScheduledTask
from .session import SpriteSession

logger = logging.getLogger(__name__)


class PlaybackState(str, Enum):
    PLAYING = "playing"
    PAUSED = "paused"


class PreviewSurface(Protocol):
    def draw(self, frame: Image.Image, index: int, total: int) -> None:
        """Show one unscaled frame; ``index`` is 0-based out of ``total``."""


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


def frame_index_at(elapsed_ms: float, fps: int, total_frames: int) -> int:
    """Sequence index shown after ``elapsed_ms`` of playback."""

    return int(elapsed_ms // (1000 / fps)) % total_frames


class LivePreviewPlayer:
    """Drive a preview surface from wall-clock time.

    Settings are read from the live session on every tick, so edits to the
    grid or fps show up on the next frame. Pausing freezes the displayed
    frame and stops the clock; resuming continues from the same point.
    Closing cancels the pending tick, after which nothing is drawn.
    """

    def __init__(
        self,
        session: SpriteSession,
        surface: PreviewSurface,
        scheduler: FrameScheduler,
        clock: Callable[[], float] = _monotonic_ms,
    ):
        self.session = session
        self.surface = surface
        self.scheduler = scheduler
        self.clock = clock
        self.state = PlaybackState.PAUSED
        self.current_index = 0
        self._elapsed_ms = 0.0
        self._resumed_at = 0.0
        self._handle: Optional[ScheduledTask] = None
        self._source: Optional[Image.Image] = None
        self._closed = False
        self._unsubscribe = session.subscribe(self._on_session_changed)
        if session.source is not None:
            self._start_new_source(session.source)

    @property
    def is_playing(self) -> bool:
        return self.state is PlaybackState.PLAYING

    @property
    def closed(self) -> bool:
        return self._closed

    def elapsed_ms(self) -> float:
        if self.is_playing:
            return self._elapsed_ms + (self.clock() - self._resumed_at)
        return self._elapsed_ms

    def play(self) -> None:
        if self._closed or self.is_playing or self.session.source is None:
            return
        self._resumed_at = self.clock()
        self.state = PlaybackState.PLAYING
        self._schedule()

    def pause(self) -> None:
        if not self.is_playing:
            return
        self._elapsed_ms += self.clock() - self._resumed_at
        self.state = PlaybackState.PAUSED
        self._cancel_pending()

    def toggle(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def close(self) -> None:
        """Stop playback for good and detach from the session."""

        if self._closed:
            return
        self.pause()
        self._cancel_pending()
        self._closed = True
        self._unsubscribe()

    def _on_session_changed(self, session: SpriteSession) -> None:
        if session.source is None:
            self._source = None
            self.pause()
            return
        if session.source is not self._source:
            self._start_new_source(session.source)

    def _start_new_source(self, source: Image.Image) -> None:
        self._source = source
        self._elapsed_ms = 0.0
        self.current_index = 0
        self.state = PlaybackState.PAUSED
        self._cancel_pending()
        self.play()

    def _schedule(self) -> None:
        if self._handle is None:
            self._handle = self.scheduler.schedule(self._tick)

    def _cancel_pending(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _tick(self) -> None:
        self._handle = None
        if self._closed or not self.is_playing:
            return
        self.render_current()
        if self._closed or not self.is_playing:
            return
        self._schedule()

    def render_current(self) -> None:
        """Draw the frame for the current playback time."""

        source = self.session.source
        if source is None:
            return
        grid = self.session.grid
        index = frame_index_at(self.elapsed_ms(), self.session.fps, grid.total_frames)
        try:
            frame = frame_extractor.extract_frame(source, grid, index, scale=1)
        except ValidationError as exc:
            logger.debug("Skipping preview frame: %s", exc)
            return
        self.current_index = index
        self.surface.draw(frame, index, grid.total_frames)

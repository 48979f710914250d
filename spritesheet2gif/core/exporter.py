"""Export pipeline: slice, key and encode every frame of a sprite sheet."""

from __future__ import annotations

import logging
import uuid
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import datetime, timezone
from typing import Callable, Optional

from PIL import Image

from . import KEY_COLOR, AnimationArtifact, ExportRequest
from . import frame_extractor
from .chroma_key import ChromaKeySynthesizer
from .errors import EncodeFailure, SourceUnavailable
from .gif_encoder import FrameEncoder, PillowGifEncoder
from .history import ArtifactHistory
from ..utils import file_tools

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


class _ProgressTracker:
    """Forward progress values, dropping any that would move backwards."""

    def __init__(self, callback: Optional[ProgressCallback]):
        self.callback = callback
        self.last = -1

    def report(self, percent: int) -> None:
        value = max(0, min(100, int(percent)))
        if value <= self.last:
            return
        self.last = value
        if self.callback:
            self.callback(value)


class AnimationExporter:
    """Turn an :class:`ExportRequest` into an :class:`AnimationArtifact`.

    A fresh encoder is created for every export, so a failed run leaves no
    frames behind. ``export`` blocks until the encoder finishes; run it on a
    worker thread to keep a UI responsive.
    """

    def __init__(
        self,
        encoder_factory: Callable[[], FrameEncoder] = PillowGifEncoder,
        synthesizer: Optional[ChromaKeySynthesizer] = None,
        history: Optional[ArtifactHistory] = None,
        timeout: Optional[float] = None,
    ):
        self.encoder_factory = encoder_factory
        self.synthesizer = synthesizer or ChromaKeySynthesizer()
        self.history = history
        self.timeout = timeout

    def export(self, request: ExportRequest, on_progress: Optional[ProgressCallback] = None) -> AnimationArtifact:
        if request.source is None:
            raise SourceUnavailable("cannot export")

        grid = request.grid
        width, height = request.output_size
        delay = request.frame_delay_ms
        logger.info(
            "Exporting %s frames at %sx%s, %sms per frame (%s, auto transparent: %s)",
            grid.total_frames,
            width,
            height,
            delay,
            grid.direction.value,
            request.auto_transparent,
        )

        encoder = self.encoder_factory()
        try:
            encoder.configure(width, height, KEY_COLOR if request.auto_transparent else None)
        except Exception as exc:
            raise EncodeFailure(f"Encoder rejected configuration: {exc}") from exc

        for index, frame in frame_extractor.iter_frames(request.source, grid, request.scale):
            if request.auto_transparent:
                frame = self._key_frame(frame)
            try:
                encoder.submit_frame(frame, delay)
            except Exception as exc:
                raise EncodeFailure(f"Encoder rejected frame {index}: {exc}") from exc

        submitted = encoder.frame_count
        data = self._render(encoder, _ProgressTracker(on_progress))
        frame_count = encoder.output_frame_count or submitted
        if frame_count != submitted:
            logger.info("Identical consecutive frames merged: %s submitted, %s written", submitted, frame_count)
        artifact = self._build_artifact(data, width, height, frame_count, delay)
        if self.history is not None:
            self.history.add(artifact)
        logger.info("Exported %s (%s bytes)", artifact.name, artifact.size_bytes)
        return artifact

    def _key_frame(self, frame: Image.Image) -> Image.Image:
        canvas = Image.new("RGBA", frame.size, (*KEY_COLOR, 255))
        canvas.alpha_composite(frame)
        return self.synthesizer.apply(canvas)

    def _render(self, encoder: FrameEncoder, tracker: _ProgressTracker) -> bytes:
        outcome: Future = Future()
        encoder.on_progress(tracker.report)
        encoder.on_finished(outcome.set_result)
        encoder.on_error(outcome.set_exception)
        try:
            encoder.render()
        except Exception as exc:
            raise EncodeFailure(f"Encoder failed to start: {exc}") from exc

        try:
            data = outcome.result(timeout=self.timeout)
        except FutureTimeoutError as exc:
            raise EncodeFailure(f"Encoder did not finish within {self.timeout}s") from exc
        except Exception as exc:
            raise EncodeFailure(f"Encoder failed: {exc}") from exc
        tracker.report(100)
        return data

    @staticmethod
    def _build_artifact(data: bytes, width: int, height: int, frame_count: int, delay: int) -> AnimationArtifact:
        created_at = datetime.now(timezone.utc)
        return AnimationArtifact(
            id=uuid.uuid4().hex,
            name=file_tools.artifact_filename(created_at),
            created_at=created_at,
            width=width,
            height=height,
            frame_count=frame_count,
            frame_delay_ms=delay,
            data=bytes(data),
        )

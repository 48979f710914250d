"""Frame encoders: the submit/render contract and a Pillow GIF implementation."""

from __future__ import annotations

import io
import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]
FinishedCallback = Callable[[bytes], None]
ErrorCallback = Callable[[BaseException], None]

# Palette slot reserved for the transparent key colour.
TRANSPARENT_INDEX = 255


class FrameEncoder(ABC):
    """Collects frames and encodes them on a background thread.

    Frames are copied on submission, so callers may reuse their buffers.
    Output preserves submission order. Callbacks run on the worker thread.
    """

    def __init__(self) -> None:
        self.width: Optional[int] = None
        self.height: Optional[int] = None
        self.transparent_color: Optional[tuple[int, int, int]] = None
        self._frames: list[tuple[Image.Image, int]] = []
        self._progress_callbacks: list[ProgressCallback] = []
        self._finished_callbacks: list[FinishedCallback] = []
        self._error_callbacks: list[ErrorCallback] = []
        self._thread: Optional[threading.Thread] = None
        # Frames in the encoded output, when the format may merge submitted frames.
        self.output_frame_count: Optional[int] = None

    def configure(self, width: int, height: int, transparent_color: Optional[tuple[int, int, int]] = None) -> None:
        if width < 1 or height < 1:
            raise ValueError(f"Encoder size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.transparent_color = tuple(transparent_color[:3]) if transparent_color else None  # type: ignore[assignment]

    def submit_frame(self, frame: Image.Image, delay_ms: int) -> None:
        if self.width is None or self.height is None:
            raise RuntimeError("Encoder must be configured before frames are submitted")
        if self._thread is not None:
            raise RuntimeError("Encoder is already rendering")
        if frame.size != (self.width, self.height):
            raise ValueError(f"Frame size {frame.size} does not match encoder size {(self.width, self.height)}")
        self._frames.append((frame.copy(), int(delay_ms)))

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    def on_progress(self, callback: ProgressCallback) -> None:
        self._progress_callbacks.append(callback)

    def on_finished(self, callback: FinishedCallback) -> None:
        self._finished_callbacks.append(callback)

    def on_error(self, callback: ErrorCallback) -> None:
        self._error_callbacks.append(callback)

    def render(self) -> None:
        """Start encoding in the background and return immediately."""

        if not self._frames:
            raise RuntimeError("No frames submitted")
        if self._thread is not None:
            raise RuntimeError("Encoder is already rendering")
        self._thread = threading.Thread(target=self._run, name=f"{type(self).__name__}-render", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        try:
            data = self.encode(self._frames)
        except Exception as exc:
            logger.exception("Encoding failed")
            for callback in self._error_callbacks:
                callback(exc)
            return
        finally:
            self._frames = []
        for callback in self._finished_callbacks:
            callback(data)

    def _emit_progress(self, percent: int) -> None:
        for callback in self._progress_callbacks:
            callback(percent)

    @abstractmethod
    def encode(self, frames: list[tuple[Image.Image, int]]) -> bytes:
        """Encode (frame, delay_ms) pairs into the output format."""


class PillowGifEncoder(FrameEncoder):
    """Animated GIF encoder built on Pillow's GIF writer."""

    def __init__(self, loop: int = 0) -> None:
        super().__init__()
        self.loop = loop

    def encode(self, frames: list[tuple[Image.Image, int]]) -> bytes:
        total = len(frames)
        paletted: list[Image.Image] = []
        for position, (frame, _delay) in enumerate(frames, start=1):
            paletted.append(self._to_palette(frame))
            self._emit_progress(int(position * 90 / total))

        save_kwargs = {
            "format": "GIF",
            "save_all": True,
            "append_images": paletted[1:],
            "duration": [delay for _frame, delay in frames],
            "loop": self.loop,
            "disposal": 2,
        }
        if self.transparent_color is not None:
            save_kwargs["transparency"] = TRANSPARENT_INDEX

        buffer = io.BytesIO()
        paletted[0].save(buffer, **save_kwargs)
        # Pillow folds identical consecutive frames into one longer frame.
        buffer.seek(0)
        with Image.open(buffer) as written:
            self.output_frame_count = getattr(written, "n_frames", 1)
        self._emit_progress(100)
        logger.debug("Encoded %s frames into %s GIF frames (%s bytes)", total, self.output_frame_count, len(buffer.getvalue()))
        return buffer.getvalue()

    def _to_palette(self, frame: Image.Image) -> Image.Image:
        """Quantize without dithering; key-coloured pixels get the transparent slot."""

        rgb = frame.convert("RGB")
        if self.transparent_color is None:
            return rgb.quantize(colors=256, method=Image.Quantize.MEDIANCUT, dither=Image.Dither.NONE)

        pixels = np.asarray(rgb)
        keyed = np.all(pixels == np.array(self.transparent_color, dtype=np.uint8), axis=2)
        quantized = rgb.quantize(colors=TRANSPARENT_INDEX, method=Image.Quantize.MEDIANCUT, dither=Image.Dither.NONE)

        palette = (quantized.getpalette() or [])[: TRANSPARENT_INDEX * 3]
        palette += [0] * (TRANSPARENT_INDEX * 3 - len(palette))
        palette += list(self.transparent_color)
        quantized.putpalette(palette)
        if keyed.any():
            mask = Image.fromarray(keyed.astype(np.uint8) * 255)
            quantized.paste(TRANSPARENT_INDEX, mask=mask)
        quantized.info["transparency"] = TRANSPARENT_INDEX
        return quantized

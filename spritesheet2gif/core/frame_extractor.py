"""Frame extraction from a sprite sheet using Pillow (nearest-neighbour only)."""

from __future__ import annotations

import logging
from typing import Iterator, Optional

from PIL import Image

from . import ALLOWED_SCALES, FrameGeometry, GridSpec
from . import grid_addressing
from .errors import OutOfBoundsFrame, SourceUnavailable, ValidationError

logger = logging.getLogger(__name__)


def extract_frame(
    source: Optional[Image.Image],
    spec: GridSpec,
    index: int,
    scale: int = 1,
) -> Image.Image:
    """Cut the cell holding sequence ``index`` out of ``source`` and upscale it.

    The returned image is a new RGBA image of ``frame size * scale``; the
    source is never modified.
    """

    if source is None:
        raise SourceUnavailable("cannot extract frames")
    if scale not in ALLOWED_SCALES:
        raise ValidationError(f"Scale must be one of {ALLOWED_SCALES}, got {scale!r}")

    row, col = grid_addressing.to_cell(index, spec)
    if index < 0 or not grid_addressing.in_grid(row, col, spec):
        raise OutOfBoundsFrame(index, row, col, spec.rows, spec.cols)

    geometry = FrameGeometry.from_size(source.width, source.height, spec)
    cell = source.crop(geometry.box(row, col))
    if cell.mode != "RGBA":
        cell = cell.convert("RGBA")
    target_size = _target_size(geometry, scale)
    if cell.size == target_size:
        return cell
    return cell.resize(target_size, resample=Image.Resampling.NEAREST)


def iter_frames(source: Optional[Image.Image], spec: GridSpec, scale: int = 1) -> Iterator[tuple[int, Image.Image]]:
    """Yield (index, frame) for every frame in playback order, one at a time."""

    if source is None:
        raise SourceUnavailable("cannot extract frames")
    logger.debug("Extracting %s frames (%sx%s grid, %s, scale %s)", spec.total_frames, spec.rows, spec.cols, spec.direction.value, scale)
    for index, _row, _col in grid_addressing.iter_sequence(spec):
        yield index, extract_frame(source, spec, index, scale)


def _target_size(geometry: FrameGeometry, scale: int) -> tuple[int, int]:
    return (geometry.frame_width * scale, geometry.frame_height * scale)

"""Grid overlay showing which cells of a sprite sheet take part in the animation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from PIL import Image, ImageDraw, ImageOps

from . import FrameGeometry, GridSpec
from . import grid_addressing

LINE_COLOR = (96, 165, 250, 77)
DIM_COLOR = (0, 0, 0, 153)


@dataclass(frozen=True)
class OverlayCell:
    visual_row: int
    visual_col: int
    sequence_index: int
    active: bool
    box: tuple[int, int, int, int]


def overlay_cells(
    spec: GridSpec,
    source_size: tuple[int, int],
    display_size: Optional[tuple[int, int]] = None,
) -> list[OverlayCell]:
    """Lay out the grid cells of a ``source_size`` sheet in reading order.

    Boxes use the same floored frame geometry as frame extraction, mapped
    onto ``display_size`` when given, so the leftover right and bottom strip
    lies outside every cell. Each cell carries the sequence index it holds
    under the configured direction; cells at or past ``total_frames`` are
    inactive.
    """

    source_width, source_height = source_size
    width, height = display_size or source_size
    scale_x = width / source_width
    scale_y = height / source_height
    geometry = FrameGeometry.from_size(source_width, source_height, spec)

    cells = []
    for position in range(spec.cell_count):
        row, col = divmod(position, spec.cols)
        index = grid_addressing.to_index(row, col, spec)
        left, top, right, bottom = geometry.box(row, col)
        box = (round(left * scale_x), round(top * scale_y), round(right * scale_x), round(bottom * scale_y))
        cells.append(OverlayCell(row, col, index, grid_addressing.is_active(row, col, spec), box))
    return cells


def render_overlay(
    image: Image.Image,
    spec: GridSpec,
    display_size: Optional[tuple[int, int]] = None,
    line_color: tuple[int, int, int, int] = LINE_COLOR,
    dim_color: tuple[int, int, int, int] = DIM_COLOR,
) -> Image.Image:
    """Return a copy of ``image`` (scaled to ``display_size``) with the grid drawn on it.

    Inactive cells are desaturated and darkened. Raises InvalidGridSpec when
    the grid is finer than the image.
    """

    base = image.convert("RGBA")
    if display_size and tuple(display_size) != base.size:
        base = base.resize(tuple(display_size), resample=Image.Resampling.NEAREST)

    cells = [cell for cell in overlay_cells(spec, image.size, base.size) if cell.box[2] > cell.box[0] and cell.box[3] > cell.box[1]]
    for cell in cells:
        if cell.active:
            continue
        region = base.crop(cell.box)
        gray = ImageOps.grayscale(region).convert("RGBA")
        gray.putalpha(region.getchannel("A"))
        base.paste(gray, cell.box[:2])

    layer = Image.new("RGBA", base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    for cell in cells:
        left, top, right, bottom = cell.box
        if not cell.active:
            draw.rectangle((left, top, right - 1, bottom - 1), fill=dim_color)
        draw.rectangle((left, top, right - 1, bottom - 1), outline=line_color)
    return Image.alpha_composite(base, layer)

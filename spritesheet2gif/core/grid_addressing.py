"""Mapping between animation sequence indices and grid cells.

Every consumer (exporter, live preview, grid overlay) resolves cells through
these functions so that all of them agree on which cell holds which frame.

Row-major ("horizontal") fills the columns of a row before moving down;
column-major ("vertical") fills the rows of a column before moving right.
Both start at cell (0, 0).
"""

from __future__ import annotations

from typing import Iterator

from . import Direction, GridSpec


def to_cell(index: int, spec: GridSpec) -> tuple[int, int]:
    """Return the (row, col) holding sequence ``index``.

    No bounds check is made; an index at or past ``rows * cols`` yields a row
    or column outside the grid, which callers detect with :func:`in_grid`.
    """

    if spec.direction is Direction.COLUMN_MAJOR:
        return index % spec.rows, index // spec.rows
    return index // spec.cols, index % spec.cols


def to_index(row: int, col: int, spec: GridSpec) -> int:
    """Return the sequence index of cell (row, col)."""

    if spec.direction is Direction.COLUMN_MAJOR:
        return col * spec.rows + row
    return row * spec.cols + col


def in_grid(row: int, col: int, spec: GridSpec) -> bool:
    return 0 <= row < spec.rows and 0 <= col < spec.cols


def is_active(row: int, col: int, spec: GridSpec) -> bool:
    """A cell is active when its sequence index is below ``total_frames``."""

    return in_grid(row, col, spec) and to_index(row, col, spec) < spec.total_frames


def iter_sequence(spec: GridSpec) -> Iterator[tuple[int, int, int]]:
    """Yield (index, row, col) for every frame in playback order."""

    for index in range(spec.total_frames):
        row, col = to_cell(index, spec)
        yield index, row, col

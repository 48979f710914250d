import pytest

from spritesheet2gif.core import Direction, GridSpec
from spritesheet2gif.core.errors import InvalidGridSpec
from spritesheet2gif.core import grid_addressing


def test_row_major_fills_columns_of_a_row_first():
    spec = GridSpec(2, 3, 6, Direction.ROW_MAJOR)
    assert grid_addressing.to_cell(4, spec) == (1, 1)
    assert [grid_addressing.to_cell(i, spec) for i in range(3)] == [(0, 0), (0, 1), (0, 2)]


def test_column_major_fills_rows_of_a_column_first():
    spec = GridSpec(2, 3, 6, Direction.COLUMN_MAJOR)
    assert grid_addressing.to_cell(4, spec) == (0, 2)
    assert [grid_addressing.to_cell(i, spec) for i in range(3)] == [(0, 0), (1, 0), (0, 1)]


@pytest.mark.parametrize("direction", list(Direction))
def test_to_index_inverts_to_cell(direction):
    spec = GridSpec(3, 5, 15, direction)
    for index in range(spec.cell_count):
        row, col = grid_addressing.to_cell(index, spec)
        assert grid_addressing.in_grid(row, col, spec)
        assert grid_addressing.to_index(row, col, spec) == index


def test_index_past_the_grid_lands_outside():
    spec = GridSpec(2, 2, 4)
    row, col = grid_addressing.to_cell(4, spec)
    assert not grid_addressing.in_grid(row, col, spec)


def test_active_cells_follow_direction():
    spec = GridSpec(2, 2, 3, Direction.COLUMN_MAJOR)
    assert grid_addressing.is_active(1, 0, spec)
    assert grid_addressing.is_active(0, 1, spec)
    assert not grid_addressing.is_active(1, 1, spec)
    assert not grid_addressing.is_active(2, 0, spec)


def test_iter_sequence_yields_total_frames_in_order():
    spec = GridSpec(2, 2, 3, Direction.ROW_MAJOR)
    assert list(grid_addressing.iter_sequence(spec)) == [(0, 0, 0), (1, 0, 1), (2, 1, 0)]


@pytest.mark.parametrize(
    "rows, cols, total",
    [(0, 4, 1), (4, 0, 1), (2, 2, 0), (2, 2, 5), (2, 2, -1)],
)
def test_invalid_grid_is_rejected(rows, cols, total):
    with pytest.raises(InvalidGridSpec):
        GridSpec(rows, cols, total)


def test_direction_parses_aliases():
    assert Direction.parse("horizontal") is Direction.ROW_MAJOR
    assert Direction.parse("Vertical") is Direction.COLUMN_MAJOR
    assert GridSpec(1, 2, 2, "column").direction is Direction.COLUMN_MAJOR

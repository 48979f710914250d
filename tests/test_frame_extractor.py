from PIL import Image
import pytest

from spritesheet2gif.core import Direction, FrameGeometry, GridSpec
from spritesheet2gif.core.errors import InvalidGridSpec, OutOfBoundsFrame, SourceUnavailable, ValidationError
from spritesheet2gif.core.frame_extractor import extract_frame, iter_frames


def test_frame_has_cell_size_times_scale(small_sheet):
    spec = GridSpec(2, 3, 6)
    assert extract_frame(small_sheet, spec, 0).size == (8, 6)
    assert extract_frame(small_sheet, spec, 0, scale=4).size == (32, 24)


def test_frame_comes_from_the_addressed_cell(small_sheet, marker):
    row_major = GridSpec(2, 3, 6, Direction.ROW_MAJOR)
    column_major = GridSpec(2, 3, 6, Direction.COLUMN_MAJOR)
    assert extract_frame(small_sheet, row_major, 4).getpixel((4, 3)) == marker(1, 1)
    assert extract_frame(small_sheet, column_major, 4).getpixel((4, 3)) == marker(0, 2)


def test_upscale_is_nearest_neighbour():
    source = Image.new("RGBA", (4, 2))
    source.putpixel((0, 0), (255, 0, 0, 255))
    source.putpixel((1, 0), (0, 0, 255, 255))
    frame = extract_frame(source, GridSpec(1, 2, 2), 0, scale=2)
    assert frame.size == (4, 4)
    colors = {frame.getpixel((x, y)) for x in range(2) for y in range(2)}
    assert colors == {(255, 0, 0, 255)}
    assert frame.getpixel((2, 0)) == (0, 0, 255, 255)


def test_source_is_not_modified(small_sheet):
    before = small_sheet.tobytes()
    frame = extract_frame(small_sheet, GridSpec(2, 3, 6), 1, scale=2)
    frame.putpixel((0, 0), (1, 2, 3, 4))
    assert small_sheet.tobytes() == before


def test_rgb_source_yields_rgba_frames():
    frame = extract_frame(Image.new("RGB", (4, 4), (9, 9, 9)), GridSpec(2, 2, 4), 3)
    assert frame.mode == "RGBA"
    assert frame.getpixel((0, 0)) == (9, 9, 9, 255)


def test_index_outside_grid_raises(small_sheet):
    with pytest.raises(OutOfBoundsFrame) as excinfo:
        extract_frame(small_sheet, GridSpec(2, 3, 6), 6)
    assert excinfo.value.row == 2
    with pytest.raises(OutOfBoundsFrame):
        extract_frame(small_sheet, GridSpec(2, 3, 6), -1)


def test_missing_source_raises():
    with pytest.raises(SourceUnavailable):
        extract_frame(None, GridSpec(1, 1, 1), 0)


def test_unsupported_scale_raises(small_sheet):
    with pytest.raises(ValidationError):
        extract_frame(small_sheet, GridSpec(2, 3, 6), 0, scale=3)


def test_fractional_geometry_is_floored():
    geometry = FrameGeometry.from_size(10, 7, GridSpec(2, 3, 6))
    assert (geometry.frame_width, geometry.frame_height) == (3, 3)
    assert geometry.box(1, 2) == (6, 3, 9, 6)


def test_grid_finer_than_source_is_rejected():
    with pytest.raises(InvalidGridSpec):
        FrameGeometry.from_size(3, 3, GridSpec(4, 1, 4))


def test_iter_frames_follows_playback_order(small_sheet, marker):
    spec = GridSpec(2, 3, 4, Direction.COLUMN_MAJOR)
    frames = list(iter_frames(small_sheet, spec))
    assert [index for index, _frame in frames] == [0, 1, 2, 3]
    assert [frame.getpixel((4, 3)) for _index, frame in frames] == [
        marker(0, 0),
        marker(1, 0),
        marker(0, 1),
        marker(1, 1),
    ]

from PIL import Image
import pytest

from spritesheet2gif.core import Direction, GridSpec
from spritesheet2gif.core.errors import InvalidGridSpec, SourceUnavailable, ValidationError
from spritesheet2gif.core.session import SpriteSession


def test_defaults():
    session = SpriteSession()
    assert session.grid == GridSpec(4, 4, 16, Direction.ROW_MAJOR)
    assert (session.fps, session.scale, session.auto_transparent) == (12, 1, True)
    assert not session.has_source


def test_loading_a_source_resets_settings(sheet_factory):
    session = SpriteSession()
    session.load_source(sheet_factory(2, 2))
    session.update_grid(rows=2, cols=3, direction="column")
    session.set_fps(30)
    session.set_scale(4)
    session.set_auto_transparent(False)

    session.load_source(sheet_factory(3, 3))
    assert session.grid == GridSpec.default()
    assert (session.fps, session.scale, session.auto_transparent) == (12, 1, True)


def test_load_converts_to_rgba_copy():
    source = Image.new("RGB", (8, 8))
    session = SpriteSession()
    session.load_source(source)
    assert session.source.mode == "RGBA"
    assert session.source is not source


def test_full_frame_count_follows_grid_size():
    session = SpriteSession()
    session.update_grid(rows=2, cols=3)
    assert session.grid.total_frames == 6
    session.update_grid(cols=5)
    assert session.grid.total_frames == 10


def test_partial_frame_count_is_clamped():
    session = SpriteSession()
    session.update_grid(total_frames=10)
    session.update_grid(rows=5)
    assert session.grid.total_frames == 10
    session.update_grid(rows=2, cols=2)
    assert session.grid.total_frames == 4


def test_invalid_update_leaves_grid_unchanged():
    session = SpriteSession()
    with pytest.raises(InvalidGridSpec):
        session.update_grid(total_frames=17)
    assert session.grid == GridSpec.default()
    with pytest.raises(ValidationError):
        session.set_fps(0)
    with pytest.raises(ValidationError):
        session.set_scale(3)
    assert (session.fps, session.scale) == (12, 1)


def test_listeners_are_notified_until_unsubscribed():
    session = SpriteSession()
    calls = []
    unsubscribe = session.subscribe(calls.append)
    session.set_fps(20)
    unsubscribe()
    session.set_fps(24)
    assert calls == [session]


def test_snapshot_requires_source():
    with pytest.raises(SourceUnavailable):
        SpriteSession().snapshot()


def test_snapshot_is_unaffected_by_later_edits(sheet_factory):
    session = SpriteSession()
    session.load_source(sheet_factory(2, 2, cell=(10, 10)))
    session.update_grid(rows=2, cols=2)
    session.set_fps(10)
    request = session.snapshot()

    session.update_grid(rows=1, cols=1)
    session.set_fps(30)
    session.set_scale(2)
    assert request.grid == GridSpec(2, 2, 4)
    assert request.fps == 10
    assert request.scale == 1
    assert request.output_size == (10, 10)

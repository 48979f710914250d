from PIL import Image
import pytest

from spritesheet2gif.core import KEY_COLOR
from spritesheet2gif.core.chroma_key import (
    ChromaKeySynthesizer,
    CornerMajority,
    CornerSample,
    FixedColor,
    apply_key,
    make_detector,
)
from spritesheet2gif.core.errors import ValidationError

MAGENTA = (*KEY_COLOR, 255)


def _sprite_on(background):
    image = Image.new("RGBA", (6, 6), background)
    for x in range(2, 4):
        for y in range(2, 4):
            image.putpixel((x, y), (200, 30, 30, 255))
    return image


def test_white_background_becomes_key_colour():
    keyed = apply_key(_sprite_on((255, 255, 255, 255)))
    assert keyed.getpixel((0, 0)) == MAGENTA
    assert keyed.getpixel((5, 5)) == MAGENTA
    assert keyed.getpixel((2, 2)) == (200, 30, 30, 255)


def test_near_background_within_tolerance_is_keyed():
    image = _sprite_on((255, 255, 255, 255))
    image.putpixel((1, 0), (236, 240, 250, 255))
    image.putpixel((2, 0), (235, 255, 255, 255))
    keyed = apply_key(image)
    assert keyed.getpixel((1, 0)) == MAGENTA
    # a difference of exactly 20 is outside the strict tolerance
    assert keyed.getpixel((2, 0)) == (235, 255, 255, 255)


def test_nearly_transparent_pixels_are_keyed():
    image = _sprite_on((255, 255, 255, 255))
    image.putpixel((3, 3), (10, 200, 10, 9))
    image.putpixel((2, 3), (10, 200, 10, 10))
    keyed = apply_key(image)
    assert keyed.getpixel((3, 3)) == MAGENTA
    assert keyed.getpixel((2, 3)) == (10, 200, 10, 10)


def test_input_is_left_untouched():
    image = _sprite_on((255, 255, 255, 255))
    before = image.tobytes()
    apply_key(image)
    assert image.tobytes() == before


def test_keying_twice_changes_nothing_more():
    once = apply_key(_sprite_on((250, 250, 250, 255)))
    twice = apply_key(once)
    assert once.tobytes() == twice.tobytes()


def test_corner_majority_ignores_single_odd_corner():
    image = _sprite_on((0, 0, 255, 255))
    image.putpixel((0, 0), (255, 255, 255, 255))
    assert CornerSample().detect(image) == (255, 255, 255)
    assert CornerMajority().detect(image) == (0, 0, 255)


def test_corner_majority_prefers_top_left_on_ties():
    image = Image.new("RGBA", (4, 4), (0, 0, 0, 255))
    image.putpixel((0, 0), (1, 1, 1, 255))
    image.putpixel((3, 0), (2, 2, 2, 255))
    image.putpixel((0, 3), (3, 3, 3, 255))
    image.putpixel((3, 3), (4, 4, 4, 255))
    assert CornerMajority().detect(image) == (1, 1, 1)


def test_fixed_colour_detector():
    synthesizer = ChromaKeySynthesizer(FixedColor((200, 30, 30, 255)))
    keyed = synthesizer.apply(_sprite_on((255, 255, 255, 255)))
    assert keyed.getpixel((2, 2)) == MAGENTA
    assert keyed.getpixel((0, 0)) == (255, 255, 255, 255)


def test_make_detector():
    assert isinstance(make_detector(), CornerSample)
    assert isinstance(make_detector("majority"), CornerMajority)
    assert isinstance(make_detector("majority", (1, 2, 3)), FixedColor)
    with pytest.raises(ValidationError):
        make_detector("flood")

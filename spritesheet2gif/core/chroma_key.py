"""Background-to-key-colour substitution for single-colour GIF transparency.

GIF frames cannot carry an alpha channel, only one palette entry that is
drawn as transparent. Before encoding, every pixel that looks like the frame
background (or is already nearly transparent) is rewritten to the opaque key
colour, which the encoder then declares transparent.

This is a heuristic, not segmentation: it assumes a roughly uniform
background. Busy or gradient backgrounds leak into the foreground or vice
versa, and a foreground that uses the key colour itself turns transparent.
"""

from __future__ import annotations

import logging
from collections import Counter
from functools import reduce
from typing import Protocol

from PIL import Image, ImageChops

from . import ALPHA_THRESHOLD, KEY_COLOR, KEY_TOLERANCE
from .errors import ValidationError

logger = logging.getLogger(__name__)

RGB = tuple[int, int, int]


def _rgb(pixel) -> RGB:
    return (int(pixel[0]), int(pixel[1]), int(pixel[2]))


class BackgroundDetector(Protocol):
    def detect(self, image: Image.Image) -> RGB:
        """Return the reference background colour of an RGBA image."""


class CornerSample:
    """Use the top-left pixel as the background reference."""

    def detect(self, image: Image.Image) -> RGB:
        return _rgb(image.getpixel((0, 0)))


class CornerMajority:
    """Use the colour shared by most of the four corners (top-left wins ties)."""

    def detect(self, image: Image.Image) -> RGB:
        right, bottom = image.width - 1, image.height - 1
        colors = [_rgb(image.getpixel(xy)) for xy in ((0, 0), (right, 0), (0, bottom), (right, bottom))]
        counts = Counter(colors)
        return max(colors, key=counts.__getitem__)


class FixedColor:
    """Use an explicit, user-picked background colour."""

    def __init__(self, color: tuple[int, ...]):
        self.color: RGB = _rgb(color)

    def detect(self, image: Image.Image) -> RGB:
        return self.color


DETECTORS = {"corner": CornerSample, "majority": CornerMajority}


def make_detector(mode: str = "corner", color: tuple[int, ...] | None = None) -> BackgroundDetector:
    """Pick a background detector; an explicit colour wins over ``mode``."""

    if color is not None:
        return FixedColor(color)
    try:
        return DETECTORS[mode]()
    except KeyError:
        raise ValidationError(f"Unknown background detection {mode!r} (use {', '.join(DETECTORS)})") from None


class ChromaKeySynthesizer:
    """Rewrite background-coloured and near-transparent pixels to the key colour."""

    def __init__(
        self,
        detector: BackgroundDetector | None = None,
        tolerance: int = KEY_TOLERANCE,
        alpha_threshold: int = ALPHA_THRESHOLD,
        key_color: RGB = KEY_COLOR,
    ):
        self.detector = detector or CornerSample()
        self.tolerance = tolerance
        self.alpha_threshold = alpha_threshold
        self.key_color = key_color

    def apply(self, image: Image.Image) -> Image.Image:
        """Return a keyed RGBA copy of ``image``; the input is left untouched."""

        img = image.convert("RGBA")
        background = self.detector.detect(img)
        tolerance = self.tolerance
        alpha_threshold = self.alpha_threshold

        solid = Image.new("RGB", img.size, background)
        diff = ImageChops.difference(img.convert("RGB"), solid)
        # largest per-channel distance from the background
        distance = reduce(ImageChops.lighter, diff.split())
        near_background = distance.point(lambda v: 255 if v < tolerance else 0)
        see_through = img.getchannel("A").point(lambda v: 255 if v < alpha_threshold else 0)
        mask = ImageChops.lighter(near_background, see_through)

        img.paste((*self.key_color, 255), mask=mask)
        logger.debug("Keyed %s of %s pixels against background %s", mask.histogram()[255], img.width * img.height, background)
        return img


_DEFAULT = ChromaKeySynthesizer()


def apply_key(image: Image.Image) -> Image.Image:
    """Key ``image`` against its top-left pixel with the default tolerances."""

    return _DEFAULT.apply(image)

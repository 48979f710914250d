"""Image utility helpers for the web surface."""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from ..core.errors import ValidationError
from ..utils import file_tools

logger = logging.getLogger(__name__)


def load_image(path: Path) -> Image.Image:
    """Load an image safely."""

    if not path.exists():
        raise FileNotFoundError(path)
    with Image.open(path) as image:
        return image.convert("RGBA")


def decode_image(data: bytes) -> Image.Image:
    """Decode uploaded bytes into a fully loaded RGBA image."""

    if not data:
        raise ValidationError("Uploaded image is empty")
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            return image.convert("RGBA")
    except (UnidentifiedImageError, OSError) as exc:
        raise ValidationError(f"Could not decode image: {exc}") from exc


def encode_png(image: Image.Image) -> bytes:
    """Serialize an image to PNG bytes."""

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def save_image(image: Image.Image, path: Path) -> Path:
    """Persist an image to disk."""

    file_tools.ensure_directory(path.parent)
    image.save(path)
    return path

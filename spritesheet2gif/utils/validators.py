"""Validation helpers for user inputs."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..core import ALLOWED_SCALES, MAX_FPS, MIN_FPS
from ..core.errors import ValidationError
from .file_tools import ALLOWED_IMAGE_EXTENSIONS


def validate_image_path(path: Optional[Path]) -> Path:
    """Ensure the image path exists and appears to be a supported format."""

    if not path:
        raise ValidationError("No image path provided")
    if not path.exists():
        raise ValidationError(f"Image not found: {path}")
    if path.suffix.lower() not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError(f"Unsupported image format: {path.suffix or '<none>'}")
    return path


def parse_fps(value: str | int) -> int:
    """Parse a frame rate in the supported range."""

    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError("FPS must be an integer") from exc
    if not MIN_FPS <= parsed <= MAX_FPS:
        raise ValidationError(f"FPS must be between {MIN_FPS} and {MAX_FPS}")
    return parsed


def parse_scale(value: str | int) -> int:
    """Parse an output scale like '2' or '2x'."""

    text = str(value).strip().lower().rstrip("x")
    try:
        parsed = int(text)
    except ValueError as exc:
        raise ValidationError(f"Scale must be one of {', '.join(map(str, ALLOWED_SCALES))}") from exc
    if parsed not in ALLOWED_SCALES:
        raise ValidationError(f"Scale must be one of {', '.join(map(str, ALLOWED_SCALES))}")
    return parsed


def parse_color_tuple(value: str | None) -> Optional[tuple[int, int, int, int]]:
    """Parse an RGBA color string like '255,0,0,255' or '#ff0000'."""

    if value is None or value.strip() == "":
        return None
    text = value.strip()
    if text.startswith("#"):
        hex_digits = text[1:]
        if len(hex_digits) not in (6, 8):
            raise ValidationError("Hex colors must look like #RRGGBB or #RRGGBBAA")
        try:
            numbers = [int(hex_digits[i : i + 2], 16) for i in range(0, len(hex_digits), 2)]
        except ValueError as exc:
            raise ValidationError("Hex colors must look like #RRGGBB or #RRGGBBAA") from exc
    else:
        parts = [p.strip() for p in text.split(",")]
        if len(parts) not in (3, 4):
            raise ValidationError("Color must be R,G,B[,A]")
        try:
            numbers = [int(p) for p in parts]
        except ValueError as exc:
            raise ValidationError("Color must be numeric R,G,B[,A]") from exc
    if len(numbers) == 3:
        numbers.append(255)
    if any(n < 0 or n > 255 for n in numbers):
        raise ValidationError("Color values must be between 0 and 255")
    return tuple(numbers)  # type: ignore


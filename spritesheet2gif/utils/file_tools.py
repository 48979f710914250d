"""Filesystem helpers."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".png", ".gif", ".jpg", ".jpeg", ".webp", ".bmp"}


def ensure_directory(path: Path) -> Path:
    """Create a directory if it does not exist."""

    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)
    return path


def default_output_path(image_path: Path, suffix: str = ".gif") -> Path:
    """Return a default output path next to the source image."""

    if not suffix.startswith("."):
        suffix = "." + suffix
    return image_path.with_suffix(suffix)


def artifact_filename(created_at: datetime) -> str:
    """Name an exported animation after its creation time in epoch milliseconds."""

    return f"sprite-{int(created_at.timestamp() * 1000)}.gif"


def write_bytes(path: Path, data: bytes) -> Path:
    """Write binary data, creating parent directories."""

    ensure_directory(path.parent)
    path.write_bytes(data)
    logger.info("Wrote %s bytes to %s", len(data), path)
    return path

"""Core data model for slicing sprite sheets into animations."""

__all__ = [
    "Direction",
    "GridSpec",
    "FrameGeometry",
    "ExportRequest",
    "AnimationArtifact",
    "KEY_COLOR",
    "ALLOWED_SCALES",
]

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from PIL import Image

from .errors import InvalidGridSpec, ValidationError

KEY_COLOR: tuple[int, int, int] = (255, 0, 255)
KEY_TOLERANCE = 20
ALPHA_THRESHOLD = 10
ALLOWED_SCALES = (1, 2, 4)
MIN_FPS = 1
MAX_FPS = 60
DEFAULT_ROWS = 4
DEFAULT_COLS = 4
DEFAULT_FPS = 12
DEFAULT_SCALE = 1
DEFAULT_AUTO_TRANSPARENT = True


class Direction(str, Enum):
    """Traversal order mapping a sequence index onto the grid."""

    ROW_MAJOR = "row"
    COLUMN_MAJOR = "column"

    @classmethod
    def parse(cls, value: "str | Direction") -> "Direction":
        """Accept enum members, 'row'/'column' and their horizontal/vertical aliases."""

        if isinstance(value, Direction):
            return value
        text = str(value).strip().lower()
        if text in ("row", "horizontal", "h", "row_major", "row-major"):
            return cls.ROW_MAJOR
        if text in ("column", "col", "vertical", "v", "column_major", "column-major"):
            return cls.COLUMN_MAJOR
        raise ValidationError(f"Unknown direction: {value!r} (use 'row' or 'column')")


@dataclass(frozen=True)
class GridSpec:
    """Grid layout of a sprite sheet and the number of frames it holds."""

    rows: int
    cols: int
    total_frames: int
    direction: Direction = Direction.ROW_MAJOR

    def __post_init__(self) -> None:
        for name in ("rows", "cols", "total_frames"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise InvalidGridSpec(f"{name} must be an integer, got {value!r}")
        if self.rows < 1 or self.cols < 1:
            raise InvalidGridSpec(f"Grid must have at least one row and column, got {self.rows}x{self.cols}")
        if not 1 <= self.total_frames <= self.cell_count:
            raise InvalidGridSpec(
                f"total_frames must be between 1 and {self.cell_count}, got {self.total_frames}"
            )
        object.__setattr__(self, "direction", Direction.parse(self.direction))

    @property
    def cell_count(self) -> int:
        return self.rows * self.cols

    @classmethod
    def default(cls) -> "GridSpec":
        return cls(DEFAULT_ROWS, DEFAULT_COLS, DEFAULT_ROWS * DEFAULT_COLS, Direction.ROW_MAJOR)


@dataclass(frozen=True)
class FrameGeometry:
    """Pixel size of one grid cell in the source image.

    Fractional cell sizes are floored; the leftover strip on the right and
    bottom edges of the source is never part of any frame.
    """

    frame_width: int
    frame_height: int

    @classmethod
    def from_size(cls, width: int, height: int, grid: GridSpec) -> "FrameGeometry":
        frame_width = width // grid.cols
        frame_height = height // grid.rows
        if frame_width < 1 or frame_height < 1:
            raise InvalidGridSpec(
                f"A {grid.rows}x{grid.cols} grid is finer than the {width}x{height} source image"
            )
        return cls(frame_width, frame_height)

    def box(self, row: int, col: int) -> tuple[int, int, int, int]:
        """Return the (left, upper, right, lower) crop box of a cell."""

        left = col * self.frame_width
        upper = row * self.frame_height
        return (left, upper, left + self.frame_width, upper + self.frame_height)


def frame_delay_ms(fps: int) -> int:
    """Per-frame display delay, rounding halves up."""

    return int(math.floor(1000 / fps + 0.5))


def validate_fps(fps: int) -> int:
    if not isinstance(fps, int) or isinstance(fps, bool) or not MIN_FPS <= fps <= MAX_FPS:
        raise ValidationError(f"FPS must be an integer between {MIN_FPS} and {MAX_FPS}, got {fps!r}")
    return fps


def validate_scale(scale: int) -> int:
    if scale not in ALLOWED_SCALES or isinstance(scale, bool):
        raise ValidationError(f"Scale must be one of {ALLOWED_SCALES}, got {scale!r}")
    return int(scale)


@dataclass(frozen=True)
class ExportRequest:
    """Immutable snapshot of everything an export needs."""

    source: Image.Image = field(repr=False, compare=False)
    grid: GridSpec
    scale: int = DEFAULT_SCALE
    fps: int = DEFAULT_FPS
    auto_transparent: bool = DEFAULT_AUTO_TRANSPARENT

    def __post_init__(self) -> None:
        validate_scale(self.scale)
        validate_fps(self.fps)
        if self.source is not None:
            FrameGeometry.from_size(self.source.width, self.source.height, self.grid)

    @property
    def geometry(self) -> FrameGeometry:
        return FrameGeometry.from_size(self.source.width, self.source.height, self.grid)

    @property
    def frame_delay_ms(self) -> int:
        return frame_delay_ms(self.fps)

    @property
    def output_size(self) -> tuple[int, int]:
        geometry = self.geometry
        return (geometry.frame_width * self.scale, geometry.frame_height * self.scale)


@dataclass(frozen=True)
class AnimationArtifact:
    """A finished animation and its display metadata."""

    id: str
    name: str
    created_at: datetime
    width: int
    height: int
    frame_count: int
    frame_delay_ms: int
    data: bytes = field(repr=False)

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    def describe(self) -> dict:
        """Metadata without the binary payload."""

        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at.isoformat(),
            "width": self.width,
            "height": self.height,
            "frame_count": self.frame_count,
            "frame_delay_ms": self.frame_delay_ms,
            "size_bytes": self.size_bytes,
        }

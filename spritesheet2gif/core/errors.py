"""Domain-specific exceptions for the sprite sheet exporter."""


class ValidationError(ValueError):
    """Raised when user-provided settings fail validation."""


class InvalidGridSpec(ValidationError):
    """Raised when rows, columns or the frame count describe an impossible grid."""


class OutOfBoundsFrame(IndexError):
    """Raised when a sequence index resolves to a cell outside the grid."""

    def __init__(self, index: int, row: int, col: int, rows: int, cols: int):
        super().__init__(
            f"Frame {index} resolves to cell ({row}, {col}) outside a {rows}x{cols} grid"
        )
        self.index = index
        self.row = row
        self.col = col


class ExportError(RuntimeError):
    """Raised when an export cannot produce an artifact."""


class SourceUnavailable(ExportError):
    """Raised when extraction or export is attempted without a decoded source image."""

    def __init__(self, reason: str | None = None):
        message = "No source image loaded"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class EncodeFailure(ExportError):
    """Raised when the frame encoder reports an internal error."""

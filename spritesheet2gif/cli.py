"""Command-line entry point for sprite-sheet-to-GIF exports."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .core import ALLOWED_SCALES, DEFAULT_FPS, Direction, ExportRequest, GridSpec
from .core.chroma_key import DETECTORS, ChromaKeySynthesizer, make_detector
from .core.errors import ExportError, ValidationError
from .core.exporter import AnimationExporter
from .core.grid_overlay import render_overlay
from .utils import file_tools, validators
from .web import image_tools

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spritesheet2gif",
        description="Slice a sprite sheet grid into frames and export them as an animated GIF.",
    )
    parser.add_argument("input", type=Path, help="Path to the sprite sheet image")
    parser.add_argument("output", type=Path, nargs="?", help="Destination GIF path (default: next to the input)")
    parser.add_argument("--rows", type=int, default=4, help="Grid rows (default: 4)")
    parser.add_argument("--cols", type=int, default=4, help="Grid columns (default: 4)")
    parser.add_argument(
        "--frames",
        type=int,
        help="Number of frames to play, for sheets whose last row or column is not full (default: rows*cols)",
    )
    parser.add_argument(
        "--fps",
        default=DEFAULT_FPS,
        help=f"Playback speed in frames per second (default: {DEFAULT_FPS})",
    )
    parser.add_argument(
        "--scale",
        default=1,
        help=f"Integer upscale factor, nearest-neighbour: {', '.join(map(str, ALLOWED_SCALES))} (default: 1)",
    )
    parser.add_argument(
        "--direction",
        choices=[d.value for d in Direction],
        default=Direction.ROW_MAJOR.value,
        help="Frame order: 'row' reads across rows, 'column' reads down columns (default: row)",
    )
    parser.add_argument(
        "--no-transparent",
        dest="auto_transparent",
        action="store_false",
        help="Keep the sheet background instead of turning it transparent",
    )
    parser.add_argument(
        "--background-detection",
        choices=sorted(DETECTORS),
        default="corner",
        help="How the background colour is picked for transparency (default: corner)",
    )
    parser.add_argument(
        "--background-color",
        help="Explicit background colour as R,G,B or #RRGGBB; overrides --background-detection",
    )
    parser.add_argument("--overlay", type=Path, help="Also write a PNG of the sheet with the grid drawn on it")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the frame plan without rendering outputs",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _print_progress(percent: int) -> None:
    print(f"\rEncoding... {percent:3d}%", end="" if percent < 100 else "\n", file=sys.stderr, flush=True)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        image_path = validators.validate_image_path(args.input)
        source = image_tools.load_image(image_path)
        total = args.frames if args.frames is not None else args.rows * args.cols
        grid = GridSpec(args.rows, args.cols, total, Direction.parse(args.direction))
        request = ExportRequest(
            source=source,
            grid=grid,
            scale=validators.parse_scale(args.scale),
            fps=validators.parse_fps(args.fps),
            auto_transparent=args.auto_transparent,
        )
        background = validators.parse_color_tuple(args.background_color)
        synthesizer = ChromaKeySynthesizer(make_detector(args.background_detection, background))
    except (ValidationError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    width, height = request.output_size
    if args.dry_run:
        geometry = request.geometry
        print(f"Source: {source.width}x{source.height}, grid {grid.rows}x{grid.cols} ({grid.direction.value})")
        print(f"Frame: {geometry.frame_width}x{geometry.frame_height} -> {width}x{height} at scale {request.scale}")
        print(f"Frames: {grid.total_frames}, {request.frame_delay_ms}ms each")
        print(f"Transparent background: {'yes' if request.auto_transparent else 'no'}")
        return 0

    try:
        if args.overlay:
            image_tools.save_image(render_overlay(source, grid), args.overlay)
            logger.info("Wrote grid overlay to %s", args.overlay)
        artifact = AnimationExporter(synthesizer=synthesizer).export(request, _print_progress)
        output = args.output or file_tools.default_output_path(image_path)
        file_tools.write_bytes(output, artifact.data)
    except ExportError as exc:
        logger.error("Export failed: %s", exc)
        return 2
    except OSError as exc:
        print(f"error: could not write output: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())

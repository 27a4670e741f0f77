"""Entry point: render the damped pendulum phase portrait animation.

Writes one PNG per frame (phase.000.png, phase.001.png, ...) into an
existing output directory. Assemble them afterwards, e.g.:

    ffmpeg -i phase_gif/phase.%03d.png phase.gif

Usage:
    python main.py [--output-dir phase_gif] [--workers N] [--only 0 37]
"""

import argparse
import dataclasses
import logging
import sys

from portrait.animate import render_animation
from portrait.coloring import COLOR_OVERFLOW_MODES
from portrait.frames import DEFAULT_CONFIG, AnimationConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render animated phase portraits of a damped pendulum.",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default="phase_gif",
        help="Existing directory for the frames (default: phase_gif)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of worker processes (default: CPU count)",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=DEFAULT_CONFIG.total_frames,
        help=f"Frames in the animation (default: {DEFAULT_CONFIG.total_frames})",
    )
    parser.add_argument(
        "--lines",
        type=int,
        default=DEFAULT_CONFIG.lines_per_frame,
        help=f"Trajectories per frame (default: {DEFAULT_CONFIG.lines_per_frame})",
    )
    parser.add_argument(
        "--steps",
        type=int,
        default=DEFAULT_CONFIG.trajectory_length,
        help=f"RK4 steps per trajectory (default: {DEFAULT_CONFIG.trajectory_length})",
    )
    parser.add_argument(
        "--only",
        type=int,
        nargs="+",
        default=None,
        metavar="INDEX",
        help="Render only these frame indices",
    )
    parser.add_argument(
        "--color-overflow",
        choices=COLOR_OVERFLOW_MODES,
        default=DEFAULT_CONFIG.color_overflow,
        help="How |p| beyond the color scale is shown (default: clamp)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> AnimationConfig:
    return dataclasses.replace(
        DEFAULT_CONFIG,
        total_frames=args.frames,
        lines_per_frame=args.lines,
        trajectory_length=args.steps,
        color_overflow=args.color_overflow,
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger = logging.getLogger(__name__)

    try:
        config = config_from_args(args)
        results = render_animation(config, args.output_dir, args.workers, args.only)
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return 2
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    if any(not r.ok for r in results):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Animation configuration and per-frame job construction.

A frame is a pure function of its index and the AnimationConfig:
  1. damping a = sin(2*pi * index / total_frames), frequency w fixed
  2. initial momenta swept across momentum_sweep, shifted by
     index / total_frames of a line spacing so the sweep drifts
  3. all lines integrated together as one (lines, 2) batch
  4. lines drawn onto a fresh canvas
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple

import numpy as np
from PyQt6.QtGui import QImage

from portrait.canvas import create_canvas
from portrait.coloring import COLOR_OVERFLOW_MODES
from portrait.integrator import (
    WrapBounds, generate_trajectory, validate_bounds, validate_step_size,
)
from portrait.projection import (
    PhaseBox, PixelBox, ProjectionBox, Range, map_value,
)
from portrait.renderer import render_frame_lines
from simulation import DissipativePendulum

logger = logging.getLogger(__name__)

FRAME_FILENAME = "phase.{index:03d}.png"


@dataclass(frozen=True)
class AnimationConfig:
    """Every constant that shapes the animation.

    Attributes:
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        lines_per_frame: Number of trajectories drawn per frame.
        total_frames: Number of frames in the animation (one damping cycle).
        trajectory_length: RK4 steps (and points) per trajectory.
        step_size: RK4 step size h.
        wrap_bounds: Interval position is wrapped into.
        q_range: Position range mapped onto the canvas width.
        p_range: Momentum range mapped onto the canvas height.
        momentum_sweep: Range of initial momenta across the lines.
        natural_frequency: w of the dissipative pendulum.
        discontinuity_threshold: Segments at least this long (px) are skipped.
        color_overflow: "clamp" or "wrap" for |p| beyond the color scale.
    """

    width: int = 800
    height: int = 800
    lines_per_frame: int = 50
    total_frames: int = 100
    trajectory_length: int = 20000
    step_size: float = 0.01
    wrap_bounds: tuple[float, float] = (-math.pi, math.pi)
    q_range: tuple[float, float] = (-math.pi, math.pi)
    p_range: tuple[float, float] = (-4.0, 4.0)
    momentum_sweep: tuple[float, float] = (-12.0, 12.0)
    natural_frequency: float = 0.5
    discontinuity_threshold: float = 200.0
    color_overflow: str = "clamp"

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Canvas size must be positive, got {self.width}x{self.height}")
        if self.lines_per_frame <= 0:
            raise ValueError(f"lines_per_frame must be positive, got {self.lines_per_frame}")
        if self.total_frames <= 0:
            raise ValueError(f"total_frames must be positive, got {self.total_frames}")
        if self.trajectory_length < 0:
            raise ValueError(
                f"trajectory_length must be non-negative, got {self.trajectory_length}"
            )
        if self.discontinuity_threshold <= 0:
            raise ValueError(
                f"discontinuity_threshold must be positive, got {self.discontinuity_threshold}"
            )
        if self.color_overflow not in COLOR_OVERFLOW_MODES:
            raise ValueError(
                f"color_overflow must be one of {COLOR_OVERFLOW_MODES}, "
                f"got {self.color_overflow!r}"
            )
        validate_step_size(self.step_size)
        validate_bounds(self.wrap_bounds)
        for name in ("q_range", "p_range"):
            lo, hi = getattr(self, name)
            if hi == lo:
                raise ValueError(f"{name} must have non-zero width, got ({lo}, {hi})")

    @property
    def bounds(self) -> WrapBounds:
        return WrapBounds(*self.wrap_bounds)

    @property
    def projection(self) -> ProjectionBox:
        return ProjectionBox(
            source=PhaseBox(Range(*self.q_range), Range(*self.p_range)),
            dest=PixelBox(Range(0.0, float(self.width)), Range(0.0, float(self.height))),
        )


DEFAULT_CONFIG = AnimationConfig()


class FrameSpec(NamedTuple):
    """Everything needed to integrate one frame."""

    index: int
    damping: float
    initial_states: np.ndarray  # (lines, 2) [q, p]


def damping_for_frame(index: int, total_frames: int) -> float:
    """Damping coefficient for a frame: one full sine cycle over the animation."""
    return math.sin(2.0 * math.pi * index / total_frames)


def initial_momenta(index: int, config: AnimationConfig) -> np.ndarray:
    """Initial momentum of every line in a frame.

    Line i sits at i + index/total_frames on [0, lines_per_frame), mapped
    linearly onto momentum_sweep. Over the whole animation each line
    drifts by exactly one line spacing.
    """
    offset = index / config.total_frames
    positions = np.arange(config.lines_per_frame, dtype=np.float64) + offset
    return map_value(
        positions, (0.0, float(config.lines_per_frame)), config.momentum_sweep,
    )


def build_frame_spec(index: int, config: AnimationConfig = DEFAULT_CONFIG) -> FrameSpec:
    """Damping and initial states (q = 0) for frame index."""
    momenta = initial_momenta(index, config)
    initial_states = np.column_stack([np.zeros_like(momenta), momenta])
    return FrameSpec(
        index=index,
        damping=damping_for_frame(index, config.total_frames),
        initial_states=initial_states,
    )


def compute_frame_trajectories(
    spec: FrameSpec,
    config: AnimationConfig = DEFAULT_CONFIG,
) -> np.ndarray:
    """Integrate all lines of a frame.

    Returns:
        (trajectory_length, lines_per_frame, 2) float64 array.
    """
    field = DissipativePendulum(damping=spec.damping, frequency=config.natural_frequency)
    return generate_trajectory(
        field,
        spec.initial_states,
        config.trajectory_length,
        config.step_size,
        config.bounds,
    )


def render_frame(index: int, config: AnimationConfig = DEFAULT_CONFIG) -> QImage:
    """Build, integrate and draw frame index onto a new canvas."""
    spec = build_frame_spec(index, config)
    batch = compute_frame_trajectories(spec, config)

    canvas = create_canvas(config.width, config.height)
    # (points, lines, 2) -> one (points, 2) trajectory per line
    segments = render_frame_lines(
        canvas,
        np.moveaxis(batch, 1, 0),
        config.projection,
        threshold=config.discontinuity_threshold,
        color_mode=config.color_overflow,
    )

    logger.debug(
        "Frame %d: damping=%.4f, %d segments", index, spec.damping, segments,
    )
    return canvas


def frame_path(output_dir: str | Path, index: int) -> Path:
    """Output path <output_dir>/phase.NNN.png for a frame."""
    return Path(output_dir) / FRAME_FILENAME.format(index=index)

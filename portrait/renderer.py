"""Frame renderer: projected, colored trajectories drawn as line strips.

Consecutive points of a trajectory are joined by segments. Segment i runs
from point i to point i+1 and takes its color from point i's momentum.

When position wraps from one side of the interval to the other, the two
consecutive points sit almost a full canvas width apart. Such segments
are skipped with a simple length test: anything at or above
DEFAULT_DISCONTINUITY_THRESHOLD pixels is not drawn. This is a heuristic;
it is not derived from the wrap geometry, and a genuinely fast segment
longer than the threshold would also be dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

import numpy as np
from PyQt6.QtGui import QImage

from portrait.canvas import LinePainter
from portrait.coloring import colorize, segment_color
from portrait.projection import ProjectionBox, project

logger = logging.getLogger(__name__)

DEFAULT_DISCONTINUITY_THRESHOLD = 200.0


class SegmentSink(Protocol):
    """Anything that can draw a colored segment (LinePainter in production)."""

    def draw(self, p1, p2, rgba: tuple[int, int, int, int]) -> None:
        ...


def segment_lengths(pixels: np.ndarray) -> np.ndarray:
    """Euclidean length of each consecutive segment of an (n, 2) polyline."""
    deltas = np.diff(pixels, axis=0)
    return np.hypot(deltas[:, 0], deltas[:, 1])


def segment_mask(
    pixels: np.ndarray,
    threshold: float = DEFAULT_DISCONTINUITY_THRESHOLD,
) -> np.ndarray:
    """True for segments shorter than threshold (these get drawn).

    NaN lengths compare False, so segments touching a non-finite point
    are never drawn.
    """
    return segment_lengths(pixels) < threshold


def render_trajectory(
    sink: SegmentSink,
    trajectory: np.ndarray,
    box: ProjectionBox,
    threshold: float = DEFAULT_DISCONTINUITY_THRESHOLD,
    color_mode: str = "clamp",
) -> int:
    """Draw one (n, 2) phase trajectory as connected segments.

    Returns:
        Number of segments drawn (skipped discontinuities excluded).
    """
    if len(trajectory) < 2:
        return 0

    pixels = project(trajectory, box)
    intensities = colorize(trajectory[:, 1], color_mode)
    mask = segment_mask(pixels, threshold)

    # Plain Python lists avoid per-element NumPy scalar overhead in the loop
    points = pixels.tolist()
    colors = intensities.tolist()

    drawn = 0
    for i in np.flatnonzero(mask).tolist():
        sink.draw(points[i], points[i + 1], segment_color(colors[i]))
        drawn = drawn + 1
    return drawn


def render_frame_lines(
    canvas: QImage,
    trajectories: Iterable[np.ndarray],
    box: ProjectionBox,
    threshold: float = DEFAULT_DISCONTINUITY_THRESHOLD,
    color_mode: str = "clamp",
) -> int:
    """Draw every trajectory of a frame onto canvas, in order.

    Args:
        canvas: Target QImage.
        trajectories: Iterable of (n, 2) phase trajectories.
        box: Phase-to-pixel projection.
        threshold: Discontinuity threshold in pixels.
        color_mode: Color overflow mode ("clamp" or "wrap").

    Returns:
        Total number of segments drawn.
    """
    total = 0
    n_lines = 0
    with LinePainter(canvas) as painter:
        for trajectory in trajectories:
            total = total + render_trajectory(
                painter, trajectory, box, threshold, color_mode,
            )
            n_lines = n_lines + 1

    logger.debug("Rendered %d lines, %d segments", n_lines, total)
    return total

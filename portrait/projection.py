"""Phase space to pixel space projection.

An independent affine map per axis: q -> x, p -> y. There is no clamping;
states outside the source box land outside the pixel box and are clipped
later by the painter.
"""

from __future__ import annotations

import math
from typing import NamedTuple

import numpy as np


class Range(NamedTuple):
    lo: float
    hi: float


class PhaseBox(NamedTuple):
    """Rectangle in phase space (position range, momentum range)."""

    q: Range
    p: Range


class PixelBox(NamedTuple):
    """Rectangle in pixel space (x range, y range)."""

    x: Range
    y: Range


class ProjectionBox(NamedTuple):
    """Source phase-space box and destination pixel box."""

    source: PhaseBox
    dest: PixelBox


def default_projection(width: int, height: int) -> ProjectionBox:
    """q in [-pi, pi] and p in [-4, 4] onto the full width x height canvas."""
    return ProjectionBox(
        source=PhaseBox(Range(-math.pi, math.pi), Range(-4.0, 4.0)),
        dest=PixelBox(Range(0.0, float(width)), Range(0.0, float(height))),
    )


def map_value(x, src: tuple[float, float], dst: tuple[float, float]):
    """Linearly map x from the src interval onto the dst interval."""
    src_lo, src_hi = src
    dst_lo, dst_hi = dst
    if src_hi == src_lo:
        raise ValueError(f"Source range must have non-zero width, got ({src_lo}, {src_hi})")
    # Normalize first so the interval endpoints map exactly onto dst
    t = (x - src_lo) / (src_hi - src_lo)
    return t * (dst_hi - dst_lo) + dst_lo


def project(states: np.ndarray, box: ProjectionBox) -> np.ndarray:
    """Map phase states (..., 2) to pixel coordinates (..., 2).

    Column 0 of the result is x (from q), column 1 is y (from p).
    """
    states = np.asarray(states, dtype=np.float64)
    x = map_value(states[..., 0], box.source.q, box.dest.x)
    y = map_value(states[..., 1], box.source.p, box.dest.y)
    return np.stack([x, y], axis=-1)

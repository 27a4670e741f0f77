"""Momentum magnitude to segment color.

Each segment is colored on a blue -> red ramp: intensity c = |p| / 5 * 255
goes into the red channel and 255 - c into the blue channel.

Momenta with |p| > 5 overflow a byte. Two overflow modes are supported:
  - "clamp": saturate at 255 (NaN becomes 0). Default.
  - "wrap":  keep the low 8 bits, so the ramp restarts at blue every
             5 units of momentum and produces banding in fast regions.
"""

from __future__ import annotations

import numpy as np

# |p| at which the ramp reaches full red
MOMENTUM_FULL_SCALE = 5.0

COLOR_OVERFLOW_MODES = ("clamp", "wrap")


def colorize(momentum, mode: str = "clamp") -> np.ndarray:
    """Map momentum values to uint8 color intensities.

    The scaled magnitude is truncated toward zero, then overflow is
    resolved according to mode.

    Args:
        momentum: Scalar or array of momenta.
        mode: "clamp" or "wrap" (see module docstring).

    Returns:
        uint8 array with the same shape as momentum.
    """
    scaled = np.abs(np.asarray(momentum, dtype=np.float64)) / MOMENTUM_FULL_SCALE * 255.0

    if mode == "clamp":
        scaled = np.nan_to_num(scaled, nan=0.0)
        return np.trunc(np.clip(scaled, 0.0, 255.0)).astype(np.uint8)

    if mode == "wrap":
        finite = np.where(np.isfinite(scaled), scaled, 0.0)
        return np.mod(np.trunc(finite), 256.0).astype(np.uint8)

    raise ValueError(
        f"Unknown color overflow mode {mode!r}, expected one of {COLOR_OVERFLOW_MODES}"
    )


def segment_color(intensity: int) -> tuple[int, int, int, int]:
    """RGBA for one segment: red = intensity, blue = 255 - intensity, opaque."""
    c = int(intensity)
    return (c, 0, 255 - c, 255)

"""Raster canvas: QImage allocation, line drawing, PNG output.

Frames are drawn off-screen into a QImage with a QPainter. No
QApplication is needed for line drawing on a QImage, so this works
inside multiprocessing workers.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PyQt6.QtCore import QPointF, Qt
from PyQt6.QtGui import QColor, QImage, QPainter, QPen

logger = logging.getLogger(__name__)


class FrameWriteError(OSError):
    """Raised when a finished canvas cannot be written to disk."""


def create_canvas(width: int, height: int) -> QImage:
    """Allocate an opaque black RGB32 canvas."""
    if width <= 0 or height <= 0:
        raise ValueError(f"Canvas size must be positive, got {width}x{height}")
    canvas = QImage(width, height, QImage.Format.Format_RGB32)
    canvas.fill(Qt.GlobalColor.black)
    return canvas


class LinePainter:
    """Context manager that draws many segments through one QPainter.

    The pen is only rebuilt when the color changes, which matters for
    frames with ~10^6 segments. Antialiasing stays off so output is
    bit-reproducible.
    """

    def __init__(self, canvas: QImage):
        self._canvas = canvas
        self._painter: QPainter | None = None
        self._rgba: tuple[int, int, int, int] | None = None

    def __enter__(self) -> LinePainter:
        self._painter = QPainter(self._canvas)
        self._painter.setRenderHint(QPainter.RenderHint.Antialiasing, False)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._painter.end()
        self._painter = None

    def draw(self, p1, p2, rgba: tuple[int, int, int, int]) -> None:
        """Draw a 1-pixel segment from p1 to p2 in pixel coordinates."""
        if rgba != self._rgba:
            pen = QPen(QColor(*rgba))
            pen.setWidth(1)
            self._painter.setPen(pen)
            self._rgba = rgba
        self._painter.drawLine(
            QPointF(float(p1[0]), float(p1[1])),
            QPointF(float(p2[0]), float(p2[1])),
        )


def draw_line_segment(canvas: QImage, p1, p2, rgba: tuple[int, int, int, int]) -> None:
    """Draw a single segment onto canvas (opens and closes its own painter)."""
    with LinePainter(canvas) as painter:
        painter.draw(p1, p2, rgba)


def save_as_image(canvas: QImage, path: str | Path) -> None:
    """Encode canvas as PNG at path.

    The parent directory must already exist; it is not created here.

    Raises:
        FrameWriteError: If Qt reports that the image could not be written.
    """
    path = Path(path)
    if not canvas.save(str(path), "PNG"):
        raise FrameWriteError(f"Could not write image to {path}")
    logger.debug("Wrote %s", path)


def canvas_pixels(canvas: QImage) -> np.ndarray:
    """Copy the canvas pixels out as an (H, W, 4) uint8 array.

    Byte order is Qt's RGB32 memory layout (BGRA on little-endian).
    """
    w = canvas.width()
    h = canvas.height()
    ptr = canvas.constBits()
    ptr.setsize(canvas.sizeInBytes())
    rows = np.frombuffer(ptr, dtype=np.uint8).reshape(h, canvas.bytesPerLine())
    return rows[:, : w * 4].reshape(h, w, 4).copy()

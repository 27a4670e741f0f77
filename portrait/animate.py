"""Animation pipeline: render every frame in a process pool.

Frames share nothing, so each one is a separate task: the worker
integrates, draws and writes its frame, then returns a small FrameResult.
A frame that cannot be written is logged and reported in its result;
the remaining frames still render.
"""

from __future__ import annotations

import logging
import multiprocessing
import time
from collections.abc import Iterable
from pathlib import Path
from typing import NamedTuple

from portrait.canvas import save_as_image
from portrait.frames import AnimationConfig, DEFAULT_CONFIG, frame_path, render_frame

logger = logging.getLogger(__name__)

# Log a progress line every this many finished frames
_PROGRESS_EVERY = 10


class FrameTask(NamedTuple):
    """Specification for a single frame to render."""

    index: int
    output_dir: str
    config: AnimationConfig


class FrameResult(NamedTuple):
    """Outcome of a single frame. error is None on success."""

    index: int
    path: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def write_frame(task: FrameTask) -> FrameResult:
    """Render one frame and write it to disk.

    Runs in a worker process. Write failures are caught here so that one
    bad frame does not take down the pool.
    """
    path = frame_path(task.output_dir, task.index)
    canvas = render_frame(task.index, task.config)
    try:
        save_as_image(canvas, path)
    except OSError as exc:
        logger.error("Frame %d: failed to write %s: %s", task.index, path, exc)
        return FrameResult(task.index, str(path), str(exc))
    return FrameResult(task.index, str(path))


def build_frame_tasks(
    config: AnimationConfig,
    output_dir: str | Path,
    frames: Iterable[int] | None = None,
) -> list[FrameTask]:
    """One task per frame index (all frames when frames is None)."""
    if frames is None:
        indices = range(config.total_frames)
    else:
        indices = sorted(set(frames))
        for index in indices:
            if not 0 <= index < config.total_frames:
                raise ValueError(
                    f"Frame index {index} outside [0, {config.total_frames})"
                )
    return [FrameTask(index, str(output_dir), config) for index in indices]


def _log_progress(done: int, total: int, t0: float) -> None:
    if done % _PROGRESS_EVERY == 0 or done == total:
        elapsed = time.monotonic() - t0
        logger.info(
            "  %d/%d frames (%.2f frames/s)",
            done, total, done / elapsed if elapsed > 0 else 0.0,
        )


def render_animation(
    config: AnimationConfig = DEFAULT_CONFIG,
    output_dir: str | Path = "phase_gif",
    n_workers: int | None = None,
    frames: Iterable[int] | None = None,
) -> list[FrameResult]:
    """Render frames to <output_dir>/phase.NNN.png.

    Args:
        config: Animation constants.
        output_dir: Existing directory for the PNG files.
        n_workers: Number of worker processes (default: CPU count).
            1 or less renders sequentially in this process.
        frames: Optional subset of frame indices to render.

    Returns:
        FrameResult per rendered frame, sorted by frame index.

    Raises:
        FileNotFoundError: If output_dir does not exist.
    """
    output_dir = Path(output_dir)
    if not output_dir.is_dir():
        raise FileNotFoundError(f"Output directory does not exist: {output_dir}")

    if n_workers is None:
        n_workers = multiprocessing.cpu_count()

    tasks = build_frame_tasks(config, output_dir, frames)
    n_frames = len(tasks)

    logger.info(
        "Rendering %d frames (%d lines x %d steps, %dx%d) using %d workers",
        n_frames, config.lines_per_frame, config.trajectory_length,
        config.width, config.height, max(n_workers, 1),
    )

    results: list[FrameResult] = []
    t0 = time.monotonic()

    if n_workers <= 1:
        # Sequential mode (useful for debugging)
        for task in tasks:
            results.append(write_frame(task))
            _log_progress(len(results), n_frames, t0)
    else:
        with multiprocessing.Pool(n_workers) as pool:
            for result in pool.imap_unordered(write_frame, tasks):
                results.append(result)
                _log_progress(len(results), n_frames, t0)

    results.sort(key=lambda r: r.index)
    failed = [r.index for r in results if not r.ok]

    elapsed = time.monotonic() - t0
    if failed:
        logger.error(
            "%d of %d frames failed to write: %s", len(failed), n_frames, failed,
        )
    logger.info(
        "Animation complete: %d frames in %.1f s", n_frames - len(failed), elapsed,
    )
    return results

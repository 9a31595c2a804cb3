"""
Offline rasterisation of particle render batches.

Turns a RenderBatch into an (H, W, 3) uint8 frame with numpy, so a run
can be inspected or exported frame by frame without a display.
"""

import math
from typing import Iterator

import numpy as np
from scipy.ndimage import gaussian_filter

from pixelmorph.animation.particles import ParticleConvergenceEngine, RenderBatch


def _paint_squares(
    frame: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
    colors: np.ndarray,
    size: int,
):
    """Alpha-composite squares onto ``frame`` in order; later squares cover earlier ones."""
    h, w = frame.shape[:2]
    n = len(xs)
    if n == 0:
        return

    owner = np.full(h * w, -1, dtype=np.int64)
    order = np.arange(n, dtype=np.int64)
    for oy in range(size):
        py = ys + oy
        for ox in range(size):
            px = xs + ox
            inside = (px >= 0) & (px < w) & (py >= 0) & (py < h)
            if inside.any():
                np.maximum.at(owner, py[inside] * w + px[inside], order[inside])

    covered = owner >= 0
    flat = frame.reshape(-1, 3)
    src = colors[owner[covered]].astype(np.float32)
    alpha = src[:, 3:4] / 255.0
    flat[covered] = flat[covered] * (1.0 - alpha) + src[:, :3] * alpha


def add_glow(frame: np.ndarray, layer: np.ndarray, sigma: float) -> np.ndarray:
    """
    Screen-blend a gaussian-blurred glow layer onto a frame.

    Args:
        frame: (H, W, 3) float32 in [0, 255].
        layer: (H, W, 3) float32 in [0, 255], particles to bloom.
        sigma: Blur radius in pixels.

    Returns:
        (H, W, 3) float32.
    """
    if sigma <= 0:
        return frame
    blurred = gaussian_filter(layer, sigma=(sigma, sigma, 0))
    a = frame / 255.0
    b = np.clip(blurred / 255.0, 0, 1)
    return (1.0 - (1.0 - a) * (1.0 - b)) * 255.0


def rasterize(
    batch: RenderBatch,
    width: int,
    height: int,
    background: tuple[int, int, int] = (255, 255, 255),
    glow: bool = True,
) -> np.ndarray:
    """
    Paint one tick's particles.

    Args:
        batch: Draw instructions from ``ParticleConvergenceEngine.tick``.
        width: Frame width.
        height: Frame height.
        background: RGB fill under the particles.
        glow: Bloom fast-moving particles.

    Returns:
        (height, width, 3) uint8 RGB array.
    """
    frame = np.empty((height, width, 3), dtype=np.float32)
    frame[:] = background

    _paint_squares(frame, batch.xs, batch.ys, batch.colors, batch.size)

    if glow:
        # One blur per whole-pixel glow radius, so faster particles bloom wider
        levels = np.ceil(batch.glow)
        for sigma in np.unique(levels[levels > 0]):
            group = levels == sigma
            layer = np.zeros_like(frame)
            _paint_squares(
                layer,
                batch.xs[group],
                batch.ys[group],
                batch.colors[group],
                batch.size,
            )
            frame = add_glow(frame, layer, float(sigma))

    return np.clip(frame, 0, 255).astype(np.uint8)


def frame_times(duration_ms: float, fps: int) -> np.ndarray:
    """Elapsed-ms timestamps for a fixed-rate run, ending exactly at duration."""
    n = max(1, math.ceil(duration_ms / 1000.0 * fps))
    return np.minimum(np.arange(n + 1) * (1000.0 / fps), duration_ms)


def render_run(
    engine: ParticleConvergenceEngine,
    fps: int | None = None,
    final_frame: np.ndarray | None = None,
    progress_callback: callable = None,
) -> Iterator[np.ndarray]:
    """
    Drive a whole run at a fixed frame rate and yield frames.

    Args:
        engine: Fresh (or reset) engine.
        fps: Frame rate; defaults to the engine's configured fps.
        final_frame: Authoritative (H, W, 3) target image shown in place
            of the particle render once the run completes.
        progress_callback: Optional callback(current, total).

    Yields:
        (H, W, 3) uint8 RGB arrays, one per tick.
    """
    cfg = engine.cfg
    times = frame_times(cfg.duration_ms, fps or cfg.fps)
    total = len(times)

    for i, elapsed in enumerate(times):
        batch = engine.tick(float(elapsed))
        if batch.completed and final_frame is not None:
            yield final_frame
        else:
            yield rasterize(batch, engine.width, engine.height, cfg.background)

        if progress_callback:
            progress_callback(i + 1, total)

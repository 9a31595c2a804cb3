"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest
from PIL import Image


def gray_pixels(levels, width: int, height: int, alpha: int = 255) -> np.ndarray:
    """(H, W, 4) array of gray pixels, levels given in scan order."""
    levels = np.asarray(levels, dtype=np.uint8).reshape(height, width)
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[..., 0] = levels
    pixels[..., 1] = levels
    pixels[..., 2] = levels
    pixels[..., 3] = alpha
    return pixels


@pytest.fixture
def ranked_2x2() -> np.ndarray:
    """
    2x2 gray raster already rank-sorted in scan order.

    Returns:
        (2, 2, 4) uint8 array with levels 10, 50, 150, 200.
    """
    return gray_pixels([10, 50, 150, 200], 2, 2)


@pytest.fixture
def random_rgba() -> np.ndarray:
    """Reproducible 16x12 opaque RGBA noise."""
    rng = np.random.default_rng(42)
    pixels = rng.integers(0, 256, size=(12, 16, 4), dtype=np.uint8)
    pixels[..., 3] = 255
    return pixels


@pytest.fixture
def silhouette_rgba() -> np.ndarray:
    """
    16x16 target: an opaque gradient disc on a transparent background.

    Returns:
        (16, 16, 4) uint8 array.
    """
    y, x = np.mgrid[0:16, 0:16]
    pixels = np.zeros((16, 16, 4), dtype=np.uint8)
    inside = (x - 7.5) ** 2 + (y - 7.5) ** 2 <= 36
    pixels[..., 0] = x * 16
    pixels[..., 1] = y * 16
    pixels[..., 2] = 128
    pixels[..., 3] = np.where(inside, 255, 0)
    return pixels


def _save(tmp_path, name: str, pixels: np.ndarray):
    path = tmp_path / name
    Image.fromarray(pixels).save(path)
    return path


@pytest.fixture
def source_png(tmp_path, random_rgba):
    """Temporary PNG of the random source raster."""
    return _save(tmp_path, "source.png", random_rgba)


@pytest.fixture
def target_png(tmp_path, silhouette_rgba):
    """Temporary PNG of the silhouette target."""
    return _save(tmp_path, "target.png", silhouette_rgba)


@pytest.fixture
def transparent_png(tmp_path):
    """Temporary fully transparent PNG."""
    return _save(tmp_path, "empty.png", np.zeros((8, 8, 4), dtype=np.uint8))

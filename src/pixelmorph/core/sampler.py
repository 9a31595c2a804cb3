"""
Sparse pixel sampling.

Reads every ``stride``-th row and column of a raw RGBA raster into a
SampleSet: positions, colours and brightness, in raster scan order.
"""

from dataclasses import dataclass
from typing import Iterator, Union

import numpy as np

from pixelmorph.errors import EmptySampleSet, InvalidDimensions
from pixelmorph.luminance import REC601, brightness

RawBuffer = Union[bytes, bytearray, memoryview, np.ndarray]


def is_positive_int(value) -> bool:
    """True for ints (numpy ints included) above zero; bools are rejected."""
    return not isinstance(value, bool) and isinstance(value, (int, np.integer)) and value > 0


@dataclass(frozen=True)
class Sample:
    """A single sampled pixel."""

    x: int
    y: int
    color: tuple[int, int, int, int]
    brightness: float


class SampleSet:
    """
    Ordered, read-only collection of samples.

    Stored column-wise so that sorting and rasterising stay vectorised;
    indexing and iteration hand out :class:`Sample` objects.
    """

    def __init__(
        self,
        xs: np.ndarray,
        ys: np.ndarray,
        colors: np.ndarray,
        brightness: np.ndarray,
    ):
        n = len(xs)
        if not (len(ys) == n and len(colors) == n and len(brightness) == n):
            raise ValueError("SampleSet columns must have equal length")

        self.xs = np.array(xs, dtype=np.int64)
        self.ys = np.array(ys, dtype=np.int64)
        self.colors = np.array(colors, dtype=np.uint8).reshape(n, 4)
        self.brightness = np.array(brightness, dtype=np.float64)

        for arr in (self.xs, self.ys, self.colors, self.brightness):
            arr.flags.writeable = False

    @classmethod
    def empty(cls) -> "SampleSet":
        return cls(
            np.zeros(0, dtype=np.int64),
            np.zeros(0, dtype=np.int64),
            np.zeros((0, 4), dtype=np.uint8),
            np.zeros(0, dtype=np.float64),
        )

    def __len__(self) -> int:
        return len(self.xs)

    def __getitem__(self, index: int) -> Sample:
        return Sample(
            x=int(self.xs[index]),
            y=int(self.ys[index]),
            color=tuple(int(c) for c in self.colors[index]),
            brightness=float(self.brightness[index]),
        )

    def __iter__(self) -> Iterator[Sample]:
        for i in range(len(self)):
            yield self[i]

    def __repr__(self) -> str:
        return f"SampleSet(n={len(self)})"

    @property
    def alphas(self) -> np.ndarray:
        return self.colors[:, 3]

    def positions(self) -> np.ndarray:
        """(N, 2) int array of (x, y)."""
        return np.stack([self.xs, self.ys], axis=1)

    def take(self, indices: np.ndarray) -> "SampleSet":
        """New SampleSet with the given rows, in the given order."""
        return SampleSet(
            self.xs[indices],
            self.ys[indices],
            self.colors[indices],
            self.brightness[indices],
        )

    def filter_alpha(self, threshold: int) -> "SampleSet":
        """Keep samples whose alpha is at least ``threshold`` (scan order kept)."""
        return self.take(np.flatnonzero(self.alphas >= threshold))


def as_pixel_array(
    buffer: RawBuffer,
    width: int,
    height: int,
    channels: int = 4,
) -> np.ndarray:
    """
    View a raw buffer as an (H, W, 4) uint8 RGBA array.

    Args:
        buffer: Raw interleaved bytes or a numpy array (flat or (H, W, C)).
        width: Raster width in pixels.
        height: Raster height in pixels.
        channels: 3 (RGB, alpha taken as 255) or 4 (RGBA).

    Returns:
        (H, W, 4) uint8 array.
    """
    for name, value in (("width", width), ("height", height)):
        if not is_positive_int(value):
            raise InvalidDimensions(f"{name} must be a positive integer, got {value!r}")
    if channels not in (3, 4):
        raise ValueError(f"channels must be 3 or 4, got {channels}")

    if isinstance(buffer, np.ndarray):
        data = np.ascontiguousarray(buffer, dtype=np.uint8).reshape(-1)
    else:
        data = np.frombuffer(bytes(buffer), dtype=np.uint8)

    if data.size == 0:
        raise EmptySampleSet("Raster buffer is empty")

    expected = width * height * channels
    if data.size != expected:
        raise InvalidDimensions(
            f"Buffer holds {data.size} bytes, expected {expected} "
            f"for {width}x{height}x{channels}"
        )

    pixels = data.reshape(height, width, channels)
    if channels == 3:
        alpha = np.full((height, width, 1), 255, dtype=np.uint8)
        pixels = np.concatenate([pixels, alpha], axis=2)
    return pixels


class PixelSampler:
    """Extracts a sparse SampleSet from a raw raster at a fixed stride."""

    def __init__(self, stride: int = 1, weights: tuple[float, float, float] = REC601):
        if not is_positive_int(stride):
            raise ValueError(f"stride must be a positive integer, got {stride!r}")
        self.stride = int(stride)
        self.weights = weights

    def sample_array(self, pixels: np.ndarray) -> SampleSet:
        """Sample an already-shaped (H, W, 4) array."""
        s = self.stride
        h, w = pixels.shape[:2]
        grid = pixels[::s, ::s]

        ys, xs = np.mgrid[0:h:s, 0:w:s]
        colors = grid.reshape(-1, 4)
        return SampleSet(
            xs.reshape(-1),
            ys.reshape(-1),
            colors,
            brightness(colors, self.weights),
        )

    def sample(
        self,
        buffer: RawBuffer,
        width: int,
        height: int,
        channels: int = 4,
    ) -> SampleSet:
        """
        Sample a raw buffer.

        Args:
            buffer: Raw interleaved pixel data.
            width: Raster width.
            height: Raster height.
            channels: 3 or 4.

        Returns:
            SampleSet in row-major scan order, no alpha filtering.
        """
        return self.sample_array(as_pixel_array(buffer, width, height, channels))

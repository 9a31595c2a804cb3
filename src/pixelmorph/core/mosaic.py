"""
Mosaic rasterisation of a correspondence.

Each mapped point becomes a solid ``block_size`` square of its source
colour anchored at its target position. Block size is independent of the
sampling stride: larger blocks overlap into a coarse mosaic, smaller ones
leave transparent gaps.
"""

import numpy as np

from pixelmorph.core.mapper import Correspondence
from pixelmorph.core.sampler import is_positive_int
from pixelmorph.errors import InvalidDimensions


class MosaicRenderer:
    """Renders a Correspondence into an RGBA raster."""

    def __init__(self, block_size: int = 1):
        if not is_positive_int(block_size):
            raise ValueError(f"block_size must be a positive integer, got {block_size!r}")
        self.block_size = int(block_size)

    def render(self, correspondence: Correspondence, width: int, height: int) -> np.ndarray:
        """
        Rasterise the correspondence.

        Tiles are written in rank order, so where tiles overlap the one
        with the higher rank wins. The owner of every pixel is resolved
        first and colours are gathered in a single pass afterwards.

        Args:
            correspondence: Rank-ordered mapping.
            width: Output width.
            height: Output height.

        Returns:
            (height, width, 4) uint8 RGBA array, transparent where untouched.
        """
        if width <= 0 or height <= 0:
            raise InvalidDimensions(f"Output dimensions must be positive, got {width}x{height}")

        output = np.zeros((height, width, 4), dtype=np.uint8)
        n = len(correspondence)
        if n == 0:
            return output

        owner = np.full(height * width, -1, dtype=np.int64)
        ranks = np.arange(n, dtype=np.int64)
        tx = correspondence.target_xy[:, 0]
        ty = correspondence.target_xy[:, 1]

        for oy in range(self.block_size):
            py = ty + oy
            for ox in range(self.block_size):
                px = tx + ox
                inside = (px >= 0) & (px < width) & (py >= 0) & (py < height)
                if not inside.any():
                    continue
                flat = py[inside] * width + px[inside]
                np.maximum.at(owner, flat, ranks[inside])

        covered = owner >= 0
        output.reshape(-1, 4)[covered] = correspondence.colors[owner[covered]]
        return output

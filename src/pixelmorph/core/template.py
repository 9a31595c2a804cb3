"""
Target template extraction.

The target raster is cover-fit to the output size, sampled like the
source, stripped of near-transparent samples and optionally jittered.
"""

import numpy as np
from PIL import Image

from pixelmorph.core.sampler import PixelSampler, RawBuffer, SampleSet, as_pixel_array
from pixelmorph.errors import EmptySampleSet
from pixelmorph.io.images import cover_fit, to_rgba_array
from pixelmorph.luminance import REC601


class TargetTemplateBuilder:
    """
    Builds the target SampleSet that source pixels are mapped onto.

    Samples below ``alpha_threshold`` are background and never receive a
    mapped pixel. With ``jitter_radius > 0`` every retained position is
    nudged by an integer offset in [-j, j] per axis and clamped to bounds.
    """

    def __init__(
        self,
        stride: int = 1,
        alpha_threshold: int = 50,
        jitter_radius: int = 0,
        seed: int | None = None,
        weights: tuple[float, float, float] = REC601,
    ):
        if jitter_radius < 0:
            raise ValueError(f"jitter_radius must be >= 0, got {jitter_radius}")
        self.sampler = PixelSampler(stride, weights)
        self.alpha_threshold = alpha_threshold
        self.jitter_radius = int(jitter_radius)
        self.rng = np.random.default_rng(seed)

    def _jitter(self, samples: SampleSet, width: int, height: int) -> SampleSet:
        j = self.jitter_radius
        n = len(samples)
        dx = self.rng.integers(-j, j + 1, size=n)
        dy = self.rng.integers(-j, j + 1, size=n)
        return SampleSet(
            np.clip(samples.xs + dx, 0, width - 1),
            np.clip(samples.ys + dy, 0, height - 1),
            samples.colors,
            samples.brightness,
        )

    def build_array(self, pixels: np.ndarray) -> SampleSet:
        h, w = pixels.shape[:2]
        samples = self.sampler.sample_array(pixels).filter_alpha(self.alpha_threshold)
        if len(samples) == 0:
            raise EmptySampleSet(
                f"Target has no samples with alpha >= {self.alpha_threshold}"
            )
        if self.jitter_radius > 0:
            samples = self._jitter(samples, w, h)
        return samples

    def build(
        self,
        buffer: RawBuffer,
        width: int,
        height: int,
        channels: int = 4,
    ) -> SampleSet:
        """
        Build the template from a buffer already sized to the output.

        Raises:
            EmptySampleSet: every sample was transparent.
        """
        return self.build_array(as_pixel_array(buffer, width, height, channels))

    def build_from_image(self, image: Image.Image, width: int, height: int) -> SampleSet:
        """Cover-fit a decoded image to (width, height), then build."""
        return self.build_array(to_rgba_array(cover_fit(image, width, height)))

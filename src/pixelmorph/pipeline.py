"""
Main rank-mapping pipeline.

Orchestrates the complete flow from two encoded images to a finished
mosaic, and prepares correspondences for the particle animation.
"""

import time
from pathlib import Path
from typing import Any, Union

import numpy as np
from PIL import Image

from pixelmorph.config import AnimationConfig, MosaicConfig, OutputConfig, PixelmorphConfig
from pixelmorph.core.mapper import BrightnessRankMapper, Correspondence
from pixelmorph.core.mosaic import MosaicRenderer
from pixelmorph.core.sampler import PixelSampler, SampleSet
from pixelmorph.core.template import TargetTemplateBuilder
from pixelmorph.io.images import (
    ImageSource,
    encode,
    enhance,
    load_image,
    stretch,
    to_rgba_array,
    validate_dimensions,
)
from pixelmorph.luminance import get_weights


class MorphPipeline:
    """
    Complete image-to-mosaic processing pipeline.

    Combines decoding, sampling, target templating, rank mapping,
    rendering and encoding behind a single interface.
    """

    def __init__(self, config: PixelmorphConfig | None = None, verbose: bool = False):
        """
        Initialize the pipeline.

        Args:
            config: Section configs; defaults if None.
            verbose: Print per-phase timings.
        """
        self.config = config or PixelmorphConfig()
        self.verbose = verbose
        self.mapper = BrightnessRankMapper()

    @property
    def mosaic(self) -> MosaicConfig:
        return self.config.mosaic

    @property
    def output(self) -> OutputConfig:
        return self.config.output

    @property
    def animation(self) -> AnimationConfig:
        return self.config.animation

    def load(self, source: ImageSource) -> Image.Image:
        """Phase A: decode, orient and validate an input image."""
        img = load_image(source)
        validate_dimensions(img.width, img.height, self.output.max_dimension)
        return img

    def sample_source(self, image: Image.Image) -> SampleSet:
        """Phase B: sample the source at the configured stride."""
        sampler = PixelSampler(self.mosaic.stride, get_weights(self.mosaic.luminance))
        return sampler.sample_array(to_rgba_array(image))

    def build_template(self, image: Image.Image, width: int, height: int) -> SampleSet:
        """Phase C: cover-fit the target and extract its template."""
        builder = TargetTemplateBuilder(
            stride=self.mosaic.stride,
            alpha_threshold=self.mosaic.alpha_threshold,
            jitter_radius=self.mosaic.jitter_radius,
            seed=self.mosaic.seed,
            weights=get_weights(self.mosaic.luminance),
        )
        return builder.build_from_image(image, width, height)

    def map(self, source: SampleSet, target: SampleSet) -> Correspondence:
        """Phase D: brightness-rank correspondence."""
        return self.mapper.map(source, target)

    def render(self, correspondence: Correspondence, width: int, height: int) -> np.ndarray:
        """Phase E: rasterise mosaic tiles."""
        return MosaicRenderer(self.mosaic.mosaic_block_size).render(correspondence, width, height)

    def _report(self, timings: dict[str, float]):
        if not self.verbose:
            return
        for phase, seconds in timings.items():
            print(f"  {phase:<9} {seconds * 1000:8.1f} ms", flush=True)

    def process(
        self,
        source: ImageSource,
        target: ImageSource,
        output_path: Union[str, Path] | None = None,
        width: int | None = None,
        height: int | None = None,
    ) -> dict[str, Any]:
        """
        Run the complete pipeline.

        Args:
            source: Image whose pixels are rearranged.
            target: Image whose layout they are rearranged into.
            output_path: Where to write the encoded result. If None, only
                returns the result dict.
            width: Output width (defaults to the source width).
            height: Output height (defaults to the source height).

        Returns:
            Dictionary with the RGBA ``image`` array, ``encoded`` bytes and
            processing info.
        """
        timings: dict[str, float] = {}
        t0 = time.perf_counter()

        src_img = self.load(source)
        tgt_img = self.load(target)
        out_w = src_img.width if width is None else width
        out_h = src_img.height if height is None else height
        validate_dimensions(out_w, out_h, self.output.max_dimension)
        timings["decode"] = time.perf_counter() - t0

        t = time.perf_counter()
        src_samples = self.sample_source(src_img)
        tgt_samples = self.build_template(tgt_img, out_w, out_h)
        timings["sample"] = time.perf_counter() - t

        t = time.perf_counter()
        correspondence = self.map(src_samples, tgt_samples)
        timings["map"] = time.perf_counter() - t

        t = time.perf_counter()
        image = self.render(correspondence, out_w, out_h)
        if self.output.enhance:
            image = enhance(image)
        timings["render"] = time.perf_counter() - t

        t = time.perf_counter()
        encoded = encode(image, self.output.format, self.output.quality)
        timings["encode"] = time.perf_counter() - t
        timings["total"] = time.perf_counter() - t0

        self._report(timings)

        result = {
            "image": image,
            "encoded": encoded,
            "width": out_w,
            "height": out_h,
            "format": self.output.format,
            "size": len(encoded),
            "n_source": len(src_samples),
            "n_target": len(tgt_samples),
            "n_mapped": len(correspondence),
            "timings": timings,
        }

        if output_path:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(encoded)
            result["output_path"] = str(output_path)

        return result

    def prepare_animation(
        self,
        source: ImageSource,
        target: ImageSource,
        width: int,
        height: int,
    ) -> tuple[Correspondence, np.ndarray]:
        """
        Build the correspondence for a particle run.

        Both images are stretched onto the same canvas, transparent
        samples are dropped on both sides, and brightness uses the
        animation's luminance weights.

        Returns:
            (correspondence, target RGBA array to show on completion)
        """
        cfg = self.animation
        validate_dimensions(width, height, self.output.max_dimension)
        weights = get_weights(cfg.luminance)

        src_pixels = to_rgba_array(stretch(self.load(source), width, height))
        tgt_pixels = to_rgba_array(stretch(self.load(target), width, height))

        sampler = PixelSampler(cfg.sample_stride, weights)
        src_samples = sampler.sample_array(src_pixels).filter_alpha(cfg.alpha_threshold)
        builder = TargetTemplateBuilder(
            stride=cfg.sample_stride,
            alpha_threshold=cfg.alpha_threshold,
            weights=weights,
        )
        tgt_samples = builder.build_array(tgt_pixels)

        return self.map(src_samples, tgt_samples), tgt_pixels

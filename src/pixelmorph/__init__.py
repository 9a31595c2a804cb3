"""Brightness-rank pixel rearrangement and particle transitions."""

from pixelmorph.config import AnimationConfig, MosaicConfig, OutputConfig, PixelmorphConfig, load_config
from pixelmorph.core.mapper import BrightnessRankMapper, Correspondence
from pixelmorph.core.mosaic import MosaicRenderer
from pixelmorph.core.sampler import PixelSampler, Sample, SampleSet
from pixelmorph.core.template import TargetTemplateBuilder
from pixelmorph.animation.particles import ParticleConvergenceEngine
from pixelmorph.errors import EmptySampleSet, InvalidDimensions, PixelmorphError
from pixelmorph.pipeline import MorphPipeline

__version__ = "0.1.0"
__all__ = [
    "AnimationConfig",
    "MosaicConfig",
    "OutputConfig",
    "PixelmorphConfig",
    "load_config",
    "BrightnessRankMapper",
    "Correspondence",
    "MosaicRenderer",
    "PixelSampler",
    "Sample",
    "SampleSet",
    "TargetTemplateBuilder",
    "ParticleConvergenceEngine",
    "EmptySampleSet",
    "InvalidDimensions",
    "PixelmorphError",
    "MorphPipeline",
]

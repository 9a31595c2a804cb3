"""Core sampling, rank mapping and mosaic rendering."""

from pixelmorph.core.mapper import BrightnessRankMapper, Correspondence, MappedPoint
from pixelmorph.core.mosaic import MosaicRenderer
from pixelmorph.core.sampler import PixelSampler, Sample, SampleSet
from pixelmorph.core.template import TargetTemplateBuilder

__all__ = [
    "BrightnessRankMapper",
    "Correspondence",
    "MappedPoint",
    "MosaicRenderer",
    "PixelSampler",
    "Sample",
    "SampleSet",
    "TargetTemplateBuilder",
]

"""
Configuration for the batch mosaic and the particle animation.

Every component receives its configuration explicitly; nothing here
reads the environment. A JSON file with optional "mosaic", "animation"
and "output" sections can be loaded with :func:`load_config`.
"""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Union

from pixelmorph.core.sampler import is_positive_int
from pixelmorph.luminance import get_weights

OUTPUT_FORMATS = ("png", "jpeg", "webp")


def _require_positive_int(name: str, value):
    if not is_positive_int(value):
        raise ValueError(f"{name} must be a positive integer, got {value!r}")


@dataclass
class MosaicConfig:
    """Configuration for the batch rank-mapping path."""

    mosaic_block_size: int = 1
    sample_stride: int | None = None  # defaults to mosaic_block_size
    jitter_radius: int = 0
    alpha_threshold: int = 50  # target samples below this alpha are dropped
    luminance: str = "rec601"
    seed: int | None = None  # jitter reproducibility

    def __post_init__(self):
        _require_positive_int("mosaic_block_size", self.mosaic_block_size)
        if self.sample_stride is not None:
            _require_positive_int("sample_stride", self.sample_stride)
        if self.jitter_radius < 0:
            raise ValueError(f"jitter_radius must be >= 0, got {self.jitter_radius}")
        if not 0 <= self.alpha_threshold <= 255:
            raise ValueError(f"alpha_threshold must be in [0, 255], got {self.alpha_threshold}")
        get_weights(self.luminance)

    @property
    def stride(self) -> int:
        """Effective sampling stride."""
        return self.sample_stride or self.mosaic_block_size


@dataclass
class AnimationConfig:
    """Configuration for the hold -> scatter -> converge particle run."""

    duration_ms: float = 3000.0
    fps: int = 60

    # Phase boundaries on global progress p
    hold_end: float = 0.2
    scatter_end: float = 0.4
    lock_at: float = 0.95  # on local converge progress q

    # Convergence physics (per tick)
    force_constant: float = 0.08
    damping: float = 0.88
    snap_distance: float = 0.5

    # Cosmetics
    sample_stride: int = 4
    particle_size: int | None = None  # defaults to sample_stride
    glow_speed: float = 2.0
    glow_scale: float = 0.5
    background: tuple[int, int, int] = (255, 255, 255)
    alpha_threshold: int = 50
    luminance: str = "rec709"

    def __post_init__(self):
        if self.duration_ms <= 0:
            raise ValueError(f"duration_ms must be > 0, got {self.duration_ms}")
        if self.fps <= 0:
            raise ValueError(f"fps must be > 0, got {self.fps}")
        if not 0.0 <= self.hold_end <= self.scatter_end < 1.0:
            raise ValueError(
                "phase boundaries must satisfy 0 <= hold_end <= scatter_end < 1, "
                f"got {self.hold_end}, {self.scatter_end}"
            )
        if not 0.0 < self.lock_at <= 1.0:
            raise ValueError(f"lock_at must be in (0, 1], got {self.lock_at}")
        if not 0.0 < self.damping <= 1.0:
            raise ValueError(f"damping must be in (0, 1], got {self.damping}")
        _require_positive_int("sample_stride", self.sample_stride)
        if self.particle_size is not None:
            _require_positive_int("particle_size", self.particle_size)
        self.background = tuple(int(c) for c in self.background)
        get_weights(self.luminance)

    @property
    def size(self) -> int:
        """Side length of a drawn particle square."""
        return self.particle_size or self.sample_stride


@dataclass
class OutputConfig:
    """Codec settings for the encoded batch result."""

    format: str = "png"
    quality: int = 90
    enhance: bool = True
    max_dimension: int = 8000

    def __post_init__(self):
        self.format = self.format.lower()
        if self.format == "jpg":
            self.format = "jpeg"
        if self.format not in OUTPUT_FORMATS:
            raise ValueError(f"format must be one of {OUTPUT_FORMATS}, got {self.format!r}")
        if not 1 <= self.quality <= 100:
            raise ValueError(f"quality must be in [1, 100], got {self.quality}")


@dataclass
class PixelmorphConfig:
    """Bundle of all section configs."""

    mosaic: MosaicConfig = field(default_factory=MosaicConfig)
    animation: AnimationConfig = field(default_factory=AnimationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _section(cls, data: dict[str, Any] | None):
    """Build a section dataclass, rejecting unknown keys."""
    data = dict(data or {})
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {sorted(unknown)}")
    return cls(**data)


def config_from_dict(data: dict[str, Any]) -> PixelmorphConfig:
    """Build a :class:`PixelmorphConfig` from a plain dict."""
    unknown = set(data) - {"mosaic", "animation", "output"}
    if unknown:
        raise ValueError(f"Unknown config sections: {sorted(unknown)}")
    return PixelmorphConfig(
        mosaic=_section(MosaicConfig, data.get("mosaic")),
        animation=_section(AnimationConfig, data.get("animation")),
        output=_section(OutputConfig, data.get("output")),
    )


def load_config(path: Union[str, Path]) -> PixelmorphConfig:
    """
    Load configuration from a JSON file.

    Args:
        path: JSON file with optional "mosaic", "animation", "output" sections.

    Returns:
        PixelmorphConfig with defaults for anything not given.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a JSON object: {path}")
    return config_from_dict(data)

"""Particle convergence animation."""

from pixelmorph.animation.clock import Phase, PhaseBoundaries, SimulationClock
from pixelmorph.animation.particles import (
    Particle,
    ParticleConvergenceEngine,
    RenderBatch,
    RenderCommand,
)
from pixelmorph.animation.raster import rasterize, render_run

__all__ = [
    "Phase",
    "PhaseBoundaries",
    "SimulationClock",
    "Particle",
    "ParticleConvergenceEngine",
    "RenderBatch",
    "RenderCommand",
    "rasterize",
    "render_run",
]

"""Tests for offline particle rasterisation."""

import numpy as np
import pytest

from pixelmorph.animation.clock import Phase
from pixelmorph.animation.particles import ParticleConvergenceEngine, RenderBatch
from pixelmorph.animation.raster import add_glow, frame_times, rasterize, render_run
from pixelmorph.config import AnimationConfig
from pixelmorph.core.mapper import Correspondence

WHITE = (255, 255, 255)


def _batch(xs, ys, colors, size=1, glow=None) -> RenderBatch:
    n = len(xs)
    return RenderBatch(
        xs=np.asarray(xs),
        ys=np.asarray(ys),
        colors=np.asarray(colors, dtype=np.uint8),
        glow=np.zeros(n) if glow is None else np.asarray(glow, dtype=float),
        size=size,
        progress=0.0,
        phase=Phase.HOLD,
    )


class TestRasterize:
    def test_output_shape(self):
        frame = rasterize(_batch([0], [0], [(0, 0, 0, 255)]), 20, 10)
        assert frame.shape == (10, 20, 3)
        assert frame.dtype == np.uint8

    def test_background_fill(self):
        frame = rasterize(_batch([], [], np.zeros((0, 4))), 4, 4, background=(1, 2, 3))
        assert np.all(frame == (1, 2, 3))

    def test_square_drawn_at_position(self):
        frame = rasterize(_batch([1], [2], [(255, 0, 0, 255)], size=2), 5, 5, WHITE)
        assert np.all(frame[2:4, 1:3] == (255, 0, 0))
        assert tuple(frame[0, 0]) == WHITE
        assert tuple(frame[4, 4]) == WHITE

    def test_offscreen_particles_clipped(self):
        frame = rasterize(_batch([-5, 10], [0, 0], [(0, 0, 0, 255)] * 2), 4, 4, WHITE)
        assert np.all(frame == 255)

    def test_later_particle_on_top(self):
        colors = [(255, 0, 0, 255), (0, 0, 255, 255)]
        frame = rasterize(_batch([0, 0], [0, 0], colors), 2, 2, WHITE)
        assert tuple(frame[0, 0]) == (0, 0, 255)

    def test_translucent_particle_blends(self):
        frame = rasterize(_batch([0], [0], [(0, 0, 0, 128)]), 1, 1, WHITE)
        assert 120 <= frame[0, 0, 0] <= 135

    def test_glow_spreads_light(self):
        batch = _batch([10], [10], [(255, 255, 255, 255)], glow=[3.0])
        plain = rasterize(batch, 21, 21, background=(0, 0, 0), glow=False)
        glowing = rasterize(batch, 21, 21, background=(0, 0, 0), glow=True)
        assert plain[10, 13].sum() == 0
        assert glowing[10, 13].sum() > 0

    def test_glow_radius_per_particle(self):
        white = (255, 255, 255, 255)
        fast = _batch([0], [0], [white], size=8, glow=[6.0])
        both = _batch([0, 60], [0, 0], [white, white], size=8, glow=[6.0, 2.0])
        alone = rasterize(fast, 70, 10, background=(0, 0, 0)).astype(int)
        mixed = rasterize(both, 70, 10, background=(0, 0, 0)).astype(int)
        # The slow particle does not shrink the fast one's bloom
        assert np.abs(alone[:, :40] - mixed[:, :40]).max() <= 1
        assert mixed[5, 20].sum() > 0
        # and is not widened by it
        assert mixed[5, 48].sum() == 0


class TestAddGlow:
    def test_no_sigma_is_identity(self):
        frame = np.full((4, 4, 3), 100, dtype=np.float32)
        assert add_glow(frame, np.zeros_like(frame), 0) is frame

    def test_screen_blend_brightens(self):
        frame = np.full((8, 8, 3), 100, dtype=np.float32)
        layer = np.full((8, 8, 3), 200, dtype=np.float32)
        out = add_glow(frame, layer, 1.0)
        assert np.all(out >= frame)


class TestRenderRun:
    def _engine(self, duration_ms=500.0, fps=20):
        corr = Correspondence(
            source_xy=[[0, 0], [5, 5]],
            target_xy=[[5, 5], [0, 0]],
            colors=[(255, 0, 0, 255), (0, 255, 0, 255)],
            source_brightness=[0.0, 1.0],
            target_brightness=[0.0, 1.0],
        )
        return ParticleConvergenceEngine(
            corr, 8, 8, AnimationConfig(duration_ms=duration_ms, fps=fps, sample_stride=1), seed=1
        )

    def test_frame_times_end_at_duration(self):
        times = frame_times(500.0, 20)
        assert times[0] == 0.0
        assert times[-1] == 500.0
        assert len(times) == 11

    def test_yields_every_frame(self):
        engine = self._engine()
        progress = []
        frames = list(render_run(engine, progress_callback=lambda c, t: progress.append((c, t))))
        assert len(frames) == 11
        assert frames[0].shape == (8, 8, 3)
        assert progress[-1] == (11, 11)
        assert engine.finished

    def test_final_frame_replaces_last(self):
        engine = self._engine()
        final = np.zeros((8, 8, 3), dtype=np.uint8)
        frames = list(render_run(engine, final_frame=final))
        assert frames[-1] is final

    def test_first_frame_shows_origins(self):
        engine = self._engine()
        first = next(render_run(engine))
        assert tuple(first[0, 0]) == (255, 0, 0)
        assert tuple(first[5, 5]) == (0, 255, 0)

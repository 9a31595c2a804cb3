"""Tests for the BrightnessRankMapper module."""

import numpy as np
import pytest

from pixelmorph.core.mapper import BrightnessRankMapper, Correspondence
from pixelmorph.core.sampler import PixelSampler, SampleSet
from pixelmorph.errors import EmptySampleSet

from conftest import gray_pixels


def _samples(pixels: np.ndarray) -> SampleSet:
    return PixelSampler().sample_array(pixels)


class TestBrightnessRankMapper:
    """Tests for rank correspondence."""

    def test_bijection_for_equal_sizes(self, random_rgba):
        rng = np.random.default_rng(5)
        target_pixels = rng.integers(0, 256, size=random_rgba.shape, dtype=np.uint8)
        target_pixels[..., 3] = 255
        source = _samples(random_rgba)
        target = _samples(target_pixels)

        corr = BrightnessRankMapper().map(source, target)

        assert len(corr) == len(source) == len(target)
        assert {tuple(p) for p in corr.target_xy} == {tuple(p) for p in target.positions()}
        assert {tuple(p) for p in corr.source_xy} == {tuple(p) for p in source.positions()}

    def test_rank_preservation(self, random_rgba, silhouette_rgba):
        source = _samples(random_rgba)
        target = _samples(silhouette_rgba)
        corr = BrightnessRankMapper().map(source, target)

        assert np.all(np.diff(corr.source_brightness) >= 0)
        assert np.all(np.diff(corr.target_brightness) >= 0)

    def test_keeps_source_color(self, ranked_2x2):
        target = gray_pixels([200, 150, 50, 10], 2, 2)
        corr = BrightnessRankMapper().map(_samples(ranked_2x2), _samples(target))

        # Darkest source (10 at (0,0)) lands on darkest target (10 at (1,1))
        darkest = corr[0]
        assert darkest.color == (10, 10, 10, 255)
        assert (darkest.source_x, darkest.source_y) == (0, 0)
        assert (darkest.target_x, darkest.target_y) == (1, 1)

    def test_ties_keep_scan_order(self):
        flat = gray_pixels([80] * 6, 3, 2)
        source = _samples(flat)
        corr = BrightnessRankMapper().map(source, _samples(flat))
        assert np.array_equal(corr.source_xy, source.positions())
        assert np.array_equal(corr.target_xy, source.positions())

    def test_truncates_larger_source(self, ranked_2x2):
        big = _samples(gray_pixels(range(0, 160, 10), 4, 4))
        corr = BrightnessRankMapper().map(big, _samples(ranked_2x2))
        assert len(corr) == 4
        # Only the four darkest source colours are used
        assert [c[0] for c in corr.colors] == [0, 10, 20, 30]

    def test_truncates_larger_target(self, ranked_2x2):
        big = _samples(gray_pixels(range(0, 160, 10), 4, 4))
        corr = BrightnessRankMapper().map(_samples(ranked_2x2), big)
        assert len(corr) == 4

    @pytest.mark.parametrize("empty_side", ["source", "target"])
    def test_empty_set(self, ranked_2x2, empty_side):
        full = _samples(ranked_2x2)
        args = (SampleSet.empty(), full) if empty_side == "source" else (full, SampleSet.empty())
        with pytest.raises(EmptySampleSet):
            BrightnessRankMapper().map(*args)

    def test_deterministic(self, random_rgba, silhouette_rgba):
        mapper = BrightnessRankMapper()
        a = mapper.map(_samples(random_rgba), _samples(silhouette_rgba))
        b = mapper.map(_samples(random_rgba), _samples(silhouette_rgba))
        assert np.array_equal(a.target_xy, b.target_xy)
        assert np.array_equal(a.colors, b.colors)


class TestCorrespondence:
    def test_iteration_in_rank_order(self, ranked_2x2):
        corr = BrightnessRankMapper().map(_samples(ranked_2x2), _samples(ranked_2x2))
        assert [p.rank for p in corr] == [0, 1, 2, 3]
        assert repr(corr) == "Correspondence(n=4)"

    def test_column_length_mismatch(self):
        with pytest.raises(ValueError):
            Correspondence(
                source_xy=[[0, 0]],
                target_xy=[[0, 0], [1, 1]],
                colors=[[0, 0, 0, 255]],
                source_brightness=[0.0],
                target_brightness=[0.0],
            )

"""Tests for the end-to-end rank-mapping pipeline."""

import io

import numpy as np
import pytest
from PIL import Image

from pixelmorph.config import MosaicConfig, OutputConfig, PixelmorphConfig
from pixelmorph.errors import EmptySampleSet, ImageTooLarge, InvalidDimensions
from pixelmorph.pipeline import MorphPipeline


def _plain(**mosaic) -> PixelmorphConfig:
    return PixelmorphConfig(mosaic=MosaicConfig(**mosaic), output=OutputConfig(enhance=False))


class TestProcess:
    def test_result_keys(self, source_png, target_png):
        result = MorphPipeline().process(source_png, target_png)
        for key in ("image", "encoded", "width", "height", "format", "size",
                    "n_source", "n_target", "n_mapped", "timings"):
            assert key in result
        assert result["image"].shape == (12, 16, 4)
        assert result["size"] == len(result["encoded"])
        assert "output_path" not in result

    def test_mapped_is_min_of_sides(self, source_png, target_png):
        result = MorphPipeline(_plain()).process(source_png, target_png)
        assert result["n_source"] == 16 * 12
        assert 0 < result["n_target"] < result["n_source"]
        assert result["n_mapped"] == min(result["n_source"], result["n_target"])

    def test_painted_pixels_come_from_source(self, source_png, target_png, random_rgba):
        result = MorphPipeline(_plain()).process(source_png, target_png)
        image = result["image"]
        painted = image[image[..., 3] > 0]
        assert len(painted) == result["n_mapped"]
        source_colors = {tuple(c) for c in random_rgba.reshape(-1, 4)}
        assert all(tuple(c) in source_colors for c in painted)

    def test_block_size_tiles(self, source_png, target_png):
        result = MorphPipeline(_plain(mosaic_block_size=4)).process(source_png, target_png)
        assert result["n_source"] == 4 * 3

    def test_output_dimensions_override(self, source_png, target_png):
        result = MorphPipeline(_plain()).process(source_png, target_png, width=8, height=8)
        assert result["image"].shape == (8, 8, 4)

    def test_deterministic(self, source_png, target_png):
        pipeline = MorphPipeline(_plain(jitter_radius=2, seed=7))
        a = pipeline.process(source_png, target_png)["image"]
        b = pipeline.process(source_png, target_png)["image"]
        assert np.array_equal(a, b)

    def test_writes_output(self, tmp_path, source_png, target_png):
        out = tmp_path / "nested" / "out.png"
        result = MorphPipeline(_plain()).process(source_png, target_png, output_path=out)
        assert out.exists()
        assert result["output_path"] == str(out)
        decoded = np.array(Image.open(io.BytesIO(out.read_bytes())))
        assert np.array_equal(decoded, result["image"])

    @pytest.mark.parametrize("width,height", [(0, 8), (8, 0)])
    def test_zero_output_dimension(self, source_png, target_png, width, height):
        with pytest.raises(InvalidDimensions):
            MorphPipeline(_plain()).process(source_png, target_png, width=width, height=height)

    def test_transparent_target(self, source_png, transparent_png):
        with pytest.raises(EmptySampleSet):
            MorphPipeline().process(source_png, transparent_png)

    def test_oversized_input(self, tmp_path, target_png):
        big = tmp_path / "big.png"
        Image.new("RGBA", (40, 4), (0, 0, 0, 255)).save(big)
        config = PixelmorphConfig(output=OutputConfig(max_dimension=32))
        with pytest.raises(ImageTooLarge):
            MorphPipeline(config).process(big, target_png)

    def test_verbose_reports_timings(self, source_png, target_png, capsys):
        MorphPipeline(_plain(), verbose=True).process(source_png, target_png)
        out = capsys.readouterr().out
        assert "decode" in out
        assert "total" in out


class TestPrepareAnimation:
    def test_correspondence_and_target(self, source_png, target_png):
        correspondence, target = MorphPipeline().prepare_animation(source_png, target_png, 8, 8)
        assert target.shape == (8, 8, 4)
        # stride 4 on an 8x8 canvas gives at most four samples a side
        assert 0 < len(correspondence) <= 4

    def test_transparent_target(self, source_png, transparent_png):
        with pytest.raises(EmptySampleSet):
            MorphPipeline().prepare_animation(source_png, transparent_png, 8, 8)

"""Image codec helpers."""

from pixelmorph.io.images import cover_fit, encode, enhance, load_image, to_rgba_array

__all__ = ["cover_fit", "encode", "enhance", "load_image", "to_rgba_array"]

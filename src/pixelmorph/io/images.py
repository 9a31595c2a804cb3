"""
Image codec collaborator built on Pillow.

Handles everything the core deliberately does not: decoding, EXIF
orientation, dimension validation, cover-fit resizing, the colour
enhancement pass applied to finished mosaics, and encoding.
"""

import io
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, ImageEnhance, ImageFilter, ImageOps, UnidentifiedImageError

from pixelmorph.errors import ImageTooLarge, InvalidDimensions, ProcessingError

ImageSource = Union[str, Path, bytes, bytearray, Image.Image]

MAX_DIMENSION = 8000

# Post-processing applied to the batch result
ENHANCE_BRIGHTNESS = 1.1
ENHANCE_SATURATION = 1.2
ENHANCE_SHARPEN_RADIUS = 1.0
ENHANCE_CONTRAST = 1.1
ENHANCE_OFFSET = -(128 * 0.1)


def load_image(source: ImageSource) -> Image.Image:
    """
    Decode an image and normalise its orientation.

    Args:
        source: File path, encoded bytes, or an already-open PIL image.

    Returns:
        RGBA PIL image with EXIF rotation applied.
    """
    try:
        if isinstance(source, Image.Image):
            img = source
        elif isinstance(source, (bytes, bytearray)):
            img = Image.open(io.BytesIO(bytes(source)))
        else:
            img = Image.open(Path(source))
        img.load()
        img = ImageOps.exif_transpose(img)
    except (UnidentifiedImageError, OSError) as e:
        raise ProcessingError(f"Unable to decode image: {e}") from e
    return img.convert("RGBA")


def validate_dimensions(width: int, height: int, max_dimension: int = MAX_DIMENSION) -> None:
    """Reject non-positive or oversized rasters."""
    if width <= 0 or height <= 0:
        raise InvalidDimensions(f"Invalid image dimensions: {width}x{height}")
    if width > max_dimension or height > max_dimension:
        raise ImageTooLarge(
            f"Image dimensions too large ({width}x{height}). "
            f"Maximum: {max_dimension}px per side"
        )


def to_rgba_array(image: Image.Image) -> np.ndarray:
    """(H, W, 4) uint8 copy of an image."""
    return np.array(image.convert("RGBA"), dtype=np.uint8)


def cover_fit(image: Image.Image, width: int, height: int) -> Image.Image:
    """
    Resize and centre-crop so the image exactly covers (width, height).

    Aspect ratio is preserved; overflow on one axis is cropped evenly.
    """
    validate_dimensions(width, height)
    return ImageOps.fit(
        image.convert("RGBA"),
        (width, height),
        method=Image.LANCZOS,
        centering=(0.5, 0.5),
    )


def stretch(image: Image.Image, width: int, height: int) -> Image.Image:
    """Resize to (width, height) ignoring aspect ratio."""
    validate_dimensions(width, height)
    return image.convert("RGBA").resize((width, height), Image.BILINEAR)


def enhance(
    pixels: np.ndarray,
    brightness: float = ENHANCE_BRIGHTNESS,
    saturation: float = ENHANCE_SATURATION,
    sharpen_radius: float = ENHANCE_SHARPEN_RADIUS,
    contrast: float = ENHANCE_CONTRAST,
    offset: float = ENHANCE_OFFSET,
) -> np.ndarray:
    """
    Brighten, saturate, sharpen and add linear contrast to an RGBA raster.

    Alpha passes through untouched so mosaic gaps stay transparent.

    Args:
        pixels: (H, W, 4) uint8.

    Returns:
        (H, W, 4) uint8.
    """
    rgb = Image.fromarray(np.ascontiguousarray(pixels[..., :3]))
    rgb = ImageEnhance.Brightness(rgb).enhance(brightness)
    rgb = ImageEnhance.Color(rgb).enhance(saturation)
    if sharpen_radius > 0:
        rgb = rgb.filter(ImageFilter.UnsharpMask(radius=sharpen_radius, percent=100, threshold=0))

    f = np.asarray(rgb, dtype=np.float32) * contrast + offset
    out = np.empty_like(pixels)
    out[..., :3] = np.clip(f, 0, 255).astype(np.uint8)
    out[..., 3] = pixels[..., 3]
    return out


def encode(pixels: np.ndarray, format: str = "png", quality: int = 90) -> bytes:
    """
    Encode an RGBA raster.

    JPEG has no alpha channel, so transparent regions are flattened onto
    black for that format.
    """
    img = Image.fromarray(np.ascontiguousarray(pixels))
    fmt = format.lower()
    buf = io.BytesIO()
    try:
        if fmt in ("jpeg", "jpg"):
            img.convert("RGB").save(buf, format="JPEG", quality=quality)
        elif fmt == "webp":
            img.save(buf, format="WEBP", quality=quality)
        elif fmt == "png":
            img.save(buf, format="PNG")
        else:
            raise ValueError(f"Unsupported output format: {format!r}")
    except OSError as e:
        raise ProcessingError(f"Encoding to {fmt} failed: {e}") from e
    return buf.getvalue()


def estimate_processing_time(width: int, height: int) -> int:
    """Rough batch runtime estimate in milliseconds (~10ms per megapixel)."""
    return int(np.ceil(width * height / 1_000_000 * 10))


def flatten(pixels: np.ndarray, background: tuple[int, int, int] = (255, 255, 255)) -> np.ndarray:
    """Composite an RGBA raster over a solid background, returning (H, W, 3) uint8."""
    f = pixels.astype(np.float32)
    alpha = f[..., 3:4] / 255.0
    bg = np.asarray(background, dtype=np.float32)
    return (f[..., :3] * alpha + bg * (1.0 - alpha) + 0.5).astype(np.uint8)

"""Raster image rasterization."""

import io
import logging

from PIL import Image, UnidentifiedImageError

from watercurtain.exceptions import RasterizationError
from watercurtain.models.pattern import Matrix

from .canvas import alpha_matrix, check_valve_count, surface_height

logger = logging.getLogger(__name__)

LOAD_FAILED = (
    "The selected image file could not be loaded. "
    "It may be corrupt or in an unsupported format."
)


def decode_image(data: bytes) -> Image.Image:
    """Decode image bytes with Pillow, fully loading the pixel data."""
    if not data:
        raise RasterizationError("Image is required.", source="image")
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise RasterizationError(LOAD_FAILED, source="image", original_error=str(e)) from e
    return image


def sample_image(image: Image.Image, valve_count: int) -> Matrix:
    """Resample a decoded image to valve_count columns and threshold its alpha."""
    src_width, src_height = image.size
    if src_width <= 0 or src_height <= 0:
        raise RasterizationError(LOAD_FAILED, source="image")

    height = surface_height(valve_count, src_height / src_width)
    logger.debug(f"Resampling {src_width}x{src_height} image to {valve_count}x{height}")

    resized = image.convert("RGBA").resize((valve_count, height), Image.Resampling.BILINEAR)
    return alpha_matrix(resized)


def rasterize_image(data: bytes, valve_count: int) -> Matrix:
    """
    Rasterize encoded image bytes (PNG, JPEG, GIF...) into a valve matrix.

    Images without an alpha channel are fully opaque, so every cell is on.

    Raises:
        RasterizationError: Empty or undecodable data, or bad valve count
    """
    check_valve_count(valve_count, source="image")
    return sample_image(decode_image(data), valve_count)

"""Text prompt rasterization."""

import logging
import math
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from watercurtain.exceptions import RasterizationError
from watercurtain.models.pattern import Matrix

from .canvas import alpha_matrix, check_valve_count

logger = logging.getLogger(__name__)

# Horizontal margin (total) and vertical padding around the glyphs, in pixels
TEXT_PADDING = 8


def _load_font(size: float, font_path: Path | None) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    if font_path is None:
        return ImageFont.load_default(size=size)
    try:
        return ImageFont.truetype(str(font_path), size=size)
    except OSError as e:
        raise RasterizationError(
            f"Could not load font {font_path}.", source="text", original_error=str(e)
        ) from e


def _measure(font, text: str) -> tuple[float, float]:
    left, top, right, bottom = font.getbbox(text)
    return right - left, bottom - top


def fitted_font_size(valve_count: int, width_at_full_size: float) -> int:
    """
    Largest whole pixel size at which the text fits ``valve_count - TEXT_PADDING``.

    Text measured ``width_at_full_size`` wide when drawn at ``valve_count``
    pixels. Never larger than ``valve_count`` and never below 1, since
    FreeType refuses sizes under one pixel.
    """
    available = valve_count - TEXT_PADDING
    return max(1, min(valve_count, math.floor(available * valve_count / width_at_full_size)))


def rasterize_text(text: str, valve_count: int, font_path: Path | None = None) -> Matrix:
    """
    Render a single line of text into a valve matrix.

    The font starts at valve_count pixels and shrinks until the text fits
    inside the surface width minus padding. The surface is exactly
    valve_count wide and as tall as the rendered glyphs plus padding.

    Args:
        text: Prompt to render (newlines are drawn as spaces)
        valve_count: Surface width, a positive multiple of 8
        font_path: Optional TrueType font; Pillow's bundled font otherwise

    Raises:
        RasterizationError: Empty prompt, bad valve count, or text with no width
    """
    if not text.strip():
        raise RasterizationError("Prompt cannot be empty.", source="text")
    check_valve_count(valve_count, source="text")

    line = " ".join(text.splitlines())

    font = _load_font(valve_count, font_path)
    width, _ = _measure(font, line)
    if width <= 0:
        raise RasterizationError("Failed to generate pattern from text.", source="text")

    final_size = fitted_font_size(valve_count, width)
    font = _load_font(final_size, font_path)
    _, glyph_height = _measure(font, line)

    height = math.ceil(glyph_height) + TEXT_PADDING
    logger.debug(f"Text '{line}' at {final_size}px -> {valve_count}x{height} surface")

    surface = Image.new("RGBA", (valve_count, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(surface)
    draw.text((valve_count / 2, height / 2), line, font=font, fill=(0, 0, 0, 255), anchor="mm")

    return alpha_matrix(surface)

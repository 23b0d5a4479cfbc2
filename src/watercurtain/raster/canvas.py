"""Surface sizing and alpha thresholding shared by the raster generators."""

import numpy as np
from PIL import Image

from watercurtain.exceptions import RasterizationError
from watercurtain.models.pattern import VALVE_MULTIPLE, Matrix

# A pixel is "on" when strictly more than half opaque
ALPHA_THRESHOLD = 128


def check_valve_count(valve_count: int, source: str | None = None) -> None:
    """Raise RasterizationError unless valve_count is a positive multiple of 8."""
    if valve_count < VALVE_MULTIPLE:
        raise RasterizationError(f"Must have at least {VALVE_MULTIPLE} valves.", source=source)
    if valve_count % VALVE_MULTIPLE != 0:
        raise RasterizationError(
            f"Number of valves must be a multiple of {VALVE_MULTIPLE}.", source=source
        )


def surface_height(valve_count: int, aspect_ratio: float) -> int:
    """
    Height of a surface exactly valve_count wide that keeps the aspect ratio.

    Rounds half up and never returns less than one row.

    Args:
        valve_count: Surface width in pixels
        aspect_ratio: Source height divided by source width
    """
    return max(1, int(np.floor(valve_count * aspect_ratio + 0.5)))


def alpha_matrix(image: Image.Image) -> Matrix:
    """Threshold the alpha channel of an image into a valve matrix, top row first."""
    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    alpha = np.asarray(rgba.getchannel("A"), dtype=np.uint8)
    mask = alpha > ALPHA_THRESHOLD
    return tuple(tuple(bool(cell) for cell in row) for row in mask)

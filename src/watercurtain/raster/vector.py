"""SVG rasterization via CairoSVG."""

import io
import logging
import re
import xml.etree.ElementTree as ET

from PIL import Image

from watercurtain.exceptions import RasterizationError
from watercurtain.models.pattern import Matrix

from .canvas import alpha_matrix, check_valve_count, surface_height

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

PARSE_FAILED = "Failed to parse SVG. The file might be corrupt or not a valid SVG."
RENDER_FAILED = (
    "The selected SVG file could not be rendered. "
    "It may be corrupt or contain unsupported features."
)

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

# Keep the default namespace unprefixed when the tree is written back out
ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)


def _leading_float(value: str | None) -> float | None:
    """Parse the numeric prefix of a length such as '120px' or '50%'."""
    if not value:
        return None
    match = _LEADING_NUMBER.match(value)
    if match is None:
        return None
    return float(match.group(1))


def aspect_ratio(root: ET.Element) -> float:
    """
    Height/width ratio of an SVG root element.

    Taken from viewBox when present, else from the width and height
    attributes, else 1. Degenerate values fall back to 1.
    """
    view_box = root.get("viewBox")
    if view_box:
        parts = re.split(r"[ ,]+", view_box.strip())
        if len(parts) != 4:
            return 1.0
        vb_width, vb_height = _leading_float(parts[2]), _leading_float(parts[3])
        if vb_width and vb_height and vb_width > 0 and vb_height > 0:
            return vb_height / vb_width
        return 1.0

    width = _leading_float(root.get("width"))
    height = _leading_float(root.get("height"))
    if width and height and width > 0 and height > 0:
        return height / width
    return 1.0


def parse_svg(data: str | bytes) -> ET.Element:
    """Parse SVG markup and return its root element."""
    if not data:
        raise RasterizationError("SVG file is required.", source="vector")
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise RasterizationError(PARSE_FAILED, source="vector", original_error=str(e)) from e

    # Tags are '{namespace}svg' when namespaced, plain 'svg' otherwise
    if root.tag.rsplit("}", 1)[-1].lower() != "svg":
        raise RasterizationError(
            PARSE_FAILED, source="vector", original_error=f"root element is <{root.tag}>"
        )
    return root


def _render_png(markup: bytes, width: int, height: int) -> bytes:
    # Imported here: cairosvg needs the native cairo library at import time
    import cairosvg

    return cairosvg.svg2png(bytestring=markup, output_width=width, output_height=height)


def rasterize_svg(data: str | bytes, valve_count: int) -> Matrix:
    """
    Rasterize SVG markup into a valve matrix.

    The root element is resized to valve_count x height pixels with
    ``preserveAspectRatio="none"`` and rendered with CairoSVG; the result
    is thresholded on alpha like any other image.

    Raises:
        RasterizationError: Unparseable markup, non-svg root, bad valve
            count, or a render failure
    """
    check_valve_count(valve_count, source="vector")
    root = parse_svg(data)

    height = surface_height(valve_count, aspect_ratio(root))
    root.set("width", f"{valve_count}px")
    root.set("height", f"{height}px")
    root.set("preserveAspectRatio", "none")
    sized = ET.tostring(root, encoding="utf-8")

    logger.debug(f"Rendering SVG at {valve_count}x{height}")
    try:
        png = _render_png(sized, valve_count, height)
        surface = Image.open(io.BytesIO(png))
        surface.load()
    except (ValueError, OSError, ET.ParseError) as e:
        raise RasterizationError(RENDER_FAILED, source="vector", original_error=str(e)) from e

    if surface.size != (valve_count, height):
        surface = surface.resize((valve_count, height), Image.Resampling.BILINEAR)
    return alpha_matrix(surface)

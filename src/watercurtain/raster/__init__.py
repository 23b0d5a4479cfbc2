"""Rasterization of text, images, SVG and hand-drawn grids into valve matrices."""

from .canvas import ALPHA_THRESHOLD, alpha_matrix, check_valve_count, surface_height
from .image import rasterize_image
from .manual import GridEditor, parse_grid_text, render_grid_text
from .rasterizer import (
    ImageInput,
    ManualInput,
    RasterInput,
    TextInput,
    VectorInput,
    build_draft,
    rasterize,
)
from .text import rasterize_text
from .vector import rasterize_svg

__all__ = [
    "ALPHA_THRESHOLD",
    "GridEditor",
    "ImageInput",
    "ManualInput",
    "RasterInput",
    "TextInput",
    "VectorInput",
    "alpha_matrix",
    "build_draft",
    "check_valve_count",
    "parse_grid_text",
    "rasterize",
    "rasterize_image",
    "rasterize_svg",
    "rasterize_text",
    "render_grid_text",
    "surface_height",
]

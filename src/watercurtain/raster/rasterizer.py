"""Rasterizer entry points.

``rasterize`` dispatches a typed input to the generator for its kind and
returns the canonical matrix; ``build_draft`` also names the result the
way the pattern list shows it.
"""

import logging
from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from watercurtain.exceptions import RasterizationError
from watercurtain.models import PatternDraft, PatternSource
from watercurtain.models.pattern import Matrix

from .canvas import check_valve_count
from .image import rasterize_image
from .manual import MAX_ROWS, parse_grid_text
from .text import rasterize_text
from .vector import rasterize_svg

logger = logging.getLogger(__name__)

NAME_LIMIT = 30


class TextInput(BaseModel):
    """A free-text prompt."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str
    font_path: Path | None = None


class ImageInput(BaseModel):
    """Encoded raster image bytes and the filename they came from."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    data: bytes
    filename: str = "image"

    @classmethod
    def from_path(cls, path: Path) -> "ImageInput":
        return cls(data=Path(path).read_bytes(), filename=Path(path).name)


class VectorInput(BaseModel):
    """SVG markup and the filename it came from."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["vector"] = "vector"
    markup: str | bytes
    filename: str = "vector.svg"

    @classmethod
    def from_path(cls, path: Path) -> "VectorInput":
        return cls(markup=Path(path).read_bytes(), filename=Path(path).name)


class ManualInput(BaseModel):
    """A hand-drawn grid, either as cells or in the '#'/'.' text format."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["manual"] = "manual"
    name: str = "My Manual Pattern"
    grid: Matrix | None = None
    grid_text: str | None = None
    max_rows: int = Field(default=MAX_ROWS, ge=1)


RasterInput = Annotated[
    TextInput | ImageInput | VectorInput | ManualInput, Field(discriminator="kind")
]


def _manual_matrix(spec: ManualInput, valve_count: int) -> Matrix:
    # No resampling: the grid's own width is the valve count
    if spec.grid is not None:
        matrix = spec.grid
    elif spec.grid_text is not None:
        matrix = parse_grid_text(spec.grid_text)
    else:
        raise RasterizationError("Grid is empty.", source="manual")

    if not matrix or not matrix[0]:
        raise RasterizationError("Grid is empty.", source="manual")
    width = len(matrix[0])
    if any(len(row) != width for row in matrix):
        raise RasterizationError("Grid rows have different lengths.", source="manual")
    check_valve_count(width, source="manual")
    if len(matrix) > spec.max_rows:
        raise RasterizationError(f"Grid has more than {spec.max_rows} rows.", source="manual")
    if width != valve_count:
        logger.info(f"Manual grid is {width} valves wide (requested {valve_count}), keeping {width}")
    return matrix


def rasterize(spec: RasterInput, valve_count: int) -> Matrix:
    """
    Convert one input into a valve matrix.

    Args:
        spec: Text, image, vector or manual input
        valve_count: Columns of the result (manual grids keep their own width)

    Returns:
        Matrix with at least one row; each row has valve_count cells

    Raises:
        RasterizationError: If the input cannot be turned into a matrix
    """
    if isinstance(spec, TextInput):
        return rasterize_text(spec.text, valve_count, font_path=spec.font_path)
    if isinstance(spec, ImageInput):
        return rasterize_image(spec.data, valve_count)
    if isinstance(spec, VectorInput):
        return rasterize_svg(spec.markup, valve_count)
    if isinstance(spec, ManualInput):
        return _manual_matrix(spec, valve_count)
    raise RasterizationError(f"Unsupported input type: {type(spec).__name__}")


def _text_name(text: str) -> str:
    return text[:NAME_LIMIT] + ("..." if len(text) > NAME_LIMIT else "")


def build_draft(spec: RasterInput, valve_count: int) -> PatternDraft:
    """Rasterize an input and wrap the result in a named draft."""
    matrix = rasterize(spec, valve_count)

    if isinstance(spec, TextInput):
        name, source, origin = _text_name(spec.text), PatternSource.TEXT, spec.text
    elif isinstance(spec, ImageInput):
        name, source, origin = spec.filename, PatternSource.IMAGE, spec.filename
    elif isinstance(spec, VectorInput):
        name, source, origin = spec.filename, PatternSource.VECTOR, spec.filename
    else:
        name = spec.name.strip()
        if not name:
            raise RasterizationError("Pattern name is required.", source="manual")
        source = PatternSource.MANUAL
        origin = f"{len(matrix)}x{len(matrix[0])} grid"

    logger.info(f"Generated {source.value} pattern '{name}': {len(matrix)} rows x {len(matrix[0])} valves")
    return PatternDraft(name=name, matrix=matrix, source=source, origin=origin)

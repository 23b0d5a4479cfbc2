"""Hand-drawn grid authoring.

``GridEditor`` holds the mutable state of a grid being drawn (cells,
name, dimensions, current brush stroke) and only produces an immutable
``PatternDraft`` on save, after checking the grid constraints.

The text grid format uses one line per row, ``#`` for an open valve and
``.`` for a closed one, and round-trips exactly.
"""

import logging
from collections.abc import Iterable, Sequence

from watercurtain.exceptions import PatternValidationError, RasterizationError
from watercurtain.models import PatternDraft, PatternSource
from watercurtain.models.pattern import VALVE_MULTIPLE, Matrix, check_matrix

logger = logging.getLogger(__name__)

MAX_ROWS = 100
DEFAULT_ROWS = 16
DEFAULT_NAME = "My Manual Pattern"

ON_CHAR = "#"
OFF_CHAR = "."


class GridEditor:
    """
    Mutable grid being drawn by hand.

    Painting follows a press/drag/release gesture: ``begin_stroke`` toggles
    the pressed cell and remembers whether the stroke draws or erases;
    ``extend_stroke`` applies that same state to every cell it passes over.
    """

    def __init__(
        self,
        cols: int = 16,
        rows: int = DEFAULT_ROWS,
        name: str = DEFAULT_NAME,
        max_rows: int = MAX_ROWS,
    ):
        self.name = name
        self.max_rows = max_rows
        self._rows = 0
        self._cols = 0
        self._grid: list[list[bool]] = []
        self._stroke_value: bool | None = None
        self.resize(rows, cols)

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def grid(self) -> Matrix:
        """Snapshot of the current cells."""
        return tuple(tuple(row) for row in self._grid)

    def resize(self, rows: int, cols: int) -> None:
        """Set grid dimensions, discarding all drawn cells.

        Rows are clamped to [1, max_rows] and columns to at least 8; whether
        the column count is a multiple of 8 is only checked on save.
        """
        self._rows = max(1, min(rows, self.max_rows))
        self._cols = max(VALVE_MULTIPLE, cols)
        self.clear()

    def clear(self) -> None:
        """Turn every cell off."""
        self._grid = [[False] * self._cols for _ in range(self._rows)]
        self._stroke_value = None

    def _check_cell(self, row: int, col: int) -> None:
        if not (0 <= row < self._rows and 0 <= col < self._cols):
            raise IndexError(f"Cell ({row}, {col}) outside {self._rows}x{self._cols} grid")

    def toggle(self, row: int, col: int) -> bool:
        """Flip one cell and return its new state."""
        self._check_cell(row, col)
        self._grid[row][col] = not self._grid[row][col]
        return self._grid[row][col]

    def set_cell(self, row: int, col: int, value: bool) -> None:
        self._check_cell(row, col)
        self._grid[row][col] = value

    def begin_stroke(self, row: int, col: int) -> None:
        """Press on a cell: toggle it and draw (or erase) with its new state."""
        self._stroke_value = self.toggle(row, col)

    def extend_stroke(self, row: int, col: int) -> None:
        """Drag over a cell; no effect outside a stroke."""
        if self._stroke_value is None:
            return
        self.set_cell(row, col, self._stroke_value)

    def end_stroke(self) -> None:
        self._stroke_value = None

    def paint(self, cells: Iterable[tuple[int, int]]) -> None:
        """Apply a complete stroke: press on the first cell, drag over the rest."""
        iterator = iter(cells)
        first = next(iterator, None)
        if first is None:
            return
        self.begin_stroke(*first)
        for row, col in iterator:
            self.extend_stroke(row, col)
        self.end_stroke()

    def load(self, matrix: Sequence[Sequence[bool]]) -> None:
        """Replace the grid with existing cells (dimensions follow the matrix)."""
        rows = [list(map(bool, row)) for row in matrix]
        if not rows or not rows[0]:
            raise PatternValidationError("pattern has no rows")
        if any(len(row) != len(rows[0]) for row in rows):
            raise PatternValidationError("rows have different lengths")
        if len(rows) > self.max_rows:
            raise PatternValidationError(f"more than {self.max_rows} rows")
        self._rows = len(rows)
        self._cols = len(rows[0])
        self._grid = rows
        self._stroke_value = None

    def to_draft(self) -> PatternDraft:
        """
        Validate and freeze the grid into a draft.

        Raises:
            RasterizationError: Missing name, or columns not a multiple of 8
        """
        name = self.name.strip()
        if not name:
            raise RasterizationError("Pattern name is required.", source="manual")
        if self._cols < VALVE_MULTIPLE or self._cols % VALVE_MULTIPLE != 0:
            raise RasterizationError(
                "Columns (valves) must be at least 8 and a multiple of 8.", source="manual"
            )

        return PatternDraft(
            name=name,
            matrix=self.grid,
            source=PatternSource.MANUAL,
            origin=f"{self._rows}x{self._cols} grid",
        )


def parse_grid_text(text: str) -> Matrix:
    """
    Parse the text grid format into a matrix.

    Blank lines and surrounding whitespace are ignored.

    Raises:
        RasterizationError: Unknown characters, ragged rows, or a width that
            is not a positive multiple of 8
    """
    rows: list[tuple[bool, ...]] = []
    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue
        bad = set(line) - {ON_CHAR, OFF_CHAR}
        if bad:
            raise RasterizationError(
                f"Line {line_no}: unexpected characters {''.join(sorted(bad))!r} "
                f"(use '{ON_CHAR}' for on and '{OFF_CHAR}' for off).",
                source="manual",
            )
        rows.append(tuple(ch == ON_CHAR for ch in line))

    if not rows:
        raise RasterizationError("Grid is empty.", source="manual")
    try:
        return check_matrix(rows)
    except PatternValidationError as e:
        raise RasterizationError(e.user_message, source="manual") from e


def render_grid_text(matrix: Matrix, on: str = ON_CHAR, off: str = OFF_CHAR) -> str:
    """Render a matrix in the text grid format, one line per row."""
    return "\n".join("".join(on if cell else off for cell in row) for row in matrix)

"""Pattern models: a named boolean time x valve matrix."""

import uuid
from collections.abc import Iterable, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from watercurtain.exceptions import PatternValidationError

from .enums import PatternSource

# One row per time step, one column per valve. Row 0 is the top of the
# rendered surface and the first row stored.
Matrix = tuple[tuple[bool, ...], ...]

VALVE_MULTIPLE = 8


def check_matrix(rows: Sequence[Sequence[Any]]) -> Matrix:
    """
    Validate grid invariants and return the matrix as nested tuples of bool.

    Args:
        rows: Row-major grid of truthy/falsy cells

    Returns:
        Immutable matrix

    Raises:
        PatternValidationError: If the grid is empty, ragged, or its width is
            not a positive multiple of 8
    """
    matrix = tuple(tuple(bool(cell) for cell in row) for row in rows)
    if not matrix:
        raise PatternValidationError("pattern has no rows")

    width = len(matrix[0])
    for index, row in enumerate(matrix):
        if len(row) != width:
            raise PatternValidationError(
                f"row {index} has {len(row)} columns, expected {width}"
            )

    if width < VALVE_MULTIPLE or width % VALVE_MULTIPLE != 0:
        raise PatternValidationError(
            f"{width} valves is not a positive multiple of {VALVE_MULTIPLE}"
        )

    return matrix


def concat_matrices(matrices: Iterable[Matrix]) -> Matrix:
    """Row-wise concatenation of matrices, in the given order."""
    return tuple(row for matrix in matrices for row in matrix)


def new_pattern_id() -> str:
    """Generate an opaque unique pattern identifier."""
    return uuid.uuid4().hex


class PatternDraft(BaseModel):
    """A generated pattern that has not been inserted into a store yet.

    Field aliases match the device's stored representation
    (``patternData``, ``promptOrFile``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1, description="Display name")
    matrix: Matrix = Field(alias="patternData", description="Rows of valve states")
    source: PatternSource = Field(description="Input kind the matrix was generated from")
    origin: str | None = Field(
        default=None, alias="promptOrFile", description="Original prompt or filename"
    )

    @field_validator("matrix")
    @classmethod
    def validate_matrix(cls, v: Matrix) -> Matrix:
        """Enforce equal row widths and a valve count that is a multiple of 8."""
        try:
            return check_matrix(v)
        except PatternValidationError as e:
            raise ValueError(e.reason) from e

    @property
    def valve_count(self) -> int:
        """Number of valves (columns)."""
        return len(self.matrix[0])

    @property
    def row_count(self) -> int:
        """Number of time steps (rows)."""
        return len(self.matrix)

    def to_wire(self) -> dict[str, Any]:
        """Serialize using the device's field names."""
        return self.model_dump(mode="json", by_alias=True)


class Pattern(PatternDraft):
    """A pattern held by the store, with a stable identity."""

    id: str = Field(min_length=1, description="Opaque unique identifier")

    @classmethod
    def from_draft(cls, draft: PatternDraft, pattern_id: str | None = None) -> "Pattern":
        """Attach an identifier to a draft (fresh uuid when none is given)."""
        return cls(
            id=pattern_id or new_pattern_id(),
            name=draft.name,
            matrix=draft.matrix,
            source=draft.source,
            origin=draft.origin,
        )

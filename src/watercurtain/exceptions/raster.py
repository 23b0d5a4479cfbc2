"""Pattern generation exceptions.

- RasterizationError: An input could not be turned into a pattern matrix
- PatternValidationError: A matrix or pattern breaks the grid invariants
"""

from .base import WaterCurtainError


class RasterizationError(WaterCurtainError):
    """Input could not be rasterized into a valve matrix."""

    def __init__(self, reason: str, source: str | None = None, original_error: str | None = None):
        """
        Initialize rasterization error.

        Args:
            reason: Human-readable reason the input was rejected
            source: Input kind that failed ("text", "image", "vector", "manual")
            original_error: Low-level error message from the decoding library
        """
        tech_msg = reason if source is None else f"[{source}] {reason}"
        if original_error:
            tech_msg += f"\nOriginal error: {original_error}"

        super().__init__(
            user_message=reason,
            technical_message=tech_msg,
            recoverable=True,
            recovery_hint="Check the input and try generating the pattern again.",
        )
        self.reason = reason
        self.source = source


class PatternValidationError(WaterCurtainError):
    """A pattern matrix violates the grid invariants."""

    def __init__(self, reason: str):
        super().__init__(
            user_message=f"Invalid pattern: {reason}",
            recoverable=True,
            recovery_hint="Columns (valves) must be at least 8 and a multiple of 8, "
            "and every row must have the same number of columns.",
        )
        self.reason = reason

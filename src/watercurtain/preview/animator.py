"""Playback preview of patterns and sequences."""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator

from watercurtain.models.pattern import Matrix

logger = logging.getLogger(__name__)


def playback_order(matrix: Matrix) -> Matrix:
    """
    Rows in the order the curtain releases them.

    The stored matrix has the top of the picture first; the curtain drops
    the bottom row first so the picture lands upright as the water falls.
    """
    return tuple(reversed(matrix))


class SequenceAnimator:
    """
    Steps through a matrix in playback order at a fixed tick.

    Example:
        ```python
        animator = SequenceAnimator(store.sequence(), interval_ms=config.speed)
        async for index, row in animator.frames():
            print(render_grid_text((row,)))
        ```
    """

    def __init__(
        self,
        matrix: Matrix,
        interval_ms: int = 100,
        loop: bool = False,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        self._rows = playback_order(matrix)
        self.interval_ms = interval_ms
        self.loop = loop
        self._sleep = sleep

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[tuple[bool, ...]]:
        """One pass over the rows in playback order (no timing)."""
        return iter(self._rows)

    async def frames(self, max_frames: int | None = None) -> AsyncIterator[tuple[int, tuple[bool, ...]]]:
        """
        Yield (frame number, row) pairs, sleeping one tick between frames.

        Args:
            max_frames: Stop after this many frames (required to end a looping run)
        """
        if not self._rows:
            return

        count = 0
        while True:
            for row in self._rows:
                if max_frames is not None and count >= max_frames:
                    return
                yield count, row
                count += 1
                await self._sleep(self.interval_ms / 1000)
            if not self.loop:
                return

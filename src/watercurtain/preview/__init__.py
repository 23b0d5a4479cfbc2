"""Terminal preview of valve matrices."""

from .animator import SequenceAnimator, playback_order

__all__ = ["SequenceAnimator", "playback_order"]

"""Sequence upload exceptions."""

from .base import WaterCurtainError


class UploadError(WaterCurtainError):
    """Sequence upload could not be performed."""
    pass


class EmptySequenceError(UploadError):
    """Upload was requested with no patterns in the store."""

    def __init__(self):
        super().__init__(
            user_message="Empty sequence: generate some patterns before uploading.",
            recoverable=True,
        )


class InvalidValveCountError(UploadError):
    """Patterns in the sequence do not describe a usable valve count."""

    def __init__(self, valve_count: int, reason: str | None = None):
        user_msg = reason or "Cannot upload a pattern with zero valves."
        super().__init__(
            user_message=user_msg,
            technical_message=f"Invalid valve count {valve_count}: {user_msg}",
            recoverable=True,
            recovery_hint="All patterns in one upload must share the same number of valves.",
        )
        self.valve_count = valve_count


class UploadInProgressError(UploadError):
    """A second upload was started while one is still running."""

    def __init__(self):
        super().__init__(
            user_message="An upload is already in progress.",
            recoverable=True,
            recovery_hint="Wait for the current upload to finish.",
        )

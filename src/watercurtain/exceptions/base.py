"""Root of the Water Curtain exception tree."""

from typing import Optional


class WaterCurtainError(Exception):
    """
    Failure that can be shown to a user.

    ``str(error)`` is the short user-facing text. ``technical_message``
    goes to the log, and ``recovery_hint`` (when set) is appended by
    ``get_full_message()`` for notifications and CLI output.
    ``recoverable`` marks failures the user can fix and retry, such as
    bad input or an unreachable device.
    """

    def __init__(
        self,
        user_message: str,
        technical_message: Optional[str] = None,
        recoverable: bool = False,
        recovery_hint: Optional[str] = None,
    ):
        super().__init__(user_message)
        self.user_message = user_message
        self.technical_message = technical_message or user_message
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint

    def __str__(self) -> str:
        return self.user_message

    def get_full_message(self) -> str:
        """User message followed by the recovery hint, if any."""
        if not self.recovery_hint:
            return self.user_message
        return f"{self.user_message}\n\nSuggestion: {self.recovery_hint}"

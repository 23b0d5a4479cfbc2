"""Device communication exceptions.

This module defines exceptions raised around the device link:
- DeviceError: Base class for device communication errors
- NotConnectedError: A command was attempted with no live link
- ConnectionFailedError: The handshake failed or the link dropped
- DiscoveryExhaustedError: No discovery candidate answered
"""

from .base import WaterCurtainError


class DeviceError(WaterCurtainError):
    """Device communication failed."""

    def __init__(self, user_message: str, address: str | None = None, **kwargs):
        """
        Initialize device error.

        Args:
            user_message: User-friendly error message
            address: Device address involved (if applicable)
        """
        super().__init__(user_message, **kwargs)
        self.address = address


class NotConnectedError(DeviceError):
    """A command was attempted while no device is connected."""

    def __init__(self, action: str | None = None):
        user_msg = "Not connected. Connect to the hardware first."
        tech_msg = user_msg if action is None else f"Cannot send '{action}': link is not connected"
        super().__init__(
            user_message=user_msg,
            technical_message=tech_msg,
            recoverable=True,
            recovery_hint="Run 'watercurtain discover' or pass --address to reach the device.",
        )
        self.action = action


class ConnectionFailedError(DeviceError):
    """The connection handshake failed or the link closed abruptly."""

    def __init__(self, address: str, original_error: str | None = None):
        user_msg = f"Could not connect to {address}. Check IP and network."
        tech_msg = f"Connection to {address} failed"
        if original_error:
            tech_msg += f": {original_error}"

        super().__init__(
            user_message=user_msg,
            technical_message=tech_msg,
            address=address,
            recoverable=True,
            recovery_hint=(
                "Make sure the device is powered and on the same network. "
                "If it was just reset, join its setup access point and use 192.168.4.1."
            ),
        )


class DiscoveryExhaustedError(DeviceError):
    """No candidate address responded during discovery."""

    def __init__(self, candidates: list[str]):
        super().__init__(
            user_message="Could not automatically detect the device.",
            technical_message=f"No response from {len(candidates)} candidates: {', '.join(candidates)}",
            recoverable=True,
            recovery_hint="Please enter the IP address manually (--address).",
        )
        self.candidates = list(candidates)

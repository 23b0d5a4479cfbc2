"""Enumerations for the water curtain controller."""

from enum import Enum


class PatternSource(str, Enum):
    """Where a pattern's matrix came from."""

    TEXT = "text"
    IMAGE = "image"
    VECTOR = "svg"  # Spelled "svg" on the wire, as stored by the device
    MANUAL = "manual"


class ConnectionState(str, Enum):
    """Lifecycle states of the device link."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSING = "closing"

"""Domain events for observer pattern.

This module defines events that can occur within the controller:
- Link events: Device connection lifecycle and decoded inbound messages
- Store events: Pattern store mutations
- Notification levels: Severity of operator-facing notifications
"""

from enum import Enum


class LinkEvent(Enum):
    """Events from the device link."""

    CONNECTED = "connected"                  # Handshake completed, link is live
    DISCONNECTED = "disconnected"            # Link closed (local, remote or error)
    CONNECTION_FAILED = "connection_failed"  # Handshake failed or timed out
    IP_REPORTED = "ip_reported"              # Device reported its network address
    PATTERNS = "patterns"                    # Device sent its stored pattern list
    PATTERN_SAVED = "pattern_saved"          # Device acknowledged a save_pattern


class StoreEvent(Enum):
    """
    Events from the pattern store.

    The store lives for the session only; these events describe
    in-memory changes, never disk writes.
    """

    ADDED = "added"          # One pattern appended
    REMOVED = "removed"      # One pattern deleted
    REORDERED = "reordered"  # One pattern moved
    HYDRATED = "hydrated"    # Contents replaced wholesale (device list)


class NotificationLevel(Enum):
    """Severity of a notification shown to the operator."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"

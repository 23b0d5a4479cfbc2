"""Observer protocol definitions for domain-specific events.

This module contains observer protocols for the domain:
- Link observers: React to device connection changes and inbound messages
- Store observers: React to pattern store mutations
- Notification observers: Present operator-facing messages
"""

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from watercurtain.models import Pattern

from .events import LinkEvent, NotificationLevel, StoreEvent


@runtime_checkable
class LinkObserver(Protocol):
    """
    Observer that receives device link events.

    This protocol allows loose coupling between the device link and the
    components that react to it (orchestrator, CLI status output).
    """

    def on_link_event(self, event: "LinkEvent", **data: Any) -> None:
        """
        Handle device link events.

        Args:
            event: The type of link event
            **data: Event-specific data:
                - CONNECTED / DISCONNECTED / CONNECTION_FAILED: 'address'
                - CONNECTION_FAILED: 'error' (the ConnectionFailedError)
                - IP_REPORTED: 'ip'
                - PATTERNS: 'patterns' (raw list of device entries)
                - PATTERN_SAVED: 'name'

        Note:
            Called from the link's reader task on the event loop, so
            implementations must not block.
        """
        ...


@runtime_checkable
class StoreObserver(Protocol):
    """Observer that receives pattern store events."""

    def on_store_event(self, event: "StoreEvent", patterns: list["Pattern"]) -> None:
        """
        Handle pattern store events.

        Args:
            event: The type of store event
            patterns: Affected patterns (all patterns for HYDRATED)
        """
        ...


@runtime_checkable
class NotificationObserver(Protocol):
    """Observer that presents notifications to the operator."""

    def on_notification(self, level: "NotificationLevel", title: str, message: str) -> None:
        ...

"""Protocol definitions for domain-specific observer patterns and interfaces.

This package contains protocols and events specific to the water curtain domain:
- Events: Link, store and notification events
- Observers: Protocols for components that react to these events

For generic model management protocols (ModelEvent, ModelObserver),
see watercurtain.model_manager.protocols.
"""

from .events import LinkEvent, NotificationLevel, StoreEvent
from .observers import LinkObserver, NotificationObserver, StoreObserver

__all__ = [
    # Events
    "LinkEvent",
    "NotificationLevel",
    "StoreEvent",
    # Observers
    "LinkObserver",
    "NotificationObserver",
    "StoreObserver",
]

"""Application orchestration layer.

The orchestrator owns the session, store, link, discovery and upload
services, and turns every operator action into notifications.
"""

from .orchestrator import Orchestrator

__all__ = ["Orchestrator"]

"""Generic model management framework for Pydantic models.

- ModelManagerService: stateful get/set/save service for any Pydantic model
- PydanticPersistence: loading/saving Pydantic models to JSON
- ObserverManager: generic observer list used across the package
- ModelEvent / ModelObserver: model lifecycle notifications
"""

from watercurtain.model_manager.observer import ObserverManager
from watercurtain.model_manager.persistence import PydanticPersistence
from watercurtain.model_manager.protocols import ModelEvent, ModelObserver
from watercurtain.model_manager.service import ModelManagerService

__all__ = [
    "ModelEvent",
    "ModelManagerService",
    "ModelObserver",
    "ObserverManager",
    "PydanticPersistence",
]

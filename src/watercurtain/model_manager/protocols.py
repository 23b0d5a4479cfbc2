"""Events emitted by ModelManagerService and the observer that receives them."""

from enum import Enum
from typing import Protocol, runtime_checkable


class ModelEvent(Enum):
    """What happened to the managed model."""

    MODEL_LOADED = "model_loaded"
    MODEL_SAVED = "model_saved"
    MODEL_UPDATED = "model_updated"
    MODEL_RESET = "model_reset"


@runtime_checkable
class ModelObserver(Protocol):
    """Anything with an ``on_model_event`` method."""

    def on_model_event(self, event: "ModelEvent", **kwargs) -> None:
        """
        Keyword arguments by event:

        - MODEL_UPDATED: ``keys`` (changed field names), ``values`` (new values)
        - MODEL_LOADED, MODEL_SAVED: ``path``
        - MODEL_RESET: ``model`` (the new default)

        An exception raised here is logged and does not reach the caller
        that changed the model.
        """
        ...

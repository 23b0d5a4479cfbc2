"""Validated, observable holder for a Pydantic model (the application config)."""

import logging
from pathlib import Path
from threading import Lock
from typing import Any

from pydantic import BaseModel, ValidationError

from watercurtain.exceptions import ConfigurationError
from watercurtain.model_manager.observer import ObserverManager
from watercurtain.model_manager.persistence import PydanticPersistence
from watercurtain.model_manager.protocols import ModelEvent, ModelObserver

logger = logging.getLogger(__name__)


class ModelManagerService[ModelType: BaseModel]:
    """
    Owns one model instance and replaces it on every change.

    Pydantic does not validate attribute assignment on our models, so
    changes are applied by dumping the current model, merging the new
    values and validating the result. A rejected change leaves the old
    model in place and emits nothing.

    The orchestrator keeps ``AppConfig`` here so a device address report
    or a speed/color change is reflected in the config (and, with
    ``auto_save``, on disk); the ``config`` CLI commands use it directly.

    Example:
        ```python
        service = ModelManagerService[AppConfig](AppConfig, config, default_path=path)
        service.set("device_address", "192.168.1.101")
        service.save()
        ```
    """

    def __init__(
        self,
        model_type: type[ModelType],
        initial_model: ModelType,
        default_path: Path | None = None,
        auto_save: bool = False,
    ):
        """
        Args:
            model_type: Model class, used to validate and to build defaults
            initial_model: Starting value
            default_path: File used by load()/save() when no path is given
            auto_save: Write to default_path after every successful change
        """
        self._model_type = model_type
        self._model = initial_model
        self._default_path = default_path
        self._auto_save = auto_save and default_path is not None
        self._lock = Lock()
        self._observers = ObserverManager[ModelObserver](observer_type_name="model")

    def register_observer(self, observer: ModelObserver) -> None:
        self._observers.register(observer)

    def unregister_observer(self, observer: ModelObserver) -> None:
        self._observers.unregister(observer)

    # =================================================================
    # Reads
    # =================================================================

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return getattr(self._model, key, default)

    def get_all(self) -> dict[str, Any]:
        """All fields, JSON-ready (paths as strings)."""
        with self._lock:
            return self._model.model_dump(mode="json")

    def get_model(self) -> ModelType:
        """Independent copy of the current model."""
        with self._lock:
            return self._model.model_copy(deep=True)

    # =================================================================
    # Changes
    # =================================================================

    def set(self, key: str, value: Any) -> None:
        """
        Change one field.

        Raises:
            AttributeError: Unknown field
            ValidationError: Value rejected by the model
        """
        self.update({key: value})

    def update(self, values: dict[str, Any]) -> None:
        """Change several fields at once; either all apply or none do."""
        unknown = [key for key in values if key not in self._model_type.model_fields]
        if unknown:
            raise AttributeError(f"{self._model_type.__name__} has no field(s) {', '.join(unknown)}")

        with self._lock:
            merged = {**self._model.model_dump(), **values}
            try:
                self._model = self._model_type.model_validate(merged)
            except ValidationError as e:
                logger.warning(f"Rejected {self._model_type.__name__} change {values}: {e.error_count()} error(s)")
                raise

        logger.debug(f"{self._model_type.__name__} updated: {values}")
        self._observers.notify("on_model_event", ModelEvent.MODEL_UPDATED, keys=list(values), values=values)
        self._save_if_enabled()

    def reset(self) -> None:
        """Replace the model with a default instance."""
        with self._lock:
            self._model = self._model_type()

        logger.info(f"{self._model_type.__name__} reset to defaults")
        self._observers.notify("on_model_event", ModelEvent.MODEL_RESET, model=self.get_model())
        self._save_if_enabled()

    # =================================================================
    # Files
    # =================================================================

    def _resolve(self, path: Path | None) -> Path:
        resolved = path or self._default_path
        if resolved is None:
            raise ValueError("No path given and no default_path configured")
        return Path(resolved)

    def load(self, path: Path | None = None) -> None:
        """
        Replace the model with the contents of a file.

        Raises:
            ValueError: No path available
            FileNotFoundError: File missing
            ConfigurationError: File unreadable or invalid
        """
        file_path = self._resolve(path)
        loaded = PydanticPersistence.load_json(file_path, self._model_type)
        with self._lock:
            self._model = loaded

        logger.info(f"Loaded {self._model_type.__name__} from {file_path}")
        self._observers.notify("on_model_event", ModelEvent.MODEL_LOADED, path=file_path)

    def save(self, path: Path | None = None) -> None:
        """Write the model to a file (atomic, with backup)."""
        file_path = self._resolve(path)
        PydanticPersistence.save_json(self.get_model(), file_path)

        logger.info(f"Saved {self._model_type.__name__} to {file_path}")
        self._observers.notify("on_model_event", ModelEvent.MODEL_SAVED, path=file_path)

    def _save_if_enabled(self) -> None:
        if not self._auto_save:
            return
        try:
            self.save()
        except (OSError, ConfigurationError) as e:
            # The in-memory change stands; the file keeps its previous content
            logger.error(f"Auto-save to {self._default_path} failed: {e}")

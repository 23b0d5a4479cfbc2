"""JSON files for Pydantic models.

Only the application config goes through here. Patterns are never stored
locally; they live in the session store and in the device's memory.

Writes go to ``<name>.tmp`` first and are renamed into place, and the
previous file is copied to ``<name>.bak``. A file that exists but cannot
be parsed is never overwritten by a default.
"""

import logging
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from watercurtain.exceptions import (
    ConfigFileInvalidError,
    ConfigurationError,
    wrap_pydantic_error,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _sibling(path: Path, suffix: str) -> Path:
    return path.with_suffix(path.suffix + suffix)


class PydanticPersistence:
    """
    Static load/save helpers.

    Example Usage:
        ```python
        config = PydanticPersistence.ensure_valid_or_create(path, AppConfig)
        PydanticPersistence.save_json(config.model_copy(update={"speed": 200}), path)
        ```
    """

    @staticmethod
    def load_json(path: Path, model_type: type[M]) -> M:
        """
        Read ``path`` and validate it as ``model_type``.

        Raises:
            FileNotFoundError: Nothing at ``path``
            ConfigFileInvalidError: Empty, unreadable or malformed JSON
            ConfigValidationError: Well-formed JSON with bad values
        """
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigFileInvalidError(str(path), f"Cannot read file: {e}") from e

        if not text.strip():
            raise ConfigFileInvalidError(str(path), "File is empty")

        try:
            model = model_type.model_validate_json(text)
        except ValidationError as e:
            logger.error(f"{path} is not a valid {model_type.__name__}: {e.error_count()} error(s)")
            raise wrap_pydantic_error(e, str(path)) from e

        logger.debug(f"Read {model_type.__name__} from {path}")
        return model

    @staticmethod
    def save_json(
        data: BaseModel,
        path: Path,
        indent: int = 2,
        create_parents: bool = True,
        backup: bool = True,
    ) -> None:
        """
        Write ``data`` to ``path`` as indented JSON.

        Args:
            data: Model to write
            path: Destination file
            indent: JSON indentation
            create_parents: Create missing parent directories
            backup: Copy an existing file to ``<path>.bak`` first

        Raises:
            OSError: The file system refused the write
            ConfigurationError: The model could not be serialized
        """
        name = type(data).__name__
        try:
            content = data.model_dump_json(indent=indent)
        except ValueError as e:
            raise ConfigurationError(
                user_message=f"Failed to save configuration to {path}",
                technical_message=f"Cannot serialize {name}: {e}",
                recovery_hint="Reset the configuration with 'watercurtain config reset'.",
            ) from e

        if create_parents:
            path.parent.mkdir(parents=True, exist_ok=True)

        if backup and path.exists():
            shutil.copy2(path, _sibling(path, ".bak"))

        staging = _sibling(path, ".tmp")
        try:
            staging.write_text(content, encoding="utf-8")
            staging.replace(path)
        except OSError as e:
            logger.error(f"Could not write {name} to {path}: {e}")
            raise
        finally:
            staging.unlink(missing_ok=True)

        logger.debug(f"Wrote {name} to {path}")

    @staticmethod
    def ensure_valid_or_create(
        path: Path,
        model_type: type[M],
        default_factory: Callable[[], M] | None = None,
        auto_save: bool = True,
    ) -> M:
        """
        Load ``path``, falling back to a default model.

        A missing file gets the default written to it (unless ``auto_save``
        is off). A broken file is logged and left untouched so the user can
        repair it; the default is used for this run only.
        """
        make_default = default_factory or model_type

        try:
            return PydanticPersistence.load_json(path, model_type)
        except FileNotFoundError:
            instance = make_default()
            if auto_save:
                PydanticPersistence.save_json(instance, path, backup=False)
                logger.info(f"Created {path} with default {model_type.__name__}")
            return instance
        except ConfigurationError as e:
            logger.error(f"Ignoring {path}: {e.user_message}")
            logger.warning(f"Running with default {model_type.__name__}; {path} was left as is")
            return make_default()

"""
Helpers for turning failures into log lines and user notifications.

Each user operation (generate, connect, upload, a playback command) is
guarded at its own boundary. A failure there is logged once, shown to the
user once, and the operation returns a fallback; nothing is retried.

- ``handle_errors``: decorator for sync or async callables
- ``ErrorContext``: the same for a ``with`` block
- ``collect_errors``: keep going through a batch and summarize failures
- ``wrap_pydantic_error`` / ``wrap_connection_error``: convert library
  exceptions into this package's hierarchy
"""

import asyncio
import inspect
import logging
from functools import wraps
from typing import Callable, Optional, TypeVar

from pydantic import ValidationError

from .base import WaterCurtainError
from .config import ConfigFileInvalidError, ConfigValidationError
from .device import ConnectionFailedError

logger = logging.getLogger(__name__)

T = TypeVar('T')


def _describe(error: BaseException) -> str:
    """Log text for an error: the technical message for our own errors."""
    if isinstance(error, WaterCurtainError):
        return error.technical_message
    return str(error)


def handle_errors(
    *,
    operation_name: str,
    user_notification: Optional[Callable[[str], None]] = None,
    fallback_value: Optional[T] = None,
    re_raise: bool = True,
    log_level: int = logging.ERROR
) -> Callable:
    """
    Guard a function (or coroutine function) at an operation boundary.

    Our own errors are logged by their technical message and shown by their
    full message (with recovery hint). Anything else is logged with a
    traceback and shown as ``"Error: <text>"``. Cancellation of a coroutine
    always propagates.

    Args:
        operation_name: Used in log lines, e.g. "upload sequence"
        user_notification: Receives the text to show the user
        fallback_value: Returned instead of raising when re_raise is False
        re_raise: Propagate the exception after reporting it
        log_level: Level of the log line
    """
    def report(error: Exception) -> None:
        if isinstance(error, WaterCurtainError):
            logger.log(log_level, f"Failed to {operation_name}: {error.technical_message}")
            shown = error.get_full_message()
        else:
            logger.log(log_level, f"Unexpected error during {operation_name}: {error}", exc_info=True)
            shown = f"Error: {error}"
        if user_notification:
            user_notification(shown)

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def guarded_async(*args, **kwargs):
                try:
                    return await func(*args, **kwargs)
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    report(e)
                    if re_raise:
                        raise
                    return fallback_value

            return guarded_async

        @wraps(func)
        def guarded(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                report(e)
                if re_raise:
                    raise
                return fallback_value

        return guarded
    return decorator


class ErrorContext:
    """
    ``with`` block that logs how an operation ended.

    With ``re_raise=False`` the exception is kept on ``.error`` instead of
    propagating:

        ```python
        with ErrorContext("save discovered address", re_raise=False) as saving:
            service.save()
        if saving.error:
            ...
        ```
    """

    def __init__(
        self,
        operation: str,
        logger_instance: Optional[logging.Logger] = None,
        re_raise: bool = True
    ):
        self.operation = operation
        self.logger = logger_instance or logger
        self.re_raise = re_raise
        self.error: Optional[Exception] = None

    def __enter__(self):
        self.logger.debug(f"{self.operation}: started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.logger.debug(f"{self.operation}: done")
            return False
        if not issubclass(exc_type, Exception):
            return False

        self.error = exc_val
        self.logger.error(
            f"Failed to {self.operation}: {_describe(exc_val)}",
            exc_info=not isinstance(exc_val, WaterCurtainError),
        )
        return not self.re_raise


def wrap_pydantic_error(error: ValidationError, file_path: str) -> WaterCurtainError:
    """
    Convert a ValidationError raised while reading a config file.

    Malformed JSON becomes ConfigFileInvalidError; bad values become
    ConfigValidationError naming the field (or "multiple fields").
    """
    details = error.errors()

    if any(detail["type"] == "json_invalid" for detail in details):
        detail = next(d for d in details if d["type"] == "json_invalid")
        parse_error = str(detail.get("ctx", {}).get("error", detail["msg"]))
        return ConfigFileInvalidError(file_path, parse_error)

    def location(detail: dict) -> str:
        return ".".join(str(part) for part in detail.get("loc", ())) or "unknown"

    if len(details) == 1:
        only = details[0]
        return ConfigValidationError(
            field=location(only),
            value=only.get("input"),
            error_msg=only.get("msg", "validation failed"),
            file_path=file_path,
        )

    listing = "\n".join(f"  - {location(d)}: {d.get('msg', 'validation failed')}" for d in details)
    return ConfigValidationError(
        field="multiple fields",
        value=None,
        error_msg=f"{len(details)} validation errors:\n{listing}",
        file_path=file_path,
    )


def wrap_connection_error(error: Exception, address: str) -> WaterCurtainError:
    """Convert a websockets/asyncio/OS error from dialing ``address``."""
    if isinstance(error, WaterCurtainError):
        return error
    if isinstance(error, TimeoutError):
        return ConnectionFailedError(address, original_error="handshake timed out")
    return ConnectionFailedError(address, original_error=f"{type(error).__name__}: {error}")


def format_error_for_display(error: Exception) -> tuple[str, Optional[str]]:
    """(message, recovery hint or None) for printing an error in the CLI."""
    if isinstance(error, WaterCurtainError):
        return error.user_message, error.recovery_hint
    return f"{type(error).__name__}: {error}", None


def collect_errors(operation: str) -> "ErrorCollector":
    """
    Start collecting failures for a batch.

    Example:
        ```python
        collector = collect_errors("hydrate patterns")
        for entry in entries:
            with collector.try_operation(f"load pattern {entry['name']}"):
                patterns.append(Pattern.model_validate(entry))
        if collector.has_errors:
            logger.warning(collector.get_summary())
        ```
    """
    return ErrorCollector(operation)


class ErrorCollector:
    """Counts successes and records failures of the steps in a batch."""

    def __init__(self, operation: str):
        self.operation = operation
        self.errors: list[tuple[str, Exception]] = []
        self.success_count = 0

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def try_operation(self, sub_operation: str) -> "_Step":
        """Context manager for one step; an Exception inside it is recorded, not raised."""
        return _Step(self, sub_operation)

    def get_summary(self) -> str:
        total = self.error_count + self.success_count
        if not self.errors:
            return f"All operations completed successfully ({total} total)"

        lines = [f"Failed {self.error_count} of {total} operations:"]
        for step, error in self.errors:
            shown = error.user_message if isinstance(error, WaterCurtainError) else str(error)
            lines.append(f"  - {step}: {shown}")
        return "\n".join(lines)


class _Step:
    def __init__(self, collector: ErrorCollector, name: str):
        self.collector = collector
        self.name = name

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.collector.success_count += 1
            return False
        if not issubclass(exc_type, Exception):
            return False

        self.collector.errors.append((self.name, exc_val))
        logger.debug(f"{self.collector.operation}: {self.name} failed: {_describe(exc_val)}")
        return True

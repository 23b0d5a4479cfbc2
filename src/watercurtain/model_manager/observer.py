"""Observer list shared by the store, the device link, the config service and the orchestrator."""

import logging
from threading import Lock
from typing import Any

logger = logging.getLogger(__name__)


class ObserverManager[T: object]:
    """
    Ordered set of observers for one kind of event.

    Callbacks are looked up by name at notify time, so one manager type
    serves every observer protocol (``on_link_event``, ``on_store_event``,
    ``on_notification``, ``on_model_event``). A failing observer is logged
    and skipped; the others still hear about the event.

    The link fires events from its reader task, so callbacks run on the
    event loop and must return quickly.
    """

    def __init__(self, observer_type_name: str = "observer"):
        """
        Args:
            observer_type_name: Label used in log lines ("link", "store", ...)
        """
        self._lock = Lock()
        self._observers: list[T] = []
        self._name = observer_type_name

    def register(self, observer: T) -> None:
        """Add an observer; registering the same object twice is a no-op."""
        with self._lock:
            if observer in self._observers:
                return
            self._observers.append(observer)
        logger.debug(f"{self._name} observer added: {observer!r}")

    def unregister(self, observer: T) -> None:
        with self._lock:
            try:
                self._observers.remove(observer)
            except ValueError:
                logger.warning(f"{self._name} observer was not registered: {observer!r}")
                return
        logger.debug(f"{self._name} observer removed: {observer!r}")

    def notify(self, callback_name: str, *args: Any, **kwargs: Any) -> None:
        """
        Call ``callback_name`` on every observer, in registration order.

        Observers may (un)register from inside a callback; the call goes to
        the observers registered when notify() started.
        """
        with self._lock:
            snapshot = tuple(self._observers)

        for observer in snapshot:
            callback = getattr(observer, callback_name, None)
            if callback is None:
                logger.error(f"{self._name} observer {observer!r} lacks {callback_name}()")
                continue
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"{self._name} observer {observer!r} failed in {callback_name}: {e}",
                    exc_info=True,
                )

    def clear(self) -> None:
        with self._lock:
            self._observers.clear()

    def __contains__(self, observer: object) -> bool:
        with self._lock:
            return observer in self._observers

    def __len__(self) -> int:
        with self._lock:
            return len(self._observers)

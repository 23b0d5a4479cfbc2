"""Ordered, in-memory collection of the session's patterns."""

import logging
from collections.abc import Iterable, Iterator
from threading import Lock
from typing import Any

from watercurtain.exceptions import (
    EmptySequenceError,
    InvalidValveCountError,
    collect_errors,
)
from watercurtain.model_manager import ObserverManager
from watercurtain.models import Pattern, PatternDraft
from watercurtain.models.pattern import Matrix, concat_matrices, new_pattern_id
from watercurtain.protocols import StoreEvent, StoreObserver

logger = logging.getLogger(__name__)


class PatternStore:
    """
    Ordered list of patterns with stable identity.

    Ids are assigned on insertion and never change. Store order is upload
    order: ``sequence()`` concatenates the matrices front to back.

    Event-Driven Architecture:
        Every mutation emits a StoreEvent to registered StoreObservers
        with the affected patterns (post-mutation).
    """

    def __init__(self, patterns: Iterable[Pattern] = ()):
        self._lock = Lock()
        self._patterns: list[Pattern] = list(patterns)
        self._observers = ObserverManager[StoreObserver](observer_type_name="store")

    # =================================================================
    # Event System
    # =================================================================

    def register_observer(self, observer: StoreObserver) -> None:
        self._observers.register(observer)

    def unregister_observer(self, observer: StoreObserver) -> None:
        self._observers.unregister(observer)

    def _notify_observers(self, event: StoreEvent, patterns: list[Pattern]) -> None:
        self._observers.notify("on_store_event", event, patterns)

    # =================================================================
    # Access
    # =================================================================

    @property
    def patterns(self) -> list[Pattern]:
        """Snapshot of the patterns in store order."""
        with self._lock:
            return list(self._patterns)

    def get(self, pattern_id: str) -> Pattern | None:
        with self._lock:
            return next((p for p in self._patterns if p.id == pattern_id), None)

    def _index(self, pattern_id: str) -> int | None:
        for index, pattern in enumerate(self._patterns):
            if pattern.id == pattern_id:
                return index
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._patterns)

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self.patterns)

    # =================================================================
    # Mutation
    # =================================================================

    def add(self, draft: PatternDraft) -> Pattern:
        """Append a draft under a fresh id and return the stored pattern."""
        with self._lock:
            existing = {p.id for p in self._patterns}
            pattern_id = new_pattern_id()
            while pattern_id in existing:
                pattern_id = new_pattern_id()
            pattern = Pattern.from_draft(draft, pattern_id)
            self._patterns.append(pattern)

        logger.info(f"Added pattern '{pattern.name}' ({pattern.row_count}x{pattern.valve_count})")
        self._notify_observers(StoreEvent.ADDED, [pattern])
        return pattern

    def remove(self, pattern_id: str) -> bool:
        """Delete a pattern; False (and no change) when the id is unknown."""
        with self._lock:
            index = self._index(pattern_id)
            if index is None:
                removed = None
            else:
                removed = self._patterns.pop(index)

        if removed is None:
            logger.debug(f"Remove ignored, unknown pattern id {pattern_id}")
            return False

        logger.info(f"Removed pattern '{removed.name}'")
        self._notify_observers(StoreEvent.REMOVED, [removed])
        return True

    def reorder(self, pattern_id: str, before_id: str | None) -> bool:
        """
        Move a pattern so it sits immediately before another one.

        Args:
            pattern_id: Pattern to move
            before_id: Pattern it should precede, or None to move it to the end

        Returns:
            True if the pattern now sits in the requested place; False (no
            change) when either id is unknown or both ids are the same
        """
        if pattern_id == before_id:
            return False

        with self._lock:
            index = self._index(pattern_id)
            if index is None:
                return False
            if before_id is not None and self._index(before_id) is None:
                return False

            moved = self._patterns.pop(index)
            if before_id is None:
                self._patterns.append(moved)
            else:
                self._patterns.insert(self._index(before_id), moved)

        logger.debug(f"Moved pattern '{moved.name}' before {before_id or 'end'}")
        self._notify_observers(StoreEvent.REORDERED, [moved])
        return True

    def clear(self) -> None:
        with self._lock:
            self._patterns.clear()
        self._notify_observers(StoreEvent.HYDRATED, [])

    def hydrate(self, entries: Iterable[Pattern | dict[str, Any]]) -> list[Pattern]:
        """
        Replace the whole store with externally supplied patterns.

        Entries may be Pattern models or dicts in the device's shape
        (``patternData``, ``promptOrFile``). A supplied id is kept (numbers
        become strings) and a missing one is generated; a repeated id keeps
        its first occurrence. Entries that fail validation are skipped and
        logged.

        Returns:
            The patterns now in the store
        """
        collector = collect_errors("hydrate patterns")
        loaded: list[Pattern] = []
        seen: set[str] = set()

        for position, entry in enumerate(entries):
            if isinstance(entry, dict):
                label = entry.get("name", f"#{position}")
            else:
                label = getattr(entry, "name", f"#{position}")
            with collector.try_operation(f"load pattern {label}"):
                if isinstance(entry, Pattern):
                    pattern = entry
                elif isinstance(entry, dict):
                    data = dict(entry)
                    if not data.get("id"):
                        data["id"] = new_pattern_id()
                    elif not isinstance(data["id"], str):
                        data["id"] = str(data["id"])
                    pattern = Pattern.model_validate(data)
                else:
                    raise TypeError(f"Unsupported pattern entry {type(entry).__name__}")

                if pattern.id in seen:
                    logger.warning(f"Duplicate pattern id {pattern.id} ('{pattern.name}'), keeping first")
                    continue
                seen.add(pattern.id)
                loaded.append(pattern)

        if collector.has_errors:
            logger.warning(collector.get_summary())

        with self._lock:
            self._patterns = list(loaded)

        logger.info(f"Store hydrated with {len(loaded)} patterns")
        self._notify_observers(StoreEvent.HYDRATED, list(loaded))
        return loaded

    # =================================================================
    # Sequence
    # =================================================================

    def sequence(self) -> Matrix:
        """
        Concatenate every matrix in store order.

        Raises:
            EmptySequenceError: If the store is empty
            InvalidValveCountError: If the first row has no cells or the
                patterns do not share one valve count
        """
        patterns = self.patterns
        if not patterns:
            raise EmptySequenceError()

        valve_count = len(patterns[0].matrix[0]) if patterns[0].matrix else 0
        if valve_count == 0:
            raise InvalidValveCountError(0)

        for pattern in patterns[1:]:
            if pattern.valve_count != valve_count:
                raise InvalidValveCountError(
                    valve_count,
                    reason=(
                        f"Pattern '{pattern.name}' has {pattern.valve_count} valves, "
                        f"expected {valve_count}."
                    ),
                )

        return concat_matrices(p.matrix for p in patterns)

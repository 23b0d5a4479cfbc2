"""Tests for PatternStore."""

from unittest.mock import Mock

import pytest

from conftest import make_draft
from watercurtain.exceptions import EmptySequenceError, InvalidValveCountError
from watercurtain.models import Pattern, PatternSource
from watercurtain.protocols import StoreEvent
from watercurtain.services import PatternStore


@pytest.fixture
def store():
    return PatternStore()


@pytest.fixture
def filled(store):
    """Store holding patterns a, b, c (in that order)."""
    for name in ("a", "b", "c"):
        store.add(make_draft(name=name))
    return store


def names(store: PatternStore) -> list[str]:
    return [p.name for p in store]


def ids(store: PatternStore) -> dict[str, str]:
    return {p.name: p.id for p in store}


class TestAddRemove:
    """Test insertion and deletion."""

    @pytest.mark.unit
    def test_add_assigns_unique_ids(self, store):
        patterns = [store.add(make_draft(name=str(i))) for i in range(50)]
        assert len({p.id for p in patterns}) == 50
        assert len(store) == 50

    @pytest.mark.unit
    def test_add_appends(self, filled):
        assert names(filled) == ["a", "b", "c"]

    @pytest.mark.unit
    def test_get(self, filled):
        pattern = filled.patterns[1]
        assert filled.get(pattern.id) == pattern
        assert filled.get("missing") is None
        assert pattern.id in filled

    @pytest.mark.unit
    def test_remove(self, filled):
        assert filled.remove(ids(filled)["b"]) is True
        assert names(filled) == ["a", "c"]

    @pytest.mark.unit
    def test_remove_unknown_id_keeps_size(self, filled):
        assert filled.remove("nope") is False
        assert len(filled) == 3

    @pytest.mark.unit
    def test_clear(self, filled):
        filled.clear()
        assert len(filled) == 0


class TestReorder:
    """Test moving patterns."""

    @pytest.mark.unit
    def test_move_before(self, filled):
        by_name = ids(filled)
        assert filled.reorder(by_name["c"], by_name["a"]) is True
        assert names(filled) == ["c", "a", "b"]

    @pytest.mark.unit
    def test_move_forward(self, filled):
        by_name = ids(filled)
        assert filled.reorder(by_name["a"], by_name["c"]) is True
        assert names(filled) == ["b", "a", "c"]

    @pytest.mark.unit
    def test_move_to_end(self, filled):
        assert filled.reorder(ids(filled)["a"], None) is True
        assert names(filled) == ["b", "c", "a"]

    @pytest.mark.unit
    def test_idempotent(self, filled):
        by_name = ids(filled)
        filled.reorder(by_name["c"], by_name["b"])
        first = names(filled)
        filled.reorder(by_name["c"], by_name["b"])
        assert names(filled) == first == ["a", "c", "b"]

    @pytest.mark.unit
    def test_same_id_is_noop(self, filled):
        by_name = ids(filled)
        assert filled.reorder(by_name["b"], by_name["b"]) is False
        assert names(filled) == ["a", "b", "c"]

    @pytest.mark.unit
    @pytest.mark.parametrize("moving,target", [("missing", "a"), ("a", "missing")])
    def test_unknown_ids_are_noop(self, filled, moving, target):
        by_name = ids(filled)
        assert filled.reorder(by_name.get(moving, moving), by_name.get(target, target)) is False
        assert names(filled) == ["a", "b", "c"]


class TestHydrate:
    """Test replacing contents from the device."""

    @pytest.mark.unit
    def test_numeric_ids_kept_as_strings(self, store):
        loaded = store.hydrate(
            [
                {"id": 7, "name": "seven", "patternData": [[True] * 8], "source": "manual"},
                {"id": 0, "name": "zero", "patternData": [[False] * 8], "source": "manual"},
            ]
        )
        assert loaded[0].id == "7"
        assert loaded[1].id not in ("", "0")
        assert names(store) == ["seven", "zero"]

    @pytest.mark.unit
    def test_replaces_contents(self, filled):
        loaded = filled.hydrate(
            [{"id": "x1", "name": "wave", "patternData": [[True] * 8], "source": "svg"}]
        )
        assert [p.id for p in loaded] == ["x1"]
        assert names(filled) == ["wave"]
        assert filled.patterns[0].source is PatternSource.VECTOR

    @pytest.mark.unit
    def test_missing_id_generated(self, store):
        loaded = store.hydrate([{"name": "a", "patternData": [[False] * 8], "source": "text"}])
        assert loaded[0].id

    @pytest.mark.unit
    def test_duplicate_ids_keep_first(self, store):
        entry = {"id": "dup", "patternData": [[False] * 8], "source": "manual"}
        loaded = store.hydrate([{**entry, "name": "first"}, {**entry, "name": "second"}])
        assert [p.name for p in loaded] == ["first"]

    @pytest.mark.unit
    def test_invalid_entries_skipped(self, store):
        loaded = store.hydrate(
            [
                {"id": "ok", "name": "ok", "patternData": [[True] * 8], "source": "image"},
                {"id": "bad", "name": "bad", "patternData": [[True] * 5], "source": "image"},
                {"id": "worse", "name": "worse"},
                "not a dict",
            ]
        )
        assert [p.id for p in loaded] == ["ok"]

    @pytest.mark.unit
    def test_accepts_pattern_models(self, store):
        pattern = Pattern.from_draft(make_draft(name="m"), "m1")
        assert store.hydrate([pattern]) == [pattern]


class TestSequence:
    """Test sequence concatenation."""

    @pytest.mark.unit
    def test_empty_store(self, store):
        with pytest.raises(EmptySequenceError):
            store.sequence()

    @pytest.mark.unit
    def test_concatenates_in_store_order(self, store):
        first = store.add(make_draft(rows=2, name="first"))
        second = store.add(make_draft(rows=3, name="second", fill=False))
        sequence = store.sequence()
        assert len(sequence) == 5
        assert sequence == first.matrix + second.matrix

    @pytest.mark.unit
    def test_follows_reorder(self, store):
        first = store.add(make_draft(rows=1, name="first"))
        second = store.add(make_draft(rows=1, name="second", fill=False))
        store.reorder(second.id, first.id)
        assert store.sequence() == second.matrix + first.matrix

    @pytest.mark.unit
    def test_mixed_valve_counts(self, store):
        store.add(make_draft(valves=8))
        store.add(make_draft(valves=16, name="wide"))
        with pytest.raises(InvalidValveCountError, match="wide"):
            store.sequence()


class TestStoreEvents:
    """Test observer notifications."""

    @pytest.mark.unit
    def test_events(self, store):
        observer = Mock()
        store.register_observer(observer)

        a = store.add(make_draft(name="a"))
        observer.on_store_event.assert_called_with(StoreEvent.ADDED, [a])

        b = store.add(make_draft(name="b"))
        store.reorder(b.id, a.id)
        observer.on_store_event.assert_called_with(StoreEvent.REORDERED, [b])

        store.remove(a.id)
        observer.on_store_event.assert_called_with(StoreEvent.REMOVED, [a])

        store.hydrate([])
        observer.on_store_event.assert_called_with(StoreEvent.HYDRATED, [])

    @pytest.mark.unit
    def test_noop_emits_nothing(self, filled):
        observer = Mock()
        filled.register_observer(observer)
        filled.remove("missing")
        filled.reorder("missing", None)
        observer.on_store_event.assert_not_called()

    @pytest.mark.unit
    def test_failing_observer_does_not_break_store(self, store):
        observer = Mock()
        observer.on_store_event.side_effect = RuntimeError("boom")
        store.register_observer(observer)
        store.add(make_draft())
        assert len(store) == 1

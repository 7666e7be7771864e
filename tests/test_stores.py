# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Tests for the reactive store stubs."""

import asyncio
from unittest.mock import Mock

import pytest

from component_harness.stores import (
    ReadableStore,
    StaleFlagStore,
    WritableStore,
    get,
    is_store,
    is_writable,
    readable,
    writable,
)


class TestSubscribe:
    """Tests for subscribe/unsubscribe."""

    def test_subscribe_calls_observer_immediately(self):
        store = writable("initial")
        observer = Mock()

        store.subscribe(observer)

        observer.assert_called_once_with("initial")

    def test_set_notifies_in_registration_order(self):
        store = writable(0)
        calls = []
        store.subscribe(lambda value: calls.append(("first", value)))
        store.subscribe(lambda value: calls.append(("second", value)))
        calls.clear()

        store.set(5)

        assert calls == [("first", 5), ("second", 5)]

    def test_unsubscribe_stops_notifications(self):
        store = writable(0)
        observer = Mock()
        unsubscribe = store.subscribe(observer)

        unsubscribe()
        store.set(1)

        observer.assert_called_once_with(0)
        assert store.subscriber_count == 0

    def test_unsubscribe_twice_is_noop(self):
        store = writable(0)
        unsubscribe = store.subscribe(Mock())
        other = store.subscribe(Mock())

        unsubscribe()
        unsubscribe()

        assert store.subscriber_count == 1
        other()
        assert store.subscriber_count == 0

    def test_observer_unsubscribed_during_notify_is_skipped(self):
        store = writable(0)
        second = Mock()
        unsubscribers = []

        def first(value):
            if value == 1:
                unsubscribers[1]()

        unsubscribers.append(store.subscribe(first))
        unsubscribers.append(store.subscribe(second))
        second.reset_mock()

        store.set(1)

        second.assert_not_called()

    def test_observer_added_during_notify_waits_for_next_set(self):
        store = writable(0)
        late = Mock()

        def first(value):
            if value == 1 and store.subscriber_count == 1:
                store.subscribe(late)

        store.subscribe(first)
        store.set(1)

        # Only the immediate call made by subscribe()
        late.assert_called_once_with(1)

    def test_subscribe_rejects_non_callable(self):
        with pytest.raises(TypeError, match="must be callable"):
            writable(0).subscribe("not callable")


class TestWritableStore:
    """Tests for set/update and get()."""

    def test_get_after_set_returns_value(self):
        store = writable()
        for value in (0, "", None, [1, 2], {"a": 1}):
            store.set(value)
            assert get(store) == value

    def test_get_leaves_no_subscriber_behind(self):
        store = writable("x")
        get(store)
        assert store.subscriber_count == 0

    def test_update_applies_function(self):
        store = writable(2)
        store.update(lambda value: value * 10)
        assert get(store) == 20

    def test_set_same_value_still_notifies(self):
        store = writable("same")
        observer = Mock()
        store.subscribe(observer)

        store.set("same")

        assert observer.call_count == 2

    def test_repr_shows_value(self):
        assert repr(writable("a")) == "WritableStore('a')"


class TestReadableAndStaleFlag:
    """Tests for read-only stores and the stale flag stand-in."""

    def test_readable_has_no_set(self):
        store = readable(1)
        assert isinstance(store, ReadableStore)
        assert not hasattr(store, "set")
        assert get(store) == 1

    def test_stale_flag_is_always_false(self):
        store = StaleFlagStore()
        observer = Mock()
        store.subscribe(observer)

        store.set(True)

        assert get(store) is False
        observer.assert_called_once_with(False)

    @pytest.mark.asyncio
    async def test_stale_flag_check_resolves_false(self):
        store = StaleFlagStore()
        assert await asyncio.wait_for(store.check(), timeout=1) is False


class TestStoreDetection:
    """Tests for is_store / is_writable."""

    def test_detection(self):
        assert is_store(readable(0))
        assert not is_writable(readable(0))
        assert is_writable(writable(0))
        assert is_writable(WritableStore())
        assert not is_store(42)
        assert not is_store(None)

    def test_duck_typed_store_is_accepted(self):
        class Custom:
            def subscribe(self, observer):
                observer("custom")
                return lambda: None

            def set(self, value):
                pass

        assert is_writable(Custom())
        assert get(Custom()) == "custom"

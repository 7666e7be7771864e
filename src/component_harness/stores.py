# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Reactive store stubs implementing the subscribe/notify contract.

A store holds one value and an ordered list of observers:
- subscribe(observer) calls the observer immediately with the current value
  and returns an unsubscribe callable
- set(value) / update(fn) notify every current observer synchronously, in
  registration order

The same objects serve as mocks for ambient page/navigation state and as
the bridge a test passes in place of a two-way bound prop.
"""

import logging
from typing import Any, Callable, List

logger = logging.getLogger(__name__)

Observer = Callable[[Any], None]
Unsubscriber = Callable[[], None]


class _Subscription:
    """One registered observer. Inactive once unsubscribed."""

    __slots__ = ("observer", "active")

    def __init__(self, observer: Observer):
        self.observer = observer
        self.active = True


class ReadableStore:
    """Store whose value can only be changed through the stub itself."""

    def __init__(self, value: Any = None):
        self._value = value
        self._subscriptions: List[_Subscription] = []

    def subscribe(self, observer: Observer) -> Unsubscriber:
        """Register an observer and call it with the current value.

        Args:
            observer: Callable receiving each new value.

        Returns:
            Callable that removes the observer. Calling it twice is a no-op.
        """
        if not callable(observer):
            raise TypeError(f"Store observer must be callable, got {type(observer)}")

        subscription = _Subscription(observer)
        self._subscriptions.append(subscription)
        observer(self._value)

        def unsubscribe() -> None:
            if not subscription.active:
                return
            subscription.active = False
            self._subscriptions.remove(subscription)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        """Number of currently registered observers."""
        return len(self._subscriptions)

    def _notify(self) -> None:
        # Snapshot so observers added during notification wait for the next set
        for subscription in list(self._subscriptions):
            if subscription.active:
                subscription.observer(self._value)

    def _replace(self, value: Any) -> None:
        self._value = value
        self._notify()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


class WritableStore(ReadableStore):
    """Store that tests and components can write to."""

    def set(self, value: Any) -> None:
        """Replace the value and notify all observers in registration order."""
        self._replace(value)

    def update(self, updater: Callable[[Any], Any]) -> None:
        """Set the value to ``updater(current)``."""
        self._replace(updater(self._value))


class StaleFlagStore(ReadableStore):
    """Read-only "is content stale" flag that always reports False.

    This is a fixed stand-in, not real staleness detection: set() and
    check() never change the value or notify anyone.
    """

    def __init__(self) -> None:
        super().__init__(False)

    def set(self, value: Any) -> None:
        logger.debug(f"Ignoring set({value!r}) on stale flag store")

    async def check(self) -> bool:
        return False


def readable(value: Any = None) -> ReadableStore:
    return ReadableStore(value)


def writable(value: Any = None) -> WritableStore:
    return WritableStore(value)


def get(store: ReadableStore) -> Any:
    """Read a store's current value synchronously via subscribe/unsubscribe."""
    captured: List[Any] = []
    unsubscribe = store.subscribe(captured.append)
    unsubscribe()
    return captured[0]


def is_store(value: Any) -> bool:
    """Whether value honours the subscribe contract."""
    return callable(getattr(value, "subscribe", None))


def is_writable(value: Any) -> bool:
    """Whether value can be used as the target of a two-way binding."""
    return is_store(value) and callable(getattr(value, "set", None))


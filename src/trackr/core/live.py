# src/trackr/core/live.py

"""
Observable values.

LiveValue holds the last published value and pushes every new value to its
subscribers. A new subscriber is called immediately with the current value
(replay-latest), so late observers never miss state.

Mediator derives a value from several sources: each source gets its own
handler, and a handler decides whether (and what) to publish.

Delivery is synchronous and happens on the caller's thread. Everything in
trackr publishes from the event loop thread.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

Observer = Callable[[T], None]

_UNSET: Any = object()


class Subscription:
    """Handle returned by LiveValue.subscribe(); call dispose() to stop delivery."""

    __slots__ = ("_live", "_observer", "_active")

    def __init__(self, live: LiveValue[Any], observer: Observer[Any]) -> None:
        self._live = live
        self._observer = observer
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def dispose(self) -> None:
        if not self._active:
            return
        self._active = False
        self._live._remove(self)


class LiveValue(Generic[T]):
    def __init__(self, value: T = _UNSET, *, name: str = "") -> None:
        self._value = value
        self._name = name
        self._subscriptions: list[Subscription] = []

    def __repr__(self) -> str:
        shown = "<unset>" if self._value is _UNSET else repr(self._value)
        return f"LiveValue({self._name or '?'}={shown})"

    @property
    def has_value(self) -> bool:
        return self._value is not _UNSET

    @property
    def value(self) -> T | None:
        """Last published value, or None while nothing was published."""
        return None if self._value is _UNSET else self._value

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def set(self, value: T) -> None:
        self._value = value
        # Snapshot: observers may subscribe/unsubscribe while being notified.
        for sub in list(self._subscriptions):
            if sub.active:
                sub._observer(value)

    def subscribe(self, observer: Observer[T]) -> Subscription:
        sub = Subscription(self, observer)
        self._subscriptions.append(sub)
        if self._value is not _UNSET:
            observer(self._value)
        return sub

    def _remove(self, sub: Subscription) -> None:
        try:
            self._subscriptions.remove(sub)
        except ValueError:
            logger.debug("Subscription already removed from %r", self)


class Mediator(LiveValue[T]):
    """
    LiveValue fed by other LiveValues.

    Each add_source() registers a handler that runs whenever that source
    publishes. Handlers call self.set(...) to publish a derived value, or do
    nothing to keep the previous one.
    """

    def __init__(self, *, name: str = "") -> None:
        super().__init__(name=name)
        self._sources: list[Subscription] = []

    def add_source(self, source: LiveValue[Any], handler: Observer[Any]) -> None:
        self._sources.append(source.subscribe(handler))

    def dispose(self) -> None:
        """Detach from every source."""
        for sub in self._sources:
            sub.dispose()
        self._sources.clear()


def map_live(source: LiveValue[T], fn: Callable[[T], R], *, name: str = "") -> Mediator[R]:
    """Derived LiveValue publishing fn(value) for every value of source."""
    out: Mediator[R] = Mediator(name=name)
    out.add_source(source, lambda v: out.set(fn(v)))
    return out

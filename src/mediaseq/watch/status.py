"""Thread-safe observable status and event broadcast primitives."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, Optional, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

Unsubscribe = Callable[[], None]


class StatusHolder(Generic[T]):
    """Hold the latest value and notify subscribers when it changes.

    New subscribers immediately receive the current value. Setting a value equal
    to the current one is a no-op.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._condition = threading.Condition()
        self._subscribers: list[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        with self._condition:
            return self._value

    def set(self, value: T) -> None:
        with self._condition:
            if value == self._value:
                return
            self._value = value
            subscribers = list(self._subscribers)
            self._condition.notify_all()
        _dispatch(subscribers, value)

    def subscribe(self, callback: Callable[[T], None]) -> Unsubscribe:
        """Register ``callback`` and replay the current value to it."""
        with self._condition:
            self._subscribers.append(callback)
            current = self._value
        _dispatch([callback], current)

        def _unsubscribe() -> None:
            with self._condition:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    def wait_for(
        self, predicate: Callable[[T], bool], timeout: Optional[float] = None
    ) -> Optional[T]:
        """Block until ``predicate`` holds for the current value.

        Returns:
            Optional[T]: The matching value, or ``None`` on timeout.
        """
        with self._condition:
            if self._condition.wait_for(lambda: predicate(self._value), timeout=timeout):
                return self._value
            return None


class EventChannel(Generic[T]):
    """Broadcast events to the subscribers registered at publish time."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: list[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Unsubscribe:
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    def publish(self, event: T) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        _dispatch(subscribers, event)


def _dispatch(subscribers: list[Callable[[T], None]], value: T) -> None:
    for callback in subscribers:
        try:
            callback(value)
        except Exception:  # noqa: BLE001
            LOGGER.exception("Subscriber %r raised while handling %r", callback, value)


__all__ = ["EventChannel", "StatusHolder", "Unsubscribe"]

"""
Observable Values

Small synchronous observer helper. Subscribers are called on the thread
that publishes, before publish() returns. A late subscriber is immediately
handed the current value.
"""

import threading
from typing import Callable, Generic, List, TypeVar

from loguru import logger


T = TypeVar("T")


class Observable(Generic[T]):
    """Holds a value and notifies subscribers whenever it is replaced"""

    def __init__(self, initial: T, name: str = "value"):
        self._value = initial
        self._name = name
        self._callbacks: List[Callable[[T], None]] = []
        self._lock = threading.Lock()

    @property
    def value(self) -> T:
        with self._lock:
            return self._value

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """
        Register a callback and deliver the current value to it.

        Args:
            callback: Called with each new value

        Returns:
            A function that removes the subscription
        """
        with self._lock:
            self._callbacks.append(callback)
            current = self._value
        self._call(callback, current)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unsubscribe

    def publish(self, value: T) -> None:
        """Replace the value and notify every current subscriber"""
        with self._lock:
            self._value = value
            callbacks = list(self._callbacks)
        for callback in callbacks:
            self._call(callback, value)

    def _call(self, callback: Callable[[T], None], value: T) -> None:
        try:
            callback(value)
        except Exception as e:
            logger.error(f"{self._name} subscriber error: {e}")

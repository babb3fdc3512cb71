from __future__ import annotations

from typing import Callable, Generic, List, TypeVar

from utils.logger import get_logger

_logger = get_logger(__name__)

T = TypeVar("T")


class StateCell(Generic[T]):
    """
    Holds one immutable snapshot and tells subscribers when it is replaced.

    Stores publish through `set`; views subscribe on mount and call the
    returned function on unmount, so a discarded view never sees late results.
    """

    def __init__(self, value: T) -> None:
        self._value = value
        self._subscribers: List[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception:
                # a broken view must not stop the store or its siblings
                _logger.exception("State subscriber failed")

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

"""Minimal observer used for snapshot listeners and the session-expired signal."""

import logging
from typing import Callable, Generic, List, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Signal(Generic[T]):
    """Synchronous fan-out of a value to registered callbacks."""

    def __init__(self, name: str):
        self.name = name
        self._listeners: List[Callable[[T], None]] = []

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            Callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, value: T) -> None:
        logger.debug(f"[{self.name}] emitting to {len(self._listeners)} listener(s)")
        for listener in list(self._listeners):
            listener(value)

    def __len__(self) -> int:
        return len(self._listeners)

"""Base presenter with change notification."""

from __future__ import annotations

from typing import Callable

PropertyListener = Callable[[str], None]


class Observable:
    """Notifies subscribers with the names of properties that changed."""

    def __init__(self) -> None:
        self._listeners: list[PropertyListener] = []

    def subscribe(self, listener: PropertyListener) -> Callable[[], None]:
        """Register a listener.

        Returns:
            Function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, *names: str) -> None:
        for name in names:
            for listener in list(self._listeners):
                listener(name)

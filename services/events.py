"""
Minimal observer channel shared by the stateful services.
"""

import logging
from typing import Callable

logger = logging.getLogger(__name__)


class Observable:
    """
    Synchronous callback list.

    Callbacks run in registration order on the caller's stack, so a
    notification and everything it triggers finish before control
    returns to the event loop.
    """

    def __init__(self, name: str):
        self.name = name
        self._callbacks: list[Callable] = []

    def subscribe(self, callback: Callable) -> Callable[[], None]:
        """Add callback. Returns a handle that removes it again."""
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def notify(self, *args) -> None:
        """Call every subscriber. One failing callback does not stop the rest."""
        for cb in list(self._callbacks):
            try:
                cb(*args)
            except Exception:
                logger.exception("[%s] Callback error", self.name)

    def clear(self) -> None:
        self._callbacks.clear()

    def __len__(self) -> int:
        return len(self._callbacks)

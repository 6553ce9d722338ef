import logging
from typing import Callable, List, Optional

from explorer.core.schemas import SessionState

logger = logging.getLogger(__name__)

Subscriber = Callable[[SessionState, SessionState], None]


class SessionStore:
    """
    Holds the current SessionState snapshot.

    Snapshots are never mutated: every transition builds a new one and swaps
    it in, then notifies subscribers with (previous, current).
    """

    def __init__(self, initial: Optional[SessionState] = None):
        self._state = initial or SessionState()
        self._subscribers: List[Subscriber] = []

    @property
    def state(self) -> SessionState:
        return self._state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback, returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def update(self, **changes) -> SessionState:
        previous = self._state
        self._state = previous.model_copy(update=changes)

        # Copy so callbacks may unsubscribe while being notified
        for callback in list(self._subscribers):
            callback(previous, self._state)

        return self._state

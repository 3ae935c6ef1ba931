"""Fan-out of state transitions to interface code.

A State calls its subscribers in order and stops at the first error.
The EventBus sits one step further out: listeners subscribe by event
type, never hold the State itself, and a failing listener is logged
without keeping the others from running.
"""

import logging
import threading
from typing import Any, Callable

log = logging.getLogger("statekeeper.core.event_bus")

STATE_CHANGED = "state_changed"


class EventBus:
    """Thread-safe publish/subscribe keyed by event type."""

    def __init__(self):
        self._listeners: dict[str, tuple[Callable, ...]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: str, callback: Callable) -> Callable[[], None]:
        """Add ``callback`` for ``event_type``; returns its remover."""
        with self._lock:
            self._listeners[event_type] = self._listeners.get(event_type, ()) + (callback,)
        log.debug("Listening for '%s': %s", event_type, _describe(callback))

        def unsubscribe() -> None:
            self.unsubscribe(event_type, callback)

        return unsubscribe

    def unsubscribe(self, event_type: str, callback: Callable) -> None:
        with self._lock:
            remaining = tuple(
                cb for cb in self._listeners.get(event_type, ()) if cb is not callback
            )
            if remaining:
                self._listeners[event_type] = remaining
            else:
                self._listeners.pop(event_type, None)

    def publish(self, event_type: str, data: Any = None) -> int:
        """Deliver ``data`` to every listener. Returns how many succeeded."""
        with self._lock:
            listeners = self._listeners.get(event_type, ())

        delivered = 0
        for callback in listeners:
            try:
                callback(data)
            except Exception:
                log.exception(
                    "Error in event handler for '%s': %s",
                    event_type,
                    _describe(callback),
                )
            else:
                delivered += 1
        return delivered

    def watch(self, state, event_type: str = STATE_CHANGED) -> Callable[[], None]:
        """Publish ``{"state": name, "context": now}`` for every notification of ``state``.

        Fires once immediately (State.subscribe calls back right away) and
        once per transition. Returns the function that stops watching.
        """

        def forward(target) -> None:
            self.publish(event_type, {"state": target.current_name, "context": target.now})

        return state.subscribe(forward)


def _describe(callback: Callable) -> str:
    return getattr(callback, "__qualname__", None) or repr(callback)

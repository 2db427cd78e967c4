"""
In-process notification channels. RecentsStore fires RECENTS_UPDATED here with no
payload; list views subscribe and call list() for fresh data.

Each channel holds an immutable tuple of callbacks that is replaced on (un)subscribe,
so emit() iterates without holding the lock and callbacks may (un)subscribe freely.
"""
import threading
from typing import Any, Callable, Dict, Tuple

from .logger import get_logger

logger = get_logger("event_bus")

Callback = Callable[[str, Any], None]


class EventBus:
    """Callbacks are invoked as callback(channel, data); a failing callback is logged and skipped."""

    def __init__(self) -> None:
        self._channels: Dict[str, Tuple[Callback, ...]] = {}
        self._lock = threading.Lock()

    def subscribe(self, channel: str, callback: Callback) -> None:
        with self._lock:
            self._channels[channel] = self._channels.get(channel, ()) + (callback,)

    def unsubscribe(self, channel: str, callback: Callback) -> None:
        """Remove the most recent registration of callback; unknown callbacks are ignored."""
        with self._lock:
            callbacks = list(self._channels.get(channel, ()))
            for i in range(len(callbacks) - 1, -1, -1):
                if callbacks[i] == callback:
                    del callbacks[i]
                    break
            else:
                return
            if callbacks:
                self._channels[channel] = tuple(callbacks)
            else:
                del self._channels[channel]

    def subscriber_count(self, channel: str) -> int:
        return len(self._channels.get(channel, ()))

    def emit(self, channel: str, data: Any = None) -> None:
        for callback in self._channels.get(channel, ()):
            try:
                callback(channel, data)
            except Exception:
                logger.exception("Subscriber of %r failed", channel)

"""In-memory pub/sub bus for battle notifications, flushed by the scheduler."""
from __future__ import annotations

import logging
from typing import Any, Callable

Handler = Callable[[str, dict[str, Any]], None]

ANY = "*"

logger = logging.getLogger(__name__)


class SignalBus:
    """Queues notifications and delivers them on ``flush()``.

    Handlers registered under ``ANY`` receive every signal, after the
    handlers registered for that signal's own name.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Handler]] = {}
        self._queue: list[tuple[str, dict[str, Any]]] = []

    def subscribe(self, signal_name: str, handler: Handler) -> None:
        self._subscribers.setdefault(signal_name, []).append(handler)

    def unsubscribe(self, signal_name: str, handler: Handler) -> None:
        handlers = self._subscribers.get(signal_name)
        if handlers is None:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            pass

    def publish(self, signal_name: str, **data: Any) -> None:
        self._queue.append((signal_name, data))

    def pending(self) -> int:
        return len(self._queue)

    def flush(self) -> int:
        """Dispatch queued signals in publish order. Returns how many were sent.

        Signals published by a handler during the flush wait for the next one.
        """
        snapshot = self._queue
        self._queue = []
        for signal_name, data in snapshot:
            logger.debug("signal %s %s", signal_name, data)
            for handler in self._subscribers.get(signal_name, []):
                handler(signal_name, data)
            for handler in self._subscribers.get(ANY, []):
                handler(signal_name, data)
        return len(snapshot)

    def clear(self) -> None:
        self._queue.clear()

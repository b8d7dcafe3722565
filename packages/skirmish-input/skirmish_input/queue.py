"""LineQueue — one-way, non-blocking hand-off from the reader thread."""
from __future__ import annotations

import queue as _queue_mod

_EOF = object()


class LineQueue:
    """Unbounded single-producer, single-consumer queue of input lines.

    The producer calls ``put()`` and finally ``close()``; the consumer polls
    with ``poll()`` / ``drain()`` and never blocks. ``closed`` turns True
    only after every line put before ``close()`` has been consumed.
    """

    def __init__(self) -> None:
        self._items: _queue_mod.SimpleQueue[object] = _queue_mod.SimpleQueue()
        self._closed = False

    # --- Producer side ---

    def put(self, line: str) -> None:
        self._items.put(line)

    def close(self) -> None:
        """Signal that no further lines will arrive."""
        self._items.put(_EOF)

    # --- Consumer side ---

    @property
    def closed(self) -> bool:
        return self._closed

    def poll(self) -> str | None:
        """Return the next line, or None if nothing is available right now."""
        if self._closed:
            return None
        try:
            item = self._items.get_nowait()
        except _queue_mod.Empty:
            return None
        if item is _EOF:
            self._closed = True
            return None
        return item  # type: ignore[return-value]

    def drain(self) -> list[str]:
        """Return every line currently available, in arrival order."""
        lines: list[str] = []
        while True:
            line = self.poll()
            if line is None:
                return lines
            lines.append(line)

    def pending(self) -> int:
        """Approximate number of items waiting (includes the close marker)."""
        return self._items.qsize()

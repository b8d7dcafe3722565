"""InputReader — background thread forwarding console lines into a LineQueue."""
from __future__ import annotations

import logging
import threading
from typing import Iterable

from skirmish_input.queue import LineQueue

logger = logging.getLogger(__name__)


class InputReader:
    """Reads newline-delimited text on a daemon thread.

    Each line is forwarded without its trailing newline. When the stream
    ends (or is closed underneath the reader) the queue is closed and the
    thread exits quietly. The reader never touches anything but its queue.

    Args:
        stream: Any iterable of text lines, typically ``sys.stdin``.
        lines: Destination queue. A new one is created if omitted.
    """

    def __init__(self, stream: Iterable[str], lines: LineQueue | None = None) -> None:
        self._stream = stream
        self.lines: LineQueue = lines if lines is not None else LineQueue()
        self._thread = threading.Thread(
            target=self._run, name="skirmish-input", daemon=True
        )

    def start(self) -> LineQueue:
        self._thread.start()
        return self.lines

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def _run(self) -> None:
        count = 0
        try:
            for raw in self._stream:
                self.lines.put(raw.rstrip("\r\n"))
                count += 1
        except (OSError, ValueError) as exc:
            # ValueError: I/O operation on closed file
            logger.debug("input stream closed underneath reader: %s", exc)
        finally:
            logger.info("input stream ended after %d line(s)", count)
            self.lines.close()

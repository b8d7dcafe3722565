"""Wall-clock source for the round scheduler."""
from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Millisecond monotonic time plus the scheduler's one suspension point."""

    def now_ms(self) -> int:
        ...

    def sleep_ms(self, ms: int) -> None:
        ...


class MonotonicClock:
    """Real wall-clock time from ``time.monotonic_ns``."""

    def now_ms(self) -> int:
        return time.monotonic_ns() // 1_000_000

    def sleep_ms(self, ms: int) -> None:
        if ms > 0:
            time.sleep(ms / 1000)

"""Shared fixtures: a manual clock, a fixed random source, and a signal recorder."""
from __future__ import annotations

from typing import Any, Callable

import pytest

from skirmish_signal import ANY, SignalBus


class ManualClock:
    """Virtual time that only moves when the scheduler sleeps.

    ``at(ms, fn)`` registers a callback fired the first time the clock
    reaches ``ms``, which lets tests type input "during" a round.
    """

    def __init__(self, start_ms: int = 0) -> None:
        self.now = start_ms
        self.sleeps: list[int] = []
        self._pending: list[tuple[int, Callable[[], None]]] = []

    def now_ms(self) -> int:
        return self.now

    def sleep_ms(self, ms: int) -> None:
        self.sleeps.append(ms)
        self.advance(ms)

    def advance(self, ms: int) -> None:
        self.now += max(0, ms)
        due = [item for item in self._pending if item[0] <= self.now]
        self._pending = [item for item in self._pending if item[0] > self.now]
        for _, fn in due:
            fn()

    def at(self, ms: int, fn: Callable[[], None]) -> None:
        self._pending.append((ms, fn))


class FixedRng:
    """Stand-in for ``random.Random`` with scripted results."""

    def __init__(self, roll: float = 0.99, offset: int = 0) -> None:
        self.roll = roll
        self.offset = offset
        self.randint_calls: list[tuple[int, int]] = []

    def random(self) -> float:
        return self.roll

    def randint(self, a: int, b: int) -> int:
        self.randint_calls.append((a, b))
        return min(a + self.offset, b)


class Recorder:
    def __init__(self, bus: SignalBus) -> None:
        self.signals: list[tuple[str, dict[str, Any]]] = []
        bus.subscribe(ANY, lambda name, data: self.signals.append((name, data)))

    def names(self) -> list[str]:
        return [name for name, _ in self.signals]

    def of(self, name: str) -> list[dict[str, Any]]:
        return [data for n, data in self.signals if n == name]


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def rng() -> FixedRng:
    return FixedRng()


@pytest.fixture
def bus() -> SignalBus:
    return SignalBus()


@pytest.fixture
def recorder(bus: SignalBus) -> Recorder:
    return Recorder(bus)

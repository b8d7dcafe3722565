"""Cooldown advancement shared by both sides of a battle."""
from __future__ import annotations

from typing import Iterable

from skirmish_actions.types import CooldownTimer


def tick_timers(timers: Iterable[CooldownTimer], elapsed_ms: int) -> list[CooldownTimer]:
    """Advance each timer by ``elapsed_ms`` and return those that became ready.

    Timers are advanced in iteration order. A non-positive ``elapsed_ms``
    leaves every timer unchanged and returns an empty list.
    """
    if elapsed_ms <= 0:
        return []
    became_ready: list[CooldownTimer] = []
    for timer in timers:
        if timer.tick(elapsed_ms):
            became_ready.append(timer)
    return became_ready

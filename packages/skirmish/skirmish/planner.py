"""Opponent action planning — one randomized instant per round."""
from __future__ import annotations

from typing import Protocol

DEFAULT_BUFFER_MS = 300


class IntSource(Protocol):
    def randint(self, a: int, b: int) -> int:
        ...


def plan_opponent_action(
    round_start_ms: int,
    round_end_ms: int,
    remaining_ms: int,
    rng: IntSource,
    buffer_ms: int = DEFAULT_BUFFER_MS,
) -> int | None:
    """Pick the instant at which the opponent may act this round.

    The instant is never before the opponent's cooldown expires and never
    inside the closing ``buffer_ms`` of the round, unless the cooldown
    itself ends inside that buffer, in which case the expiry instant is
    the only choice. Returns None when the cooldown outlasts the round.
    """
    earliest = round_start_ms + max(0, remaining_ms)
    if earliest >= round_end_ms:
        return None
    latest = round_end_ms - buffer_ms
    if earliest >= latest:
        return earliest
    return earliest + rng.randint(0, latest - earliest)

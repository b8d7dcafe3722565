"""Engine configuration dataclass."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EngineConfig:
    """Immutable timing configuration for the round scheduler.

    Attributes:
        round_ms: Length of one round in milliseconds.
        tick_ms: Target loop cadence. The scheduler never sleeps past the
            end of the round, so the last sleep of a round may be shorter.
        opponent_buffer_ms: Closing window of each round in which the
            opponent never starts an action.
        player_initial_lockout_ms: Cooldown placed on every player card
            before the first round.
        opponent_initial_lockout_ms: Cooldown placed on the opponent's card
            before the first round.
        max_rounds: Stop after this many rounds and call it a draw.
            0 means no limit.
    """

    round_ms: int = 5000
    tick_ms: int = 100
    opponent_buffer_ms: int = 300
    player_initial_lockout_ms: int = 1000
    opponent_initial_lockout_ms: int = 2000
    max_rounds: int = 0

    def __post_init__(self) -> None:
        if self.round_ms <= 0:
            raise ValueError("round_ms must be positive")
        if self.tick_ms <= 0:
            raise ValueError("tick_ms must be positive")
        for name in (
            "opponent_buffer_ms",
            "player_initial_lockout_ms",
            "opponent_initial_lockout_ms",
            "max_rounds",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

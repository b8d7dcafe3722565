"""Core data types for cooldown-gated cards and skills."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

DEFAULT_CARD_COOLDOWN_MS = 3000
DEFAULT_SKILL_COOLDOWN_MS = 20000


@dataclass
class CooldownTimer:
    """Millisecond countdown attached to one action. Never negative."""

    total_ms: int
    remaining_ms: int = 0  # 0 means ready

    def __post_init__(self) -> None:
        self.total_ms = max(0, self.total_ms)
        self.remaining_ms = max(0, self.remaining_ms)

    def is_ready(self) -> bool:
        return self.remaining_ms == 0

    def trigger(self) -> None:
        """Restart the full cooldown, whatever is currently left."""
        self.remaining_ms = self.total_ms

    def lock(self, ms: int) -> None:
        """Override the remaining time, e.g. to stagger the first round."""
        self.remaining_ms = max(0, ms)

    def tick(self, elapsed_ms: int) -> bool:
        """Advance by elapsed wall-clock time.

        Returns True only when this call moved the timer from running to
        ready. A zero or negative elapsed value changes nothing.
        """
        if elapsed_ms <= 0 or self.remaining_ms == 0:
            return False
        self.remaining_ms = max(0, self.remaining_ms - elapsed_ms)
        return self.remaining_ms == 0

    def reduce(self, amount_ms: int) -> None:
        """Shorten the remaining time, floored at zero."""
        if amount_ms > 0:
            self.remaining_ms = max(0, self.remaining_ms - amount_ms)

    def remaining_seconds(self) -> int:
        """Whole seconds left, rounded up. 0 when ready."""
        return -(-self.remaining_ms // 1000)


# --- Effects ---


@dataclass(frozen=True)
class Damage:
    amount: int


@dataclass(frozen=True)
class Shield:
    amount: int


@dataclass(frozen=True)
class Heal:
    amount: int


@dataclass(frozen=True)
class ReduceAllCardCooldownMs:
    """Self-targeted: shortens every card cooldown of the caster."""

    amount_ms: int


Effect = Union[Damage, Shield, Heal, ReduceAllCardCooldownMs]


# --- Actions ---


@dataclass
class Card:
    """A hand card. At most one card may be played per round."""

    name: str
    description: str
    effect: Effect
    cooldown: CooldownTimer = field(
        default_factory=lambda: CooldownTimer(DEFAULT_CARD_COOLDOWN_MS)
    )
    icon: str = ""

    def is_ready(self) -> bool:
        return self.cooldown.is_ready()


@dataclass
class Skill:
    """An equipped skill, gated only by its own cooldown."""

    name: str
    description: str
    effect: Effect
    cooldown: CooldownTimer = field(
        default_factory=lambda: CooldownTimer(DEFAULT_SKILL_COOLDOWN_MS)
    )
    icon: str = ""

    def is_ready(self) -> bool:
        return self.cooldown.is_ready()


Action = Union[Card, Skill]

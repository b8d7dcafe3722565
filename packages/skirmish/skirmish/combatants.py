"""Combatants — the capability set shared by the player and every opponent."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from skirmish_actions import Loadout


@runtime_checkable
class Combatant(Protocol):
    name: str
    hp: int
    max_hp: int
    speed: int
    shield: int

    def take_damage(self, amount: int) -> int:
        ...

    def add_shield(self, amount: int) -> None:
        ...

    def clear_shield(self) -> None:
        ...

    def heal(self, amount: int) -> int:
        ...

    def dodge_chance(self) -> float:
        ...

    def is_alive(self) -> bool:
        ...


@dataclass
class _Fighter:
    """Shared hp/shield arithmetic. Keeps ``0 <= hp <= max_hp`` and ``shield >= 0``."""

    name: str
    max_hp: int
    speed: int = 3
    hp: int = -1  # -1 means start at max_hp
    shield: int = 0

    def __post_init__(self) -> None:
        self.max_hp = max(0, self.max_hp)
        self.hp = self.max_hp if self.hp < 0 else min(self.hp, self.max_hp)
        self.shield = max(0, self.shield)

    def take_damage(self, amount: int) -> int:
        """Shield absorbs first, the rest comes off hp. Returns the absorbed part."""
        amount = max(0, amount)
        absorbed = min(amount, self.shield)
        self.shield -= absorbed
        self.hp = max(0, self.hp - (amount - absorbed))
        return absorbed

    def add_shield(self, amount: int) -> None:
        self.shield += max(0, amount)

    def clear_shield(self) -> None:
        self.shield = 0

    def heal(self, amount: int) -> int:
        """Raise hp up to max_hp. Returns the amount actually healed."""
        before = self.hp
        self.hp = min(self.max_hp, self.hp + max(0, amount))
        return self.hp - before

    def dodge_chance(self) -> float:
        return 0.0

    def is_alive(self) -> bool:
        return self.hp > 0


@dataclass
class Player(_Fighter):
    loadout: Loadout = field(default_factory=Loadout)


@dataclass
class Slime(_Fighter):
    """Plain opponent, no passive."""

    speed: int = 3


@dataclass
class GoblinRogue(_Fighter):
    """Evasive opponent: fully dodges a share of incoming attacks."""

    speed: int = 4
    evasion: float = 0.1

    def dodge_chance(self) -> float:
        return min(1.0, max(0.0, self.evasion))


OPPONENTS: dict[str, type[_Fighter]] = {
    "slime": Slime,
    "goblin": GoblinRogue,
}

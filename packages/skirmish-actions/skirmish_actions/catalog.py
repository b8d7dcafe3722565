"""Catalog of built-in cards and skills, looked up by id."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Iterable, TypeVar

from skirmish_actions.loadout import Loadout
from skirmish_actions.types import (
    DEFAULT_SKILL_COOLDOWN_MS,
    Card,
    CooldownTimer,
    Damage,
    Heal,
    ReduceAllCardCooldownMs,
    Shield,
    Skill,
)

MAX_EQUIPPED_CARDS = 4

T = TypeVar("T")


class CatalogError(KeyError):
    """Raised when a card or skill id is not in the catalog."""

    def __init__(self, kind: str, entry_id: str) -> None:
        self.kind = kind
        self.entry_id = entry_id
        super().__init__(f"Unknown {kind} id {entry_id!r}")

    def __str__(self) -> str:
        return self.args[0]


@dataclass(frozen=True)
class CatalogEntry(Generic[T]):
    id: str
    factory: Callable[[], T]


# --- Factories ---


def create_attack_card() -> Card:
    return Card("Attack", "Deal 1 damage", Damage(1), icon="⚔")


def create_defense_card() -> Card:
    return Card("Defense", "Gain 1 shield until the round ends", Shield(1), icon="🛡")


def create_emergency_heal() -> Skill:
    """Heals 1 HP. Ready from the first round."""
    return Skill(
        "Emergency Heal",
        "Restore 1 HP",
        Heal(1),
        CooldownTimer(DEFAULT_SKILL_COOLDOWN_MS),
        icon="✚",
    )


def create_fast_cycle() -> Skill:
    """Cuts 1 second off every card cooldown. Locked for the first round."""
    return Skill(
        "Fast Cycle",
        "Usable after 5 seconds; all card cooldowns drop by 1 second",
        ReduceAllCardCooldownMs(1000),
        CooldownTimer(DEFAULT_SKILL_COOLDOWN_MS, remaining_ms=5000),
        icon="↻",
    )


CARDS: dict[str, CatalogEntry[Card]] = {
    "attack": CatalogEntry("attack", create_attack_card),
    "defense": CatalogEntry("defense", create_defense_card),
}

SKILLS: dict[str, CatalogEntry[Skill]] = {
    "emergency_heal": CatalogEntry("emergency_heal", create_emergency_heal),
    "fast_cycle": CatalogEntry("fast_cycle", create_fast_cycle),
}

DEFAULT_CARDS = ("attack", "defense")
DEFAULT_SKILLS = ("emergency_heal", "fast_cycle")


# --- Lookup ---


def card(card_id: str) -> Card:
    """Build a fresh card. Raises CatalogError for unknown ids."""
    entry = CARDS.get(card_id)
    if entry is None:
        raise CatalogError("card", card_id)
    return entry.factory()


def skill(skill_id: str) -> Skill:
    """Build a fresh skill. Raises CatalogError for unknown ids."""
    entry = SKILLS.get(skill_id)
    if entry is None:
        raise CatalogError("skill", skill_id)
    return entry.factory()


def card_ids() -> list[str]:
    return list(CARDS)


def skill_ids() -> list[str]:
    return list(SKILLS)


def build_loadout(
    card_ids: Iterable[str] = DEFAULT_CARDS,
    skill_ids: Iterable[str] = DEFAULT_SKILLS,
) -> tuple[Loadout, list[str]]:
    """Assemble a loadout from catalog ids.

    Every id is validated first, so an unknown id raises CatalogError
    before anything is built. Ids past the card or skill capacity are not
    equipped and come back in the second element of the result.
    """
    card_list = list(card_ids)
    skill_list = list(skill_ids)
    for cid in card_list:
        if cid not in CARDS:
            raise CatalogError("card", cid)
    for sid in skill_list:
        if sid not in SKILLS:
            raise CatalogError("skill", sid)

    loadout = Loadout()
    rejected: list[str] = []
    for i, cid in enumerate(card_list):
        if i >= MAX_EQUIPPED_CARDS:
            rejected.append(cid)
            continue
        loadout.add_card(card(cid))
    for sid in skill_list:
        if not loadout.equip_skill(skill(sid)):
            rejected.append(sid)
    return loadout, rejected

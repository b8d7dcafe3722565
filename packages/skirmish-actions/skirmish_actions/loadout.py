"""Loadout — a player's ordered hand of cards and equipped skills."""
from __future__ import annotations

from typing import Literal

from skirmish_actions.systems import tick_timers
from skirmish_actions.types import Action, Card, CooldownTimer, Skill

MAX_EQUIPPED_SKILLS = 2

ActionKind = Literal["card", "skill"]


class Loadout:
    """Holds cards and skills in selection order: ``[*hand, *skills]``."""

    def __init__(self, skill_capacity: int = MAX_EQUIPPED_SKILLS) -> None:
        self._hand: list[Card] = []
        self._skills: list[Skill] = []
        self._skill_capacity = skill_capacity

    # --- Registration ---

    def add_card(self, card: Card) -> None:
        """Append a card to the hand. The hand is unbounded."""
        self._hand.append(card)

    def equip_skill(self, skill: Skill) -> bool:
        """Equip a skill. Returns False, leaving the loadout untouched, when full."""
        if len(self._skills) >= self._skill_capacity:
            return False
        self._skills.append(skill)
        return True

    # --- Queries ---

    @property
    def hand(self) -> list[Card]:
        return list(self._hand)

    @property
    def skills(self) -> list[Skill]:
        return list(self._skills)

    @property
    def skill_capacity(self) -> int:
        return self._skill_capacity

    def actions(self) -> list[Action]:
        return [*self._hand, *self._skills]

    def select(self, index: int) -> tuple[ActionKind, Action] | None:
        """Resolve a 1-based index into the hand then the skills."""
        if index < 1:
            return None
        pos = index - 1
        if pos < len(self._hand):
            return "card", self._hand[pos]
        pos -= len(self._hand)
        if pos < len(self._skills):
            return "skill", self._skills[pos]
        return None

    def timers(self) -> list[CooldownTimer]:
        return [action.cooldown for action in self.actions()]

    def has_ready_card(self) -> bool:
        return any(card.is_ready() for card in self._hand)

    def has_ready_skill(self) -> bool:
        return any(skill.is_ready() for skill in self._skills)

    # --- Mutation ---

    def tick(self, elapsed_ms: int) -> list[CooldownTimer]:
        """Advance every cooldown. Returns the timers that became ready."""
        return tick_timers(self.timers(), elapsed_ms)

    def lock_cards(self, ms: int) -> None:
        """Lock every card for at least ``ms``. Longer per-card lockouts are kept."""
        for card in self._hand:
            if card.cooldown.remaining_ms < ms:
                card.cooldown.lock(ms)

    def reduce_card_cooldowns(self, amount_ms: int) -> int:
        """Shorten every card cooldown. Returns how many cards were affected."""
        affected = 0
        for card in self._hand:
            if not card.is_ready() and amount_ms > 0:
                affected += 1
            card.cooldown.reduce(amount_ms)
        return affected

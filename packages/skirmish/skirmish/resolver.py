"""Combat resolution: applies one effect and reports what happened."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from skirmish_actions import Damage, Effect, Heal, ReduceAllCardCooldownMs, Shield

if TYPE_CHECKING:
    from skirmish_actions import Loadout

    from skirmish.combatants import Combatant

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Anything with ``random() -> float`` in [0, 1), e.g. ``random.Random``."""

    def random(self) -> float:
        ...


@dataclass(frozen=True)
class Outcome:
    dodged: bool = False
    absorbed: int = 0
    dealt: int = 0
    healed: int = 0
    shielded: int = 0
    cooldowns_reduced: int = 0  # cards whose cooldown was shortened


class CombatResolver:
    """Applies effects to combatants.

    The random source is injected so dodge rolls are reproducible under
    test; the engine passes its own ``random.Random`` instance.
    """

    def __init__(self, rng: RandomSource) -> None:
        self._rng = rng

    def apply(
        self,
        effect: Effect,
        target: Combatant,
        caster_loadout: Loadout | None = None,
    ) -> Outcome:
        """Resolve ``effect`` against ``target``.

        ``ReduceAllCardCooldownMs`` ignores ``target`` and acts on the
        caster's own cards, so ``caster_loadout`` is required for it.
        """
        if isinstance(effect, Damage):
            return self._damage(effect.amount, target)
        if isinstance(effect, Shield):
            target.add_shield(effect.amount)
            return Outcome(shielded=effect.amount)
        if isinstance(effect, Heal):
            return Outcome(healed=target.heal(effect.amount))
        if isinstance(effect, ReduceAllCardCooldownMs):
            if caster_loadout is None:
                raise ValueError("cooldown reduction needs the caster's loadout")
            affected = caster_loadout.reduce_card_cooldowns(effect.amount_ms)
            return Outcome(cooldowns_reduced=affected)
        raise TypeError(f"Unsupported effect {type(effect).__qualname__}")

    def _damage(self, amount: int, target: Combatant) -> Outcome:
        chance = target.dodge_chance()
        if chance > 0 and self._rng.random() < chance:
            logger.debug("%s dodged %d damage", target.name, amount)
            return Outcome(dodged=True)
        amount = max(0, amount)
        absorbed = target.take_damage(amount)
        return Outcome(absorbed=absorbed, dealt=amount - absorbed)

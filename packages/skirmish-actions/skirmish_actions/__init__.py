"""Cooldown-gated cards and skills for the skirmish round engine."""
from skirmish_actions.catalog import CatalogError, build_loadout
from skirmish_actions.loadout import MAX_EQUIPPED_SKILLS, Loadout
from skirmish_actions.systems import tick_timers
from skirmish_actions.types import (
    Action,
    Card,
    CooldownTimer,
    Damage,
    Effect,
    Heal,
    ReduceAllCardCooldownMs,
    Shield,
    Skill,
)

__all__ = [
    "Action",
    "Card",
    "CatalogError",
    "CooldownTimer",
    "Damage",
    "Effect",
    "Heal",
    "Loadout",
    "MAX_EQUIPPED_SKILLS",
    "ReduceAllCardCooldownMs",
    "Shield",
    "Skill",
    "build_loadout",
    "tick_timers",
]

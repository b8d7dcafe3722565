"""skirmish - A real-time, two-combatant round engine."""

from skirmish.clock import Clock, MonotonicClock
from skirmish.combatants import Combatant, GoblinRogue, Player, Slime
from skirmish.config import EngineConfig
from skirmish.engine import (
    ActionResult,
    BattleStatus,
    Phase,
    Rejection,
    Round,
    RoundScheduler,
)
from skirmish.planner import plan_opponent_action
from skirmish.resolver import CombatResolver, Outcome

__all__ = [
    "ActionResult",
    "BattleStatus",
    "Clock",
    "Combatant",
    "CombatResolver",
    "EngineConfig",
    "GoblinRogue",
    "MonotonicClock",
    "Outcome",
    "Phase",
    "Player",
    "Rejection",
    "Round",
    "RoundScheduler",
    "Slime",
    "plan_opponent_action",
]

"""Signal names published by the round scheduler on its SignalBus."""
from __future__ import annotations

ROUND_STARTED = "round_started"  # round, status
ACTION_USED = "action_used"  # side, kind, name
DAMAGE_DEALT = "damage_dealt"  # side, target, amount
SHIELD_ABSORBED = "shield_absorbed"  # side, target, amount
FULLY_BLOCKED = "fully_blocked"  # side, target
SHIELD_ADDED = "shield_added"  # side, target, amount
HEALED = "healed"  # side, target, amount (may be 0)
DODGED = "dodged"  # side, target
COOLDOWNS_REDUCED = "cooldowns_reduced"  # side, amount_ms, cards
ACTION_READY = "action_ready"  # side, index, name
ACTION_REJECTED = "action_rejected"  # reason, message, line
ROUND_IDLE = "round_idle"  # round, side
ROUND_ENDED = "round_ended"  # round
COMBATANT_DEFEATED = "combatant_defeated"  # side, name
BATTLE_FINISHED = "battle_finished"  # winner, rounds, status
INPUT_CLOSED = "input_closed"

PLAYER = "player"
OPPONENT = "opponent"
DRAW = "draw"

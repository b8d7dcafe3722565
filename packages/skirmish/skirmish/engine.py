"""RoundScheduler — the real-time round loop, pacing, and action execution."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from skirmish_actions import (
    Card,
    CooldownTimer,
    Damage,
    Effect,
    Heal,
    Loadout,
    ReduceAllCardCooldownMs,
    Shield,
    tick_timers,
)
from skirmish_input import InvalidInput, LineQueue, parse_line
from skirmish_signal import SignalBus

from skirmish import events
from skirmish.clock import Clock, MonotonicClock
from skirmish.config import EngineConfig
from skirmish.planner import plan_opponent_action
from skirmish.resolver import CombatResolver, Outcome

if TYPE_CHECKING:
    from skirmish.combatants import Combatant, Player

logger = logging.getLogger(__name__)


class Phase(Enum):
    IDLE = "idle"
    ROUND_ACTIVE = "round_active"
    ROUND_SETTLING = "round_settling"
    FINISHED = "finished"


class Rejection(Enum):
    INVALID = "invalid"
    OUT_OF_RANGE = "out_of_range"
    CARD_ALREADY_USED = "card_already_used"
    NOT_READY = "not_ready"
    BATTLE_OVER = "battle_over"


@dataclass(frozen=True)
class Round:
    index: int
    start_ms: int
    end_ms: int
    opponent_action_at: int | None  # None: opponent cannot act this round


@dataclass(frozen=True)
class ActionResult:
    accepted: bool
    kind: str | None = None  # "card" or "skill"
    name: str | None = None
    outcome: Outcome | None = None
    reason: Rejection | None = None
    message: str = ""


@dataclass(frozen=True)
class CombatantStatus:
    name: str
    hp: int
    max_hp: int
    shield: int
    speed: int


@dataclass(frozen=True)
class ActionStatus:
    index: int  # 1-based, as typed by the player
    kind: str
    name: str
    description: str
    ready: bool
    cooldown_seconds: int
    icon: str = ""


@dataclass(frozen=True)
class BattleStatus:
    round: int
    phase: Phase
    player: CombatantStatus
    opponent: CombatantStatus
    actions: tuple[ActionStatus, ...]
    opponent_action: ActionStatus
    card_used: bool
    card_available: bool = False  # a ready card and the card budget unspent
    skill_available: bool = False


def _combatant_status(c: Combatant) -> CombatantStatus:
    return CombatantStatus(c.name, c.hp, c.max_hp, c.shield, c.speed)


class RoundScheduler:
    """Runs fixed-length wall-clock rounds between a player and one opponent.

    All combat state is owned by the thread that calls ``run()``. Player
    input arrives only through ``lines``, a queue filled by a background
    reader; the scheduler polls it and never blocks on it.

    Each loop iteration, in order: advance every cooldown by the elapsed
    wall-clock time, drain and execute pending input lines, let the
    opponent act if its planned instant has come, then stop on a defeat
    or at the end of the round. Between iterations the scheduler sleeps
    ``min(tick_ms, time left in the round)``.
    """

    def __init__(
        self,
        player: Player,
        opponent: Combatant,
        opponent_card: Card,
        *,
        config: EngineConfig | None = None,
        clock: Clock | None = None,
        rng: random.Random | None = None,
        bus: SignalBus | None = None,
        lines: LineQueue | None = None,
    ) -> None:
        self.config: EngineConfig = config if config is not None else EngineConfig()
        self.player = player
        self.opponent = opponent
        self.opponent_card = opponent_card
        self.bus: SignalBus = bus if bus is not None else SignalBus()
        self._clock: Clock = clock if clock is not None else MonotonicClock()
        self._rng = rng if rng is not None else random.Random()
        self._lines = lines
        self._resolver = CombatResolver(self._rng)

        self._opponent_loadout = Loadout(skill_capacity=0)
        self._opponent_loadout.add_card(opponent_card)

        # Opening lockouts only ever lengthen an action's own lockout.
        player.loadout.lock_cards(self.config.player_initial_lockout_ms)
        self._opponent_loadout.lock_cards(self.config.opponent_initial_lockout_ms)

        self._phase = Phase.IDLE
        self._round_index = 1
        self._round: Round | None = None
        self._last_tick_ms = 0
        self._winner: str | None = None
        self._input_closed_seen = False

        self._player_used_card = False
        self._player_acted = False
        self._opponent_acted = False
        self._opponent_done = False

    # --- Queries ---

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def round_index(self) -> int:
        return self._round_index

    @property
    def current_round(self) -> Round | None:
        return self._round

    @property
    def winner(self) -> str | None:
        """``"player"``, ``"opponent"``, ``"draw"``, or None while running."""
        return self._winner

    @property
    def player_used_card(self) -> bool:
        return self._player_used_card

    @property
    def player_acted(self) -> bool:
        return self._player_acted

    @property
    def opponent_acted(self) -> bool:
        return self._opponent_acted

    def both_alive(self) -> bool:
        return self.player.is_alive() and self.opponent.is_alive()

    def time_left_ms(self) -> int:
        if self._round is None or self._phase is not Phase.ROUND_ACTIVE:
            return 0
        return max(0, self._round.end_ms - self._clock.now_ms())

    def status(self) -> BattleStatus:
        """Read-only snapshot for the presentation layer."""
        actions = []
        for i, action in enumerate(self.player.loadout.actions(), start=1):
            kind = "card" if isinstance(action, Card) else "skill"
            actions.append(
                ActionStatus(
                    i,
                    kind,
                    action.name,
                    action.description,
                    action.is_ready(),
                    action.cooldown.remaining_seconds(),
                    action.icon,
                )
            )
        card = self.opponent_card
        over = self._phase is Phase.FINISHED
        return BattleStatus(
            round=self._round_index,
            phase=self._phase,
            player=_combatant_status(self.player),
            opponent=_combatant_status(self.opponent),
            actions=tuple(actions),
            opponent_action=ActionStatus(
                1, "card", card.name, card.description,
                card.is_ready(), card.cooldown.remaining_seconds(), card.icon,
            ),
            card_used=self._player_used_card,
            card_available=(
                not over
                and not self._player_used_card
                and self.player.loadout.has_ready_card()
            ),
            skill_available=not over and self.player.loadout.has_ready_skill(),
        )

    # --- Round lifecycle ---

    def start_round(self) -> Round:
        """Enter ROUND_ACTIVE: reset per-round flags and plan the opponent."""
        if self._phase is Phase.FINISHED or not self.both_alive():
            raise RuntimeError("Cannot start a round: the battle is over")
        if self._phase is Phase.ROUND_ACTIVE:
            raise RuntimeError(f"Round {self._round_index} is already running")

        now = self._clock.now_ms()
        end = now + self.config.round_ms
        planned = plan_opponent_action(
            now,
            end,
            self.opponent_card.cooldown.remaining_ms,
            self._rng,
            self.config.opponent_buffer_ms,
        )
        self._round = Round(self._round_index, now, end, planned)
        self._last_tick_ms = now
        self._player_used_card = False
        self._player_acted = False
        self._opponent_acted = False
        self._opponent_done = False
        self._phase = Phase.ROUND_ACTIVE

        if planned is None:
            logger.debug("round %d: opponent cannot act", self._round_index)
        else:
            logger.debug(
                "round %d: opponent acts at +%dms", self._round_index, planned - now
            )
        logger.info("round %d started", self._round_index)
        self.bus.publish(
            events.ROUND_STARTED, round=self._round_index, status=self.status()
        )
        self.bus.flush()
        return self._round

    def step(self) -> bool:
        """Run one loop iteration. Returns False once the round must stop."""
        if self._phase is not Phase.ROUND_ACTIVE or self._round is None:
            raise RuntimeError("step() called outside an active round")

        now = self._clock.now_ms()
        self._advance_cooldowns(now)
        self._drain_input()
        self._opponent_turn(now)
        self.bus.flush()

        if not self.both_alive():
            return False
        return self._clock.now_ms() < self._round.end_ms

    def play_round(self) -> Phase:
        """Start (if needed) and run one round to completion, then settle it."""
        if self._phase is not Phase.ROUND_ACTIVE:
            self.start_round()
        while self.step():
            left = self.time_left_ms()
            self._clock.sleep_ms(min(self.config.tick_ms, left))
        return self._settle()

    def run(self) -> str:
        """Play rounds until one side falls (or ``max_rounds`` is reached)."""
        while self._phase is not Phase.FINISHED:
            self.play_round()
        assert self._winner is not None
        return self._winner

    def _settle(self) -> Phase:
        assert self._round is not None
        # Account for the time between the last tick and the exit moment.
        self._advance_cooldowns(self._clock.now_ms())

        if not self.both_alive():
            winner = events.PLAYER if self.player.is_alive() else events.OPPONENT
            loser = self.opponent if winner == events.PLAYER else self.player
            loser_side = events.OPPONENT if winner == events.PLAYER else events.PLAYER
            self.bus.publish(events.COMBATANT_DEFEATED, side=loser_side, name=loser.name)
            self._finish(winner)
            return self._phase

        self._phase = Phase.ROUND_SETTLING
        index = self._round.index
        if not self._player_acted:
            self.bus.publish(events.ROUND_IDLE, round=index, side=events.PLAYER)
        if not self._opponent_acted:
            self.bus.publish(events.ROUND_IDLE, round=index, side=events.OPPONENT)
        self.player.clear_shield()
        self.opponent.clear_shield()
        self._round_index += 1
        self.bus.publish(events.ROUND_ENDED, round=index)
        logger.info("round %d ended", index)

        if self.config.max_rounds and self._round_index > self.config.max_rounds:
            self._finish(events.DRAW)
        else:
            self._phase = Phase.IDLE
        self.bus.flush()
        return self._phase

    def _finish(self, winner: str) -> None:
        self._phase = Phase.FINISHED
        self._winner = winner
        rounds = self._round.index if self._round is not None else 0
        logger.info("battle finished after %d round(s): %s", rounds, winner)
        self.bus.publish(
            events.BATTLE_FINISHED, winner=winner, rounds=rounds, status=self.status()
        )
        self.bus.flush()

    # --- Loop phases ---

    def _advance_cooldowns(self, now: int) -> None:
        elapsed = now - self._last_tick_ms
        if elapsed <= 0:
            return
        ready = tick_timers(
            [*self.player.loadout.timers(), *self._opponent_loadout.timers()],
            elapsed,
        )
        self._last_tick_ms = now
        if ready:
            self._announce_ready(ready)

    def _announce_ready(self, ready: list[CooldownTimer]) -> None:
        for side, actions in (
            (events.PLAYER, self.player.loadout.actions()),
            (events.OPPONENT, self._opponent_loadout.actions()),
        ):
            for i, action in enumerate(actions, start=1):
                if any(action.cooldown is timer for timer in ready):
                    self.bus.publish(
                        events.ACTION_READY, side=side, index=i, name=action.name
                    )

    def _drain_input(self) -> None:
        if self._lines is None:
            return
        while self.both_alive():
            line = self._lines.poll()
            if line is None:
                break
            self.handle_line(line)
        if self._lines.closed and not self._input_closed_seen:
            self._input_closed_seen = True
            logger.info("player input closed; continuing on timers alone")
            self.bus.publish(events.INPUT_CLOSED)

    def _opponent_turn(self, now: int) -> None:
        assert self._round is not None
        if self._opponent_done or not self.both_alive():
            return
        at = self._round.opponent_action_at
        if at is None or now < at or now >= self._round.end_ms:
            return
        self._opponent_done = True
        card = self.opponent_card
        if not card.is_ready():
            logger.debug("opponent planned instant reached before %s was ready", card.name)
            return
        card.cooldown.trigger()
        self._opponent_acted = True
        self.bus.publish(
            events.ACTION_USED, side=events.OPPONENT, kind="card", name=card.name
        )
        self._resolve(
            card.effect,
            events.OPPONENT,
            self.opponent,
            self._opponent_loadout,
            self.player,
        )

    # --- Player actions ---

    def handle_line(self, line: str) -> ActionResult:
        """Parse one console line and execute it as a player action."""
        command = parse_line(line)
        if isinstance(command, InvalidInput):
            return self._reject(
                Rejection.INVALID,
                f"Enter a number between 1 and {len(self.player.loadout.actions())}.",
                line,
            )
        return self.use_action(command.index, line)

    def use_action(self, index: int, line: str | None = None) -> ActionResult:
        """Use the action at 1-based ``index`` over ``[hand..., skills...]``."""
        if self._phase is Phase.FINISHED or not self.both_alive():
            return self._reject(Rejection.BATTLE_OVER, "The battle is over.", line)

        selected = self.player.loadout.select(index)
        if selected is None:
            return self._reject(
                Rejection.OUT_OF_RANGE,
                f"Enter a number between 1 and {len(self.player.loadout.actions())}.",
                line,
            )
        kind, action = selected

        if kind == "card" and self._player_used_card:
            return self._reject(
                Rejection.CARD_ALREADY_USED,
                "You already used a card this round.",
                line,
            )
        if not action.is_ready():
            return self._reject(
                Rejection.NOT_READY,
                f"{action.name} is cooling down "
                f"({action.cooldown.remaining_seconds()}s left).",
                line,
            )

        action.cooldown.trigger()
        if kind == "card":
            self._player_used_card = True
        self._player_acted = True
        self.bus.publish(events.ACTION_USED, side=events.PLAYER, kind=kind, name=action.name)
        outcome = self._resolve(
            action.effect,
            events.PLAYER,
            self.player,
            self.player.loadout,
            self.opponent,
        )
        return ActionResult(True, kind=kind, name=action.name, outcome=outcome)

    def _reject(self, reason: Rejection, message: str, line: str | None) -> ActionResult:
        logger.debug("rejected input %r: %s", line, reason.value)
        self.bus.publish(
            events.ACTION_REJECTED, reason=reason.value, message=message, line=line
        )
        return ActionResult(False, reason=reason, message=message)

    # --- Resolution ---

    def _resolve(
        self,
        effect: Effect,
        side: str,
        caster: Combatant,
        caster_loadout: Loadout,
        enemy: Combatant,
    ) -> Outcome:
        target = enemy if isinstance(effect, Damage) else caster
        outcome = self._resolver.apply(effect, target, caster_loadout)

        if isinstance(effect, Damage):
            if outcome.dodged:
                self.bus.publish(events.DODGED, side=side, target=target.name)
                return outcome
            if outcome.absorbed > 0:
                self.bus.publish(
                    events.SHIELD_ABSORBED, side=side, target=target.name,
                    amount=outcome.absorbed,
                )
            if outcome.dealt > 0:
                self.bus.publish(
                    events.DAMAGE_DEALT, side=side, target=target.name,
                    amount=outcome.dealt,
                )
            else:
                self.bus.publish(events.FULLY_BLOCKED, side=side, target=target.name)
        elif isinstance(effect, Shield):
            self.bus.publish(
                events.SHIELD_ADDED, side=side, target=target.name, amount=outcome.shielded
            )
        elif isinstance(effect, Heal):
            self.bus.publish(
                events.HEALED, side=side, target=target.name, amount=outcome.healed
            )
        elif isinstance(effect, ReduceAllCardCooldownMs):
            self.bus.publish(
                events.COOLDOWNS_REDUCED, side=side, amount_ms=effect.amount_ms,
                cards=outcome.cooldowns_reduced,
            )
        return outcome

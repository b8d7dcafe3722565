"""
Console front-end — play a skirmish in the terminal.

Type the number of a card or skill and press Enter at any time; the round
clock keeps running while you think.

    python -m skirmish --opponent goblin --log-level INFO
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, TextIO

from skirmish_actions import CatalogError, Loadout, build_loadout
from skirmish_actions import catalog
from skirmish_input import InputReader, LineQueue
from skirmish_signal import SignalBus

from skirmish import events
from skirmish.clock import Clock, MonotonicClock
from skirmish.combatants import OPPONENTS, Player
from skirmish.config import EngineConfig
from skirmish.engine import BattleStatus, Phase, RoundScheduler

logger = logging.getLogger(__name__)

PLAYER_NAME = "Hero"
PLAYER_HP = 3
OPPONENT_HP = {"slime": 3, "goblin": 4}
RESTART_ANSWERS = ("y", "yes", "r", "restart")
RESTART_POLL_MS = 50


class ConsoleView:
    """Formats scheduler notifications as plain text lines."""

    def __init__(
        self,
        bus: SignalBus,
        out: TextIO | None = None,
        round_seconds: float = 5.0,
    ) -> None:
        self._out = out if out is not None else sys.stdout
        self._round_seconds = round_seconds
        handlers = {
            events.ROUND_STARTED: self._round_started,
            events.ACTION_USED: self._action_used,
            events.DAMAGE_DEALT: self._damage_dealt,
            events.SHIELD_ABSORBED: self._shield_absorbed,
            events.FULLY_BLOCKED: self._fully_blocked,
            events.SHIELD_ADDED: self._shield_added,
            events.HEALED: self._healed,
            events.DODGED: self._dodged,
            events.COOLDOWNS_REDUCED: self._cooldowns_reduced,
            events.ACTION_READY: self._action_ready,
            events.ACTION_REJECTED: self._rejected,
            events.ROUND_IDLE: self._round_idle,
            events.COMBATANT_DEFEATED: self._defeated,
            events.BATTLE_FINISHED: self._finished,
            events.INPUT_CLOSED: self._input_closed,
        }
        for name, handler in handlers.items():
            bus.subscribe(name, handler)

    def _print(self, text: str = "") -> None:
        print(text, file=self._out, flush=True)

    def render_status(self, status: BattleStatus) -> None:
        p, o = status.player, status.opponent
        self._print(f"--- Round {status.round} ({self._round_seconds:g}s) ---")
        self._print(f"  {_hp_line(p.name, p.hp, p.max_hp, p.shield)}")
        self._print(f"  {_hp_line(o.name, o.hp, o.max_hp, o.shield)}")
        for action in status.actions:
            state = "ready" if action.ready else f"cooldown {action.cooldown_seconds}s"
            icon = f"{action.icon} " if action.icon else ""
            self._print(
                f"  {icon}[{action.index}] {action.name} ({action.kind})"
                f" - {action.description} [{state}]"
            )
        self._print(f"  {_action_hint(status)}")

    # --- Handlers ---

    def _round_started(self, name: str, data: dict[str, Any]) -> None:
        self.render_status(data["status"])

    def _action_used(self, name: str, data: dict[str, Any]) -> None:
        who = "You" if data["side"] == events.PLAYER else "The opponent"
        self._print(f"> {who} used {data['name']}!")

    def _damage_dealt(self, name: str, data: dict[str, Any]) -> None:
        self._print(f"  {data['target']} takes {data['amount']} damage.")

    def _shield_absorbed(self, name: str, data: dict[str, Any]) -> None:
        self._print(f"  {data['target']}'s shield absorbs {data['amount']}.")

    def _fully_blocked(self, name: str, data: dict[str, Any]) -> None:
        self._print("  The attack is fully blocked!")

    def _shield_added(self, name: str, data: dict[str, Any]) -> None:
        self._print(f"  {data['target']} gains {data['amount']} shield.")

    def _healed(self, name: str, data: dict[str, Any]) -> None:
        if data["amount"] > 0:
            self._print(f"  {data['target']} recovers {data['amount']} HP.")
        else:
            self._print("  HP is already full; nothing healed.")

    def _dodged(self, name: str, data: dict[str, Any]) -> None:
        self._print(f"  {data['target']} dodges the attack!")

    def _cooldowns_reduced(self, name: str, data: dict[str, Any]) -> None:
        self._print(f"  All card cooldowns drop by {data['amount_ms'] / 1000:g}s.")

    def _action_ready(self, name: str, data: dict[str, Any]) -> None:
        if data["side"] == events.PLAYER:
            self._print(f"  [{data['index']}] {data['name']} is ready.")

    def _rejected(self, name: str, data: dict[str, Any]) -> None:
        self._print(f"  ! {data['message']}")

    def _round_idle(self, name: str, data: dict[str, Any]) -> None:
        who = "You" if data["side"] == events.PLAYER else "The opponent"
        self._print(f"  {who} did not act this round.")

    def _defeated(self, name: str, data: dict[str, Any]) -> None:
        self._print(f"x {data['name']} is defeated!")

    def _finished(self, name: str, data: dict[str, Any]) -> None:
        banner = {
            events.PLAYER: "Victory!",
            events.OPPONENT: "You were defeated...",
            events.DRAW: "Time is up: draw.",
        }[data["winner"]]
        self._print(f"=== {banner} ({data['rounds']} rounds) ===")
        status: BattleStatus = data["status"]
        for c in (status.player, status.opponent):
            self._print(f"  {_hp_line(c.name, c.hp, c.max_hp, c.shield)}")

    def _input_closed(self, name: str, data: dict[str, Any]) -> None:
        self._print("  (input closed; the battle continues without you)")


def _action_hint(status: BattleStatus) -> str:
    if status.phase is Phase.FINISHED:
        return "The battle is over."
    if status.card_available and status.skill_available:
        return "Play one card this round, or use a skill."
    if status.card_available:
        return "You may play one card this round."
    if status.skill_available:
        return "Skills are ready (no per-round limit)."
    if status.card_used:
        return "Card played this round; waiting for skill cooldowns..."
    return "Waiting for cooldowns..."


def _hp_line(name: str, hp: int, max_hp: int, shield: int) -> str:
    line = f"{name}: {hp}/{max_hp} HP"
    if shield > 0:
        line += f" (shield {shield})"
    return line


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skirmish",
        description="Real-time two-combatant card battle in the terminal.",
    )
    parser.add_argument(
        "--opponent", choices=sorted(OPPONENTS), default="slime",
        help="Opponent variant (default: slime)",
    )
    parser.add_argument(
        "--cards", nargs="+", default=list(catalog.DEFAULT_CARDS),
        metavar="ID", help=f"Card ids for the hand ({', '.join(catalog.card_ids())})",
    )
    parser.add_argument(
        "--skills", nargs="*", default=list(catalog.DEFAULT_SKILLS),
        metavar="ID", help=f"Skill ids to equip ({', '.join(catalog.skill_ids())})",
    )
    parser.add_argument(
        "--round-seconds", type=float, default=5.0,
        help="Round length in seconds (default: 5)",
    )
    parser.add_argument(
        "--tick-ms", type=int, default=100,
        help="Scheduler cadence in milliseconds (default: 100)",
    )
    parser.add_argument(
        "--max-rounds", type=int, default=0,
        help="End in a draw after this many rounds; 0 = unlimited",
    )
    parser.add_argument(
        "--no-restart", action="store_true",
        help="Exit after one battle instead of offering a rematch",
    )
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostics written to stderr (default: WARNING)",
    )
    return parser


def ask_restart(lines: LineQueue, clock: Clock, out: TextIO | None = None) -> bool:
    """Prompt for another battle. Lines typed before the prompt are discarded.

    Closed input counts as "no".
    """
    lines.drain()
    print("Play again? [y/N]", file=out if out is not None else sys.stdout, flush=True)
    while True:
        line = lines.poll()
        if line is not None:
            return line.strip().lower() in RESTART_ANSWERS
        if lines.closed:
            return False
        clock.sleep_ms(RESTART_POLL_MS)


def _play_battle(
    args: argparse.Namespace, config: EngineConfig, loadout: Loadout, lines: LineQueue
) -> str:
    player = Player(PLAYER_NAME, PLAYER_HP, loadout=loadout)
    opponent_cls = OPPONENTS[args.opponent]
    opponent = opponent_cls(args.opponent.title(), OPPONENT_HP[args.opponent])

    bus = SignalBus()
    ConsoleView(bus, round_seconds=args.round_seconds)
    scheduler = RoundScheduler(
        player,
        opponent,
        catalog.card("attack"),
        config=config,
        bus=bus,
        lines=lines,
    )

    print(f"Battle start! {player.name} vs {opponent.name}", flush=True)
    print(
        f"Each round lasts {args.round_seconds:g}s; one card per round, skills any time.",
        flush=True,
    )
    return scheduler.run()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = EngineConfig(
            round_ms=int(args.round_seconds * 1000),
            tick_ms=args.tick_ms,
            max_rounds=args.max_rounds,
        )
        loadout, rejected = build_loadout(args.cards, args.skills)
    except (ValueError, CatalogError) as exc:
        parser.error(str(exc))
    for entry_id in rejected:
        logger.warning("loadout full, %r not equipped", entry_id)

    lines = InputReader(sys.stdin).start()
    clock = MonotonicClock()
    battles = 0
    try:
        while True:
            if battles:
                # ids were validated above; a new battle gets fresh cooldowns
                loadout, _ = build_loadout(args.cards, args.skills)
            winner = _play_battle(args, config, loadout, lines)
            battles += 1
            if args.no_restart or not ask_restart(lines, clock):
                break
            logger.info("restarting, battle %d", battles + 1)
    except KeyboardInterrupt:
        print("\nBattle abandoned.", flush=True)
        return 130
    return 0 if winner == events.PLAYER else 1

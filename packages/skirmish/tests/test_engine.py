"""Tests for RoundScheduler: round lifecycle, pacing, and action execution."""
from __future__ import annotations

import pytest

from skirmish_actions import (
    Card,
    CooldownTimer,
    Damage,
    Heal,
    Loadout,
    ReduceAllCardCooldownMs,
    Skill,
    build_loadout,
)
from skirmish_actions import catalog
from skirmish_input import LineQueue
from skirmish_signal import SignalBus

from skirmish import events
from skirmish.combatants import GoblinRogue, Player, Slime
from skirmish.config import EngineConfig
from skirmish.engine import Phase, Rejection, RoundScheduler

NO_LOCKOUT = EngineConfig(player_initial_lockout_ms=0)
# opponent stays locked for the whole test unless stated otherwise
QUIET_OPPONENT = EngineConfig(
    player_initial_lockout_ms=0, opponent_initial_lockout_ms=60_000
)


def make_scheduler(
    clock,
    rng,
    bus: SignalBus,
    *,
    config: EngineConfig | None = None,
    lines: LineQueue | None = None,
    opponent=None,
    loadout: Loadout | None = None,
    player_hp: int = 3,
) -> RoundScheduler:
    if loadout is None:
        loadout, _ = build_loadout()
    player = Player("Hero", player_hp, loadout=loadout)
    return RoundScheduler(
        player,
        opponent if opponent is not None else Slime("Slime", 3),
        catalog.card("attack"),
        config=config,
        clock=clock,
        rng=rng,
        bus=bus,
        lines=lines,
    )


def queued(*texts: str) -> LineQueue:
    lines = LineQueue()
    for text in texts:
        lines.put(text)
    return lines


class TestOpening:
    def test_initial_lockouts(self, clock, rng, bus) -> None:
        sched = make_scheduler(clock, rng, bus)
        assert all(c.cooldown.remaining_ms == 1000 for c in sched.player.loadout.hand)
        assert sched.opponent_card.cooldown.remaining_ms == 2000
        # skills keep their own lockouts
        heal, cycle = sched.player.loadout.skills
        assert heal.is_ready()
        assert cycle.cooldown.remaining_ms == 5000

    def test_status_snapshot(self, clock, rng, bus) -> None:
        sched = make_scheduler(clock, rng, bus)
        status = sched.status()
        assert status.round == 1
        assert status.phase is Phase.IDLE
        assert (status.player.hp, status.player.max_hp) == (3, 3)
        assert status.opponent.speed == 3
        assert [a.index for a in status.actions] == [1, 2, 3, 4]
        assert [a.kind for a in status.actions] == ["card", "card", "skill", "skill"]
        assert [a.cooldown_seconds for a in status.actions] == [1, 1, 0, 5]
        assert status.opponent_action.cooldown_seconds == 2
        assert status.card_used is False
        # cards still locked, Emergency Heal ready from the start
        assert status.card_available is False
        assert status.skill_available is True

    def test_card_availability_tracks_budget(self, clock, rng, bus) -> None:
        sched = make_scheduler(clock, rng, bus, config=NO_LOCKOUT)
        sched.start_round()
        assert sched.status().card_available
        sched.use_action(1)
        # Defense is still ready, but the card budget is spent
        assert sched.player.loadout.hand[1].is_ready()
        assert not sched.status().card_available

    def test_round_started_signal(self, clock, rng, bus, recorder) -> None:
        sched = make_scheduler(clock, rng, bus)
        rnd = sched.start_round()
        assert (rnd.index, rnd.start_ms, rnd.end_ms) == (1, 0, 5000)
        assert rnd.opponent_action_at == 2000
        assert rng.randint_calls == [(0, 2700)]
        started = recorder.of(events.ROUND_STARTED)
        assert len(started) == 1
        assert started[0]["status"].phase is Phase.ROUND_ACTIVE

    def test_cannot_start_twice(self, clock, rng, bus) -> None:
        sched = make_scheduler(clock, rng, bus)
        sched.start_round()
        with pytest.raises(RuntimeError):
            sched.start_round()

    def test_step_requires_active_round(self, clock, rng, bus) -> None:
        sched = make_scheduler(clock, rng, bus)
        with pytest.raises(RuntimeError):
            sched.step()


class TestPlayerActions:
    def test_second_card_in_same_round_rejected(self, clock, rng, bus, recorder) -> None:
        sched = make_scheduler(clock, rng, bus, config=NO_LOCKOUT, lines=queued("1", "2"))
        sched.start_round()
        sched.step()

        assert sched.opponent.hp == 2
        assert sched.player.shield == 0
        rejected = recorder.of(events.ACTION_REJECTED)
        assert len(rejected) == 1
        assert rejected[0]["reason"] == Rejection.CARD_ALREADY_USED.value
        assert "already used a card this round" in rejected[0]["message"]
        assert rejected[0]["line"] == "2"
        # the rejected card was not put on cooldown
        assert sched.player.loadout.hand[1].is_ready()

    def test_skill_ignores_card_budget(self, clock, rng, bus) -> None:
        sched = make_scheduler(clock, rng, bus, config=NO_LOCKOUT)
        sched.player.hp = 2
        sched.start_round()
        assert sched.use_action(1).accepted
        result = sched.use_action(3)
        assert result.accepted
        assert result.kind == "skill"
        assert result.outcome.healed == 1
        assert sched.player.hp == 3

    def test_skill_gated_by_own_cooldown(self, clock, rng, bus) -> None:
        sched = make_scheduler(clock, rng, bus, config=NO_LOCKOUT)
        sched.start_round()
        assert sched.use_action(3).accepted
        second = sched.use_action(3)
        assert not second.accepted
        assert second.reason is Rejection.NOT_READY

    def test_skill_with_no_cooldown_is_reusable(self, clock, rng, bus, recorder) -> None:
        loadout = Loadout()
        loadout.equip_skill(Skill("Quick Patch", "", Heal(1), CooldownTimer(0)))
        sched = make_scheduler(clock, rng, bus, config=NO_LOCKOUT, loadout=loadout)
        sched.player.hp = 2
        sched.start_round()
        assert sched.use_action(1).accepted
        assert sched.use_action(1).accepted
        bus.flush()
        assert [d["amount"] for d in recorder.of(events.HEALED)] == [1, 0]

    @pytest.mark.parametrize(
        "line, reason",
        [
            ("abc", Rejection.INVALID),
            ("", Rejection.INVALID),
            ("-2", Rejection.INVALID),
            ("0", Rejection.OUT_OF_RANGE),
            ("5", Rejection.OUT_OF_RANGE),
        ],
    )
    def test_invalid_input_has_no_effect(self, clock, rng, bus, line, reason) -> None:
        sched = make_scheduler(clock, rng, bus, config=NO_LOCKOUT)
        sched.start_round()
        before = [t.remaining_ms for t in sched.player.loadout.timers()]

        result = sched.handle_line(line)

        assert not result.accepted
        assert result.reason is reason
        assert "between 1 and 4" in result.message
        assert [t.remaining_ms for t in sched.player.loadout.timers()] == before
        assert not sched.player_acted
        assert not sched.player_used_card

    def test_oversized_number_is_rejected_and_round_continues(
        self, clock, rng, bus, recorder
    ) -> None:
        sched = make_scheduler(
            clock, rng, bus, config=NO_LOCKOUT, lines=queued("9" * 5000, "1")
        )
        sched.start_round()

        assert sched.step()

        rejected = recorder.of(events.ACTION_REJECTED)
        assert len(rejected) == 1
        assert rejected[0]["reason"] in (
            Rejection.INVALID.value,
            Rejection.OUT_OF_RANGE.value,
        )
        # the next line is still read in the same step
        assert sched.opponent.hp == 2
        assert sched.phase is Phase.ROUND_ACTIVE

    def test_card_on_cooldown_rejected_then_ready_after_tick(
        self, clock, rng, bus, recorder
    ) -> None:
        lines = queued("1")
        sched = make_scheduler(clock, rng, bus, lines=lines)
        sched.start_round()
        sched.step()
        rejected = recorder.of(events.ACTION_REJECTED)
        assert rejected[0]["reason"] == Rejection.NOT_READY.value
        assert "1s left" in rejected[0]["message"]

        # cooldowns advance before input is drained in the same iteration
        clock.advance(1000)
        lines.put("1")
        sched.step()
        assert sched.opponent.hp == 2

    def test_fast_cycle_shortens_card_cooldowns(self, clock, rng, bus, recorder) -> None:
        loadout = Loadout()
        loadout.add_card(Card("Attack", "", Damage(1)))
        loadout.equip_skill(
            Skill("Cycle", "", ReduceAllCardCooldownMs(1000), CooldownTimer(20000))
        )
        sched = make_scheduler(
            clock, rng, bus, config=NO_LOCKOUT, loadout=loadout, lines=queued("1", "2")
        )
        sched.start_round()
        sched.step()
        assert loadout.hand[0].cooldown.remaining_ms == 2000
        reduced = recorder.of(events.COOLDOWNS_REDUCED)
        assert reduced == [{"side": "player", "amount_ms": 1000, "cards": 1}]

    def test_dodge_consumes_the_card(self, clock, rng, bus, recorder) -> None:
        goblin = GoblinRogue("Goblin", 4, evasion=1.0)
        sched = make_scheduler(
            clock, rng, bus, config=NO_LOCKOUT, opponent=goblin, lines=queued("1")
        )
        sched.start_round()
        sched.step()
        assert goblin.hp == 4
        assert recorder.of(events.DODGED) == [{"side": "player", "target": "Goblin"}]
        assert sched.player_used_card
        assert not sched.player.loadout.hand[0].is_ready()


class TestOpponent:
    def test_acts_once_at_planned_instant(self, clock, rng, bus, recorder) -> None:
        sched = make_scheduler(clock, rng, bus)
        sched.play_round()

        used = recorder.of(events.ACTION_USED)
        assert [d["side"] for d in used] == [events.OPPONENT]
        assert sched.player.hp == 2
        assert sched.opponent_acted
        # opponent card: used at 2000ms with a 3000ms cooldown
        assert sched.opponent_card.cooldown.remaining_ms == 0

    def test_never_acts_in_closing_buffer(self, clock, rng, bus) -> None:
        rng.offset = 10_000  # always the latest allowed instant
        hits: list[int] = []
        bus.subscribe(events.DAMAGE_DEALT, lambda n, d: hits.append(clock.now))
        sched = make_scheduler(clock, rng, bus)
        sched.play_round()
        assert hits == [4700]

    def test_forfeits_when_not_ready_at_instant(self, clock, rng, bus, recorder) -> None:
        sched = make_scheduler(clock, rng, bus)
        rnd = sched.start_round()
        assert rnd.opponent_action_at == 2000
        sched.opponent_card.cooldown.lock(2500)  # becomes ready at 2500, too late

        sched.play_round()

        assert sched.player.hp == 3
        assert not sched.opponent_acted
        idle = recorder.of(events.ROUND_IDLE)
        assert {"round": 1, "side": "opponent"} in idle

    def test_no_action_when_cooldown_outlasts_round(self, clock, rng, bus, recorder) -> None:
        sched = make_scheduler(clock, rng, bus, config=QUIET_OPPONENT)
        rnd = sched.start_round()
        assert rnd.opponent_action_at is None
        sched.play_round()
        assert sched.player.hp == 3
        assert [d["side"] for d in recorder.of(events.ROUND_IDLE)] == ["player", "opponent"]


class TestPacing:
    def test_sleep_never_passes_round_end(self, clock, rng, bus) -> None:
        config = EngineConfig(
            round_ms=1000, tick_ms=300, opponent_initial_lockout_ms=60_000
        )
        sched = make_scheduler(clock, rng, bus, config=config)
        sched.play_round()
        assert clock.sleeps == [300, 300, 300, 100]
        assert clock.now == 1000

    @pytest.mark.parametrize("tick_ms", [100, 300, 700, 5000])
    def test_cooldowns_track_elapsed_time(self, clock, rng, bus, tick_ms) -> None:
        loadout = Loadout()
        loadout.add_card(Card("Slow", "", Damage(1), CooldownTimer(8000)))
        config = EngineConfig(
            tick_ms=tick_ms, player_initial_lockout_ms=0, opponent_initial_lockout_ms=60_000
        )
        sched = make_scheduler(
            clock, rng, bus, config=config, loadout=loadout, lines=queued("1")
        )
        sched.play_round()
        assert loadout.hand[0].cooldown.remaining_ms == 3000
        assert sched.opponent_card.cooldown.remaining_ms == 55_000

    def test_input_arriving_mid_round(self, clock, rng, bus) -> None:
        lines = LineQueue()
        sched = make_scheduler(clock, rng, bus, config=QUIET_OPPONENT, lines=lines)
        hp_seen: list[int] = []
        clock.at(1250, lambda: lines.put("1"))
        clock.at(1300, lambda: hp_seen.append(sched.opponent.hp))
        sched.play_round()
        # typed at 1250, picked up by the 1300 iteration
        assert hp_seen == [3]
        assert sched.opponent.hp == 2


    def test_ready_signal_when_cooldowns_expire(self, clock, rng, bus, recorder) -> None:
        sched = make_scheduler(clock, rng, bus)
        ready_at: list[tuple[int, str, int, str]] = []
        bus.subscribe(
            events.ACTION_READY,
            lambda n, d: ready_at.append((clock.now, d["side"], d["index"], d["name"])),
        )
        sched.play_round()

        assert ready_at == [
            (1000, "player", 1, "Attack"),
            (1000, "player", 2, "Defense"),
            (2000, "opponent", 1, "Attack"),
            (5000, "player", 4, "Fast Cycle"),
            (5000, "opponent", 1, "Attack"),
        ]


class TestSettling:
    def test_shields_cleared_between_rounds(self, clock, rng, bus) -> None:
        sched = make_scheduler(
            clock, rng, bus, config=QUIET_OPPONENT, lines=queued("2")
        )
        mid_round: list[int] = []
        clock.at(4000, lambda: mid_round.append(sched.player.shield))
        phase = sched.play_round()
        assert mid_round == [1]
        assert sched.player.shield == 0
        assert sched.opponent.shield == 0
        assert phase is Phase.IDLE
        assert sched.round_index == 2

    def test_shield_blocks_opponent_attack(self, clock, rng, bus, recorder) -> None:
        sched = make_scheduler(clock, rng, bus, config=NO_LOCKOUT, lines=queued("2"))
        sched.play_round()
        assert sched.player.hp == 3
        assert recorder.of(events.SHIELD_ABSORBED)[0]["amount"] == 1
        assert len(recorder.of(events.FULLY_BLOCKED)) == 1
        assert recorder.of(events.DAMAGE_DEALT) == []

    def test_lines_after_round_end_are_deferred(self, clock, rng, bus, recorder) -> None:
        lines = LineQueue()
        sched = make_scheduler(clock, rng, bus, config=QUIET_OPPONENT, lines=lines)
        sched.play_round()
        lines.put("1")
        assert lines.pending() == 1

        sched.play_round()

        names = recorder.names()
        second_start = [i for i, n in enumerate(names) if n == events.ROUND_STARTED][1]
        used_at = names.index(events.ACTION_USED)
        assert used_at > second_start
        assert sched.opponent.hp == 2

    def test_round_events_order(self, clock, rng, bus, recorder) -> None:
        sched = make_scheduler(clock, rng, bus, config=QUIET_OPPONENT)
        sched.play_round()
        assert recorder.names()[-3:] == [events.ROUND_IDLE, events.ROUND_IDLE, events.ROUND_ENDED]


class TestBattle:
    def test_opponent_wins_without_player_input(self, clock, rng, bus, recorder) -> None:
        sched = make_scheduler(clock, rng, bus)
        winner = sched.run()

        assert winner == "opponent"
        assert sched.winner == "opponent"
        assert sched.phase is Phase.FINISHED
        assert sched.player.hp == 0
        assert clock.now == 10_000
        assert recorder.of(events.COMBATANT_DEFEATED) == [{"side": "player", "name": "Hero"}]
        finished = recorder.of(events.BATTLE_FINISHED)
        assert finished[0]["winner"] == "opponent"
        assert finished[0]["rounds"] == 3
        assert len(recorder.of(events.ROUND_ENDED)) == 2

    def test_player_wins_mid_round(self, clock, rng, bus, recorder) -> None:
        sched = make_scheduler(
            clock, rng, bus, config=NO_LOCKOUT, opponent=Slime("Slime", 1),
            lines=queued("1", "2"),
        )
        assert sched.run() == "player"
        assert clock.now == 0
        assert sched.round_index == 1
        # the battle ended before the second line was read
        assert recorder.of(events.ACTION_REJECTED) == []
        with pytest.raises(RuntimeError):
            sched.start_round()
        assert sched.use_action(1).reason is Rejection.BATTLE_OVER

    def test_max_rounds_ends_in_draw(self, clock, rng, bus, recorder) -> None:
        config = EngineConfig(max_rounds=2, opponent_initial_lockout_ms=60_000)
        sched = make_scheduler(clock, rng, bus, config=config)
        assert sched.run() == "draw"
        assert sched.round_index == 3
        assert recorder.of(events.BATTLE_FINISHED)[0]["rounds"] == 2

    def test_closed_input_is_not_fatal(self, clock, rng, bus, recorder) -> None:
        lines = queued("1")
        lines.close()
        config = EngineConfig(
            max_rounds=3, player_initial_lockout_ms=0, opponent_initial_lockout_ms=60_000
        )
        sched = make_scheduler(clock, rng, bus, config=config, lines=lines)
        assert sched.run() == "draw"
        assert len(recorder.of(events.INPUT_CLOSED)) == 1
        assert sched.opponent.hp == 2
        assert clock.now == 15_000

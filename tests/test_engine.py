"""Test the round and turn scheduler."""
from typing import Callable, List, Optional

import pytest

from battle.engine import BattleInterrupted, Engine, Phase, simulate
from battle.model import Army, Unit


class Scripted:
    """Attack program driven by a callback; records every call."""

    def __init__(self, unit: Unit, action: Optional[Callable[[Unit], Optional[Unit]]] = None,
                 journal: Optional[List[str]] = None):
        self.unit = unit
        self.action = action
        self.journal = journal
        self.calls = 0
        unit.program = self

    def attack(self) -> Optional[Unit]:
        self.calls += 1
        if self.journal is not None:
            self.journal.append(self.unit.name)
        return self.action(self.unit) if self.action else None


class RecordingLog:
    def __init__(self):
        self.calls = []

    def print_battle_log(self, attacker, target):
        self.calls.append((attacker, target))


def make_unit(name: str, attack: int = 1, hp: int = 10, x: int = 0, y: int = 0) -> Unit:
    return Unit(name=name, unit_type="Swordsman", health=hp, base_attack=attack, cost=10, x=x, y=y)


def strike(target: Unit, dmg: int) -> Callable[[Unit], Unit]:
    def act(_: Unit) -> Unit:
        target.health -= dmg
        return target
    return act


def shuffle(unit: Unit) -> None:
    """Step right on even x, left on odd x."""
    unit.x += 1 if unit.x % 2 == 0 else -1


def test_missing_army_is_a_noop():
    """A missing roster means nothing happens."""
    army = Army(units=[make_unit("a")])
    Scripted(army.units[0], shuffle)
    eng = simulate(None, army)
    assert eng.phase is Phase.BATTLE_OVER
    assert eng.round_no == 0
    assert army.units[0].program.calls == 0
    assert simulate(army, None).actions == 0


def test_empty_army_ends_before_first_round():
    """An army without living units ends the battle at once."""
    player = Army(units=[make_unit("p", hp=0)])
    computer = Army(units=[make_unit("c")])
    eng = simulate(player, computer)
    assert eng.round_no == 0
    assert eng.winner == "COMPUTER"
    assert player.units == []


def test_idle_battle_stops_after_one_round():
    """If nobody attacks or moves, the battle ends after exactly one round."""
    player = Army(units=[make_unit("p1"), make_unit("p2")])
    computer = Army(units=[make_unit("c1"), make_unit("c2")])
    for u in player.units + computer.units:
        Scripted(u)

    eng = simulate(player, computer)

    assert eng.round_no == 1
    assert eng.actions == 4
    assert eng.stalled
    assert eng.winner is None
    assert all(u.program.calls == 1 for u in player.units + computer.units)


def test_single_kill_ends_battle_after_one_action():
    """One lethal attack ends the battle; the computer moves first."""
    p = make_unit("p", attack=1, hp=5)
    c = make_unit("c", attack=1, hp=5)
    Scripted(p, strike(c, 100))
    Scripted(c, strike(p, 100))
    player, computer = Army(units=[p]), Army(units=[c])
    log = RecordingLog()

    eng = simulate(player, computer, battle_log=log)

    assert eng.actions == 1
    assert eng.round_no == 1
    assert computer.units == [c]
    assert player.units == []
    assert p.program.calls == 0
    assert log.calls == [(c, p)]
    assert eng.winner == "COMPUTER"
    assert not eng.stalled


def test_turn_order_alternates_by_attack():
    """Sides alternate, each ordered by descending attack with stable ties."""
    journal: List[str] = []
    player = Army(units=[make_unit("p5", attack=5), make_unit("p9a", attack=9), make_unit("p9b", attack=9)])
    computer = Army(units=[make_unit("c3", attack=3), make_unit("c7", attack=7)])
    for u in player.units + computer.units:
        Scripted(u, shuffle, journal)

    eng = Engine(player, computer)
    evts = eng.play_round()

    assert journal == ["c7", "p9a", "c3", "p9b", "p5"]
    assert evts[0].kind == "RoundStarted"
    assert evts[0].data == {"PLAYER": ["p9a", "p9b", "p5"], "COMPUTER": ["c7", "c3"]}
    assert evts[-1].kind == "RoundEnded"
    assert eng.phase is Phase.ROUND_OVER

    eng.play_round()
    assert journal[5:] == ["c7", "p9a", "c3", "p9b", "p5"]
    assert eng.round_no == 2


def test_phases_while_one_side_drains():
    """When one side is out of actors the other acts back to back."""
    journal: List[str] = []
    player = Army(units=[make_unit("p1", attack=3), make_unit("p2", attack=2), make_unit("p3", attack=1)])
    computer = Army(units=[make_unit("c1")])
    for u in player.units + computer.units:
        Scripted(u, shuffle, journal)

    eng = Engine(player, computer)
    eng.step()
    assert eng.phase is Phase.TURN_READY
    assert [u.name for u in eng.pending("PLAYER")] == ["p1", "p2", "p3"]
    eng.step()  # c1
    assert eng.phase is Phase.ROUND_DRAINING
    assert eng.pending("COMPUTER") == []
    assert [u.name for u in eng.pending("PLAYER")] == ["p1", "p2", "p3"]
    eng.step()  # p1
    eng.step()  # p2
    assert eng.phase is Phase.ROUND_DRAINING
    eng.step()  # p3
    assert eng.phase is Phase.ROUND_OVER
    assert eng.pending("PLAYER") == []
    assert journal == ["c1", "p1", "p2", "p3"]


def test_dead_unit_forfeits_its_turn():
    """A unit found dead at its turn is skipped without logging or progress."""
    c1 = make_unit("c1", attack=9)
    c2 = make_unit("c2", attack=1)
    p = make_unit("p")
    for u in (c1, c2, p):
        Scripted(u, shuffle)
    log = RecordingLog()
    eng = Engine(Army(units=[p]), Army(units=[c1, c2]), battle_log=log)

    eng.step()
    c1.health = 0
    evts = eng.step()

    assert [(e.kind, e.data) for e in evts] == [
        ("TurnForfeited", {"side": "COMPUTER", "unit": "c1"}),
        ("Destroyed", {"side": "COMPUTER", "unit": "c1"}),
    ]
    assert eng.armies["COMPUTER"].units == [c2]
    assert c1.program.calls == 0
    assert eng.actions == 0
    assert not eng.progress
    assert eng.turn == "PLAYER"
    assert log.calls == []

    eng.step()
    assert p.program.calls == 1


def test_army_killed_between_steps_is_a_wipe_not_a_stall():
    """An army wiped out outside a turn leaves its roster and loses the battle."""
    p = make_unit("p")
    c = make_unit("c")
    Scripted(p, shuffle)
    Scripted(c, shuffle)
    player, computer = Army(units=[p]), Army(units=[c])
    eng = Engine(player, computer)

    eng.step()
    c.health = 0
    evts = eng.step()

    assert [e.kind for e in evts] == ["Destroyed", "RoundEnded", "BattleOver"]
    assert eng.phase is Phase.BATTLE_OVER
    assert computer.units == []
    assert player.units == [p]
    assert not eng.stalled
    assert eng.winner == "PLAYER"
    assert c.program.calls == 0


def test_killed_unit_does_not_act_later_in_round():
    """Dead units leave the rosters and the round's turn order."""
    p1 = make_unit("p1", attack=5)
    p2 = make_unit("p2", attack=1)
    c = make_unit("c", attack=9)
    Scripted(c, strike(p1, 50))
    Scripted(p1, shuffle)
    Scripted(p2, shuffle)
    player = Army(units=[p1, p2])

    eng = Engine(player, Army(units=[c]))
    evts = eng.play_round()

    assert p1.program.calls == 0
    assert p2.program.calls == 1
    assert player.units == [p2]
    assert ("Destroyed", {"side": "PLAYER", "unit": "p1"}) in [(e.kind, e.data) for e in evts]


def test_battle_runs_until_an_army_is_gone():
    """Rounds continue while both armies have living units."""
    p = make_unit("p", attack=1, hp=3)
    c = make_unit("c", attack=2, hp=50)
    Scripted(c, strike(p, 1))
    Scripted(p, shuffle)
    log = RecordingLog()

    eng = simulate(Army(units=[p]), Army(units=[c]), battle_log=log)

    assert eng.round_no == 3
    assert eng.actions == 5
    assert len(log.calls) == 3
    assert eng.winner == "COMPUTER"


def test_moving_counts_as_progress():
    """A move without an attack keeps the battle going."""
    p = make_unit("p")
    c = make_unit("c")
    Scripted(p)
    Scripted(c, shuffle)
    eng = Engine(Army(units=[p]), Army(units=[c]))
    evts = eng.play_round()
    assert eng.progress
    assert "Moved" in [e.kind for e in evts]
    assert "Idle" in [e.kind for e in evts]
    assert eng.phase is Phase.ROUND_OVER


def test_should_stop_interrupts_between_rounds():
    """A stop request is honored between rounds and raises."""
    p = make_unit("p")
    c = make_unit("c")
    Scripted(p, shuffle)
    Scripted(c, shuffle)
    eng = Engine(Army(units=[p]), Army(units=[c]))

    with pytest.raises(BattleInterrupted):
        eng.run(should_stop=lambda: eng.round_no >= 2)

    assert eng.round_no == 2
    assert eng.phase is Phase.ROUND_OVER
    assert eng.actions == 4


def test_unit_without_program_idles():
    """A unit with no attack program spends its turn idle."""
    eng = simulate(Army(units=[make_unit("p")]), Army(units=[make_unit("c")]))
    assert eng.stalled
    assert eng.round_no == 1

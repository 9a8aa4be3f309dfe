from enum import Enum
from typing import Callable, Dict, List, Optional, Set
from .model import Army, BattleLog, Event, Side, Unit

SIDES: tuple = ("PLAYER", "COMPUTER")


class Phase(Enum):
    """Scheduler state"""
    TURN_READY = "turn_ready"          # both sides still have units to act this round
    ROUND_DRAINING = "round_draining"  # only one side has units left to act
    ROUND_OVER = "round_over"          # between rounds
    BATTLE_OVER = "battle_over"


class BattleInterrupted(Exception):
    """Raised when the caller asks to stop a battle between rounds."""


def _other(side: Side) -> Side:
    return "PLAYER" if side == "COMPUTER" else "COMPUTER"


class Engine:
    """Deterministic round/turn scheduler for a battle between two armies.

    Every round both armies' living units are ordered by descending base
    attack and act at most once, the sides taking turns with the computer
    first. Dead units are removed from the armies in place after every
    action. The battle ends when an army is wiped out or a whole round
    passes without an attack or a move.
    """

    def __init__(self, player_army: Optional[Army], computer_army: Optional[Army],
                 battle_log: Optional[BattleLog] = None):
        self.armies: Dict[Side, Optional[Army]] = {"PLAYER": player_army, "COMPUTER": computer_army}
        self.battle_log = battle_log
        self.round_no = 0
        self.actions = 0
        self.stalled = False
        self.phase = Phase.ROUND_OVER
        self._turn: Side = "COMPUTER"
        self._progress = False
        self._order: Dict[Side, List[Unit]] = {s: [] for s in SIDES}
        self._acted: Dict[Side, Set[Unit]] = {s: set() for s in SIDES}
        if player_army is None or computer_army is None:
            self.phase = Phase.BATTLE_OVER

    @property
    def turn(self) -> Side:
        """Side whose turn comes next."""
        return self._turn

    @property
    def progress(self) -> bool:
        """Whether the current round has seen an attack or a move."""
        return self._progress

    @property
    def winner(self) -> Optional[Side]:
        """Only side with living units once the battle is over, else None."""
        if self.phase is not Phase.BATTLE_OVER:
            return None
        alive = [s for s in SIDES if self._has_alive(s)]
        return alive[0] if len(alive) == 1 else None

    def pending(self, side: Side) -> List[Unit]:
        """Units of a side still due to act this round, in turn order."""
        return [u for u in self._order[side] if u not in self._acted[side]]

    def _has_alive(self, side: Side) -> bool:
        army = self.armies[side]
        return army is not None and any(u is not None and u.is_alive for u in army.units)

    def _both_alive(self) -> bool:
        return self._has_alive("PLAYER") and self._has_alive("COMPUTER")

    def _refresh_order(self) -> None:
        for side in SIDES:
            self._order[side] = sorted(self.armies[side].alive(), key=lambda u: -u.base_attack)

    def _next_pending(self, side: Side) -> Optional[Unit]:
        for u in self._order[side]:
            if u not in self._acted[side]:
                return u
        return None

    def _open_round(self) -> List[Event]:
        """Start a new round, or end the battle if an army is gone."""
        if not self._both_alive():
            return self._remove_dead() + self._end_battle()
        self.round_no += 1
        self._acted = {s: set() for s in SIDES}
        self._refresh_order()
        self._turn = "COMPUTER"
        self._progress = False
        evts = [Event("RoundStarted", self.round_no,
                      {side: [u.name for u in self._order[side]] for side in SIDES})]
        return evts + self._settle()

    def _take_turn(self) -> List[Event]:
        """Let the next unit act."""
        if not self._both_alive():
            evts = self._remove_dead()
            self._refresh_order()
            return evts + self._close_round()

        side = self._turn
        unit = self._next_pending(side)
        if unit is None:
            side = _other(side)
            self._turn = side
            unit = self._next_pending(side)
            if unit is None:
                return self._close_round()
        self._acted[side].add(unit)

        # Died after the order was computed: the turn is spent doing nothing.
        if not unit.is_alive:
            self._turn = _other(side)
            evts = [Event("TurnForfeited", self.round_no, {"side": side, "unit": unit.name})]
            evts += self._remove_dead()
            self._refresh_order()
            return evts + self._settle()

        before = unit.pos
        target = unit.program.attack() if unit.program is not None else None
        after = unit.pos
        self.actions += 1

        evts: List[Event] = []
        if target is not None:
            if self.battle_log is not None:
                self.battle_log.print_battle_log(unit, target)
            evts.append(Event("Attack", self.round_no,
                              {"side": side, "attacker": unit.name, "target": target.name,
                               "target_hp": target.health}))
        if before != after:
            evts.append(Event("Moved", self.round_no,
                              {"side": side, "unit": unit.name, "from": list(before), "to": list(after)}))
        if target is None and before == after:
            evts.append(Event("Idle", self.round_no, {"side": side, "unit": unit.name}))
        else:
            self._progress = True

        evts += self._remove_dead()
        self._refresh_order()
        self._turn = _other(side)
        return evts + self._settle()

    def _remove_dead(self) -> List[Event]:
        """Drop dead units from both armies and from the acted sets."""
        evts: List[Event] = []
        for side in SIDES:
            army = self.armies[side]
            for u in army.units:
                if u is not None and not u.is_alive:
                    evts.append(Event("Destroyed", self.round_no, {"side": side, "unit": u.name}))
            army.units[:] = army.alive()
            self._acted[side] = {u for u in self._acted[side] if u.is_alive}
        return evts

    def _settle(self) -> List[Event]:
        """Pick the running phase, or close the round if nobody is left to act."""
        waiting = [s for s in SIDES if self._next_pending(s) is not None]
        if not waiting or not self._both_alive():
            return self._close_round()
        self.phase = Phase.TURN_READY if len(waiting) == 2 else Phase.ROUND_DRAINING
        return []

    def _close_round(self) -> List[Event]:
        self.phase = Phase.ROUND_OVER
        evts = [Event("RoundEnded", self.round_no, {"progress": self._progress})]
        if not self._both_alive():
            return evts + self._end_battle()
        if not self._progress:
            self.stalled = True
            print(f"[Engine] WARNING: round {self.round_no} made no progress, ending battle")
            evts.append(Event("Stalled", self.round_no, {}))
            return evts + self._end_battle()
        return evts

    def _end_battle(self) -> List[Event]:
        self.phase = Phase.BATTLE_OVER
        return [Event("BattleOver", self.round_no,
                      {"winner": self.winner, "rounds": self.round_no,
                       "actions": self.actions, "stalled": self.stalled})]

    def step(self) -> List[Event]:
        """Advance the battle by one transition: open a round or play one turn."""
        if self.phase is Phase.BATTLE_OVER:
            return []
        if self.phase is Phase.ROUND_OVER:
            return self._open_round()
        return self._take_turn()

    def play_round(self) -> List[Event]:
        """Play turns until the current (or next) round is over."""
        evts: List[Event] = []
        if self.phase is Phase.ROUND_OVER:
            evts += self.step()
        while self.phase in (Phase.TURN_READY, Phase.ROUND_DRAINING):
            evts += self.step()
        return evts

    def run(self, should_stop: Optional[Callable[[], bool]] = None) -> "Engine":
        """Play the battle to the end.

        should_stop is polled between rounds; when it returns True the battle
        is abandoned with BattleInterrupted.
        """
        while self.phase is not Phase.BATTLE_OVER:
            if should_stop is not None and self.phase is Phase.ROUND_OVER and should_stop():
                raise BattleInterrupted(f"battle stopped after round {self.round_no}")
            self.step()
        return self


def simulate(player_army: Optional[Army], computer_army: Optional[Army],
             battle_log: Optional[BattleLog] = None) -> Engine:
    """Run a whole battle between two armies; does nothing if one is missing."""
    return Engine(player_army, computer_army, battle_log).run()

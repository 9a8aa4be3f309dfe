from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Protocol, Tuple

Side = Literal["PLAYER", "COMPUTER"]
Position = Tuple[int, int]  # (x, y) grid cell


class AttackProgram(Protocol):
    """Per-unit behavior invoked once per turn.

    Performs an attack or a move and returns the attacked unit, or None
    when no attack happened.
    """

    def attack(self) -> Optional["Unit"]:
        ...


class BattleLog(Protocol):
    """Optional sink notified of every attack."""

    def print_battle_log(self, attacker: "Unit", target: "Unit") -> None:
        ...


@dataclass(eq=False)
class Unit:
    name: str
    unit_type: str
    health: int
    base_attack: int
    cost: int
    x: int
    y: int
    attack_type: str = ""
    attack_bonuses: Dict[str, float] = field(default_factory=dict)
    defence_bonuses: Dict[str, float] = field(default_factory=dict)
    program: Optional[AttackProgram] = None

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    @property
    def pos(self) -> Position:
        return (self.x, self.y)


@dataclass
class Army:
    units: List[Unit] = field(default_factory=list)
    points: int = 0

    def alive(self) -> List[Unit]:
        """Living units in roster order."""
        return [u for u in self.units if u is not None and u.is_alive]


@dataclass
class Event:
    kind: str
    round_no: Optional[int]  # None when recorded outside the engine
    data: Dict

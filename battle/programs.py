from typing import List, Optional, Tuple
from .model import Army, Position, Unit
from .pathfinding import find_path
from .targeting import group_by_row, suitable_targets


class ClosestTargetProgram:
    """Attack the nearest reachable uncovered enemy, or walk one cell towards it.

    Enemies are filtered with the row cover rule, then ranked by route length
    through all living units. An adjacent target (diagonals included) takes
    base_attack damage.
    """

    def __init__(self, unit: Unit, enemies: Army, everyone: List[Army], is_left_army_target: bool):
        self.unit = unit
        self.enemies = enemies
        self.everyone = everyone
        self.is_left_army_target = is_left_army_target

    def _obstacles(self) -> List[Unit]:
        return [u for army in self.everyone for u in army.units]

    def choose(self) -> Optional[Tuple[Unit, List[Position]]]:
        """Return (target, path) for the closest reachable candidate."""
        rows = group_by_row(self.enemies.alive())
        candidates = suitable_targets(rows, self.is_left_army_target)
        obstacles = self._obstacles()

        best: Optional[Unit] = None
        best_path: List[Position] = []
        for t in candidates:
            path = find_path(self.unit, t, obstacles)
            if not path:
                continue
            if best is None or len(path) < len(best_path):
                best, best_path = t, path
        if best is None:
            return None
        return best, best_path

    def attack(self) -> Optional[Unit]:
        if not self.unit.is_alive:
            return None
        choice = self.choose()
        if choice is None:
            return None
        target, path = choice
        if len(path) <= 2:
            target.health -= self.unit.base_attack
            return target
        self.unit.x, self.unit.y = path[1]
        return None

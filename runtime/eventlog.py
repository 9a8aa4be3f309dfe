from typing import Callable, List, Optional, Tuple
from battle.model import Event, Unit


class EventLog:
    """Append-only event storage for battle replay and streaming.

    Also usable as the engine's battle log: every attack is recorded as a
    BattleLog event, stamped with the round reported by round_source (or
    None without one).
    """

    def __init__(self, round_source: Optional[Callable[[], int]] = None):
        self._log: List[Event] = []
        self.round_source = round_source

    def __len__(self) -> int:
        return len(self._log)

    def append_many(self, evts: List[Event]) -> Tuple[int, int]:
        """Append events and return (start_offset, end_offset)."""
        start = len(self._log)
        self._log.extend(evts)
        end = len(self._log) - 1
        return start, end

    def since(self, offset: int, limit: int = 1000) -> tuple[list[Event], int]:
        """Return events starting from offset, up to limit."""
        offset = max(0, offset)
        chunk = self._log[offset: offset + limit]
        return chunk, offset + len(chunk)

    def print_battle_log(self, attacker: Unit, target: Unit) -> None:
        round_no = self.round_source() if self.round_source is not None else None
        self._log.append(Event("BattleLog", round_no, {"attacker": attacker.name, "target": target.name,
                                                       "target_hp": target.health}))


class ConsoleBattleLog:
    """Prints one line per attack."""

    def print_battle_log(self, attacker: Unit, target: Unit) -> None:
        print(f"[Battle] {attacker.name} ({attacker.x},{attacker.y}) -> "
              f"{target.name} ({target.x},{target.y}) hp={target.health}")

from typing import Dict, Iterable, List, Optional, Sequence, Set
from .model import Unit


def group_by_row(units: Iterable[Optional[Unit]]) -> List[List[Unit]]:
    """Group units into rows sharing an x coordinate, ascending by x."""
    rows: Dict[int, List[Unit]] = {}
    for u in units:
        if u is None:
            continue
        rows.setdefault(u.x, []).append(u)
    return [rows[x] for x in sorted(rows)]


def suitable_targets(units_by_row: Optional[Sequence[Optional[Sequence[Optional[Unit]]]]],
                     is_left_army_target: bool) -> List[Unit]:
    """Return the living units that are not covered by a neighbor in their row.

    A unit is covered when another living unit of the same row sits on the
    adjacent y coordinate: y - 1 when targeting the left army, y + 1
    otherwise. Every living unit of the row counts as cover, whichever army
    it belongs to.

    Runs in O(N) over the total number of units; inputs are not modified.
    """
    if not units_by_row:
        return []

    neighbor_dy = -1 if is_left_army_target else 1
    result: List[Unit] = []

    for row in units_by_row:
        if not row:
            continue

        alive_ys: Set[int] = {u.y for u in row if u is not None and u.is_alive}

        for u in row:
            if u is None or not u.is_alive:
                continue
            if u.y + neighbor_dy not in alive_ys:
                result.append(u)

    return result

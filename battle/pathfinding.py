"""Shortest route search on the fixed battle grid.

Breadth-first search over 8 neighbors with unit edge weight, so a diagonal
step costs the same as an orthogonal one. Cells occupied by living units are
obstacles, except the attacker's and the target's own cells.
"""
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional, Tuple

import numpy as np

from .model import Position, Unit

WIDTH = 27
HEIGHT = 21

# Exploration order decides which of several equally short routes is returned.
DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (1, 0), (-1, 0), (0, 1), (0, -1),
    (1, 1), (1, -1), (-1, 1), (-1, -1),
)


def in_bounds(x: int, y: int) -> bool:
    return 0 <= x < WIDTH and 0 <= y < HEIGHT


def obstacle_mask(units: Optional[Iterable[Optional[Unit]]]) -> np.ndarray:
    """Boolean WIDTH x HEIGHT grid marking cells held by living units."""
    blocked = np.zeros((WIDTH, HEIGHT), dtype=bool)
    if units is None:
        return blocked
    for u in units:
        if u is None or not u.is_alive:
            continue
        if in_bounds(u.x, u.y):
            blocked[u.x, u.y] = True
    return blocked


def find_path(attack_unit: Optional[Unit], target_unit: Optional[Unit],
              existing_units: Optional[Iterable[Optional[Unit]]]) -> List[Position]:
    """Return the cells from the attacker to the target, both inclusive.

    An empty list means there is no route: a missing unit, an endpoint off
    the grid, or every way blocked.
    """
    if attack_unit is None or target_unit is None:
        return []

    start = attack_unit.pos
    goal = target_unit.pos
    if not in_bounds(*start) or not in_bounds(*goal):
        return []

    blocked = obstacle_mask(existing_units)
    blocked[start] = False
    blocked[goal] = False

    visited = np.zeros((WIDTH, HEIGHT), dtype=bool)
    parent: Dict[Position, Position] = {}

    queue: Deque[Position] = deque([start])
    visited[start] = True

    while queue:
        cur = queue.popleft()
        if cur == goal:
            return _build_path(parent, start, cur)

        cx, cy = cur
        for dx, dy in DIRECTIONS:
            nxt = (cx + dx, cy + dy)
            if not in_bounds(*nxt):
                continue
            if visited[nxt] or blocked[nxt]:
                continue
            visited[nxt] = True
            parent[nxt] = cur
            queue.append(nxt)

    return []


def _build_path(parent: Dict[Position, Position], start: Position, end: Position) -> List[Position]:
    path = [end]
    cur = end
    while cur != start:
        cur = parent[cur]
        path.append(cur)
    path.reverse()
    return path

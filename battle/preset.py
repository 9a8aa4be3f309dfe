"""Greedy, budget-limited army generation from unit templates.

Templates are ranked by attack per point, then health per point; the
generator adds one unit per template per pass until the budget, the per-type
limit or the free cells of the deployment zone run out.
"""
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

from .model import Army, Position, Unit
from .rng import DRNG

MAX_UNITS_PER_TYPE = 11

# Deployment zone: three leftmost columns over the full field height.
PRESET_X_FROM = 0
PRESET_X_TO = 2  # inclusive
FIELD_HEIGHT = 21


def _ratio(value: int, cost: int) -> float:
    if cost <= 0:
        return 0.0
    return value / cost


def template_score(u: Unit) -> Tuple[float, float]:
    """(attack per point, health per point); higher is better."""
    return (_ratio(u.base_attack, u.cost), _ratio(u.health, u.cost))


def best_templates(templates: Iterable[Optional[Unit]]) -> List[Unit]:
    """Keep the best scoring template of each unit type, first seen wins ties."""
    best: Dict[str, Unit] = {}
    for u in templates:
        if u is None:
            continue
        cur = best.get(u.unit_type)
        if cur is None or template_score(u) > template_score(cur):
            best[u.unit_type] = u
    return list(best.values())


def free_positions(rng: DRNG) -> List[Position]:
    cells = [(x, y) for x in range(PRESET_X_FROM, PRESET_X_TO + 1) for y in range(FIELD_HEIGHT)]
    return rng.shuffled(cells)


def generate_preset(templates: Optional[List[Optional[Unit]]], max_points: int,
                    rng: Optional[DRNG] = None, max_units_per_type: int = MAX_UNITS_PER_TYPE) -> Army:
    """Build an army worth at most max_points from the given templates."""
    if not templates or max_points <= 0:
        return Army(units=[], points=0)

    ranked = best_templates(templates)
    if not ranked:
        return Army(units=[], points=0)

    rng = rng or DRNG(0)
    # Random tie-break so equally rated templates do not always come out in the same order.
    tie = {id(t): rng.uniform(0.0, 1.0) for t in ranked}
    ranked.sort(key=lambda t: (-template_score(t)[0], -template_score(t)[1], tie[id(t)]))

    positions = free_positions(rng)
    pos_idx = 0
    type_count: Dict[str, int] = {}
    units: List[Unit] = []
    points = 0

    added = True
    while added:
        added = False
        for t in ranked:
            cnt = type_count.get(t.unit_type, 0)
            if cnt >= max_units_per_type:
                continue
            if points + t.cost > max_points:
                continue
            if pos_idx >= len(positions):
                break

            x, y = positions[pos_idx]
            pos_idx += 1
            units.append(replace(t, name=f"{t.unit_type} {cnt + 1}", x=x, y=y, program=None,
                                 attack_bonuses=dict(t.attack_bonuses),
                                 defence_bonuses=dict(t.defence_bonuses)))
            points += t.cost
            type_count[t.unit_type] = cnt + 1
            added = True

    return Army(units=units, points=points)

from __future__ import annotations

import random

from board.units import UnitID
from skirmish.battlefield import Battlefield
from skirmish.combat import RNG


def wander(battlefield: Battlefield, unit_id: UnitID, rng: RNG | None = None) -> bool:
    """Move `unit_id` to a random spot that uses up exactly its movements.

    Attacks are never chosen. Returns False when there is nowhere to go.
    """
    r = rng or random.Random()
    unit = battlefield.get_unit(unit_id)
    target_cost = unit.movements

    choices = [
        pos for pos, a in sorted(battlefield.reachable_positions(unit_id).items(), key=lambda kv: kv[0].as_tuple())
        if not a.is_attack and a.cost == target_cost
    ]
    if not choices:
        return False

    target = choices[r.randint(0, len(choices) - 1)]
    ok, _ = battlefield.move_unit_to(unit_id, target)
    return ok

from __future__ import annotations

from dataclasses import dataclass
from enum import Flag, auto
from typing import Callable, Dict, Optional

from board.hexpos import Pos, PosPath
from board.paths import PathEnumerator
from board.queries import TerrainQuery, UnitQuery
from board.units import PlayerID, UnitID


class Hindrance(Flag):
    """What stands in the way of a mover at a given position."""

    NONE = 0
    OCCUPIED = auto()          # a unit of any owner sits there
    ZONE_OF_CONTROL = auto()   # an enemy sits there or next to it


HindranceLookup = Callable[[Pos], Hindrance]


def is_enemy(units: UnitQuery, unit_id: Optional[UnitID], owner: PlayerID) -> bool:
    return unit_id is not None and units.owner_of(unit_id) != owner


def hindrances(pos: Pos, owner: PlayerID, units: UnitQuery) -> Hindrance:
    """Hindrances at `pos` as seen by a unit belonging to `owner`."""
    found = Hindrance.NONE
    occupant = units.unit_at(pos)
    if occupant is not None:
        found |= Hindrance.OCCUPIED
        if units.owner_of(occupant) != owner:
            return found | Hindrance.ZONE_OF_CONTROL

    for n in pos.around():
        if is_enemy(units, units.unit_at(n), owner):
            return found | Hindrance.ZONE_OF_CONTROL
    return found


@dataclass(frozen=True, slots=True)
class PathAssessment:
    """A path judged against the battlefield, relative to its mover's owner.

    could_be_reachable: False means no extension of this path can be reachable.
    is_exhausting: the path steps from one enemy ZOC cell straight into another
      (destination included), which ends the mover's turn whatever the cost.
    """

    path: PosPath
    cost: int
    could_be_reachable: bool
    is_reachable: bool
    is_exhausting: bool
    is_attack: bool
    ends_on_enemy: bool

    @property
    def destination(self) -> Pos:
        return self.path.destination

    @property
    def staging(self) -> Pos:
        """Where an attacker stands when this path is an attack."""
        before = self.path.before_destination
        return before if before is not None else self.path.origin

    def move_cost(self, budget: int) -> int:
        """Movement points actually deducted when taking this path."""
        if self.is_exhausting:
            return budget
        return min(self.cost, budget)


def assess_path(
    path: PosPath,
    owner: PlayerID,
    terrain: TerrainQuery,
    units: UnitQuery,
    *,
    hindrance_of: Optional[HindranceLookup] = None,
) -> PathAssessment:
    lookup = hindrance_of or (lambda p: hindrances(p, owner, units))
    cells = path.stack
    zoc = [Hindrance.ZONE_OF_CONTROL in lookup(p) for p in cells]

    origin_occupant = units.unit_at(path.origin)
    could_be_reachable = origin_occupant is not None and units.owner_of(origin_occupant) == owner

    if could_be_reachable and not all(terrain.is_passable(p) for p in cells):
        could_be_reachable = False

    # ZOC -> ZOC moves are only allowed as the last step
    if could_be_reachable and any(zoc[i] and zoc[i + 1] for i in range(len(cells) - 2)):
        could_be_reachable = False

    # Enemy cells can be attacked, never walked through
    if could_be_reachable and any(is_enemy(units, units.unit_at(p), owner) for p in cells[1:-1]):
        could_be_reachable = False

    cost = sum(terrain.movement_cost(p) for p in cells[1:])
    is_exhausting = any(zoc[i] and zoc[i + 1] for i in range(len(cells) - 1))

    dest_occupant = units.unit_at(path.destination) if path.steps > 0 else None
    ends_on_enemy = is_enemy(units, dest_occupant, owner)
    is_attack = ends_on_enemy and (
        path.steps == 1 or units.unit_at(path.before_destination) is None
    )
    is_reachable = could_be_reachable and path.steps > 0 and (dest_occupant is None or is_attack)

    return PathAssessment(
        path=path,
        cost=cost,
        could_be_reachable=could_be_reachable,
        is_reachable=is_reachable,
        is_exhausting=is_exhausting,
        is_attack=is_attack,
        ends_on_enemy=ends_on_enemy,
    )


class ReachabilityResolver:
    """Every position a unit can reach this turn, with the cheapest path to it.

    Reads terrain and units, never mutates them. Movement points bound the
    number of steps explored; the cheapest terrain costs 1 per step.
    """

    def __init__(self, terrain: TerrainQuery, units: UnitQuery, *, max_depth: Optional[int] = None):
        if max_depth is not None and max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        self.terrain = terrain
        self.units = units
        self.max_depth = max_depth

    def reachable_positions(self, unit_id: UnitID) -> Dict[Pos, PathAssessment]:
        owner = self.units.owner_of(unit_id)
        origin = self.units.position_of(unit_id)
        budget = int(self.units.movements_remaining(unit_id))

        depth = budget if self.max_depth is None else min(budget, self.max_depth)
        cache: Dict[Pos, Hindrance] = {}

        def hindrance_of(pos: Pos) -> Hindrance:
            if pos not in cache:
                cache[pos] = hindrances(pos, owner, self.units)
            return cache[pos]

        result: Dict[Pos, PathAssessment] = {}
        walker = PathEnumerator(origin, depth)
        for path in walker:
            assessment = assess_path(path, owner, self.terrain, self.units, hindrance_of=hindrance_of)
            if not assessment.could_be_reachable:
                walker.prune()
                continue

            if assessment.is_reachable:
                best = result.get(path.destination)
                if best is None or assessment.cost < best.cost:
                    result[path.destination] = assessment

            if assessment.cost >= budget or assessment.ends_on_enemy:
                walker.prune()

        return result

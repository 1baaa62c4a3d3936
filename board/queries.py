from __future__ import annotations

from typing import Optional, Protocol

from board.hexpos import Pos
from board.units import PlayerID, UnitID


class TerrainQuery(Protocol):
    """What the resolvers need from the terrain. Out of bounds is impassable."""

    def is_passable(self, pos: Pos) -> bool: ...

    def movement_cost(self, pos: Pos) -> int: ...

    def defense_modifier(self, pos: Pos) -> int: ...


class UnitQuery(Protocol):
    """What the resolvers need from the unit registry.

    Unknown unit ids raise KeyError.
    """

    def unit_at(self, pos: Pos) -> Optional[UnitID]: ...

    def owner_of(self, unit_id: UnitID) -> PlayerID: ...

    def position_of(self, unit_id: UnitID) -> Pos: ...

    def strength(self, unit_id: UnitID) -> int: ...

    def ranged_strength(self, unit_id: UnitID) -> int: ...

    def hp(self, unit_id: UnitID) -> int: ...

    def movements_remaining(self, unit_id: UnitID) -> int: ...

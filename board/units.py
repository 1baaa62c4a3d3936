# board/units.py
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from board.hexpos import Pos

UnitID = int

MAX_HP = 100


class PlayerID:
    def __init__(self, name: str):
        self.name = name

    def __repr__(self):
        return self.name

    def __eq__(self, other):
        return isinstance(other, PlayerID) and self.name == other.name

    def __hash__(self):
        return hash(self.name)


class UnitType:
    def __init__(self, name: str, strength: int, ranged_strength: int = 0, movement: int = 2):
        self.name = name
        self.strength = strength
        self.ranged_strength = ranged_strength
        self.movement = movement

    def __repr__(self):
        return f"UnitType({self.name})"


WARRIOR = UnitType("Warrior", strength=8, movement=2)
ARCHER = UnitType("Archer", strength=5, ranged_strength=7, movement=2)
SPEARMAN = UnitType("Spearman", strength=11, movement=2)


class Unit:
    def __init__(self, unit_id: UnitID, name: str, owner: PlayerID, unit_type: UnitType,
                 pos: Pos, hp: int = MAX_HP, movements: int = 0):
        self.unit_id = unit_id
        self.name = name
        self.owner = owner
        self.unit_type = unit_type
        self.pos = pos
        self.hp = int(hp)
        self.movements = int(movements)

    @property
    def strength(self) -> int:
        return int(self.unit_type.strength)

    @property
    def ranged_strength(self) -> int:
        return int(self.unit_type.ranged_strength)

    @property
    def map_symbol(self) -> str:
        """One letter for the map: first letter of the name."""
        return (self.name.strip() or "?")[0]

    def is_exhausted(self) -> bool:
        return self.movements == 0

    def is_dead(self) -> bool:
        return self.hp <= 0

    def refresh(self) -> None:
        """Regenerate movement points for a new turn."""
        self.movements = int(self.unit_type.movement)

    def spend_movements(self, amount: int) -> None:
        """Deduct movement points, never going below zero."""
        if amount < 0:
            raise ValueError("amount must be >= 0")
        self.movements = max(0, self.movements - amount)

    def __repr__(self):
        return f"{self.name}#{self.unit_id}({self.owner}) at {self.pos}"


class UnitRegistry:
    """All units on the battlefield, at most one per position."""

    def __init__(self, units: Iterable[Unit] = ()):
        self._units: Dict[UnitID, Unit] = {}
        self._next_id: UnitID = 0
        for u in units:
            self._insert(u)

    def _insert(self, unit: Unit) -> Unit:
        if unit.unit_id in self._units:
            raise ValueError(f"Duplicate unit_id: {unit.unit_id}")
        if self.unit_at(unit.pos) is not None:
            raise ValueError(f"Position already occupied: {unit.pos}")
        self._units[unit.unit_id] = unit
        self._next_id = max(self._next_id, unit.unit_id + 1)
        return unit

    def add(self, name: str, owner: PlayerID, unit_type: UnitType, pos: Pos, *,
            hp: int = MAX_HP, movements: int = 0) -> Unit:
        unit = Unit(self._next_id, name, owner, unit_type, pos, hp=hp, movements=movements)
        return self._insert(unit)

    def __len__(self) -> int:
        return len(self._units)

    def __contains__(self, unit_id: UnitID) -> bool:
        return unit_id in self._units

    def get(self, unit_id: UnitID) -> Unit:
        if unit_id not in self._units:
            raise KeyError(f"Unknown unit_id: {unit_id!r}")
        return self._units[unit_id]

    def unit_at(self, pos: Pos) -> Optional[UnitID]:
        for uid, u in self._units.items():
            if u.pos == pos:
                return uid
        return None

    def owner_of(self, unit_id: UnitID) -> PlayerID:
        return self.get(unit_id).owner

    def position_of(self, unit_id: UnitID) -> Pos:
        return self.get(unit_id).pos

    def strength(self, unit_id: UnitID) -> int:
        return self.get(unit_id).strength

    def ranged_strength(self, unit_id: UnitID) -> int:
        return self.get(unit_id).ranged_strength

    def hp(self, unit_id: UnitID) -> int:
        return self.get(unit_id).hp

    def movements_remaining(self, unit_id: UnitID) -> int:
        return self.get(unit_id).movements

    # ---------------------------------------------------------------------
    # Mutations
    # ---------------------------------------------------------------------

    def remove(self, unit_id: UnitID) -> Unit:
        self.get(unit_id)
        return self._units.pop(unit_id)

    def move(self, unit_id: UnitID, pos: Pos) -> None:
        unit = self.get(unit_id)
        occupant = self.unit_at(pos)
        if occupant is not None and occupant != unit_id:
            raise ValueError(f"Destination occupied: {pos}")
        unit.pos = pos

    def refresh(self, owner: Optional[PlayerID] = None) -> None:
        for u in self._units.values():
            if owner is None or u.owner == owner:
                u.refresh()

    # ---------------------------------------------------------------------
    # Deterministic views
    # ---------------------------------------------------------------------

    def units_sorted(self) -> List[Unit]:
        return [self._units[uid] for uid in sorted(self._units)]

    def owned_by(self, owner: PlayerID) -> List[Unit]:
        return [u for u in self.units_sorted() if u.owner == owner]

    def next_active_unit(self, after_id: Optional[UnitID], owner: Optional[PlayerID] = None) -> Optional[UnitID]:
        """First non-exhausted unit after `after_id`, wrapping around.

        `after_id` itself is considered last, so a lone active unit finds itself.
        """
        pool = self.units_sorted() if owner is None else self.owned_by(owner)
        candidates = [u.unit_id for u in pool if not u.is_exhausted()]
        if not candidates:
            return None
        if after_id is None:
            return candidates[0]
        for uid in candidates:
            if uid > after_id:
                return uid
        return candidates[0]

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Iterator, Optional


class Direction(IntEnum):
    """One of the 6 hex directions, clockwise from a universal 'north'.

    Cube deltas (dx, dy, dz):
      NORTH     : ( 0, +1, -1)
      NORTH_EAST: (+1,  0, -1)
      SOUTH_EAST: (+1, -1,  0)
      SOUTH     : ( 0, -1, +1)
      SOUTH_WEST: (-1,  0, +1)
      NORTH_WEST: (-1, +1,  0)

    The numeric order is also the path enumeration order.
    """

    NORTH = 0
    NORTH_EAST = 1
    SOUTH_EAST = 2
    SOUTH = 3
    SOUTH_WEST = 4
    NORTH_WEST = 5

    @staticmethod
    def all() -> tuple["Direction", ...]:
        return tuple(Direction)

    def next(self) -> Optional["Direction"]:
        """Following direction in enumeration order, None after NORTH_WEST."""
        if self == Direction.NORTH_WEST:
            return None
        return Direction(int(self) + 1)


DIRECTION_DELTAS: tuple[tuple[int, int, int], ...] = (
    (0, 1, -1),    # NORTH
    (1, 0, -1),    # NORTH_EAST
    (1, -1, 0),    # SOUTH_EAST
    (0, -1, 1),    # SOUTH
    (-1, 0, 1),    # SOUTH_WEST
    (-1, 1, 0),    # NORTH_WEST
)


@dataclass(frozen=True, slots=True)
class Pos:
    """Cube hex coordinate. Invariant: x + y + z == 0.

    Compares and hashes like the plain (x, y, z) tuple, so it can key dicts.
    """

    x: int
    y: int
    z: int

    def __post_init__(self) -> None:
        if self.x + self.y + self.z != 0:
            raise ValueError(f"Invalid cube coordinate: {self.x},{self.y},{self.z}")

    def __repr__(self) -> str:
        return f"({self.x},{self.y},{self.z})"

    @staticmethod
    def origin() -> Pos:
        return Pos(0, 0, 0)

    @staticmethod
    def vector(direction: Direction) -> Pos:
        return Pos(*DIRECTION_DELTAS[int(direction)])

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.x, self.y, self.z)

    def neighbor(self, direction: Direction) -> Pos:
        dx, dy, dz = DIRECTION_DELTAS[int(direction)]
        return Pos(self.x + dx, self.y + dy, self.z + dz)

    def around(self) -> list[Pos]:
        """All 6 neighbours, in Direction order."""
        return [self.neighbor(d) for d in Direction]

    def translate(self, other: Pos) -> Pos:
        return Pos(self.x + other.x, self.y + other.y, self.z + other.z)

    def amplify(self, factor: int) -> Pos:
        return Pos(self.x * factor, self.y * factor, self.z * factor)

    def negate(self) -> Pos:
        return Pos(-self.x, -self.y, -self.z)

    def __add__(self, other: Pos) -> Pos:
        return self.translate(other)

    def __neg__(self) -> Pos:
        return self.negate()

    def distance(self, other: Pos) -> int:
        return max(abs(self.x - other.x), abs(self.y - other.y), abs(self.z - other.z))

    def is_adjacent(self, other: Pos) -> bool:
        return self.distance(other) == 1

    def to_offset_pos(self) -> OffsetPos:
        # odd-q: columns are x, odd columns sit half a row lower
        col = self.x
        row = self.z + (self.x - (self.x & 1)) // 2
        return OffsetPos(col, row)


@dataclass(frozen=True, slots=True)
class OffsetPos:
    """Column/row storage coordinate, (0, 0) being the top-left tile."""

    x: int
    y: int

    def to_pos(self) -> Pos:
        x = self.x
        z = self.y - (self.x - (self.x & 1)) // 2
        return Pos(x, -x - z, z)


@dataclass(frozen=True, slots=True)
class PosPath:
    """Ordered, non-empty chain of neighbouring positions.

    stack[0] is the origin and never goes away; stack[-1] is the destination.
    `steps` counts moves, so a path holding only its origin has 0 steps.
    """

    stack: tuple[Pos, ...]

    def __post_init__(self) -> None:
        if not self.stack:
            raise ValueError("A path needs at least its origin")
        for a, b in zip(self.stack, self.stack[1:]):
            if not a.is_adjacent(b):
                raise ValueError(f"Path positions {a} and {b} are not neighbours")

    @staticmethod
    def start(origin: Pos) -> PosPath:
        return PosPath((origin,))

    @staticmethod
    def from_directions(origin: Pos, directions: Iterable[Direction]) -> PosPath:
        stack = [origin]
        for d in directions:
            stack.append(stack[-1].neighbor(d))
        return PosPath(tuple(stack))

    @property
    def origin(self) -> Pos:
        return self.stack[0]

    @property
    def destination(self) -> Pos:
        return self.stack[-1]

    def to(self) -> Pos:
        return self.destination

    @property
    def steps(self) -> int:
        return len(self.stack) - 1

    def __iter__(self) -> Iterator[Pos]:
        return iter(self.stack)

    @property
    def before_destination(self) -> Optional[Pos]:
        """Second-to-last position, None for a 0-step path."""
        if len(self.stack) < 2:
            return None
        return self.stack[-2]

    def extended(self, direction: Direction) -> PosPath:
        return PosPath(self.stack + (self.destination.neighbor(direction),))

    def __repr__(self) -> str:
        return " -> ".join(repr(p) for p in self.stack)

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Tuple, Union

from board.hexpos import OffsetPos, Pos, PosPath


class Terrain(str, Enum):
    PLAIN = "plain"
    GRASSLAND = "grassland"
    DESERT = "desert"
    HILL = "hill"
    MOUNTAIN = "mountain"
    WATER = "water"
    OUT_OF_BOUNDS = "out_of_bounds"

    @property
    def map_char(self) -> str:
        return MAP_CHARS[self]

    @property
    def label(self) -> str:
        return LABELS[self]

    @property
    def defense_modifier(self) -> int:
        """Signed percentage granted to a unit defending on this terrain."""
        return DEFENSE_MODIFIERS.get(self, 0)

    @property
    def is_passable(self) -> bool:
        return self not in IMPASSABLE

    @property
    def movement_cost(self) -> int:
        return MOVEMENT_COSTS.get(self, 1)

    @staticmethod
    def from_map_char(ch: str) -> "Terrain":
        """Unknown characters read as water."""
        return CHAR_TO_TERRAIN.get(ch, Terrain.WATER)


MAP_CHARS = {
    Terrain.PLAIN: "'",
    Terrain.GRASSLAND: '"',
    Terrain.DESERT: " ",
    Terrain.HILL: "^",
    Terrain.MOUNTAIN: "A",
    Terrain.WATER: "~",
    Terrain.OUT_OF_BOUNDS: "?",
}

LABELS = {
    Terrain.PLAIN: "Plain",
    Terrain.GRASSLAND: "Grassland",
    Terrain.DESERT: "Desert",
    Terrain.HILL: "Hill",
    Terrain.MOUNTAIN: "Mountain",
    Terrain.WATER: "Water",
    Terrain.OUT_OF_BOUNDS: "Out of bounds",
}

DEFENSE_MODIFIERS = {Terrain.HILL: 25}
MOVEMENT_COSTS = {Terrain.HILL: 2}
IMPASSABLE = frozenset({Terrain.MOUNTAIN, Terrain.WATER, Terrain.OUT_OF_BOUNDS})

# '?' is a rendering artifact, never a map tile.
CHAR_TO_TERRAIN = {ch: t for t, ch in MAP_CHARS.items() if t != Terrain.OUT_OF_BOUNDS}


@dataclass
class TerrainMap:
    """Rectangular terrain grid stored row by row in offset coordinates.

    OffsetPos(0, 0) is the top-left tile. Anything outside reads as
    OUT_OF_BOUNDS, which is impassable.
    """

    width: int
    height: int
    data: List[Terrain] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("width and height must be >= 0")
        if len(self.data) != self.width * self.height:
            raise ValueError(
                f"Inconsistent terrain data: {len(self.data)} tiles for {self.width}x{self.height}"
            )

    # ---------------------------------------------------------------------
    # Construction
    # ---------------------------------------------------------------------

    @staticmethod
    def empty_map(width: int, height: int) -> TerrainMap:
        """A map filled with grassland. Handy for tests."""
        return TerrainMap(width, height, [Terrain.GRASSLAND] * (width * height))

    @staticmethod
    def from_text(text: str) -> TerrainMap:
        """One character per tile, one line per row, all rows the same length."""
        rows = [line for line in text.splitlines() if line != ""]
        if not rows:
            return TerrainMap(0, 0, [])

        width = len(rows[0])
        data: List[Terrain] = []
        for index, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(f"Row {index} has {len(row)} tiles, expected {width}")
            data.extend(Terrain.from_map_char(ch) for ch in row)
        return TerrainMap(width, len(rows), data)

    @staticmethod
    def from_file(path: Union[str, Path]) -> TerrainMap:
        return TerrainMap.from_text(Path(path).read_text(encoding="utf-8"))

    def to_text(self) -> str:
        rows = []
        for y in range(self.height):
            row = self.data[y * self.width:(y + 1) * self.width]
            rows.append("".join(t.map_char for t in row))
        return "\n".join(rows)

    # ---------------------------------------------------------------------
    # Queries
    # ---------------------------------------------------------------------

    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def in_bounds(self, pos: Pos) -> bool:
        opos = pos.to_offset_pos()
        return 0 <= opos.x < self.width and 0 <= opos.y < self.height

    def get_terrain(self, pos: Pos) -> Terrain:
        opos = pos.to_offset_pos()
        if not (0 <= opos.x < self.width and 0 <= opos.y < self.height):
            return Terrain.OUT_OF_BOUNDS
        return self.data[opos.y * self.width + opos.x]

    def set_terrain(self, pos: Pos, terrain: Terrain) -> None:
        if not self.in_bounds(pos):
            raise ValueError(f"{pos} is outside the map")
        opos = pos.to_offset_pos()
        self.data[opos.y * self.width + opos.x] = terrain

    def is_passable(self, pos: Pos) -> bool:
        return self.get_terrain(pos).is_passable

    def movement_cost(self, pos: Pos) -> int:
        return self.get_terrain(pos).movement_cost

    def defense_modifier(self, pos: Pos) -> int:
        return self.get_terrain(pos).defense_modifier

    def path_cost(self, path: PosPath) -> int:
        """Movement cost of every cell entered, i.e. all but the origin."""
        return sum(self.movement_cost(p) for p in path.stack[1:])

    def tiles(self) -> Iterator[Tuple[Pos, Terrain]]:
        for index, terrain in enumerate(self.data):
            y, x = divmod(index, self.width)
            yield OffsetPos(x, y).to_pos(), terrain

    def first_passable(self) -> Pos:
        for pos, terrain in self.tiles():
            if terrain.is_passable:
                return pos
        raise ValueError("Map has no passable tile")

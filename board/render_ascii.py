from __future__ import annotations

from typing import Iterable, Optional

from board.hexpos import OffsetPos, Pos
from board.terrain import TerrainMap
from board.units import PlayerID, UnitRegistry


def unit_cell_symbol(symbol: str, friendly: bool) -> str:
    """Friendly units print upper-case, everybody else lower-case."""
    return symbol.upper() if friendly else symbol.lower()


def render_map_ascii(
    terrain: TerrainMap,
    units: UnitRegistry,
    *,
    viewer: Optional[PlayerID] = None,
    highlight: Iterable[Pos] = (),
) -> str:
    """Render the map in offset layout, one text line per row, 2-char cells.

    Each cell is the terrain char followed by a unit symbol, a '*' for a
    highlighted (e.g. reachable) empty cell, or the terrain char again.
    Odd columns sit half a row lower on the real grid; rows are not
    staggered here so columns stay aligned under the header.
    """
    marked = set(highlight)
    unit_at = {u.pos: u for u in units.units_sorted()}

    width, height = terrain.size()
    lines: list[str] = ["     " + "".join(f"{x:>3}" for x in range(width))]

    for y in range(height):
        row = [f"y={y:>2} "]
        for x in range(width):
            pos = OffsetPos(x, y).to_pos()
            ch = terrain.get_terrain(pos).map_char
            unit = unit_at.get(pos)
            if unit is not None:
                friendly = viewer is None or unit.owner == viewer
                second = unit_cell_symbol(unit.map_symbol, friendly)
            elif pos in marked:
                second = "*"
            else:
                second = ch
            row.append(f" {ch}{second}")
        lines.append("".join(row))

    return "\n".join(lines)

from __future__ import annotations

from typing import Optional

from board.hexpos import OffsetPos, Pos
from board.terrain import TerrainMap
from board.units import ARCHER, SPEARMAN, WARRIOR, PlayerID
from skirmish.battlefield import Battlefield

DEFAULT_MAP = "\n".join([
    '""""""""""',
    '""""^"""""',
    '""""^""~~"',
    '"""""""~~"',
    '""A"""""""',
    '""A"""^"""',
    "''''''''''",
    "''''''''''",
])

PLAYER_A = PlayerID("A")
PLAYER_B = PlayerID("B")


def build_battlefield(map_text: Optional[str] = None) -> Battlefield:
    """Two players, three units each, then the first turn begins."""
    terrain = TerrainMap.from_text(map_text if map_text is not None else DEFAULT_MAP)
    field = Battlefield(terrain)

    placements = [
        ("Warrior A", PLAYER_A, WARRIOR, OffsetPos(1, 2)),
        ("Archer A", PLAYER_A, ARCHER, OffsetPos(1, 3)),
        ("Spearman A", PLAYER_A, SPEARMAN, OffsetPos(1, 6)),
        ("Warrior B", PLAYER_B, WARRIOR, OffsetPos(8, 1)),
        ("Archer B", PLAYER_B, ARCHER, OffsetPos(8, 5)),
        ("Spearman B", PLAYER_B, SPEARMAN, OffsetPos(6, 6)),
    ]
    for name, owner, unit_type, opos in placements:
        field.add_unit(name, owner, unit_type, _free_tile(field, opos.to_pos()))

    field.new_turn()
    return field


def _free_tile(field: Battlefield, wanted: Pos) -> Pos:
    """`wanted` if a unit can stand there, else the first tile that works."""
    if field.terrain.is_passable(wanted) and field.units.unit_at(wanted) is None:
        return wanted
    for pos, terrain in field.terrain.tiles():
        if terrain.is_passable and field.units.unit_at(pos) is None:
            return pos
    raise ValueError("No free passable tile left on the map")

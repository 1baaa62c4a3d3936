from board.hexpos import OffsetPos
from board.render_ascii import render_map_ascii, unit_cell_symbol
from board.terrain import TerrainMap
from board.units import UnitRegistry
from scenarios.skirmish import PLAYER_A, PLAYER_B, build_battlefield


def _cell(line: str, col: int) -> str:
    return line[5 + 3 * col: 8 + 3 * col]


def test_unit_cell_symbol():
    assert unit_cell_symbol("w", True) == "W"
    assert unit_cell_symbol("W", False) == "w"


def test_empty_map_layout_and_highlight():
    terrain = TerrainMap.empty_map(3, 2)
    text = render_map_ascii(terrain, UnitRegistry(), highlight=[OffsetPos(0, 0).to_pos()])

    assert text.splitlines() == [
        "       0  1  2",
        'y= 0  "* "" ""',
        'y= 1  "" "" ""',
    ]


def test_units_render_by_viewer():
    bf = build_battlefield()

    lines = render_map_ascii(bf.terrain, bf.units, viewer=PLAYER_A).splitlines()
    assert len(lines) == 1 + bf.terrain.height
    assert _cell(lines[1 + 2], 1) == ' "W'   # Warrior A
    assert _cell(lines[1 + 1], 8) == ' "w'   # Warrior B

    lines = render_map_ascii(bf.terrain, bf.units, viewer=PLAYER_B).splitlines()
    assert _cell(lines[1 + 2], 1) == ' "w'
    assert _cell(lines[1 + 1], 8) == ' "W'

    lines = render_map_ascii(bf.terrain, bf.units).splitlines()
    assert _cell(lines[1 + 2], 1) == ' "W'
    assert _cell(lines[1 + 1], 8) == ' "W'


def test_terrain_chars_show_through():
    bf = build_battlefield()
    lines = render_map_ascii(bf.terrain, bf.units).splitlines()
    assert _cell(lines[1 + 1], 4) == " ^^"
    assert _cell(lines[1 + 2], 7) == " ~~"
    assert _cell(lines[1 + 4], 2) == " AA"

from board.hexpos import OffsetPos
from board.terrain import Terrain
from scenarios.skirmish import DEFAULT_MAP, PLAYER_A, PLAYER_B, build_battlefield


def test_default_battlefield():
    bf = build_battlefield()

    assert bf.terrain.size() == (10, 8)
    assert bf.turn == 1
    assert bf.log == ["Turn 1 begins."]
    assert len(bf.units.owned_by(PLAYER_A)) == 3
    assert len(bf.units.owned_by(PLAYER_B)) == 3
    assert all(u.movements == 2 for u in bf.units.units_sorted())

    warrior_a = bf.units.get(0)
    assert warrior_a.name == "Warrior A"
    assert warrior_a.pos == OffsetPos(1, 2).to_pos()


def test_map_has_the_interesting_terrain():
    bf = build_battlefield()
    kinds = {t for _, t in bf.terrain.tiles()}
    assert {Terrain.HILL, Terrain.WATER, Terrain.MOUNTAIN, Terrain.PLAIN, Terrain.GRASSLAND} <= kinds


def test_blocked_placement_falls_back_to_a_free_tile():
    rows = DEFAULT_MAP.splitlines()
    rows[2] = rows[2][:1] + "A" + rows[2][2:]
    bf = build_battlefield("\n".join(rows))

    warrior_a = bf.units.get(0)
    assert warrior_a.pos == OffsetPos(0, 0).to_pos()
    assert bf.terrain.is_passable(warrior_a.pos)
    assert len(bf.units) == 6

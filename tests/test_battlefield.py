import pytest

from board.hexpos import Direction, PosPath
from board.terrain import Terrain
from board.units import WARRIOR
from tests.conftest import ScriptedRNG, dump_log

N, NE, SE, S, SW, NW = Direction.all()


def test_cannot_place_on_impassable_terrain(battlefield, players, center):
    battlefield.terrain.set_terrain(center, Terrain.MOUNTAIN)
    with pytest.raises(ValueError):
        battlefield.add_unit("W", players["A"], WARRIOR, center)


def test_new_turn_refreshes_and_logs(battlefield, players, center):
    u = battlefield.add_unit("W", players["A"], WARRIOR, center)
    assert u.movements == 0

    battlefield.new_turn()
    assert battlefield.turn == 1
    assert u.movements == 2
    assert battlefield.log[-1] == "Turn 1 begins."


def test_move_unit_to_spends_cost_and_logs(battlefield, players, center):
    u = battlefield.add_unit("W", players["A"], WARRIOR, center, movements=2)
    dest = center.neighbor(SE)

    ok, msg = battlefield.move_unit_to(u.unit_id, dest)
    assert ok, msg
    assert u.pos == dest
    assert u.movements == 1
    assert battlefield.units.unit_at(center) is None
    assert "spending 1 MV" in battlefield.log[-1]


def test_move_refusals(battlefield, players, center):
    u = battlefield.add_unit("W", players["A"], WARRIOR, center, movements=1)
    far = PosPath.from_directions(center, [S, S]).destination

    ok, msg = battlefield.move_unit_to(u.unit_id, far)
    assert not ok
    assert "not reachable" in msg
    assert u.pos == center

    battlefield.add_unit("E", players["B"], WARRIOR, center.neighbor(N))
    ok, msg = battlefield.move_unit_to(u.unit_id, center.neighbor(N))
    assert not ok
    assert "attack" in msg

    u.movements = 0
    ok, msg = battlefield.move_unit_to(u.unit_id, center.neighbor(S))
    assert not ok
    assert "no movement left" in msg
    assert battlefield.log == []


def test_single_step_move(battlefield, players, center):
    u = battlefield.add_unit("W", players["A"], WARRIOR, center, movements=2)
    ok, _ = battlefield.move_unit(u.unit_id, Direction.SOUTH_WEST)
    assert ok
    assert u.pos == center.neighbor(SW)

    battlefield.add_unit("E", players["B"], WARRIOR, u.pos.neighbor(S))
    ok, msg = battlefield.move_unit(u.unit_id, Direction.SOUTH)
    assert not ok
    assert u.pos == center.neighbor(SW)


def test_prepare_attack_only_for_reachable_enemies(battlefield, players, center):
    u = battlefield.add_unit("W", players["A"], WARRIOR, center, movements=2)
    friend = battlefield.add_unit("F", players["A"], WARRIOR, center.neighbor(S))
    far_enemy = battlefield.add_unit("E", players["B"], WARRIOR,
                                     PosPath.from_directions(center, [N, N, N]).destination)

    assert battlefield.prepare_attack(u.unit_id, center.neighbor(N)) is None
    assert battlefield.prepare_attack(u.unit_id, friend.pos) is None
    assert battlefield.prepare_attack(u.unit_id, far_enemy.pos) is None


def test_attack_capture(battlefield, players, center):
    att = battlefield.add_unit("Att", players["A"], WARRIOR, center, movements=2)
    dfn = battlefield.add_unit("Def", players["B"], WARRIOR, center.neighbor(N), hp=10)

    stats = battlefield.prepare_attack(att.unit_id, dfn.pos)
    assert stats.dmgrange_to_defender == (40, 70)
    assert stats.dmgrange_to_attacker == (24, 42)

    battlefield.confirm_attack(stats, ScriptedRNG([45, 30]))
    dump_log(battlefield)

    assert dfn.unit_id not in battlefield.units
    assert att.pos == center.neighbor(N)
    assert att.hp == 70
    assert att.movements == 0
    assert "Def is destroyed." in battlefield.log
    assert "Att captures" in battlefield.log[-2]
    assert battlefield.log[-1] == "Decisive Victory"


def test_attack_after_moving_leaves_attacker_on_staging_cell(battlefield, players, center):
    enemy_pos = PosPath.from_directions(center, [N, N]).destination
    att = battlefield.add_unit("Att", players["A"], WARRIOR, center, movements=2)
    dfn = battlefield.add_unit("Def", players["B"], WARRIOR, enemy_pos)

    stats = battlefield.attack(att.unit_id, enemy_pos, ScriptedRNG([40, 40]))
    assert stats is not None
    assert att.pos == center.neighbor(N)
    assert dfn.pos == enemy_pos
    assert (att.hp, dfn.hp) == (60, 60)
    assert att.movements == 0
    assert battlefield.log[-1] == "Defeat"


def test_attacker_can_die(battlefield, players, center):
    att = battlefield.add_unit("Att", players["A"], WARRIOR, center, movements=2, hp=10)
    dfn = battlefield.add_unit("Def", players["B"], WARRIOR, center.neighbor(N))

    battlefield.attack(att.unit_id, dfn.pos, ScriptedRNG([30, 50]))
    assert att.unit_id not in battlefield.units
    assert dfn.hp == 70
    assert dfn.pos == center.neighbor(N)
    assert battlefield.log[-1] == "Crushing Defeat"


def test_withdrawn_preview_changes_nothing(battlefield, players, center):
    att = battlefield.add_unit("Att", players["A"], WARRIOR, center, movements=2)
    dfn = battlefield.add_unit("Def", players["B"], WARRIOR, center.neighbor(N))

    battlefield.prepare_attack(att.unit_id, dfn.pos)
    assert (att.hp, dfn.hp, att.movements) == (100, 100, 2)
    assert battlefield.log == []


def test_stale_preview_is_rejected(battlefield, players, center):
    att = battlefield.add_unit("Att", players["A"], WARRIOR, center, movements=2)
    dfn = battlefield.add_unit("Def", players["B"], WARRIOR, center.neighbor(N))
    stats = battlefield.prepare_attack(att.unit_id, dfn.pos)

    battlefield.units.move(dfn.unit_id, center.neighbor(NE))
    with pytest.raises(ValueError):
        battlefield.confirm_attack(stats, ScriptedRNG([40, 40]))


def test_preview_is_rejected_after_attacker_moves_away(battlefield, players, center):
    enemy_pos = PosPath.from_directions(center, [N, N]).destination
    att = battlefield.add_unit("Att", players["A"], WARRIOR, center, movements=2)
    dfn = battlefield.add_unit("Def", players["B"], WARRIOR, enemy_pos)
    stats = battlefield.prepare_attack(att.unit_id, enemy_pos)

    ok, _ = battlefield.move_unit_to(att.unit_id, center.neighbor(S))
    assert ok
    assert att.movements == 1

    with pytest.raises(ValueError):
        battlefield.confirm_attack(stats, ScriptedRNG([40, 40]))
    assert att.pos == center.neighbor(S)
    assert (att.hp, dfn.hp) == (100, 100)


def test_preview_is_rejected_once_attacker_is_exhausted(battlefield, players, center):
    att = battlefield.add_unit("Att", players["A"], WARRIOR, center, movements=2)
    dfn = battlefield.add_unit("Def", players["B"], WARRIOR, center.neighbor(N))
    stats = battlefield.prepare_attack(att.unit_id, dfn.pos)

    att.movements = 0
    with pytest.raises(ValueError):
        battlefield.confirm_attack(stats, ScriptedRNG([40, 40]))
    assert dfn.hp == 100


def test_preview_of_a_dead_defender_raises_key_error(battlefield, players, center):
    att = battlefield.add_unit("Att", players["A"], WARRIOR, center, movements=2)
    dfn = battlefield.add_unit("Def", players["B"], WARRIOR, center.neighbor(N))
    stats = battlefield.prepare_attack(att.unit_id, dfn.pos)

    battlefield.units.remove(dfn.unit_id)
    with pytest.raises(KeyError):
        battlefield.confirm_attack(stats, ScriptedRNG([40, 40]))


def test_details_lines(battlefield, players, center):
    battlefield.terrain.set_terrain(center, Terrain.HILL)
    battlefield.add_unit("Warrior A", players["A"], WARRIOR, center, hp=80)
    battlefield.new_turn()

    assert battlefield.details(center) == ["Warrior A", "MV 2 / HP 80", "Hill", "Turn 1"]
    assert battlefield.details(center.neighbor(S)) == ["", "", "Grassland", "Turn 1"]

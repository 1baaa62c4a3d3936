from dataclasses import dataclass, field

import pytest

from board.hexpos import OffsetPos, Pos
from board.terrain import TerrainMap
from board.units import PlayerID
from skirmish.battlefield import Battlefield

# Middle of a 12x12 open map: every position within 5 steps is on the map.
CENTER = OffsetPos(5, 5).to_pos()


@dataclass
class ScriptedRNG:
    """
    Deterministic RNG returning queued values in order.

    Every requested (a, b) range is recorded on `calls`.
    """
    values: list[int]
    calls: list[tuple[int, int]] = field(default_factory=list)

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        if not self.values:
            raise AssertionError("ScriptedRNG ran out of values")
        return int(self.values.pop(0))


def _build_field():
    terrain = TerrainMap.empty_map(12, 12)
    field_ = Battlefield(terrain)

    # Players (keep references; don't recreate PlayerID("A") in tests)
    players = {"A": PlayerID("A"), "B": PlayerID("B")}
    return field_, players


@pytest.fixture
def bundle():
    """(battlefield, players)"""
    return _build_field()


@pytest.fixture
def battlefield(bundle):
    return bundle[0]


@pytest.fixture
def players(bundle):
    return bundle[1]


@pytest.fixture
def center() -> Pos:
    return CENTER


def dump_log(battlefield):
    print("\n--- BATTLE LOG ---")
    for e in battlefield.log:
        print(e)
    print("--- END LOG ---\n")

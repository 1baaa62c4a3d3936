from collections import Counter

import pytest

from board.hexpos import Direction, Pos, PosPath
from board.paths import PathEnumerator


def test_depth_zero_yields_nothing():
    assert list(PathEnumerator(Pos.origin(), 0)) == []


def test_depth_one_yields_origin_then_each_direction():
    origin = Pos.origin()
    paths = list(PathEnumerator(origin, 1))

    assert paths[0] == PosPath.start(origin)
    assert [p.destination for p in paths[1:]] == origin.around()


def test_depth_two_counts_by_length():
    paths = list(PathEnumerator(Pos.origin(), 2))
    by_steps = Counter(p.steps for p in paths)
    assert by_steps == {0: 1, 1: 6, 2: 36}
    assert len(set(p.stack for p in paths)) == len(paths)


def test_walk_is_depth_first_preorder():
    origin = Pos(1, -1, 0)
    walker = PathEnumerator(origin, 2)
    first = [walker.advance() for _ in range(9)]

    assert first[0].steps == 0
    assert first[1] == PosPath.from_directions(origin, [Direction.NORTH])
    assert first[2] == PosPath.from_directions(origin, [Direction.NORTH, Direction.NORTH])
    assert first[7] == PosPath.from_directions(origin, [Direction.NORTH, Direction.NORTH_WEST])
    assert first[8] == PosPath.from_directions(origin, [Direction.NORTH_EAST])


def test_every_path_starts_at_origin():
    origin = Pos(0, 2, -2)
    for path in PathEnumerator(origin, 3):
        assert path.origin == origin


def test_prune_skips_only_descendants():
    origin = Pos.origin()
    walker = PathEnumerator(origin, 2)
    kept = []
    for path in walker:
        kept.append(path)
        if path.steps == 1 and path.destination == origin.neighbor(Direction.NORTH):
            walker.prune()

    assert len(kept) == 1 + 6 + 36 - 6
    north = origin.neighbor(Direction.NORTH)
    assert not any(p.steps == 2 and p.stack[1] == north for p in kept)
    # siblings and their subtrees are untouched
    north_east = origin.neighbor(Direction.NORTH_EAST)
    assert sum(1 for p in kept if p.steps == 2 and p.stack[1] == north_east) == 6


def test_prune_at_origin_ends_the_walk():
    walker = PathEnumerator(Pos.origin(), 3)
    assert walker.advance().steps == 0
    walker.prune()
    assert walker.advance() is None
    assert walker.advance() is None


def test_prune_at_max_depth_is_harmless():
    walker = PathEnumerator(Pos.origin(), 1)
    walker.advance()
    first_step = walker.advance()
    walker.prune()
    assert walker.advance().stack[1] == first_step.origin.neighbor(Direction.NORTH_EAST)


def test_prune_without_current_path_raises():
    walker = PathEnumerator(Pos.origin(), 1)
    with pytest.raises(RuntimeError):
        walker.prune()

    list(walker)
    with pytest.raises(RuntimeError):
        walker.prune()


def test_negative_depth_rejected():
    with pytest.raises(ValueError):
        PathEnumerator(Pos.origin(), -1)

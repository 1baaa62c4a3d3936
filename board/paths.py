from __future__ import annotations

from typing import Iterator, List, Optional

from board.hexpos import Direction, Pos, PosPath


class PathEnumerator:
    """Depth-first, pre-order walk over every path rooted at `origin`.

    The walk behaves like a base-6 odometer over Direction:
      - extend with NORTH while not pruned and depth budget remains
      - otherwise bump the last direction to its successor
      - when the last direction has no successor, pop and bump the parent
    The first path handed out is the 0-step path (origin alone). With
    max_depth == 0 nothing is handed out at all.

    Usage:
        walker = PathEnumerator(origin, 3)
        for path in walker:
            if not interesting(path):
                walker.prune()   # skip everything below `path`
    """

    def __init__(self, origin: Pos, max_depth: int):
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")
        self.origin = origin
        self.max_depth = max_depth

        self._directions: List[Direction] = []
        self._positions: List[Pos] = [origin]
        self._started = False
        self._exhausted = max_depth == 0
        self._prune_requested = False

    def __iter__(self) -> Iterator[PosPath]:
        while True:
            path = self.advance()
            if path is None:
                return
            yield path

    @property
    def current(self) -> PosPath:
        if not self._started or self._exhausted:
            raise RuntimeError("No current path: call advance() first")
        return PosPath(tuple(self._positions))

    def prune(self) -> None:
        """Do not descend below the path last returned by advance()."""
        if not self._started or self._exhausted:
            raise RuntimeError("prune() called without a current path")
        self._prune_requested = True

    def advance(self) -> Optional[PosPath]:
        if self._exhausted:
            return None

        if not self._started:
            self._started = True
            return self.current

        pruned = self._prune_requested
        self._prune_requested = False

        if not pruned and len(self._directions) < self.max_depth:
            self._push(Direction.NORTH)
            return self.current

        while self._directions:
            following = self._pop().next()
            if following is not None:
                self._push(following)
                return self.current

        self._exhausted = True
        return None

    def _push(self, direction: Direction) -> None:
        self._directions.append(direction)
        self._positions.append(self._positions[-1].neighbor(direction))

    def _pop(self) -> Direction:
        self._positions.pop()
        return self._directions.pop()

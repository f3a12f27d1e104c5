"""Shared constants and enumerations for territory allocation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from .geometry import Point, Shift


class AllocationStatus(str, Enum):
    """Outcome of a full allocation run."""

    COMPLETE = "COMPLETE"
    STALLED = "STALLED"
    INFEASIBLE = "INFEASIBLE"


class Direction(str, Enum):
    """Side of a source on which a cell lies. Row 0 is north."""

    NORTH = "NORTH"
    EAST = "EAST"
    SOUTH = "SOUTH"
    WEST = "WEST"

    @property
    def shift(self) -> Shift:
        return _SHIFTS[self]

    @property
    def opposite(self) -> Direction:
        return _OPPOSITES[self]

    @classmethod
    def from_offset(cls, offset: Shift) -> Direction:
        """Classify an axis-aligned, non-zero offset from a source."""

        if not offset.is_axis_aligned():
            raise ValueError(f"Offset {offset} is not on a source axis")
        if offset.x > 0:
            return cls.EAST
        if offset.x < 0:
            return cls.WEST
        if offset.y > 0:
            return cls.SOUTH
        return cls.NORTH


_SHIFTS: Dict[Direction, Shift] = {
    Direction.NORTH: Shift(0, -1),
    Direction.EAST: Shift(1, 0),
    Direction.SOUTH: Shift(0, 1),
    Direction.WEST: Shift(-1, 0),
}

_OPPOSITES: Dict[Direction, Direction] = {
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.EAST: Direction.WEST,
    Direction.WEST: Direction.EAST,
}

# Order in which a source registers itself on reachable cells.
EXPANSION_ORDER: Tuple[Direction, ...] = (
    Direction.NORTH,
    Direction.SOUTH,
    Direction.WEST,
    Direction.EAST,
)

# Order of the four per-source tallies in reports.
TALLY_ORDER: Tuple[Direction, ...] = (
    Direction.NORTH,
    Direction.EAST,
    Direction.SOUTH,
    Direction.WEST,
)


@dataclass(frozen=True)
class Bounds:
    """Simple rectangle bounds helper."""

    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height

    def contains(self, point: Point) -> bool:
        return 0 <= point.x < self.width and 0 <= point.y < self.height

    def edge_distance(self, point: Point, direction: Direction) -> int:
        """Number of cells between ``point`` and the grid edge in ``direction``."""

        if direction == Direction.NORTH:
            return point.y
        if direction == Direction.SOUTH:
            return self.height - point.y - 1
        if direction == Direction.WEST:
            return point.x
        return self.width - point.x - 1

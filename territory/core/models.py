"""Data models supporting territory allocation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple, Union

from .constants import TALLY_ORDER, Direction
from .geometry import Point


@dataclass
class Movement:
    """Cells claimed so far on each side of a source."""

    counts: Dict[Direction, int] = field(
        default_factory=lambda: {direction: 0 for direction in TALLY_ORDER}
    )

    def add(self, direction: Direction, amount: int) -> None:
        self.counts[direction] += amount

    def get(self, direction: Direction) -> int:
        return self.counts[direction]

    def total(self) -> int:
        return sum(self.counts.values())

    def as_tuple(self) -> Tuple[int, int, int, int]:
        north, east, south, west = (self.counts[d] for d in TALLY_ORDER)
        return north, east, south, west


@dataclass
class SourceCell:
    """A fixed claimant with a capacity of cells it still has to take."""

    id: int
    capacity: int
    remaining: int
    movement: Movement = field(default_factory=Movement)
    frontier: Set[Point] = field(default_factory=set)


@dataclass(frozen=True)
class AssignedCell:
    """A cell permanently owned by a source."""

    owner_id: int


@dataclass
class UnassignedCell:
    """A free cell and the sources that could still claim it, in registration order."""

    candidates: List[int] = field(default_factory=list)


Cell = Union[SourceCell, AssignedCell, UnassignedCell]


@dataclass(frozen=True)
class SourceSpec:
    """A source as read from input: 1-based ``x``, ``y`` counted from the bottom."""

    x: int
    y: int
    capacity: int


@dataclass
class Instance:
    """One case: the grid size and its sources in placement order."""

    width: int
    height: int
    sources: List[SourceSpec] = field(default_factory=list)

    def source_position(self, spec: SourceSpec) -> Point:
        return Point.from_input(spec.x, spec.y, self.height)

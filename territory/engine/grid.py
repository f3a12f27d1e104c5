"""Grid representation and the mutations that keep it consistent."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Iterator, List, Tuple

from ..core.constants import EXPANSION_ORDER, TALLY_ORDER, Bounds, Direction
from ..core.exceptions import PlacementError
from ..core.geometry import Point
from ..core.models import AssignedCell, Cell, SourceCell, UnassignedCell
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


@dataclass
class GridConfig:
    """Configuration values driving the grid layout."""

    width: int
    height: int

    def bounds(self) -> Bounds:
        return Bounds(width=self.width, height=self.height)


class TerritoryGrid:
    """Owns the cell states, the source index and the free-cell counter.

    Every mutation goes through this class so that each source's frontier
    stays in step with the candidate lists of the cells it names.
    """

    def __init__(self, config: GridConfig) -> None:
        if config.width < 1 or config.height < 1:
            raise PlacementError(f"Grid must be at least 1x1, got {config.width}x{config.height}")
        self.config = config
        self.bounds = config.bounds()
        self.cells: List[List[Cell]] = [
            [UnassignedCell() for _ in range(self.bounds.width)] for _ in range(self.bounds.height)
        ]
        self.free_count: int = self.bounds.area
        self.source_positions: List[Point] = []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def cell(self, point: Point) -> Cell:
        return self.cells[point.y][point.x]

    def points(self) -> Iterator[Point]:
        """Yield every position in row-major order."""

        for y in range(self.bounds.height):
            for x in range(self.bounds.width):
                yield Point(x, y)

    def source(self, source_id: int) -> SourceCell:
        cell = self.cell(self.source_positions[source_id])
        if not isinstance(cell, SourceCell):
            raise PlacementError(f"No source cell at index {source_id}")
        return cell

    @property
    def source_count(self) -> int:
        return len(self.source_positions)

    @property
    def is_complete(self) -> bool:
        return self.free_count == 0

    def reach(self, position: Point, direction: Direction, capacity: int) -> int:
        """Maximum steps from ``position`` given a capacity, capped at the grid edge."""

        return min(capacity, self.bounds.edge_distance(position, direction))

    def tallies(self) -> List[Tuple[int, int, int, int]]:
        return [self.source(i).movement.as_tuple() for i in range(self.source_count)]

    def clone(self) -> TerritoryGrid:
        """Return an independent deep copy for speculative evaluation."""

        return copy.deepcopy(self)

    # ------------------------------------------------------------------
    # Source placement and expansion
    # ------------------------------------------------------------------
    def add_source(self, position: Point, capacity: int) -> int:
        """Place a new source and register it on every cell it can reach."""

        if not self.bounds.contains(position):
            raise PlacementError(f"Source outside bounds: {position.as_tuple()}")
        if capacity < 0:
            raise PlacementError(f"Negative capacity {capacity} at {position.as_tuple()}")
        cell = self.cell(position)
        if not isinstance(cell, UnassignedCell):
            raise PlacementError(f"Cell {position.as_tuple()} is already taken")

        self._detach(position, cell)
        source_id = len(self.source_positions)
        self.cells[position.y][position.x] = SourceCell(
            id=source_id, capacity=capacity, remaining=capacity
        )
        self.free_count -= 1
        self.source_positions.append(position)
        LOGGER.debug(
            "Placed source %s at %s with capacity %s", source_id, position.as_tuple(), capacity
        )
        self.expansion(source_id)
        return source_id

    def expansion(self, source_id: int) -> None:
        """Register the source as a candidate on every free cell it can reach.

        Each arm stops at the first cell that is not free.
        """

        position = self.source_positions[source_id]
        source = self.source(source_id)
        capacity = source.remaining
        for direction in EXPANSION_ORDER:
            shift = direction.shift
            for step in range(1, self.reach(position, direction, capacity) + 1):
                target = position + shift * step
                cell = self.cell(target)
                if not isinstance(cell, UnassignedCell):
                    break
                if source_id not in cell.candidates:
                    cell.candidates.append(source_id)
                source.frontier.add(target)

    def clear_reachability(self) -> None:
        for point in self.points():
            cell = self.cell(point)
            if isinstance(cell, UnassignedCell):
                cell.candidates.clear()
            elif isinstance(cell, SourceCell):
                cell.frontier.clear()

    def rebuild_reachability(self) -> None:
        """Recompute every candidate list and frontier from current capacities."""

        self.clear_reachability()
        for source_id in range(self.source_count):
            self.expansion(source_id)

    # ------------------------------------------------------------------
    # Commits
    # ------------------------------------------------------------------
    def run_toward_source(self, point: Point, source_id: int) -> Tuple[int, Direction]:
        """Length of the free run from ``point`` back toward the source.

        Returns the run length and the side of the source the run lies on.
        """

        offset = point - self.source_positions[source_id]
        try:
            direction = Direction.from_offset(offset)
        except ValueError as exc:
            raise PlacementError(
                f"Cell {point.as_tuple()} is not on an axis of source {source_id}"
            ) from exc
        back = direction.opposite.shift
        length = 1
        while isinstance(self.cell(point + back * length), UnassignedCell):
            length += 1
        return length, direction

    def claim(self, point: Point, source_id: int) -> int:
        """Assign the straight run from ``point`` back toward the source.

        Shrinks the source's capacity, credits its tally and prunes its
        frontier. Returns the number of cells assigned.
        """

        cell = self.cell(point)
        if not isinstance(cell, UnassignedCell):
            raise PlacementError(f"Cell {point.as_tuple()} is not free")
        if source_id not in cell.candidates:
            raise PlacementError(
                f"Source {source_id} is not a candidate for {point.as_tuple()}"
            )

        length, direction = self.run_toward_source(point, source_id)
        back = direction.opposite.shift
        for step in range(length):
            self._assign(point + back * step, source_id)
        self.free_count -= length
        self.source(source_id).remaining -= length
        self.constriction(source_id, length, direction)
        return length

    def constriction(self, source_id: int, committed_length: int, direction: Direction) -> None:
        """Drop frontier cells the source can no longer reach.

        The caller has already charged ``committed_length`` against the
        remaining capacity. A frontier cell stays reachable while its distance
        does not exceed the remaining capacity plus what the source already
        holds on that side.
        """

        source = self.source(source_id)
        position = self.source_positions[source_id]
        source.movement.add(direction, committed_length)
        remaining = source.remaining

        unreachable = []
        for point in source.frontier:
            offset = point - position
            allowed = remaining + source.movement.get(Direction.from_offset(offset))
            if offset.manhattan() > allowed:
                unreachable.append(point)

        for point in unreachable:
            source.frontier.discard(point)
            cell = self.cell(point)
            if isinstance(cell, UnassignedCell) and source_id in cell.candidates:
                cell.candidates.remove(source_id)

    def _assign(self, point: Point, source_id: int) -> None:
        cell = self.cell(point)
        if not isinstance(cell, UnassignedCell):
            raise PlacementError(f"Cell {point.as_tuple()} is already taken")
        self._detach(point, cell, keep=source_id)
        self.cells[point.y][point.x] = AssignedCell(owner_id=source_id)

    def _detach(self, point: Point, cell: UnassignedCell, keep: int = -1) -> None:
        """Unregister a cell that is being taken from every source listing it.

        Sources other than ``keep`` also lose the part of their arm beyond it.
        """

        for candidate in list(cell.candidates):
            self.source(candidate).frontier.discard(point)
            if candidate != keep:
                self._block_beyond(point, candidate)

    def _block_beyond(self, point: Point, source_id: int) -> None:
        source = self.source(source_id)
        position = self.source_positions[source_id]
        offset = point - position
        direction = Direction.from_offset(offset)
        beyond = [
            other
            for other in source.frontier
            if Direction.from_offset(other - position) == direction
            and (other - position).manhattan() > offset.manhattan()
        ]
        for other in beyond:
            source.frontier.discard(other)
            cell = self.cell(other)
            if isinstance(cell, UnassignedCell) and source_id in cell.candidates:
                cell.candidates.remove(source_id)

    # ------------------------------------------------------------------
    # Serialization helpers
    # ------------------------------------------------------------------
    def owner_at(self, point: Point) -> int:
        cell = self.cell(point)
        if isinstance(cell, SourceCell):
            return cell.id
        if isinstance(cell, AssignedCell):
            return cell.owner_id
        return -1

    def to_jsonable(self) -> List[List[int]]:
        return [
            [self.owner_at(Point(x, y)) for x in range(self.bounds.width)]
            for y in range(self.bounds.height)
        ]

    def sources_jsonable(self) -> List[dict]:
        serialized = []
        for source_id, position in enumerate(self.source_positions):
            source = self.source(source_id)
            serialized.append(
                {
                    "id": source_id,
                    "position": [position.x, position.y],
                    "capacity": source.capacity,
                    "remaining": source.remaining,
                    "movement": {d.value: source.movement.get(d) for d in TALLY_ORDER},
                }
            )
        return serialized

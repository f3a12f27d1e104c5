"""Deterministic feasibility and integrity validation for territory grids."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from ..core.constants import Direction
from ..core.exceptions import ValidationError
from ..core.geometry import Point
from ..core.models import AssignedCell, UnassignedCell
from .grid import TerritoryGrid
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


@dataclass
class ValidationResult:
    ok: bool
    messages: List[str] = field(default_factory=list)


class GridValidator:
    """Runs the speculative feasibility check and the final integrity checks."""

    def check_feasibility(self, grid: TerritoryGrid) -> ValidationResult:
        """Decide whether a tentatively committed grid can still be completed.

        Rebuilds reachability on ``grid`` in place, so it must only be given a
        disposable clone. Running it twice without other mutation gives the
        same answer.
        """

        grid.rebuild_reachability()
        try:
            self._check_capacities(grid)
            self._check_coverage(grid)
            self._check_saturation(grid)
        except ValidationError as exc:
            LOGGER.debug("Trial rejected: %s", exc)
            return ValidationResult(ok=False, messages=[str(exc)])
        return ValidationResult(ok=True)

    def validate(self, grid: TerritoryGrid) -> ValidationResult:
        """Check the committed-state invariants of a finished grid."""

        messages: List[str] = []
        try:
            self._check_free_count(grid)
            self._check_source_accounts(grid)
            self._check_contiguous_arms(grid)
            self._check_frontier_sync(grid)
        except ValidationError as exc:
            messages.append(str(exc))
            LOGGER.error("Validation failed: %s", exc)
            return ValidationResult(ok=False, messages=messages)
        return ValidationResult(ok=True, messages=[])

    # ------------------------------------------------------------------
    # Feasibility checks
    # ------------------------------------------------------------------
    def _check_capacities(self, grid: TerritoryGrid) -> None:
        for source_id in range(grid.source_count):
            remaining = grid.source(source_id).remaining
            if remaining < 0:
                raise ValidationError(
                    f"Source {source_id} over-committed by {-remaining} cells"
                )

    def _check_coverage(self, grid: TerritoryGrid) -> None:
        for point in grid.points():
            cell = grid.cell(point)
            if isinstance(cell, UnassignedCell) and not cell.candidates:
                raise ValidationError(f"Free cell {point.as_tuple()} is unreachable")

    def _check_saturation(self, grid: TerritoryGrid) -> None:
        reachable = 0
        for source_id in range(grid.source_count):
            source = grid.source(source_id)
            reachable += min(source.remaining, len(source.frontier))
        if reachable != grid.free_count:
            raise ValidationError(
                f"Reachable capacity {reachable} does not match {grid.free_count} free cells"
            )

    # ------------------------------------------------------------------
    # Integrity checks
    # ------------------------------------------------------------------
    def _check_free_count(self, grid: TerritoryGrid) -> None:
        free = sum(1 for point in grid.points() if isinstance(grid.cell(point), UnassignedCell))
        if free != grid.free_count:
            raise ValidationError(f"Free counter {grid.free_count} but {free} free cells")

    def _check_source_accounts(self, grid: TerritoryGrid) -> None:
        owned: Dict[int, int] = {source_id: 0 for source_id in range(grid.source_count)}
        for point in grid.points():
            cell = grid.cell(point)
            if isinstance(cell, AssignedCell):
                owned[cell.owner_id] = owned.get(cell.owner_id, 0) + 1

        for source_id in range(grid.source_count):
            source = grid.source(source_id)
            claimed = source.movement.total()
            if source.remaining < 0:
                raise ValidationError(f"Source {source_id} has negative capacity {source.remaining}")
            if source.remaining + claimed != source.capacity:
                raise ValidationError(
                    f"Source {source_id} accounts {source.remaining}+{claimed} != {source.capacity}"
                )
            if owned[source_id] != claimed:
                raise ValidationError(
                    f"Source {source_id} owns {owned[source_id]} cells but tallies {claimed}"
                )

    def _check_contiguous_arms(self, grid: TerritoryGrid) -> None:
        for point in grid.points():
            cell = grid.cell(point)
            if not isinstance(cell, AssignedCell):
                continue
            position = grid.source_positions[cell.owner_id]
            offset = point - position
            if not offset.is_axis_aligned():
                raise ValidationError(
                    f"Cell {point.as_tuple()} is off the axes of source {cell.owner_id}"
                )
            back = Direction.from_offset(offset).opposite.shift
            for step in range(1, offset.manhattan()):
                between = grid.cell(point + back * step)
                if not (isinstance(between, AssignedCell) and between.owner_id == cell.owner_id):
                    raise ValidationError(
                        f"Cell {point.as_tuple()} is cut off from source {cell.owner_id}"
                    )

    def _check_frontier_sync(self, grid: TerritoryGrid) -> None:
        listed: Dict[Point, List[int]] = {}
        for source_id in range(grid.source_count):
            for point in grid.source(source_id).frontier:
                cell = grid.cell(point)
                if not isinstance(cell, UnassignedCell) or source_id not in cell.candidates:
                    raise ValidationError(
                        f"Frontier of source {source_id} lists {point.as_tuple()} out of sync"
                    )
                listed.setdefault(point, []).append(source_id)

        for point in grid.points():
            cell = grid.cell(point)
            if isinstance(cell, UnassignedCell) and sorted(cell.candidates) != sorted(
                listed.get(point, [])
            ):
                raise ValidationError(f"Candidates of {point.as_tuple()} out of sync")

"""CP-SAT completion of a stalled allocation using OR-Tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from ortools.sat.python import cp_model

from ..core.constants import TALLY_ORDER
from ..core.geometry import Point
from ..core.models import AssignedCell, UnassignedCell
from .grid import TerritoryGrid
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)


@dataclass
class ExactOutcome:
    """Result of the exact model over the free cells."""

    status: str
    claims: List[Tuple[Point, int]] = field(default_factory=list)

    @property
    def feasible(self) -> bool:
        return self.status in ("OPTIMAL", "FEASIBLE")

    @property
    def infeasible(self) -> bool:
        return self.status == "INFEASIBLE"


def solve_remaining(
    grid: TerritoryGrid,
    timeout: float = 10.0,
    num_workers: int = 1,
) -> ExactOutcome:
    """Find a completion of ``grid`` via CP-SAT without mutating it.

    Args:
        grid: Partially assigned grid whose committed cells stay fixed.
        timeout: Solver time limit in seconds.
        num_workers: CP-SAT search workers; 1 keeps solutions reproducible.

    Returns:
        An :class:`ExactOutcome`. When feasible, ``claims`` lists the farthest
        newly claimed cell of every extended arm together with its source, in
        source order then tally order. Replaying them through
        :meth:`TerritoryGrid.claim` completes the grid.
    """
    if grid.is_complete:
        return ExactOutcome(status="OPTIMAL")

    model = cp_model.CpModel()

    # ------------------------------------------------------------------
    # Step 1: Arm variables, contiguous from each source. Arms walk past
    # cells the source already owns; only free cells get a variable.
    # ------------------------------------------------------------------
    coverage: Dict[Point, List[cp_model.IntVar]] = {}
    arms: List[Tuple[int, List[Tuple[Point, cp_model.IntVar]]]] = []

    for source_id, position in enumerate(grid.source_positions):
        source = grid.source(source_id)
        new_cells: List[cp_model.IntVar] = []
        for direction in TALLY_ORDER:
            previous = None
            arm: List[Tuple[Point, cp_model.IntVar]] = []
            for step in range(1, grid.bounds.edge_distance(position, direction) + 1):
                point = position + direction.shift * step
                cell = grid.cell(point)
                if isinstance(cell, AssignedCell) and cell.owner_id == source_id and not arm:
                    continue
                if not isinstance(cell, UnassignedCell):
                    break
                var = model.new_bool_var(f"x_{source_id}_{direction.value}_{step}")
                if previous is not None:
                    model.add_implication(var, previous)
                previous = var
                arm.append((point, var))
                coverage.setdefault(point, []).append(var)
                new_cells.append(var)
            if arm:
                arms.append((source_id, arm))

        if not new_cells:
            if source.remaining != 0:
                LOGGER.debug("Source %s cannot reach any free cell", source_id)
                return ExactOutcome(status="INFEASIBLE")
            continue
        # ------------------------------------------------------------------
        # Step 2: Exact capacity exhaustion
        # ------------------------------------------------------------------
        model.add(sum(new_cells) == source.remaining)

    # ------------------------------------------------------------------
    # Step 3: Every free cell covered exactly once
    # ------------------------------------------------------------------
    for point in grid.points():
        if not isinstance(grid.cell(point), UnassignedCell):
            continue
        covering = coverage.get(point)
        if not covering:
            LOGGER.debug("Free cell %s has no covering arm", point.as_tuple())
            return ExactOutcome(status="INFEASIBLE")
        model.add_exactly_one(covering)

    # ------------------------------------------------------------------
    # Step 4: Solve
    # ------------------------------------------------------------------
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = timeout
    solver.parameters.num_workers = num_workers

    LOGGER.info(
        "CP-SAT: %d free cells, %d arm vars, solving (timeout=%0.1fs)...",
        grid.free_count,
        sum(len(arm) for _, arm in arms),
        timeout,
    )

    status = solver.solve(model)
    status_name = solver.status_name(status)

    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        LOGGER.warning("CP-SAT: no completion found (status=%s)", status_name)
        return ExactOutcome(status=status_name)

    LOGGER.info("CP-SAT: completion found in %.2fs", solver.wall_time)

    # ------------------------------------------------------------------
    # Step 5: Extract the farthest claimed cell per arm
    # ------------------------------------------------------------------
    claims: List[Tuple[Point, int]] = []
    for source_id, arm in arms:
        farthest = None
        for point, var in arm:
            if solver.value(var):
                farthest = point
        if farthest is not None:
            claims.append((farthest, source_id))
    return ExactOutcome(status=status_name, claims=claims)

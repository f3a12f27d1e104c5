"""Territory allocation orchestration.

The driver alternates three phases until every cell is owned or a full
round changes nothing:
  1. Obvious fill: commit cells with a single remaining candidate.
  2. Pair resolution: settle two-source ties across a pair of cells.
  3. Single-cell trials: speculatively commit each remaining cell.
Trials run on a deep copy of the grid and are replayed on the live grid
only when the copy passes the feasibility check.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..core.constants import AllocationStatus
from ..core.exceptions import PlacementError
from ..core.geometry import Point
from ..core.models import Instance, UnassignedCell
from .grid import GridConfig, TerritoryGrid
from .solver import ExactOutcome, solve_remaining
from .validator import GridValidator
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


@dataclass
class AllocatorConfig:
    exact_fallback: bool = False
    exact_timeout_seconds: float = 10.0
    exact_workers: int = 1
    validate_result: bool = True


@dataclass
class AllocationResult:
    grid: TerritoryGrid
    status: AllocationStatus
    rounds: int = 0
    validation_messages: List[str] = field(default_factory=list)

    @property
    def tallies(self) -> List[Tuple[int, int, int, int]]:
        return self.grid.tallies()

    @property
    def unassigned(self) -> int:
        return self.grid.free_count


class TerritoryAllocator:
    """Partitions one instance's grid among its sources."""

    def __init__(
        self,
        instance: Instance,
        config: Optional[AllocatorConfig] = None,
        validator: Optional[GridValidator] = None,
    ) -> None:
        self.instance = instance
        self.config = config or AllocatorConfig()
        self.validator = validator or GridValidator()

    # ------------------------------------------------------------------
    # Public entrypoint
    # ------------------------------------------------------------------
    def build_grid(self) -> TerritoryGrid:
        grid = TerritoryGrid(GridConfig(width=self.instance.width, height=self.instance.height))
        for spec in self.instance.sources:
            grid.add_source(self.instance.source_position(spec), spec.capacity)
        return grid

    def allocate(self) -> AllocationResult:
        grid = self.build_grid()
        LOGGER.info(
            "Allocating %sx%s grid among %s sources",
            grid.bounds.width,
            grid.bounds.height,
            grid.source_count,
        )

        rounds = 0
        progress = True
        while not grid.is_complete and progress:
            rounds += 1
            filled = self.fill_obvious(grid)
            paired = self.resolve_pairs(grid)
            speculated = self.speculate_cells(grid)
            progress = filled or paired or speculated
            LOGGER.debug(
                "Round %s: obvious=%s pairs=%s trials=%s, %s free cells left",
                rounds,
                filled,
                paired,
                speculated,
                grid.free_count,
            )

        status = AllocationStatus.COMPLETE if grid.is_complete else AllocationStatus.STALLED
        if status == AllocationStatus.STALLED:
            LOGGER.warning("Allocation stalled with %s free cells", grid.free_count)
            if self.config.exact_fallback:
                grid, status = self._complete_exactly(grid)

        messages: List[str] = []
        if self.config.validate_result:
            messages = self.validator.validate(grid).messages

        LOGGER.info("Allocation finished after %s rounds: %s", rounds, status.value)
        return AllocationResult(
            grid=grid,
            status=status,
            rounds=rounds,
            validation_messages=messages,
        )

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------
    def fill_obvious(self, grid: TerritoryGrid) -> bool:
        """Commit single-candidate cells until a full sweep changes nothing."""

        committed = False
        changed = True
        while changed:
            changed = False
            for point in grid.points():
                cell = grid.cell(point)
                if isinstance(cell, UnassignedCell) and len(cell.candidates) == 1:
                    source_id = cell.candidates[0]
                    length = grid.claim(point, source_id)
                    LOGGER.debug(
                        "Obvious: %s cells from %s to source %s",
                        length,
                        point.as_tuple(),
                        source_id,
                    )
                    changed = committed = True
        return committed

    def resolve_pairs(self, grid: TerritoryGrid) -> bool:
        """Try to settle every two-source tie between two free cells."""

        progressed = False
        for point in grid.points():
            cell = grid.cell(point)
            if not isinstance(cell, UnassignedCell):
                continue
            match = self.find_pair(grid, point, cell.candidates)
            if match is None:
                continue
            partner, shared = match
            LOGGER.debug(
                "Pair %s / %s tied between sources %s",
                point.as_tuple(),
                partner.as_tuple(),
                shared,
            )
            if self.try_commit(grid, [point, partner], shared):
                progressed = True
        return progressed

    def speculate_cells(self, grid: TerritoryGrid) -> bool:
        """Run a single-cell trial on each free cell that still has candidates."""

        progressed = False
        for point in grid.points():
            cell = grid.cell(point)
            if isinstance(cell, UnassignedCell) and cell.candidates:
                if self.try_commit(grid, [point], list(cell.candidates)):
                    progressed = True
        return progressed

    @staticmethod
    def find_pair(
        grid: TerritoryGrid, point: Point, candidates: Sequence[int]
    ) -> Optional[Tuple[Point, List[int]]]:
        """First other free cell sharing exactly two candidates with ``point``."""

        for other in grid.points():
            if other == point:
                continue
            cell = grid.cell(other)
            if not isinstance(cell, UnassignedCell):
                continue
            shared = [source_id for source_id in candidates if source_id in cell.candidates]
            if len(shared) == 2:
                return other, shared
        return None

    # ------------------------------------------------------------------
    # Speculative trial
    # ------------------------------------------------------------------
    def try_commit(
        self, grid: TerritoryGrid, points: Sequence[Point], source_ids: Sequence[int]
    ) -> bool:
        """Commit the first cyclic pairing of points to sources that stays feasible.

        Each rotation shifts ``points`` right by one before pairing them with
        ``source_ids`` positionally. The pairing is evaluated on a clone; the
        live grid is touched only when the clone validates.
        """

        rotated = list(points)
        for _ in range(len(rotated)):
            rotated = rotated[-1:] + rotated[:-1]
            pairs = list(zip(rotated, source_ids))
            trial = grid.clone()
            try:
                self._place(trial, pairs)
            except PlacementError as exc:
                LOGGER.debug("Trial %s rejected: %s", self._describe(pairs), exc)
                continue
            if self.validator.check_feasibility(trial).ok:
                self._place(grid, pairs)
                LOGGER.debug("Trial %s accepted", self._describe(pairs))
                return True
        return False

    @staticmethod
    def _place(grid: TerritoryGrid, pairs: Sequence[Tuple[Point, int]]) -> None:
        for point, source_id in pairs:
            grid.claim(point, source_id)

    @staticmethod
    def _describe(pairs: Sequence[Tuple[Point, int]]) -> str:
        return ", ".join(f"{point.as_tuple()}->{source_id}" for point, source_id in pairs)

    # ------------------------------------------------------------------
    # Exact fallback
    # ------------------------------------------------------------------
    def _complete_exactly(self, grid: TerritoryGrid) -> Tuple[TerritoryGrid, AllocationStatus]:
        """Finish a stalled grid with CP-SAT.

        The heuristic's commits may already rule out every tiling, so a
        stalled grid with no completion is solved again from the initial
        placement. Only when that model is infeasible too is the instance
        reported as having no tiling. Returns the grid to report and its status.
        """

        outcome = self._solve(grid)
        if outcome.feasible:
            return self._replay(grid, outcome.claims)
        if not outcome.infeasible:
            return grid, AllocationStatus.STALLED

        LOGGER.info("Stalled grid cannot be completed, solving from the initial placement")
        fresh = self.build_grid()
        outcome = self._solve(fresh)
        if outcome.infeasible:
            LOGGER.warning("No tiling exists for this instance")
            return grid, AllocationStatus.INFEASIBLE
        if not outcome.feasible:
            return grid, AllocationStatus.STALLED

        completed, status = self._replay(fresh, outcome.claims)
        if status != AllocationStatus.COMPLETE:
            return grid, AllocationStatus.STALLED
        return completed, status

    def _solve(self, grid: TerritoryGrid) -> ExactOutcome:
        return solve_remaining(
            grid,
            timeout=self.config.exact_timeout_seconds,
            num_workers=self.config.exact_workers,
        )

    def _replay(
        self, grid: TerritoryGrid, claims: Sequence[Tuple[Point, int]]
    ) -> Tuple[TerritoryGrid, AllocationStatus]:
        trial = grid.clone()
        try:
            self._place(trial, claims)
        except PlacementError as exc:
            LOGGER.warning("Exact completion could not be replayed: %s", exc)
            return grid, AllocationStatus.STALLED
        self._place(grid, claims)
        LOGGER.info("Exact completion claimed the remaining cells")
        status = AllocationStatus.COMPLETE if grid.is_complete else AllocationStatus.STALLED
        return grid, status

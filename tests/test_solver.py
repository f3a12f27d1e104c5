import unittest

from territory.core.geometry import Point
from territory.engine.grid import GridConfig, TerritoryGrid
from territory.engine.solver import ExactOutcome, solve_remaining


def build(width: int, height: int, *sources) -> TerritoryGrid:
    grid = TerritoryGrid(GridConfig(width=width, height=height))
    for x, y, capacity in sources:
        grid.add_source(Point(x, y), capacity)
    return grid


class SolveRemainingTests(unittest.TestCase):
    def test_single_arm_claims_far_end(self) -> None:
        grid = build(3, 1, (0, 0, 2))
        outcome = solve_remaining(grid, timeout=5.0)
        self.assertTrue(outcome.feasible)
        self.assertEqual(outcome.claims, [(Point(2, 0), 0)])
        # The grid itself is left for the caller to update.
        self.assertEqual(grid.free_count, 2)

    def test_claims_replay_to_completion(self) -> None:
        grid = build(3, 2, (0, 0, 2), (0, 1, 2))
        outcome = solve_remaining(grid, timeout=5.0)
        self.assertTrue(outcome.feasible)
        self.assertEqual(outcome.claims, [(Point(2, 0), 0), (Point(2, 1), 1)])
        for point, source_id in outcome.claims:
            grid.claim(point, source_id)
        self.assertTrue(grid.is_complete)
        self.assertEqual(grid.tallies(), [(0, 2, 0, 0), (0, 2, 0, 0)])

    def test_arm_extends_past_owned_cells(self) -> None:
        grid = build(4, 1, (0, 0, 3))
        grid.claim(Point(1, 0), 0)
        outcome = solve_remaining(grid, timeout=5.0)
        self.assertTrue(outcome.feasible)
        self.assertEqual(outcome.claims, [(Point(3, 0), 0)])

    def test_capacity_mismatch_is_infeasible(self) -> None:
        grid = build(3, 1, (0, 0, 1))
        outcome = solve_remaining(grid, timeout=5.0)
        self.assertTrue(outcome.infeasible)
        self.assertEqual(outcome.claims, [])

    def test_boxed_in_source_is_infeasible(self) -> None:
        grid = build(3, 1, (0, 0, 1), (1, 0, 1))
        self.assertEqual(solve_remaining(grid).status, "INFEASIBLE")

    def test_uncovered_cell_is_infeasible(self) -> None:
        grid = build(4, 1, (0, 0, 0), (1, 0, 1))
        grid.claim(Point(2, 0), 1)
        self.assertTrue(solve_remaining(grid).infeasible)

    def test_complete_grid_needs_no_claims(self) -> None:
        grid = build(2, 1, (0, 0, 1))
        grid.claim(Point(1, 0), 0)
        outcome = solve_remaining(grid)
        self.assertEqual(outcome.status, "OPTIMAL")
        self.assertEqual(outcome.claims, [])


class ExactOutcomeTests(unittest.TestCase):
    def test_status_flags(self) -> None:
        self.assertTrue(ExactOutcome(status="FEASIBLE").feasible)
        self.assertFalse(ExactOutcome(status="UNKNOWN").feasible)
        self.assertFalse(ExactOutcome(status="UNKNOWN").infeasible)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()

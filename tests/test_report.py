import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock

from territory.core.constants import AllocationStatus
from territory.core.geometry import Point
from territory.engine.allocator import AllocationResult
from territory.engine.grid import GridConfig, TerritoryGrid
from territory.io.report import format_report, result_to_jsonable, write_report


def fake_result(*tallies) -> MagicMock:
    result = MagicMock()
    result.tallies = list(tallies)
    return result


class FormatReportTests(unittest.TestCase):
    def test_cases_are_numbered_and_separated(self) -> None:
        text = format_report(
            [fake_result((0, 1, 0, 0), (2, 0, 0, 3)), fake_result((0, 0, 0, 0))]
        )
        self.assertEqual(
            text,
            "Case 1:\n0 1 0 0\n2 0 0 3\n\nCase 2:\n0 0 0 0\n\n",
        )

    def test_case_without_sources(self) -> None:
        self.assertEqual(format_report([fake_result()]), "Case 1:\n\n")

    def test_write_report(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "output.txt"
            write_report(path, [fake_result((1, 0, 0, 0))])
            self.assertEqual(path.read_text(encoding="utf-8"), "Case 1:\n1 0 0 0\n\n")


class JsonReportTests(unittest.TestCase):
    def test_result_is_json_serialisable(self) -> None:
        grid = TerritoryGrid(GridConfig(width=3, height=1))
        grid.add_source(Point(0, 0), 1)
        grid.claim(Point(1, 0), 0)
        result = AllocationResult(grid=grid, status=AllocationStatus.STALLED, rounds=2)
        payload = result_to_jsonable(result)
        self.assertEqual(payload["status"], "STALLED")
        self.assertEqual(payload["unassigned"], 1)
        self.assertEqual(payload["tallies"], [[0, 1, 0, 0]])
        self.assertEqual(payload["owners"], [[0, 0, -1]])
        self.assertEqual(payload["sources"][0]["remaining"], 0)
        json.dumps(payload)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()

"""Report rendering for finished allocations."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Sequence

if TYPE_CHECKING:
    from ..engine.allocator import AllocationResult


def format_report(results: Sequence["AllocationResult"]) -> str:
    """Render each case as ``Case N:``, one tally line per source, then a blank line."""

    lines: List[str] = []
    for case_no, result in enumerate(results, start=1):
        lines.append(f"Case {case_no}:")
        for tally in result.tallies:
            lines.append(" ".join(str(count) for count in tally))
        lines.append("")
    return "".join(line + "\n" for line in lines)


def write_report(path: Path | str, results: Sequence["AllocationResult"]) -> None:
    Path(path).write_text(format_report(results), encoding="utf-8")


def result_to_jsonable(result: "AllocationResult") -> Dict[str, Any]:
    grid = result.grid
    return {
        "width": grid.bounds.width,
        "height": grid.bounds.height,
        "status": result.status.value,
        "rounds": result.rounds,
        "unassigned": result.unassigned,
        "tallies": [list(tally) for tally in result.tallies],
        "sources": grid.sources_jsonable(),
        "owners": grid.to_jsonable(),
        "validation": result.validation_messages,
    }

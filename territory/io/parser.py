"""Reader for the multi-case instance text format."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Set, Tuple

from ..core.exceptions import InputFormatError
from ..core.models import Instance, SourceSpec


def _tokenize(line: str, line_no: int) -> List[int]:
    try:
        return [int(token) for token in line.split()]
    except ValueError as exc:
        raise InputFormatError(f"line {line_no}: expected integers, got {line.strip()!r}") from exc


def _numbered_lines(text: str) -> Iterator[Tuple[int, List[int]]]:
    """Yield (line number, integer tokens) for every non-blank line."""

    for line_no, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        yield line_no, _tokenize(line, line_no)


def parse_instances(text: str) -> List[Instance]:
    """Parse every case up to a single-number terminator line or end of input.

    Each case is a ``width height count`` header followed by ``count`` lines of
    ``x y capacity``, with ``x`` counted from the left and ``y`` from the
    bottom, both 1-based.
    """

    instances: List[Instance] = []
    lines = _numbered_lines(text)
    for line_no, header in lines:
        if len(header) == 1:
            break
        if len(header) != 3:
            raise InputFormatError(f"line {line_no}: header needs 'width height count'")
        width, height, count = header
        if width < 1 or height < 1:
            raise InputFormatError(f"line {line_no}: grid must be at least 1x1")
        if count < 0:
            raise InputFormatError(f"line {line_no}: negative source count {count}")

        instance = Instance(width=width, height=height)
        seen: Set[Tuple[int, int]] = set()
        for _ in range(count):
            try:
                source_line_no, fields = next(lines)
            except StopIteration:
                raise InputFormatError(
                    f"line {line_no}: case expects {count} sources, input ended after "
                    f"{len(instance.sources)}"
                ) from None
            instance.sources.append(_parse_source(fields, source_line_no, width, height, seen))
        instances.append(instance)
    return instances


def _parse_source(
    fields: List[int], line_no: int, width: int, height: int, seen: Set[Tuple[int, int]]
) -> SourceSpec:
    if len(fields) != 3:
        raise InputFormatError(f"line {line_no}: source needs 'x y capacity'")
    x, y, capacity = fields
    if not (1 <= x <= width and 1 <= y <= height):
        raise InputFormatError(f"line {line_no}: source ({x}, {y}) outside {width}x{height} grid")
    if capacity < 0:
        raise InputFormatError(f"line {line_no}: negative capacity {capacity}")
    if (x, y) in seen:
        raise InputFormatError(f"line {line_no}: duplicate source at ({x}, {y})")
    seen.add((x, y))
    return SourceSpec(x=x, y=y, capacity=capacity)


def read_instances(path: Path | str) -> List[Instance]:
    return parse_instances(Path(path).read_text(encoding="utf-8"))

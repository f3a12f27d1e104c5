"""Integer grid geometry: points and signed shifts."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Shift:
    """Signed displacement between two grid points."""

    x: int
    y: int

    def __mul__(self, factor: int) -> Shift:
        return Shift(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def manhattan(self) -> int:
        return abs(self.x) + abs(self.y)

    def is_axis_aligned(self) -> bool:
        return (self.x == 0) != (self.y == 0)


@dataclass(frozen=True)
class Point:
    """A cell position: column ``x`` and row ``y``, row 0 at the top."""

    x: int
    y: int

    def __add__(self, shift: Shift) -> Point:
        return Point(self.x + shift.x, self.y + shift.y)

    def __sub__(self, other: Point) -> Shift:
        return Shift(self.x - other.x, self.y - other.y)

    @classmethod
    def from_input(cls, x: int, y: int, height: int) -> Point:
        """Convert 1-based input coordinates (y counted from the bottom)."""

        return cls(x - 1, height - y)

    def as_tuple(self) -> tuple:
        return (self.x, self.y)

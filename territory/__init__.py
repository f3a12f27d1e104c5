"""Territory allocation engine for grids shared among capacity-bound sources.

This package exposes the public API surface via:

- ``territory.engine.allocator.TerritoryAllocator``: runs the allocation loop.
- ``territory.engine.grid.TerritoryGrid``: the mutable cell grid.
- ``territory.io`` helpers: instance parsing and report rendering.
"""

from .engine.allocator import AllocationResult, AllocatorConfig, TerritoryAllocator
from .engine.grid import GridConfig, TerritoryGrid
from .io.parser import parse_instances, read_instances
from .io.report import format_report

__all__ = [
    "AllocationResult",
    "AllocatorConfig",
    "TerritoryAllocator",
    "GridConfig",
    "TerritoryGrid",
    "parse_instances",
    "read_instances",
    "format_report",
]

__version__ = "0.1.0"

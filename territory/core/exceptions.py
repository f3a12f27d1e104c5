"""Custom exception hierarchy for territory allocation."""


class TerritoryError(Exception):
    """Base exception for allocation failures."""


class InputFormatError(TerritoryError):
    """Raised when the instance text cannot be parsed."""


class PlacementError(TerritoryError):
    """Raised when a source or cell commit would break grid rules."""


class ValidationError(TerritoryError):
    """Raised when a feasibility or integrity check fails."""


class IncompleteAllocationError(TerritoryError):
    """Raised when strict mode meets a case with unassigned cells."""

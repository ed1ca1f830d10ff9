"""
Exceptions raised by curve construction.

Hierarchy:
- CurveError: base for everything raised by the bootstrap core
- PreconditionError: invalid inputs (empty helper set, pillar on/before reference date)
- SolverError: hard root-finder failure (no valid bracket)
- BootstrapError: a pillar could not be solved; wraps the underlying cause

Malformed collaborator input (tenor strings, day-count names, interpolation
data) keeps raising plain ValueError.
"""

from datetime import date
from typing import Any, Optional


class CurveError(Exception):
    """Base exception for curve construction failures."""


class PreconditionError(CurveError, ValueError):
    """Inputs violate a precondition of the bootstrap."""


class SolverError(CurveError, RuntimeError):
    """Root finder could not establish or maintain a valid bracket."""

    def __init__(
        self,
        message: str,
        x_min: Optional[float] = None,
        x_max: Optional[float] = None,
    ):
        self.x_min = x_min
        self.x_max = x_max
        super().__init__(message)


class BootstrapError(CurveError, RuntimeError):
    """Bootstrap failed at a specific pillar."""

    def __init__(self, pillar_date: date, helper: Any, message: str):
        self.pillar_date = pillar_date
        self.helper = helper
        super().__init__(f"bootstrap failed at pillar {pillar_date} ({helper!r}): {message}")


__all__ = [
    "CurveError",
    "PreconditionError",
    "SolverError",
    "BootstrapError",
]

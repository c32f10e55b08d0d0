"""Exception types shared across ordering and envelope construction."""

from __future__ import annotations


class CurveSetError(ValueError):
    """Raised when a curve set has unusable shape or content."""


class IncompatiblePartsError(ValueError):
    """Raised when partial orderings or curve sets cannot be combined."""


class DegenerateInputError(ValueError):
    """Raised when a scale estimate is zero where a residual has to be divided by it."""

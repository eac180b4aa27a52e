"""
Exception types raised by the pricing library.

All input-domain violations subclass ValueError so callers that only
catch ValueError keep working.
"""

from typing import Optional


class PricerError(Exception):
    """Base class for all pricing library errors."""


class InputOutOfRangeError(PricerError, ValueError):
    """An input lies outside its documented domain."""


class CurveConstructionError(PricerError, ValueError):
    """A curve, surface or bootstrap input violates a construction invariant."""


class SurfaceLookupError(PricerError, LookupError):
    """A grid corner required for interpolation is missing."""


class NonConvergenceError(PricerError, RuntimeError):
    """
    A root finder exhausted its iterations or hit a flat derivative.

    Attributes:
        last_strike: Last strike estimate before giving up
        last_value: Objective value at that strike
        iterations: Iterations performed
    """

    def __init__(
        self,
        message: str,
        last_strike: Optional[object] = None,
        last_value: Optional[float] = None,
        iterations: int = 0
    ) -> None:
        super().__init__(message)
        self.last_strike = last_strike
        self.last_value = last_value
        self.iterations = iterations

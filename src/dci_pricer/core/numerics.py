"""
Shared numerical helpers: normal distribution, interval search, rounding.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence, Union
import math

import numpy as np
from scipy.stats import norm


# Monetary amounts are quoted to 4 decimal places
MONEY_QUANTUM = Decimal("0.0001")


def norm_cdf(x: float) -> float:
    """Standard normal cumulative distribution function."""
    return float(norm.cdf(x))


def norm_pdf(x: float) -> float:
    """Standard normal probability density function."""
    return float(norm.pdf(x))


def is_finite(*values: float) -> bool:
    """True if every value is a finite number."""
    return all(math.isfinite(v) for v in values)


def find_interval(grid: Sequence[float], x: float) -> int:
    """
    Locate the interval of a sorted grid that contains x.

    Returns the index i such that grid[i] <= x <= grid[i + 1], clipped
    to [0, len(grid) - 2] so callers can always read grid[i + 1].
    """
    if len(grid) < 2:
        raise ValueError("Interval search needs at least two grid points")
    i = int(np.searchsorted(grid, x, side="right")) - 1
    return min(max(i, 0), len(grid) - 2)


def to_decimal(value: Union[float, int, str, Decimal]) -> Decimal:
    """Convert to Decimal through str so floats keep their shortest repr."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Union[float, Decimal], places: int = 4) -> Decimal:
    """Round half away from zero to a fixed number of decimal places."""
    quantum = MONEY_QUANTUM if places == 4 else Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)

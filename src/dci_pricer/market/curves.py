"""
Zero-coupon yield curves for discounting.

Supports flat, linearly interpolated and natural cubic spline curves.
Rates are continuously compounded and tenors are in years (ACT/365F).
All curves are immutable once built and extrapolate flat outside the
pillar range.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional, Tuple
import math

import numpy as np

from dci_pricer.core.day_count import year_fraction
from dci_pricer.core.errors import CurveConstructionError, InputOutOfRangeError
from dci_pricer.core.numerics import find_interval, is_finite


MIN_ZERO_RATE = -0.20
MAX_ZERO_RATE = 0.50

# Tenors closer than this are duplicates
TENOR_TOLERANCE = 1e-10


class InterpolationMethod(str, Enum):
    """Zero rate interpolation schemes."""

    FLAT = "flat"
    LINEAR = "linear"
    CUBIC_SPLINE = "cubic_spline"


@dataclass(frozen=True)
class CurvePoint:
    """
    A single curve pillar.

    Attributes:
        tenor: Time in years from the curve reference date
        zero_rate: Continuously compounded zero rate
    """

    tenor: float
    zero_rate: float

    def __post_init__(self) -> None:
        if not is_finite(self.tenor) or self.tenor < 0:
            raise InputOutOfRangeError(f"Tenor must be non-negative, got {self.tenor}")
        if not is_finite(self.zero_rate):
            raise InputOutOfRangeError(f"Zero rate must be finite, got {self.zero_rate}")

    @property
    def discount_factor(self) -> float:
        return math.exp(-self.zero_rate * self.tenor)

    @classmethod
    def from_discount_factor(cls, tenor: float, discount_factor: float) -> "CurvePoint":
        """Build a pillar from a discount factor in (0, 1]."""
        if not is_finite(tenor) or tenor <= 0:
            raise InputOutOfRangeError(f"Tenor must be positive, got {tenor}")
        if not is_finite(discount_factor) or not (0 < discount_factor <= 1.0):
            raise InputOutOfRangeError(
                f"Discount factor must be in (0, 1], got {discount_factor}"
            )
        return cls(tenor=tenor, zero_rate=-math.log(discount_factor) / tenor)

    def is_valid(self) -> bool:
        """True if the rate is inside the supported band."""
        return MIN_ZERO_RATE < self.zero_rate < MAX_ZERO_RATE


class ZeroCurve(ABC):
    """
    Abstract zero curve.

    Subclasses implement `_rate` for a validated non-negative tenor;
    discount factors and forwards derive from it.
    """

    def __init__(self, name: str = "", reference_date: Optional[date] = None) -> None:
        self._name = name
        self._reference_date = reference_date

    @property
    def name(self) -> str:
        return self._name

    @property
    def reference_date(self) -> Optional[date]:
        return self._reference_date

    @property
    @abstractmethod
    def interpolation(self) -> InterpolationMethod:
        """Interpolation scheme of this curve."""

    @property
    @abstractmethod
    def points(self) -> Tuple[CurvePoint, ...]:
        """Pillars the curve was built from."""

    @abstractmethod
    def _rate(self, t: float) -> float:
        """Zero rate at a validated tenor."""

    @abstractmethod
    def valid_range(self) -> Tuple[float, float]:
        """(min tenor, max tenor) covered by the pillars."""

    @staticmethod
    def _check_tenor(t: float) -> None:
        if not is_finite(t) or t < 0:
            raise InputOutOfRangeError(f"Tenor must be non-negative, got {t}")

    def zero_rate(self, t: float) -> float:
        """Continuously compounded zero rate at tenor t (years)."""
        self._check_tenor(t)
        return self._rate(t)

    def discount_factor(self, t: float) -> float:
        """Discount factor exp(-r(t) * t)."""
        return math.exp(-self.zero_rate(t) * t)

    def forward_rate(self, t1: float, t2: float) -> float:
        """
        Continuously compounded forward rate between two tenors.

        Raises:
            InputOutOfRangeError: If a tenor is negative or t2 <= t1
        """
        self._check_tenor(t1)
        self._check_tenor(t2)
        if t2 <= t1:
            raise InputOutOfRangeError(f"Forward end {t2} must be after start {t1}")
        return (self._rate(t2) * t2 - self._rate(t1) * t1) / (t2 - t1)

    def _tenor_of(self, d: date) -> float:
        if self._reference_date is None:
            raise ValueError(f"Curve {self._name!r} has no reference date")
        if d < self._reference_date:
            raise InputOutOfRangeError(
                f"Date {d} is before curve reference date {self._reference_date}"
            )
        return year_fraction(self._reference_date, d)

    def zero_rate_on(self, d: date) -> float:
        """Zero rate to a calendar date."""
        return self.zero_rate(self._tenor_of(d))

    def discount_factor_on(self, d: date) -> float:
        """Discount factor to a calendar date."""
        return self.discount_factor(self._tenor_of(d))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self._name!r}, "
            f"points={len(self.points)}, range={self.valid_range()})"
        )


class FlatZeroCurve(ZeroCurve):
    """Flat curve: the same zero rate at every tenor."""

    def __init__(
        self,
        rate: float,
        name: str = "",
        reference_date: Optional[date] = None
    ) -> None:
        if not is_finite(rate) or not (MIN_ZERO_RATE <= rate <= MAX_ZERO_RATE):
            raise InputOutOfRangeError(
                f"Flat rate must be in [{MIN_ZERO_RATE}, {MAX_ZERO_RATE}], got {rate}"
            )
        super().__init__(name, reference_date)
        self._flat_rate = rate

    @property
    def rate(self) -> float:
        return self._flat_rate

    @property
    def interpolation(self) -> InterpolationMethod:
        return InterpolationMethod.FLAT

    @property
    def points(self) -> Tuple[CurvePoint, ...]:
        return (CurvePoint(0.0, self._flat_rate),)

    def _rate(self, t: float) -> float:
        return self._flat_rate

    def forward_rate(self, t1: float, t2: float) -> float:
        super().forward_rate(t1, t2)
        return self._flat_rate

    def valid_range(self) -> Tuple[float, float]:
        return 0.0, math.inf


class _PillarCurve(ZeroCurve):
    """Shared validation and storage for interpolated curves."""

    min_points = 2

    def __init__(
        self,
        points: Iterable[CurvePoint],
        name: str = "",
        reference_date: Optional[date] = None
    ) -> None:
        super().__init__(name, reference_date)
        ordered: List[CurvePoint] = sorted(points, key=lambda p: p.tenor)

        if len(ordered) < self.min_points:
            raise CurveConstructionError(
                f"{type(self).__name__} needs at least {self.min_points} points, "
                f"got {len(ordered)}"
            )
        for prev, curr in zip(ordered, ordered[1:]):
            if curr.tenor - prev.tenor < TENOR_TOLERANCE:
                raise CurveConstructionError(f"Duplicate tenor {curr.tenor} in curve")
        for point in ordered:
            if not point.is_valid():
                raise CurveConstructionError(
                    f"Zero rate {point.zero_rate} at tenor {point.tenor} is outside "
                    f"({MIN_ZERO_RATE}, {MAX_ZERO_RATE})"
                )

        self._points = tuple(ordered)
        self._tenors = np.array([p.tenor for p in ordered], dtype=float)
        self._rates = np.array([p.zero_rate for p in ordered], dtype=float)

    @property
    def points(self) -> Tuple[CurvePoint, ...]:
        return self._points

    def valid_range(self) -> Tuple[float, float]:
        return float(self._tenors[0]), float(self._tenors[-1])

    def _rate(self, t: float) -> float:
        if t <= self._tenors[0]:
            return float(self._rates[0])
        if t >= self._tenors[-1]:
            return float(self._rates[-1])
        i = find_interval(self._tenors, t)
        return self._interpolate(i, t)

    @abstractmethod
    def _interpolate(self, i: int, t: float) -> float:
        """Rate at t inside the interval [tenors[i], tenors[i + 1]]."""


class LinearInterpolatedCurve(_PillarCurve):
    """Zero rates interpolated linearly between pillars."""

    @property
    def interpolation(self) -> InterpolationMethod:
        return InterpolationMethod.LINEAR

    def _interpolate(self, i: int, t: float) -> float:
        t0, t1 = self._tenors[i], self._tenors[i + 1]
        r0, r1 = self._rates[i], self._rates[i + 1]
        return float(r0 + (r1 - r0) * (t - t0) / (t1 - t0))


class CubicSplineCurve(_PillarCurve):
    """
    Natural cubic spline through the zero rates.

    Second derivatives are solved once at construction with natural
    (zero curvature) end conditions.
    """

    min_points = 3

    def __init__(
        self,
        points: Iterable[CurvePoint],
        name: str = "",
        reference_date: Optional[date] = None
    ) -> None:
        super().__init__(points, name, reference_date)
        self._second_derivs = natural_spline_second_derivatives(self._tenors, self._rates)

    @property
    def interpolation(self) -> InterpolationMethod:
        return InterpolationMethod.CUBIC_SPLINE

    def _interpolate(self, i: int, t: float) -> float:
        t0, t1 = self._tenors[i], self._tenors[i + 1]
        r0, r1 = self._rates[i], self._rates[i + 1]
        y0, y1 = self._second_derivs[i], self._second_derivs[i + 1]

        h = t1 - t0
        a = (t1 - t) / h
        b = (t - t0) / h
        return float(a * r0 + b * r1 + ((a**3 - a) * y0 + (b**3 - b) * y1) * h * h / 6.0)


def natural_spline_second_derivatives(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """
    Second derivatives of the natural cubic spline through (x, y).

    Tridiagonal forward elimination followed by back substitution.
    Two points give all zeros, i.e. straight-line interpolation.
    """
    n = len(x)
    y2 = np.zeros(n)
    u = np.zeros(n)

    for i in range(1, n - 1):
        sig = (x[i] - x[i - 1]) / (x[i + 1] - x[i - 1])
        p = sig * y2[i - 1] + 2.0
        y2[i] = (sig - 1.0) / p
        slope_right = (y[i + 1] - y[i]) / (x[i + 1] - x[i])
        slope_left = (y[i] - y[i - 1]) / (x[i] - x[i - 1])
        u[i] = (6.0 * (slope_right - slope_left) / (x[i + 1] - x[i - 1]) - sig * u[i - 1]) / p

    # Natural end conditions: y2[0] = y2[n-1] = 0
    y2[n - 1] = 0.0
    for k in range(n - 2, -1, -1):
        y2[k] = y2[k] * y2[k + 1] + u[k]
    y2[0] = 0.0

    return y2


def build_curve(
    points: Iterable[CurvePoint],
    interpolation: InterpolationMethod,
    name: str = "",
    reference_date: Optional[date] = None
) -> ZeroCurve:
    """
    Build a curve from pillars, falling back to simpler schemes when there
    are too few points.

    FLAT uses the first pillar's rate; CUBIC_SPLINE needs three pillars
    and LINEAR two, with a single pillar becoming a flat curve.
    """
    ordered = sorted(points, key=lambda p: p.tenor)
    if not ordered:
        raise CurveConstructionError("Cannot build a curve without points")

    if interpolation == InterpolationMethod.FLAT or len(ordered) == 1:
        return FlatZeroCurve(ordered[0].zero_rate, name, reference_date)
    if interpolation == InterpolationMethod.CUBIC_SPLINE and len(ordered) >= 3:
        return CubicSplineCurve(ordered, name, reference_date)
    return LinearInterpolatedCurve(ordered, name, reference_date)

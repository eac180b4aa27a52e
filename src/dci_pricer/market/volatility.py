"""
Volatility surfaces and smile parameterisation.

Supports a flat surface, a bilinearly interpolated strike x tenor grid
and the 25-delta risk reversal / butterfly smile quoted in FX markets.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple
import math

from dci_pricer.core.errors import (
    CurveConstructionError,
    InputOutOfRangeError,
    SurfaceLookupError,
)
from dci_pricer.core.numerics import find_interval, is_finite


MAX_VOLATILITY = 5.0
MAX_RISK_REVERSAL = 0.5
MAX_BUTTERFLY = 0.5

# Corner matching tolerance for grid lookups
GRID_TOLERANCE = 1e-6

# Deltas this close to 0.5 are treated as ATM
ATM_DELTA_BAND = 0.01


def _check_volatility(volatility: float) -> None:
    if not is_finite(volatility) or not (0 < volatility <= MAX_VOLATILITY):
        raise InputOutOfRangeError(
            f"Volatility must be in (0, {MAX_VOLATILITY}], got {volatility}"
        )


def _check_query(strike: float, tenor: float) -> None:
    if not is_finite(strike) or strike <= 0:
        raise InputOutOfRangeError(f"Strike must be positive, got {strike}")
    if not is_finite(tenor) or tenor <= 0:
        raise InputOutOfRangeError(f"Tenor must be positive, got {tenor}")


@dataclass(frozen=True)
class VolSurfacePoint:
    """
    A single implied volatility quote.

    Attributes:
        strike: Strike rate
        tenor: Expiry in years
        volatility: Annualized implied volatility
        moneyness: Optional strike / forward
    """

    strike: float
    tenor: float
    volatility: float
    moneyness: Optional[float] = None

    def __post_init__(self) -> None:
        _check_query(self.strike, self.tenor)
        _check_volatility(self.volatility)

    @classmethod
    def with_forward(
        cls, strike: float, tenor: float, volatility: float, forward: float
    ) -> "VolSurfacePoint":
        """Quote with moneyness computed against a forward."""
        if not is_finite(forward) or forward <= 0:
            raise InputOutOfRangeError(f"Forward must be positive, got {forward}")
        return cls(strike, tenor, volatility, moneyness=strike / forward)


class VolSurface(ABC):
    """Abstract implied volatility surface indexed by strike and tenor."""

    @abstractmethod
    def volatility(self, strike: float, tenor: float) -> float:
        """Implied volatility at (strike, tenor)."""

    @abstractmethod
    def valid_range(self) -> Tuple[float, float, float, float]:
        """(min strike, max strike, min tenor, max tenor)."""

    @abstractmethod
    def volatility_by_moneyness(self, moneyness: float, tenor: float) -> float:
        """Implied volatility at a moneyness level (strike / ATM strike)."""

    def atm_volatility(self, spot: float, tenor: float) -> float:
        """At-the-money volatility, read at strike = spot."""
        return self.volatility(spot, tenor)

    def is_in_range(self, strike: float, tenor: float) -> bool:
        min_k, max_k, min_t, max_t = self.valid_range()
        return min_k <= strike <= max_k and min_t <= tenor <= max_t


class FlatVolSurface(VolSurface):
    """The same volatility for every strike and tenor."""

    def __init__(self, volatility: float) -> None:
        _check_volatility(volatility)
        self._volatility = volatility

    def volatility(self, strike: float, tenor: float) -> float:
        _check_query(strike, tenor)
        return self._volatility

    def volatility_by_moneyness(self, moneyness: float, tenor: float) -> float:
        _check_query(moneyness, tenor)
        return self._volatility

    def valid_range(self) -> Tuple[float, float, float, float]:
        return 0.0, math.inf, 0.0, math.inf

    def is_in_range(self, strike: float, tenor: float) -> bool:
        return strike > 0 and tenor > 0

    def __repr__(self) -> str:
        return f"FlatVolSurface({self._volatility})"


class InterpolatedVolSurface(VolSurface):
    """
    Bilinear interpolation on a full strike x tenor grid.

    Queries outside the grid are clamped to its edges.
    """

    def __init__(self, points: Iterable[VolSurfacePoint]) -> None:
        self._points: Tuple[VolSurfacePoint, ...] = tuple(points)

        if len(self._points) < 4:
            raise CurveConstructionError(
                f"Interpolated surface needs at least 4 points, got {len(self._points)}"
            )

        self._strikes: List[float] = sorted({p.strike for p in self._points})
        self._tenors: List[float] = sorted({p.tenor for p in self._points})

        if len(self._strikes) < 2 or len(self._tenors) < 2:
            raise CurveConstructionError(
                f"Surface needs at least 2 strikes and 2 tenors, got "
                f"{len(self._strikes)} strikes and {len(self._tenors)} tenors"
            )

        seen: Dict[Tuple[float, float], float] = {}
        for p in self._points:
            key = (p.strike, p.tenor)
            if key in seen:
                raise CurveConstructionError(
                    f"Duplicate quote at strike={p.strike}, tenor={p.tenor}"
                )
            seen[key] = p.volatility

        missing = [
            (k, t) for k in self._strikes for t in self._tenors if (k, t) not in seen
        ]
        if missing:
            raise CurveConstructionError(
                f"Surface grid is not rectangular, missing (strike, tenor) {missing[:3]}"
            )

    @property
    def points(self) -> Tuple[VolSurfacePoint, ...]:
        return self._points

    def _corner(self, strike: float, tenor: float) -> float:
        for p in self._points:
            if abs(p.strike - strike) < GRID_TOLERANCE and abs(p.tenor - tenor) < GRID_TOLERANCE:
                return p.volatility
        raise SurfaceLookupError(f"No grid quote at strike={strike}, tenor={tenor}")

    def volatility(self, strike: float, tenor: float) -> float:
        _check_query(strike, tenor)

        k = min(max(strike, self._strikes[0]), self._strikes[-1])
        t = min(max(tenor, self._tenors[0]), self._tenors[-1])

        i = find_interval(self._strikes, k)
        j = find_interval(self._tenors, t)
        k0, k1 = self._strikes[i], self._strikes[i + 1]
        t0, t1 = self._tenors[j], self._tenors[j + 1]

        wk = (k - k0) / (k1 - k0)
        wt = (t - t0) / (t1 - t0)

        return (
            (1 - wk) * (1 - wt) * self._corner(k0, t0)
            + wk * (1 - wt) * self._corner(k1, t0)
            + (1 - wk) * wt * self._corner(k0, t1)
            + wk * wt * self._corner(k1, t1)
        )

    def volatility_by_moneyness(self, moneyness: float, tenor: float) -> float:
        _check_query(moneyness, tenor)
        atm_strike = (self._strikes[0] + self._strikes[-1]) / 2.0
        return self.volatility(moneyness * atm_strike, tenor)

    def valid_range(self) -> Tuple[float, float, float, float]:
        return self._strikes[0], self._strikes[-1], self._tenors[0], self._tenors[-1]

    def __repr__(self) -> str:
        return (
            f"InterpolatedVolSurface({len(self._strikes)} strikes x "
            f"{len(self._tenors)} tenors)"
        )


@dataclass(frozen=True)
class VolSmileParameters:
    """
    25-delta FX smile quoted as ATM, risk reversal and butterfly.

    Attributes:
        atm_vol: At-the-money volatility
        rr_25d: 25-delta risk reversal; positive values lift the put wing
        bf_25d: 25-delta butterfly
        tenor: Expiry in years
    """

    atm_vol: float
    rr_25d: float
    bf_25d: float
    tenor: float

    def __post_init__(self) -> None:
        _check_volatility(self.atm_vol)
        if not is_finite(self.rr_25d) or abs(self.rr_25d) > MAX_RISK_REVERSAL:
            raise InputOutOfRangeError(
                f"Risk reversal must be in [-{MAX_RISK_REVERSAL}, {MAX_RISK_REVERSAL}], "
                f"got {self.rr_25d}"
            )
        if not is_finite(self.bf_25d) or not (0 <= self.bf_25d <= MAX_BUTTERFLY):
            raise InputOutOfRangeError(
                f"Butterfly must be in [0, {MAX_BUTTERFLY}], got {self.bf_25d}"
            )
        if not is_finite(self.tenor) or self.tenor <= 0:
            raise InputOutOfRangeError(f"Tenor must be positive, got {self.tenor}")

    @classmethod
    def flat(cls, atm_vol: float, tenor: float) -> "VolSmileParameters":
        """Smile with no skew and no convexity."""
        return cls(atm_vol=atm_vol, rr_25d=0.0, bf_25d=0.0, tenor=tenor)

    @property
    def put_25d_vol(self) -> float:
        return self.atm_vol + self.bf_25d + self.rr_25d / 2.0

    @property
    def call_25d_vol(self) -> float:
        return self.atm_vol + self.bf_25d - self.rr_25d / 2.0

    def vol_by_delta(self, delta: float) -> float:
        """
        Volatility for a signed option delta.

        Positive deltas read the call wing, negative deltas the put wing.
        Between 25-delta and ATM the vol is interpolated linearly; beyond
        25-delta it stays at the wing vol.

        Raises:
            InputOutOfRangeError: If |delta| > 1
        """
        if not is_finite(delta) or abs(delta) > 1.0:
            raise InputOutOfRangeError(f"Delta must be in [-1, 1], got {delta}")

        abs_delta = abs(delta)
        if abs(abs_delta - 0.5) < ATM_DELTA_BAND:
            return self.atm_vol
        if abs_delta > 0.5:
            return self.atm_vol + 2.0 * self.bf_25d

        if delta >= 0:
            if abs_delta >= 0.25:
                w = (0.5 - abs_delta) / 0.25
                return self.atm_vol * (1 - w) + self.call_25d_vol * w
            return self.call_25d_vol

        if abs_delta >= 0.25:
            w = (abs_delta - 0.25) / 0.25
            return self.put_25d_vol * (1 - w) + self.atm_vol * w
        return self.put_25d_vol

"""Market data: zero curves, curve instruments, bootstrapping and vol surfaces."""

from dci_pricer.market.curves import (
    CurvePoint,
    InterpolationMethod,
    ZeroCurve,
    FlatZeroCurve,
    LinearInterpolatedCurve,
    CubicSplineCurve,
    build_curve,
)
from dci_pricer.market.instruments import MarketInstrument, Deposit, Swap
from dci_pricer.market.bootstrap import BootstrapConfig, CurveBootstrapper, build_standard_curve
from dci_pricer.market.volatility import (
    VolSurfacePoint,
    VolSurface,
    FlatVolSurface,
    InterpolatedVolSurface,
    VolSmileParameters,
)

__all__ = [
    "CurvePoint",
    "InterpolationMethod",
    "ZeroCurve",
    "FlatZeroCurve",
    "LinearInterpolatedCurve",
    "CubicSplineCurve",
    "build_curve",
    "MarketInstrument",
    "Deposit",
    "Swap",
    "BootstrapConfig",
    "CurveBootstrapper",
    "build_standard_curve",
    "VolSurfacePoint",
    "VolSurface",
    "FlatVolSurface",
    "InterpolatedVolSurface",
    "VolSmileParameters",
]

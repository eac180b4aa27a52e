"""
DCI Pricer - FX option and Dual Currency Investment pricing library.

Provides the numerical core for quoting DCI products:
- Garman-Kohlhagen / Black-Scholes pricing, Greeks and implied vol
- Zero curve bootstrapping from deposits and swaps
- Flat, linear and cubic spline zero curves
- Flat and bilinear volatility surfaces with a 25-delta smile
- Newton-Raphson strike solving for a target coupon

Example:
    >>> from dci_pricer import DciInput, DciPricer, solve_dci_strike
    >>> dci = DciInput(**dci_dict)
    >>> quote = DciPricer().quote(dci)
    >>> print(f"Coupon: {quote.coupon_annual:.2%}")
    >>> strike = solve_dci_strike(dci, target_coupon=0.08)
"""

__version__ = "0.1.0"

# Errors
from dci_pricer.core.errors import (
    PricerError,
    InputOutOfRangeError,
    CurveConstructionError,
    SurfaceLookupError,
    NonConvergenceError,
)

# Conventions
from dci_pricer.core.day_count import (
    DayCountConvention,
    day_count_fraction,
    maturity_date,
    tenor_to_days,
)
from dci_pricer.core.calendar import Calendar, BusinessDayConvention, adjust_date

# Option pricing
from dci_pricer.engines.black_scholes import (
    OptionType,
    PricingInputs,
    GreeksResult,
    VanillaResult,
    ImpliedVolConfig,
    gk_price,
    bs_price,
    gk_price_with_discount_factors,
    gk_price_with_curves,
    gk_greeks,
    gk_implied_vol,
    bs_implied_vol,
    price_vanilla,
)

# Market data
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
from dci_pricer.market.bootstrap import (
    BootstrapConfig,
    CurveBootstrapper,
    build_standard_curve,
)
from dci_pricer.market.volatility import (
    VolSurfacePoint,
    VolSurface,
    FlatVolSurface,
    InterpolatedVolSurface,
    VolSmileParameters,
)

# Products
from dci_pricer.products.schema import (
    FxQuote,
    DciInput,
    DciQuoteResult,
    DciPayoffResult,
    MarketDataSnapshot,
    load_dci_input,
    validate_dci_input_json,
)
from dci_pricer.pricers.dci import DciPricer
from dci_pricer.pricers.strike_solver import (
    StrikeSolverConfig,
    solve_strike,
    generate_strike_ladder,
    solve_dci_strike,
    dci_strike_ladder,
    is_strike_reasonable,
)

# Risk
from dci_pricer.risk.greeks import dci_greeks, bumped_greeks, BumpingConfig, DciGreeksResult
from dci_pricer.risk.scenarios import (
    analyze,
    quick_analyze,
    coupon_sensitivities,
    pnl_distribution,
)

__all__ = [
    "__version__",
    # Errors
    "PricerError",
    "InputOutOfRangeError",
    "CurveConstructionError",
    "SurfaceLookupError",
    "NonConvergenceError",
    # Conventions
    "DayCountConvention",
    "day_count_fraction",
    "maturity_date",
    "tenor_to_days",
    "Calendar",
    "BusinessDayConvention",
    "adjust_date",
    # Option pricing
    "OptionType",
    "PricingInputs",
    "GreeksResult",
    "VanillaResult",
    "ImpliedVolConfig",
    "gk_price",
    "bs_price",
    "gk_price_with_discount_factors",
    "gk_price_with_curves",
    "gk_greeks",
    "gk_implied_vol",
    "bs_implied_vol",
    "price_vanilla",
    # Market data
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
    # Products
    "FxQuote",
    "DciInput",
    "DciQuoteResult",
    "DciPayoffResult",
    "MarketDataSnapshot",
    "load_dci_input",
    "validate_dci_input_json",
    "DciPricer",
    "StrikeSolverConfig",
    "solve_strike",
    "generate_strike_ladder",
    "solve_dci_strike",
    "dci_strike_ladder",
    "is_strike_reasonable",
    # Risk
    "dci_greeks",
    "bumped_greeks",
    "BumpingConfig",
    "DciGreeksResult",
    "analyze",
    "quick_analyze",
    "coupon_sensitivities",
    "pnl_distribution",
]

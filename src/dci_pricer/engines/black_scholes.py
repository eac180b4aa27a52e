"""
Garman-Kohlhagen / Black-Scholes analytical pricing, Greeks and implied vol.

Garman-Kohlhagen prices an FX option with a domestic (quote currency)
and a foreign (base currency) continuously compounded rate. The
single-rate Black-Scholes variant is the special case with a zero
foreign rate.

All entry points validate their inputs against the domain bounds below
and raise InputOutOfRangeError instead of clamping.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING
import logging
import math

import numpy as np

from dci_pricer.core.errors import InputOutOfRangeError
from dci_pricer.core.numerics import norm_cdf, norm_pdf, is_finite

if TYPE_CHECKING:
    from dci_pricer.market.curves import ZeroCurve
    from dci_pricer.market.volatility import VolSurface


logger = logging.getLogger(__name__)


# Input domain
MIN_RATE = -0.20
MAX_RATE = 0.50
MAX_VOLATILITY = 5.0
MAX_TIME_TO_MATURITY = 100.0

# Below these the option is worth its intrinsic value
MIN_TIME = 1e-6
MIN_VOL = 1e-6

# |d1| beyond this is treated as deep in or out of the money
DEEP_MONEYNESS_D1 = 20.0


class OptionType(str, Enum):
    """Option type."""

    CALL = "call"
    PUT = "put"


@dataclass(frozen=True)
class GreeksResult:
    """
    Option Greeks (sensitivities) per unit of foreign notional.

    Attributes:
        delta: dPrice/dSpot
        gamma: d2Price/dSpot2
        vega: Price change per 1 vol point
        theta: Price change per calendar day
        rho_domestic: Price change per 1% domestic rate move
        rho_foreign: Price change per 1% foreign rate move
    """

    delta: float
    gamma: float
    vega: float
    theta: float
    rho_domestic: float
    rho_foreign: float

    def __neg__(self) -> "GreeksResult":
        return GreeksResult(
            delta=-self.delta,
            gamma=-self.gamma,
            vega=-self.vega,
            theta=-self.theta,
            rho_domestic=-self.rho_domestic,
            rho_foreign=-self.rho_foreign,
        )

    def scaled(self, factor: float) -> "GreeksResult":
        """Greeks multiplied by a position size."""
        return GreeksResult(
            delta=self.delta * factor,
            gamma=self.gamma * factor,
            vega=self.vega * factor,
            theta=self.theta * factor,
            rho_domestic=self.rho_domestic * factor,
            rho_foreign=self.rho_foreign * factor,
        )


@dataclass(frozen=True)
class VanillaResult:
    """Result of vanilla option pricing."""

    price: float
    greeks: GreeksResult


@dataclass
class ImpliedVolConfig:
    """Newton-Raphson settings for implied volatility."""

    tolerance: float = 1e-4
    max_iterations: int = 100
    min_vol: float = 0.001
    max_vol: float = 3.0
    # Largest step as a fraction of the current vol
    max_step_ratio: float = 0.5
    min_vega: float = 1e-10


def validate_inputs(
    spot: float,
    strike: float,
    rate_domestic: float,
    rate_foreign: float,
    volatility: float,
    time_to_maturity: float
) -> None:
    """
    Check pricing inputs against the supported domain.

    Raises:
        InputOutOfRangeError: If any input is outside its domain
    """
    if not is_finite(spot, strike, rate_domestic, rate_foreign, volatility, time_to_maturity):
        raise InputOutOfRangeError("Pricing inputs must be finite numbers")
    if spot <= 0:
        raise InputOutOfRangeError(f"Spot must be positive, got {spot}")
    if strike <= 0:
        raise InputOutOfRangeError(f"Strike must be positive, got {strike}")
    if not (0 < volatility <= MAX_VOLATILITY):
        raise InputOutOfRangeError(
            f"Volatility must be in (0, {MAX_VOLATILITY}], got {volatility}"
        )
    if not (0 < time_to_maturity <= MAX_TIME_TO_MATURITY):
        raise InputOutOfRangeError(
            f"Time to maturity must be in (0, {MAX_TIME_TO_MATURITY}], got {time_to_maturity}"
        )
    for name, rate in (("Domestic rate", rate_domestic), ("Foreign rate", rate_foreign)):
        if not (MIN_RATE <= rate <= MAX_RATE):
            raise InputOutOfRangeError(
                f"{name} must be in [{MIN_RATE}, {MAX_RATE}], got {rate}"
            )


@dataclass(frozen=True)
class PricingInputs:
    """
    Validated inputs for a single Garman-Kohlhagen valuation.

    Attributes:
        spot: Spot rate (domestic per foreign)
        strike: Strike rate
        rate_domestic: Domestic continuously compounded rate
        rate_foreign: Foreign continuously compounded rate
        volatility: Annualized volatility
        time_to_maturity: Time to expiry in years
    """

    spot: float
    strike: float
    rate_domestic: float
    rate_foreign: float
    volatility: float
    time_to_maturity: float

    def __post_init__(self) -> None:
        validate_inputs(
            self.spot, self.strike, self.rate_domestic,
            self.rate_foreign, self.volatility, self.time_to_maturity
        )

    @property
    def discount_domestic(self) -> float:
        return math.exp(-self.rate_domestic * self.time_to_maturity)

    @property
    def discount_foreign(self) -> float:
        return math.exp(-self.rate_foreign * self.time_to_maturity)

    @property
    def forward(self) -> float:
        """Outright forward implied by interest rate parity."""
        return self.spot * self.discount_foreign / self.discount_domestic


def d1(
    S: float, K: float, T: float, rate_domestic: float, rate_foreign: float, sigma: float
) -> float:
    """
    Calculate d1 in the Garman-Kohlhagen formula.

    Args:
        S: Spot rate
        K: Strike
        T: Time to expiry (years)
        rate_domestic: Domestic rate (continuous)
        rate_foreign: Foreign rate (continuous)
        sigma: Volatility

    Returns:
        d1 value
    """
    return (
        np.log(S / K) + (rate_domestic - rate_foreign + 0.5 * sigma**2) * T
    ) / (sigma * np.sqrt(T))


def d2(
    S: float, K: float, T: float, rate_domestic: float, rate_foreign: float, sigma: float
) -> float:
    """Calculate d2 = d1 - sigma * sqrt(T)."""
    return d1(S, K, T, rate_domestic, rate_foreign, sigma) - sigma * np.sqrt(T)


def _intrinsic(S: float, K: float, option_type: OptionType) -> float:
    if option_type == OptionType.CALL:
        return max(0.0, S - K)
    return max(0.0, K - S)


def _gk_price(
    S: float,
    K: float,
    rate_domestic: float,
    rate_foreign: float,
    sigma: float,
    T: float,
    option_type: OptionType
) -> float:
    """Garman-Kohlhagen price on already-validated inputs."""
    if T < MIN_TIME or sigma < MIN_VOL:
        return _intrinsic(S, K, option_type)

    d1_val = float(d1(S, K, T, rate_domestic, rate_foreign, sigma))
    d2_val = d1_val - sigma * math.sqrt(T)

    df_d = math.exp(-rate_domestic * T)
    df_f = math.exp(-rate_foreign * T)

    if abs(d1_val) > DEEP_MONEYNESS_D1:
        deep_call_itm = d1_val > 0
        if option_type == OptionType.CALL:
            return max(0.0, S * df_f - K * df_d) if deep_call_itm else 0.0
        return 0.0 if deep_call_itm else max(0.0, K * df_d - S * df_f)

    if option_type == OptionType.CALL:
        price = S * df_f * norm_cdf(d1_val) - K * df_d * norm_cdf(d2_val)
    else:
        price = K * df_d * (1.0 - norm_cdf(d2_val)) - S * df_f * (1.0 - norm_cdf(d1_val))

    return max(0.0, price)


def gk_price(
    spot: float,
    strike: float,
    rate_domestic: float,
    rate_foreign: float,
    volatility: float,
    time_to_maturity: float,
    option_type: OptionType
) -> float:
    """
    Garman-Kohlhagen price of a European FX option.

    The price is in domestic currency per one unit of foreign notional.

    Args:
        spot: Spot rate (domestic per foreign)
        strike: Strike rate
        rate_domestic: Domestic rate (continuous)
        rate_foreign: Foreign rate (continuous)
        volatility: Annualized volatility
        time_to_maturity: Time to expiry (years)
        option_type: CALL or PUT

    Returns:
        Non-negative option price

    Raises:
        InputOutOfRangeError: If any input is outside its domain
    """
    validate_inputs(spot, strike, rate_domestic, rate_foreign, volatility, time_to_maturity)
    return _gk_price(
        spot, strike, rate_domestic, rate_foreign, volatility, time_to_maturity, option_type
    )


def bs_price(
    spot: float,
    strike: float,
    rate: float,
    volatility: float,
    time_to_maturity: float,
    option_type: OptionType
) -> float:
    """Single-rate Black-Scholes price (Garman-Kohlhagen with no foreign rate)."""
    return gk_price(spot, strike, rate, 0.0, volatility, time_to_maturity, option_type)


def gk_price_with_discount_factors(
    spot: float,
    strike: float,
    discount_domestic: float,
    discount_foreign: float,
    volatility: float,
    time_to_maturity: float,
    option_type: OptionType
) -> float:
    """
    Garman-Kohlhagen price from discount factors instead of rates.

    Rates are backed out as -ln(DF) / T.

    Raises:
        InputOutOfRangeError: If a discount factor is outside (0, 1] or
            the implied rates are outside their domain
    """
    for name, df in (("Domestic", discount_domestic), ("Foreign", discount_foreign)):
        if not is_finite(df) or not (0 < df <= 1.0):
            raise InputOutOfRangeError(f"{name} discount factor must be in (0, 1], got {df}")
    if not is_finite(time_to_maturity) or time_to_maturity <= 0:
        raise InputOutOfRangeError(
            f"Time to maturity must be positive, got {time_to_maturity}"
        )

    rate_domestic = -math.log(discount_domestic) / time_to_maturity
    rate_foreign = -math.log(discount_foreign) / time_to_maturity
    return gk_price(
        spot, strike, rate_domestic, rate_foreign, volatility, time_to_maturity, option_type
    )


def gk_price_with_curves(
    spot: float,
    strike: float,
    domestic_curve: "ZeroCurve",
    foreign_curve: "ZeroCurve",
    vol_surface: "VolSurface",
    time_to_maturity: float,
    option_type: OptionType
) -> float:
    """
    Garman-Kohlhagen price with rates read from zero curves and volatility
    read from a surface at (strike, expiry).
    """
    rate_domestic = domestic_curve.zero_rate(time_to_maturity)
    rate_foreign = foreign_curve.zero_rate(time_to_maturity)
    volatility = vol_surface.volatility(strike, time_to_maturity)
    return gk_price(
        spot, strike, rate_domestic, rate_foreign, volatility, time_to_maturity, option_type
    )


def gk_greeks(
    spot: float,
    strike: float,
    rate_domestic: float,
    rate_foreign: float,
    volatility: float,
    time_to_maturity: float,
    option_type: OptionType
) -> GreeksResult:
    """
    Analytic Garman-Kohlhagen Greeks.

    Vega is per 1 vol point, theta per calendar day and both rhos per
    1% rate move.

    Returns:
        GreeksResult for one unit of foreign notional
    """
    validate_inputs(spot, strike, rate_domestic, rate_foreign, volatility, time_to_maturity)
    S, K, T, sigma = spot, strike, time_to_maturity, volatility

    if T < MIN_TIME or sigma < MIN_VOL:
        if option_type == OptionType.CALL:
            delta = 1.0 if S > K else 0.0
        else:
            delta = -1.0 if S < K else 0.0
        return GreeksResult(
            delta=delta, gamma=0.0, vega=0.0, theta=0.0, rho_domestic=0.0, rho_foreign=0.0
        )

    sqrt_T = math.sqrt(T)
    d1_val = float(d1(S, K, T, rate_domestic, rate_foreign, sigma))
    d2_val = d1_val - sigma * sqrt_T
    df_d = math.exp(-rate_domestic * T)
    df_f = math.exp(-rate_foreign * T)
    pdf_d1 = norm_pdf(d1_val)

    # Gamma and vega are the same for calls and puts
    gamma = df_f * pdf_d1 / (S * sigma * sqrt_T)
    vega = S * df_f * pdf_d1 * sqrt_T / 100.0
    decay = -S * df_f * pdf_d1 * sigma / (2.0 * sqrt_T)

    if option_type == OptionType.CALL:
        delta = df_f * norm_cdf(d1_val)
        theta = (
            decay
            + rate_foreign * S * df_f * norm_cdf(d1_val)
            - rate_domestic * K * df_d * norm_cdf(d2_val)
        ) / 365.0
        rho_domestic = K * T * df_d * norm_cdf(d2_val) / 100.0
        rho_foreign = -S * T * df_f * norm_cdf(d1_val) / 100.0
    else:
        delta = -df_f * norm_cdf(-d1_val)
        theta = (
            decay
            - rate_foreign * S * df_f * norm_cdf(-d1_val)
            + rate_domestic * K * df_d * norm_cdf(-d2_val)
        ) / 365.0
        rho_domestic = -K * T * df_d * norm_cdf(-d2_val) / 100.0
        rho_foreign = S * T * df_f * norm_cdf(-d1_val) / 100.0

    return GreeksResult(
        delta=delta,
        gamma=gamma,
        vega=vega,
        theta=theta,
        rho_domestic=rho_domestic,
        rho_foreign=rho_foreign,
    )


def price_vanilla(inputs: PricingInputs, option_type: OptionType) -> VanillaResult:
    """
    Price a vanilla European FX option with Greeks.

    Args:
        inputs: Validated pricing inputs
        option_type: CALL or PUT

    Returns:
        VanillaResult with price and Greeks
    """
    args = (
        inputs.spot, inputs.strike, inputs.rate_domestic,
        inputs.rate_foreign, inputs.volatility, inputs.time_to_maturity,
    )
    return VanillaResult(
        price=_gk_price(*args, option_type),
        greeks=gk_greeks(*args, option_type),
    )


def gk_implied_vol(
    market_price: float,
    spot: float,
    strike: float,
    rate_domestic: float,
    rate_foreign: float,
    time_to_maturity: float,
    option_type: OptionType,
    initial_guess: float = 0.15,
    config: Optional[ImpliedVolConfig] = None
) -> float:
    """
    Implied volatility by Newton-Raphson on the Garman-Kohlhagen price.

    Args:
        market_price: Observed option price
        spot: Spot rate
        strike: Strike rate
        rate_domestic: Domestic rate (continuous)
        rate_foreign: Foreign rate (continuous)
        time_to_maturity: Time to expiry (years)
        option_type: CALL or PUT
        initial_guess: Starting volatility
        config: Solver settings

    Returns:
        Implied volatility, or nan if the price is not positive, vega
        vanishes or the iteration does not converge
    """
    cfg = config or ImpliedVolConfig()

    if not is_finite(market_price) or market_price <= 0:
        return float("nan")

    vol = min(max(initial_guess, cfg.min_vol), cfg.max_vol)
    validate_inputs(spot, strike, rate_domestic, rate_foreign, vol, time_to_maturity)

    S, K, T = spot, strike, time_to_maturity
    df_f = math.exp(-rate_foreign * T)
    sqrt_T = math.sqrt(T)

    for iteration in range(cfg.max_iterations):
        price = _gk_price(S, K, rate_domestic, rate_foreign, vol, T, option_type)
        diff = price - market_price

        if abs(diff) < cfg.tolerance:
            return vol

        # Raw vega (not per vol point)
        vega = S * df_f * norm_pdf(float(d1(S, K, T, rate_domestic, rate_foreign, vol))) * sqrt_T
        if abs(vega) < cfg.min_vega:
            logger.warning(
                f"Implied vol: vega {vega:.3e} too small at vol={vol:.6f}, giving up"
            )
            return float("nan")

        step_cap = cfg.max_step_ratio * vol
        new_vol = vol - diff / vega
        new_vol = min(max(new_vol, vol - step_cap), vol + step_cap)
        new_vol = min(max(new_vol, cfg.min_vol), cfg.max_vol)

        logger.debug(f"Implied vol iter {iteration}: vol={vol:.6f} diff={diff:.3e}")

        if abs(new_vol - vol) < cfg.tolerance:
            return new_vol
        vol = new_vol

    logger.warning(
        f"Implied vol did not converge in {cfg.max_iterations} iterations "
        f"(price={market_price}, K={strike}, T={time_to_maturity})"
    )
    return float("nan")


def bs_implied_vol(
    market_price: float,
    spot: float,
    strike: float,
    rate: float,
    time_to_maturity: float,
    option_type: OptionType,
    initial_guess: float = 0.3,
    config: Optional[ImpliedVolConfig] = None
) -> float:
    """Single-rate Black-Scholes implied volatility."""
    return gk_implied_vol(
        market_price, spot, strike, rate, 0.0, time_to_maturity, option_type,
        initial_guess=initial_guess, config=config
    )

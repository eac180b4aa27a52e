"""
Scenario analysis for DCI quotes.

Re-quotes a DCI under spot and volatility shifts, measures coupon
sensitivities and simulates the P&L against a plain deposit.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence
import logging
import math

import numpy as np

from dci_pricer.core.numerics import round_money, to_decimal
from dci_pricer.pricers.dci import DciPricer
from dci_pricer.products.schema import DciInput, FxQuote


logger = logging.getLogger(__name__)


# One pip in quote units
PIP = Decimal("0.01")
HALF_SPREAD = Decimal("0.01")
MIN_SCENARIO_VOL = 0.01

DEFAULT_SPOT_SHIFTS_PIPS = (-10, -5, 0, 5, 10)
DEFAULT_VOL_SHIFTS = (-0.02, 0.0, 0.02)


@dataclass
class ScenarioResult:
    """DCI quote under one spot / vol shift."""

    spot_shift_pips: int
    vol_shift: float
    spot_mid: Decimal
    volatility: float
    coupon_annual: float
    total_interest_foreign: Decimal
    coupon_change: float
    interest_change: Decimal


@dataclass
class CouponSensitivities:
    """Coupon change per unit move of the market inputs."""

    base_coupon: float
    per_pip: float
    per_vol_point: float


@dataclass
class PnlDistribution:
    """Summary of simulated P&L against a plain deposit (foreign units)."""

    scenarios: int
    mean: float
    median: float
    percentile_5: float
    percentile_95: float
    minimum: float
    maximum: float
    knock_in_probability: float


def shifted_input(dci: DciInput, spot_shift_pips: float, vol_shift: float) -> DciInput:
    """DCI input with the spot mid and volatility shifted."""
    new_mid = dci.spot_mid + to_decimal(spot_shift_pips) * PIP
    new_vol = max(MIN_SCENARIO_VOL, dci.volatility + vol_shift)
    return dci.with_spot(FxQuote.from_mid(new_mid, HALF_SPREAD)).with_volatility(new_vol)


def analyze(
    dci: DciInput,
    spot_shifts_pips: Sequence[int],
    vol_shifts: Sequence[float],
    pricer: Optional[DciPricer] = None
) -> List[ScenarioResult]:
    """
    Re-quote the DCI on a grid of spot and vol shifts.

    Args:
        dci: Base DCI input
        spot_shifts_pips: Spot shifts in pips (1 pip = 0.01)
        vol_shifts: Absolute volatility shifts
        pricer: Pricer to quote with

    Returns:
        One ScenarioResult per (spot shift, vol shift), spot-major
    """
    pricer = pricer or DciPricer()
    base = pricer.quote(dci)

    results: List[ScenarioResult] = []
    for pips in spot_shifts_pips:
        for vol_shift in vol_shifts:
            shifted = shifted_input(dci, pips, vol_shift)
            quote = pricer.quote(shifted)
            results.append(ScenarioResult(
                spot_shift_pips=pips,
                vol_shift=vol_shift,
                spot_mid=shifted.spot_mid,
                volatility=shifted.volatility,
                coupon_annual=quote.coupon_annual,
                total_interest_foreign=quote.total_interest_foreign,
                coupon_change=quote.coupon_annual - base.coupon_annual,
                interest_change=quote.total_interest_foreign - base.total_interest_foreign,
            ))
    return results


def quick_analyze(dci: DciInput, pricer: Optional[DciPricer] = None) -> List[ScenarioResult]:
    """Standard 5 x 3 spot / vol grid."""
    return analyze(dci, DEFAULT_SPOT_SHIFTS_PIPS, DEFAULT_VOL_SHIFTS, pricer)


def coupon_sensitivities(
    dci: DciInput,
    pricer: Optional[DciPricer] = None
) -> CouponSensitivities:
    """Coupon change for a 1 pip spot move and a 1 vol point move."""
    pricer = pricer or DciPricer()
    base = pricer.quote(dci).coupon_annual
    spot_up = pricer.quote(shifted_input(dci, 1, 0.0)).coupon_annual
    vol_up = pricer.quote(shifted_input(dci, 0, 0.01)).coupon_annual
    return CouponSensitivities(
        base_coupon=base,
        per_pip=spot_up - base,
        per_vol_point=vol_up - base,
    )


def pnl_distribution(
    dci: DciInput,
    scenarios: int = 100,
    spot_volatility: float = 0.10,
    seed: int = 42,
    pricer: Optional[DciPricer] = None
) -> PnlDistribution:
    """
    Simulate terminal spots under GBM and summarise the DCI P&L vs. a deposit.

    Drift is the rate differential; draws come from numpy's default
    generator seeded with `seed`, so results are reproducible.
    """
    if scenarios < 1:
        raise ValueError(f"scenarios must be positive, got {scenarios}")

    pricer = pricer or DciPricer()
    quote = pricer.quote(dci)

    T = dci.tenor_in_years
    drift = (dci.rate_domestic - dci.rate_foreign - 0.5 * spot_volatility**2) * T
    diffusion = spot_volatility * math.sqrt(T)

    rng = np.random.default_rng(seed)
    shocks = rng.standard_normal(scenarios)
    terminal = float(dci.spot_mid) * np.exp(drift + diffusion * shocks)

    pnl = np.empty(scenarios)
    knocked_in = 0
    for i, spot_t in enumerate(terminal):
        payoff = pricer.calculate_payoff(dci, quote, round_money(float(spot_t)))
        knocked_in += payoff.is_knocked_in
        pnl[i] = float(pricer.pnl_vs_deposit(dci, payoff))

    logger.debug(f"Simulated {scenarios} DCI outcomes, knock-in rate {knocked_in / scenarios:.2%}")

    return PnlDistribution(
        scenarios=scenarios,
        mean=float(np.mean(pnl)),
        median=float(np.median(pnl)),
        percentile_5=float(np.percentile(pnl, 5)),
        percentile_95=float(np.percentile(pnl, 95)),
        minimum=float(np.min(pnl)),
        maximum=float(np.max(pnl)),
        knock_in_probability=knocked_in / scenarios,
    )


def format_report(results: Sequence[ScenarioResult]) -> str:
    """Tabulate scenario results."""
    lines = [
        f"{'Spot shift':>10} {'Vol shift':>10} {'Spot':>10} {'Vol':>8} "
        f"{'Coupon':>9} {'dCoupon':>9} {'Interest':>12}",
        "-" * 74,
    ]
    for r in results:
        lines.append(
            f"{r.spot_shift_pips:>+10d} {r.vol_shift:>+10.2%} {r.spot_mid:>10.4f} "
            f"{r.volatility:>8.2%} {r.coupon_annual:>9.4%} {r.coupon_change:>+9.4%} "
            f"{r.total_interest_foreign:>12,.4f}"
        )
    return "\n".join(lines)

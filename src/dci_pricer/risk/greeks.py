"""
Greeks for DCI positions.

The investor in a DCI is short a put on the foreign currency, so the
position Greeks are the negated analytic Garman-Kohlhagen put Greeks
scaled by the foreign notional.

Also provides finite-difference Greeks by bumping, used to cross-check
the analytic formulas:
- Delta: spot bump (default 0.01% relative), central difference
- Gamma: second central difference on the same bump
- Vega: +1 vol point absolute
- Rho: 1bp on each rate, scaled to a 1% move
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
import logging

from dci_pricer.engines.black_scholes import (
    MAX_RATE,
    MAX_VOLATILITY,
    MIN_RATE,
    GreeksResult,
    OptionType,
    gk_greeks,
    gk_price,
)
from dci_pricer.products.schema import DciInput


logger = logging.getLogger(__name__)


@dataclass
class BumpingConfig:
    """Configuration for Greeks calculation via bumping."""

    # Spot bump for delta and gamma (relative, e.g., 0.0001 = 1bp of spot)
    spot_bump: float = 0.0001

    # Absolute vol bump (0.01 = +1 vol point)
    vol_bump: float = 0.01

    # Absolute rate bump (0.0001 = 1bp)
    rate_bump: float = 0.0001

    # One day in years for theta
    time_bump: float = 1.0 / 365.0


@dataclass
class DciGreeksResult:
    """
    Greeks of a DCI position.

    Attributes:
        per_unit: Greeks per unit of foreign notional (sold put)
        position: Greeks scaled by the foreign notional
        notional_foreign: Position size
        diagnostics: Inputs used in the calculation
    """

    per_unit: GreeksResult
    position: GreeksResult
    notional_foreign: float
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    def format_summary(self) -> str:
        """Formatted Greeks report."""
        rows = [
            ("Delta", self.per_unit.delta, self.position.delta),
            ("Gamma", self.per_unit.gamma, self.position.gamma),
            ("Vega (1 vol pt)", self.per_unit.vega, self.position.vega),
            ("Theta (1 day)", self.per_unit.theta, self.position.theta),
            ("Rho dom (1%)", self.per_unit.rho_domestic, self.position.rho_domestic),
            ("Rho for (1%)", self.per_unit.rho_foreign, self.position.rho_foreign),
        ]
        lines = [
            "=" * 60,
            "DCI GREEKS",
            "=" * 60,
            f"  {'Greek':<16} {'Per unit':>16} {'Position':>18}",
            f"  {'-' * 16} {'-' * 16} {'-' * 18}",
        ]
        for name, unit, pos in rows:
            lines.append(f"  {name:<16} {unit:>16.6f} {pos:>18,.4f}")
        lines.append("=" * 60)
        return "\n".join(lines)


def dci_greeks(dci: DciInput) -> DciGreeksResult:
    """
    Analytic Greeks of a DCI at the spot mid.

    Args:
        dci: DCI input

    Returns:
        DciGreeksResult with per-unit and notional-scaled Greeks
    """
    spot = float(dci.spot_mid)
    strike = float(dci.strike)
    put = gk_greeks(
        spot, strike, dci.rate_domestic, dci.rate_foreign,
        dci.volatility, dci.tenor_in_years, OptionType.PUT
    )
    per_unit = -put
    notional = float(dci.notional_foreign)

    logger.debug(f"DCI Greeks at spot={spot}, strike={strike}: delta={per_unit.delta:.6f}")

    return DciGreeksResult(
        per_unit=per_unit,
        position=per_unit.scaled(notional),
        notional_foreign=notional,
        diagnostics={
            "spot_mid": spot,
            "strike": strike,
            "volatility": dci.volatility,
            "tenor_in_years": dci.tenor_in_years,
        },
    )


def _bumped_pair(x: float, bump: float, low: float, high: float) -> Tuple[float, float]:
    """Down and up points for a difference, kept inside [low, high]."""
    return max(x - bump, low), min(x + bump, high)


def bumped_greeks(
    spot: float,
    strike: float,
    rate_domestic: float,
    rate_foreign: float,
    volatility: float,
    time_to_maturity: float,
    option_type: OptionType,
    config: Optional[BumpingConfig] = None
) -> GreeksResult:
    """
    Garman-Kohlhagen Greeks by finite differences.

    Uses the same units as the analytic Greeks: vega per vol point,
    theta per day and rhos per 1% rate move.

    Bumps that would leave the pricing domain are shortened, so the
    difference turns one-sided next to a rate or vol bound and the theta
    step never exceeds half the remaining life.
    """
    cfg = config or BumpingConfig()

    def price(S=spot, rd=rate_domestic, rf=rate_foreign, vol=volatility, T=time_to_maturity):
        return gk_price(S, strike, rd, rf, vol, T, option_type)

    base = price()
    h = spot * cfg.spot_bump
    up, down = price(S=spot + h), price(S=spot - h)

    delta = (up - down) / (2.0 * h)
    gamma = (up - 2.0 * base + down) / (h * h)

    vol_down, vol_up = _bumped_pair(volatility, cfg.vol_bump, 0.5 * volatility, MAX_VOLATILITY)
    vega = (price(vol=vol_up) - price(vol=vol_down)) / (vol_up - vol_down) / 100.0

    # Per day, even when the step is cut short near expiry
    dt = min(cfg.time_bump, 0.5 * time_to_maturity)
    theta = (price(T=time_to_maturity - dt) - base) * cfg.time_bump / dt

    rd_down, rd_up = _bumped_pair(rate_domestic, cfg.rate_bump, MIN_RATE, MAX_RATE)
    rho_domestic = (price(rd=rd_up) - price(rd=rd_down)) / (rd_up - rd_down) / 100.0
    rf_down, rf_up = _bumped_pair(rate_foreign, cfg.rate_bump, MIN_RATE, MAX_RATE)
    rho_foreign = (price(rf=rf_up) - price(rf=rf_down)) / (rf_up - rf_down) / 100.0

    return GreeksResult(
        delta=delta,
        gamma=gamma,
        vega=vega,
        theta=theta,
        rho_domestic=rho_domestic,
        rho_foreign=rho_foreign,
    )

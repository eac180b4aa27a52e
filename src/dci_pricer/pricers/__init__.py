"""Product pricers: DCI quoting, margin and strike solving."""

from dci_pricer.pricers.dci import DciPricer
from dci_pricer.pricers.margin import (
    apply_margin_to_price,
    apply_margin_to_strike,
    apply_spread,
    apply_total_cost,
    coupon_with_margin,
    solve_margin_for_target_coupon,
    spread_percent,
)
from dci_pricer.pricers.strike_solver import (
    StrikeSolverConfig,
    solve_strike,
    generate_strike_ladder,
    solve_dci_strike,
    dci_strike_ladder,
    is_strike_reasonable,
    max_coupon,
    min_coupon,
)

__all__ = [
    "DciPricer",
    "apply_margin_to_price",
    "apply_margin_to_strike",
    "apply_spread",
    "apply_total_cost",
    "coupon_with_margin",
    "solve_margin_for_target_coupon",
    "spread_percent",
    "StrikeSolverConfig",
    "solve_strike",
    "generate_strike_ladder",
    "solve_dci_strike",
    "dci_strike_ladder",
    "is_strike_reasonable",
    "max_coupon",
    "min_coupon",
]

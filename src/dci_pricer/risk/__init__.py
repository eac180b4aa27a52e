"""Risk: DCI Greeks and scenario analysis."""

from dci_pricer.risk.greeks import (
    BumpingConfig,
    DciGreeksResult,
    dci_greeks,
    bumped_greeks,
)
from dci_pricer.risk.scenarios import (
    ScenarioResult,
    CouponSensitivities,
    PnlDistribution,
    analyze,
    quick_analyze,
    coupon_sensitivities,
    pnl_distribution,
    format_report,
)

__all__ = [
    "BumpingConfig",
    "DciGreeksResult",
    "dci_greeks",
    "bumped_greeks",
    "ScenarioResult",
    "CouponSensitivities",
    "PnlDistribution",
    "analyze",
    "quick_analyze",
    "coupon_sensitivities",
    "pnl_distribution",
    "format_report",
]

"""
Shared pytest fixtures for pricer tests.

Provides reusable market data and DCI inputs for unit and integration tests.
"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Any, Dict

from dci_pricer.market.curves import CurvePoint, FlatZeroCurve, LinearInterpolatedCurve
from dci_pricer.market.volatility import InterpolatedVolSurface, VolSurfacePoint
from dci_pricer.pricers.dci import DciPricer
from dci_pricer.products.schema import DciInput, FxQuote


@pytest.fixture
def reference_date() -> date:
    """Standard curve reference date for tests (a Monday)."""
    return date(2024, 1, 1)


@pytest.fixture
def fx_params() -> Dict[str, float]:
    """EUR/USD-like option parameters."""
    return {
        "spot": 1.10,
        "strike": 1.12,
        "rate_domestic": 0.03,
        "rate_foreign": 0.01,
        "volatility": 0.12,
        "time_to_maturity": 0.5,
    }


@pytest.fixture
def dci_data() -> Dict[str, Any]:
    """Raw DCI input as it would arrive in JSON."""
    return {
        "notional_foreign": "10000",
        "spot": {"bid": "30.48", "ask": "30.52"},
        "strike": "30.00",
        "rate_domestic": 0.015,
        "rate_foreign": 0.05,
        "volatility": 0.10,
        "tenor_in_years": 90 / 365,
        "deposit_rate_annual": 0.03,
        "currency_pair": "USD/TWD",
    }


@pytest.fixture
def dci_input(dci_data: Dict[str, Any]) -> DciInput:
    """90-day DCI on a 30.50 mid with a 30.00 strike."""
    return DciInput(
        notional_foreign=Decimal("10000"),
        spot=FxQuote(bid=Decimal("30.48"), ask=Decimal("30.52")),
        strike=Decimal("30.00"),
        rate_domestic=dci_data["rate_domestic"],
        rate_foreign=dci_data["rate_foreign"],
        volatility=dci_data["volatility"],
        tenor_in_years=dci_data["tenor_in_years"],
        deposit_rate_annual=dci_data["deposit_rate_annual"],
        currency_pair="USD/TWD",
    )


@pytest.fixture
def pricer() -> DciPricer:
    """Garman-Kohlhagen DCI pricer."""
    return DciPricer()


@pytest.fixture
def flat_curve() -> FlatZeroCurve:
    """Flat 2% curve."""
    return FlatZeroCurve(0.02, name="FLAT-2%")


@pytest.fixture
def linear_curve() -> LinearInterpolatedCurve:
    """Two-pillar linear curve: 1% at 3M, 2% at 1Y."""
    return LinearInterpolatedCurve(
        [CurvePoint(0.25, 0.01), CurvePoint(1.0, 0.02)], name="LIN"
    )


@pytest.fixture
def grid_surface() -> InterpolatedVolSurface:
    """2 x 2 strike / tenor grid."""
    return InterpolatedVolSurface([
        VolSurfacePoint(29.0, 0.25, 0.12),
        VolSurfacePoint(32.0, 0.25, 0.10),
        VolSurfacePoint(29.0, 1.0, 0.13),
        VolSurfacePoint(32.0, 1.0, 0.09),
    ])

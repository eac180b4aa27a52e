"""Tests for DCI scenario analysis and P&L simulation."""

from decimal import Decimal

import pytest

from dci_pricer.risk.scenarios import (
    analyze,
    coupon_sensitivities,
    format_report,
    pnl_distribution,
    quick_analyze,
    shifted_input,
)


class TestShiftedInput:
    def test_spot_and_vol_shift(self, dci_input) -> None:
        shifted = shifted_input(dci_input, 10, 0.02)

        assert shifted.spot_mid == Decimal("30.60")
        assert shifted.volatility == pytest.approx(0.12)
        assert shifted.strike == dci_input.strike

    def test_vol_floor(self, dci_input) -> None:
        assert shifted_input(dci_input, 0, -0.5).volatility == 0.01


class TestAnalyze:
    """Tests for the spot / vol scenario grid."""

    def test_quick_grid(self, pricer, dci_input) -> None:
        results = quick_analyze(dci_input, pricer)

        assert len(results) == 15
        assert [r.spot_shift_pips for r in results[:3]] == [-10, -10, -10]
        assert [r.vol_shift for r in results[:3]] == [-0.02, 0.0, 0.02]

    def test_base_scenario_is_unchanged(self, pricer, dci_input) -> None:
        results = analyze(dci_input, [0], [0.0], pricer)

        assert results[0].coupon_change == 0.0
        assert results[0].interest_change == Decimal("0")

    def test_directions(self, pricer, dci_input) -> None:
        """Higher spot cheapens the put; higher vol makes it dearer."""
        spot_up = analyze(dci_input, [10], [0.0], pricer)[0]
        vol_up = analyze(dci_input, [0], [0.02], pricer)[0]

        assert spot_up.coupon_change < 0
        assert vol_up.coupon_change > 0

    def test_report(self, pricer, dci_input) -> None:
        report = format_report(quick_analyze(dci_input, pricer))

        assert "Coupon" in report
        assert len(report.splitlines()) == 17


class TestCouponSensitivities:
    def test_signs(self, pricer, dci_input) -> None:
        sens = coupon_sensitivities(dci_input, pricer)

        assert sens.base_coupon == pytest.approx(pricer.quote(dci_input).coupon_annual)
        assert sens.per_pip < 0
        assert sens.per_vol_point > 0


class TestPnlDistribution:
    """Tests for simulated P&L against a deposit."""

    def test_summary_ordering(self, pricer, dci_input) -> None:
        dist = pnl_distribution(dci_input, scenarios=200, pricer=pricer)

        assert dist.scenarios == 200
        assert dist.minimum <= dist.percentile_5 <= dist.median
        assert dist.median <= dist.percentile_95 <= dist.maximum
        assert 0.0 < dist.knock_in_probability < 1.0

    def test_reproducible_with_seed(self, pricer, dci_input) -> None:
        first = pnl_distribution(dci_input, scenarios=50, seed=7, pricer=pricer)
        second = pnl_distribution(dci_input, scenarios=50, seed=7, pricer=pricer)

        assert first == second

    def test_no_conversion_earns_option_interest(self, pricer, dci_input) -> None:
        """A strike far below spot is never reached."""
        far = dci_input.with_strike("20.00")
        quote = pricer.quote(far)

        dist = pnl_distribution(far, scenarios=100, pricer=pricer)

        assert dist.knock_in_probability == 0.0
        assert dist.minimum == dist.maximum
        assert dist.minimum == pytest.approx(float(quote.interest_from_option), abs=1e-4)

    def test_scenarios_must_be_positive(self, dci_input) -> None:
        with pytest.raises(ValueError, match="scenarios"):
            pnl_distribution(dci_input, scenarios=0)

"""
Tests for Newton-Raphson strike solving.

Validates:
- Solved strike reproduces the target coupon
- Strike ladder ordering and bounds
- Non-convergence is reported, not hidden
"""

from decimal import Decimal

import pytest

from dci_pricer.core.errors import InputOutOfRangeError, NonConvergenceError
from dci_pricer.pricers.strike_solver import (
    StrikeSolverConfig,
    dci_strike_ladder,
    generate_strike_ladder,
    is_strike_reasonable,
    max_coupon,
    min_coupon,
    solve_dci_strike,
    solve_strike,
)


class TestSolveStrike:
    """Tests for the generic solver."""

    def test_linear_objective(self) -> None:
        """objective = strike / 100 hits 0.3 at strike 30."""
        strike = solve_strike(lambda k: float(k) / 100.0, 0.30, spot=Decimal("31"))

        assert strike == pytest.approx(Decimal("30"), abs=Decimal("0.01"))

    def test_result_has_four_decimals(self) -> None:
        strike = solve_strike(lambda k: float(k) / 100.0, 0.30, spot=31.0)

        assert strike.as_tuple().exponent == -4

    def test_flat_objective_raises(self) -> None:
        with pytest.raises(NonConvergenceError, match="flat") as exc_info:
            solve_strike(lambda k: 0.05, 0.08, spot=Decimal("30"))

        assert exc_info.value.last_strike == Decimal("30") * Decimal("0.98")
        assert exc_info.value.last_value == 0.05

    def test_iteration_limit_raises(self) -> None:
        """A target outside the band cannot be reached."""
        config = StrikeSolverConfig(max_iterations=3)

        with pytest.raises(NonConvergenceError):
            solve_strike(lambda k: float(k) / 100.0, 0.60, spot=Decimal("30"), config=config)

    def test_unreachable_target_raises_at_band_edge(self) -> None:
        """Default settings: the strike pins at 120% of spot and stops moving."""
        with pytest.raises(NonConvergenceError, match="stalled") as exc_info:
            solve_strike(lambda k: float(k) / 100.0, 0.60, spot=Decimal("30"))

        assert exc_info.value.last_strike == Decimal("36")
        assert exc_info.value.last_value == pytest.approx(0.36)

    def test_stall_is_logged(self, caplog) -> None:
        with caplog.at_level("WARNING", logger="dci_pricer.pricers.strike_solver"):
            with pytest.raises(NonConvergenceError):
                solve_strike(lambda k: float(k) / 100.0, 0.10, spot=Decimal("30"))

        assert "stalled" in caplog.text

    def test_non_positive_spot(self) -> None:
        with pytest.raises(InputOutOfRangeError):
            solve_strike(lambda k: float(k), 1.0, spot=0)

    def test_initial_guess_clamped_to_band(self) -> None:
        strike = solve_strike(
            lambda k: float(k) / 100.0, 0.30, spot=Decimal("31"), initial_guess=Decimal("100")
        )

        assert strike == pytest.approx(Decimal("30"), abs=Decimal("0.01"))


class TestStrikeLadder:
    """Tests for strike ladders."""

    def test_evenly_spaced(self) -> None:
        ladder = generate_strike_ladder(lambda k: float(k), Decimal("100"), 5, "0.90", "1.10")

        assert [k for k, _ in ladder] == [
            Decimal("90.0000"), Decimal("95.0000"), Decimal("100.0000"),
            Decimal("105.0000"), Decimal("110.0000"),
        ]
        assert ladder[0][1] == 90.0

    def test_needs_two_strikes(self) -> None:
        with pytest.raises(InputOutOfRangeError, match="at least 2"):
            generate_strike_ladder(lambda k: 0.0, 100, 1, "0.9", "1.1")

    def test_ratios_must_increase(self) -> None:
        with pytest.raises(InputOutOfRangeError, match="ratios"):
            generate_strike_ladder(lambda k: 0.0, 100, 3, "1.1", "0.9")

    def test_reasonable_band(self) -> None:
        assert is_strike_reasonable("29.00", "30.50")
        assert not is_strike_reasonable("20.00", "30.50")
        assert not is_strike_reasonable("40.00", "30.50")


class TestDciStrike:
    """Strike solving on real DCI coupons."""

    def test_solves_target_coupon(self, pricer, dci_input) -> None:
        strike = solve_dci_strike(dci_input, 0.08, pricer=pricer)

        spot = dci_input.spot_mid
        assert spot * Decimal("0.95") < strike < spot
        coupon = pricer.quote(dci_input.with_strike(strike)).coupon_annual
        assert coupon == pytest.approx(0.08, abs=5e-4)

    def test_small_notional_solves(self, pricer, dci_input) -> None:
        """The coupon does not depend on the notional, so neither does the strike."""
        small = dci_input.model_copy(update={"notional_foreign": Decimal("1")})

        strike = solve_dci_strike(small, 0.08, pricer=pricer)

        reference = solve_dci_strike(dci_input, 0.08, pricer=pricer)
        assert strike == pytest.approx(reference, abs=Decimal("0.0005"))
        coupon = pricer.quote(small.with_strike(strike)).coupon_annual
        assert coupon == pytest.approx(0.08, abs=1e-4)

    def test_unreachable_coupon_raises(self, pricer, dci_input) -> None:
        with pytest.raises(NonConvergenceError):
            solve_dci_strike(dci_input, 2.0, pricer=pricer)

    def test_higher_target_needs_higher_strike(self, pricer, dci_input) -> None:
        low = solve_dci_strike(dci_input, 0.06, pricer=pricer)
        high = solve_dci_strike(dci_input, 0.09, pricer=pricer)

        assert low < high

    def test_ladder_coupons_increase(self, pricer, dci_input) -> None:
        ladder = dci_strike_ladder(dci_input, count=6, pricer=pricer)

        assert len(ladder) == 6
        assert ladder[-1][0] == Decimal("30.5000")
        coupons = [c for _, c in ladder]
        assert all(a < b for a, b in zip(coupons, coupons[1:]))

    def test_coupon_band(self, pricer, dci_input) -> None:
        assert min_coupon(dci_input, pricer) < pricer.quote(dci_input).coupon_annual
        assert max_coupon(dci_input, pricer) > pricer.quote(dci_input).coupon_annual

"""
Tests for DCI quoting and settlement.

Validates:
- Interest breakdown and coupon annualization
- Coupon increases with strike
- Settlement legs around the strike
- P&L against a plain deposit
"""

from decimal import Decimal

import pytest

from dci_pricer.core.errors import InputOutOfRangeError
from dci_pricer.engines.black_scholes import OptionType, gk_price
from dci_pricer.pricers.dci import DciPricer


class TestQuote:
    """Tests for DciPricer.quote."""

    def test_deposit_interest(self, pricer, dci_input) -> None:
        """10,000 at 3% for 90 days."""
        quote = pricer.quote(dci_input)

        assert quote.interest_from_deposit == Decimal("73.9726")

    def test_option_interest_is_premium_over_spot(self, pricer, dci_input) -> None:
        quote = pricer.quote(dci_input)
        premium = gk_price(30.50, 30.00, 0.015, 0.05, 0.10, 90 / 365, OptionType.PUT)

        assert quote.option_premium == pytest.approx(premium)
        assert float(quote.interest_from_option) == pytest.approx(10_000 * premium / 30.50, abs=1e-4)

    def test_total_and_coupon(self, pricer, dci_input) -> None:
        quote = pricer.quote(dci_input)

        parts = quote.interest_from_deposit + quote.interest_from_option
        assert abs(quote.total_interest_foreign - parts) <= Decimal("0.0001")
        expected_coupon = float(quote.total_interest_foreign) / 10_000 / (90 / 365)
        assert quote.coupon_annual == pytest.approx(expected_coupon, abs=1e-7)

    def test_coupon_beats_deposit(self, pricer, dci_input) -> None:
        assert pricer.quote(dci_input).coupon_annual > dci_input.deposit_rate_annual

    def test_amounts_have_four_decimals(self, pricer, dci_input) -> None:
        quote = pricer.quote(dci_input)

        assert quote.interest_from_option.as_tuple().exponent == -4
        assert quote.interest_from_deposit.as_tuple().exponent == -4

    def test_coupon_increases_with_strike(self, pricer, dci_input) -> None:
        quotes = pricer.quote_batch(dci_input, ["29.00", "29.50", "30.00", "30.50"])
        coupons = [q.coupon_annual for q in quotes]

        assert [q.strike for q in quotes] == [
            Decimal("29.00"), Decimal("29.50"), Decimal("30.00"), Decimal("30.50")
        ]
        assert all(a < b for a, b in zip(coupons, coupons[1:]))

    def test_coupon_for_strike(self, pricer, dci_input) -> None:
        coupon = pricer.coupon_for_strike(dci_input)

        assert coupon(Decimal("30.00")) == pytest.approx(pricer.quote(dci_input).coupon_annual)

    def test_custom_model(self, dci_input) -> None:
        """A zero-premium model leaves only the deposit interest."""
        pricer = DciPricer(model=lambda *args: 0.0)
        quote = pricer.quote(dci_input)

        assert quote.interest_from_option == Decimal("0.0000")
        assert quote.total_interest_foreign == Decimal("73.9726")


class TestQuoteWithMargin:
    """Tests for margin on the option interest."""

    def test_margin_reduces_option_interest(self, pricer, dci_input) -> None:
        full = pricer.quote(dci_input)
        net = pricer.quote_with_margin(dci_input, 0.25)

        assert net.interest_from_deposit == full.interest_from_deposit
        assert float(net.interest_from_option) == pytest.approx(
            0.75 * float(full.interest_from_option), abs=2e-4
        )
        assert net.coupon_annual < full.coupon_annual

    def test_zero_margin_matches_quote(self, pricer, dci_input) -> None:
        assert pricer.quote_with_margin(dci_input, 0.0) == pricer.quote(dci_input)

    @pytest.mark.parametrize("margin", [-0.1, 1.0, 1.5])
    def test_invalid_margin(self, pricer, dci_input, margin) -> None:
        with pytest.raises(InputOutOfRangeError, match="Margin"):
            pricer.quote_with_margin(dci_input, margin)


class TestPayoff:
    """Tests for settlement at maturity."""

    def test_above_strike_repays_foreign(self, pricer, dci_input) -> None:
        quote = pricer.quote(dci_input)
        payoff = pricer.calculate_payoff(dci_input, quote, "31.00")

        assert not payoff.is_knocked_in
        assert payoff.payoff_foreign == Decimal("10000") + quote.total_interest_foreign
        assert payoff.payoff_domestic is None

    def test_at_strike_converts(self, pricer, dci_input) -> None:
        quote = pricer.quote(dci_input)
        payoff = pricer.calculate_payoff(dci_input, quote, Decimal("30.00"))

        assert payoff.is_knocked_in
        assert payoff.payoff_domestic == (
            (Decimal("10000") + quote.total_interest_foreign) * Decimal("30.00")
        ).quantize(Decimal("0.0001"))
        assert payoff.payoff_foreign is None

    def test_non_positive_spot_rejected(self, pricer, dci_input) -> None:
        quote = pricer.quote(dci_input)

        with pytest.raises(InputOutOfRangeError):
            pricer.calculate_payoff(dci_input, quote, 0)


class TestPnlVsDeposit:
    """Tests for P&L against a plain foreign deposit."""

    def test_no_conversion_earns_option_interest(self, pricer, dci_input) -> None:
        quote = pricer.quote(dci_input)
        payoff = pricer.calculate_payoff(dci_input, quote, "31.00")

        pnl = pricer.pnl_vs_deposit(dci_input, payoff)
        assert abs(pnl - quote.interest_from_option) <= Decimal("0.0001")

    def test_conversion_valued_at_final_spot(self, pricer, dci_input) -> None:
        quote = pricer.quote(dci_input)
        payoff = pricer.calculate_payoff(dci_input, quote, "29.00")

        deposit_value = Decimal("10000") * (
            1 + Decimal("0.03") * Decimal(str(90 / 365))
        )
        expected = (payoff.payoff_domestic / Decimal("29.00") - deposit_value).quantize(
            Decimal("0.0001")
        )
        assert pricer.pnl_vs_deposit(dci_input, payoff) == expected


class TestFormatSummary:
    def test_summary_contains_quote(self, pricer, dci_input) -> None:
        quote = pricer.quote(dci_input)
        summary = pricer.format_summary(dci_input, quote)

        assert "DCI QUOTE: USD/TWD" in summary
        assert "Coupon (annual)" in summary

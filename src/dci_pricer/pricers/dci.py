"""
DCI quoting and settlement.

The investor earns the plain deposit interest plus the premium of a put
on the foreign currency that they sell to the bank. The premium is
converted into foreign units at the spot mid and paid as extra interest.
"""

from decimal import Decimal
from typing import Callable, List, Optional, Sequence, Union
import logging

from dci_pricer.core.errors import InputOutOfRangeError
from dci_pricer.core.numerics import round_money, to_decimal
from dci_pricer.engines.black_scholes import OptionType, gk_price
from dci_pricer.products.schema import DciInput, DciPayoffResult, DciQuoteResult


logger = logging.getLogger(__name__)


# (spot, strike, rate_domestic, rate_foreign, volatility, T, type) -> price
PriceModel = Callable[[float, float, float, float, float, float, OptionType], float]


class DciPricer:
    """
    Prices DCI products with a pluggable option model.

    Example:
        >>> pricer = DciPricer()
        >>> quote = pricer.quote(dci)
        >>> print(f"Coupon: {quote.coupon_annual:.2%}")
    """

    def __init__(self, model: Optional[PriceModel] = None) -> None:
        self.model: PriceModel = model or gk_price

    def put_premium(self, dci: DciInput) -> float:
        """Premium of the embedded put in domestic units per foreign unit."""
        return self.model(
            float(dci.spot_mid),
            float(dci.strike),
            dci.rate_domestic,
            dci.rate_foreign,
            dci.volatility,
            dci.tenor_in_years,
            OptionType.PUT,
        )

    def _deposit_interest(self, dci: DciInput) -> Decimal:
        return (
            dci.notional_foreign
            * to_decimal(dci.deposit_rate_annual)
            * to_decimal(dci.tenor_in_years)
        )

    def _build_quote(self, dci: DciInput, premium: float, scale: Decimal) -> DciQuoteResult:
        notional = dci.notional_foreign
        deposit_interest = self._deposit_interest(dci)
        option_interest = notional * to_decimal(premium) / dci.spot_mid * scale
        total = deposit_interest + option_interest
        # Coupon from the unrounded total; only reported amounts are rounded
        coupon = float(total / notional) / dci.tenor_in_years

        return DciQuoteResult(
            strike=dci.strike,
            notional_foreign=notional,
            interest_from_deposit=round_money(deposit_interest),
            interest_from_option=round_money(option_interest),
            total_interest_foreign=round_money(total),
            coupon_annual=coupon,
            option_premium=premium,
        )

    def quote(self, dci: DciInput) -> DciQuoteResult:
        """
        Quote a DCI.

        Returns:
            DciQuoteResult with deposit, option and total interest in
            foreign currency (4 dp) and the annualized coupon
        """
        return self._build_quote(dci, self.put_premium(dci), Decimal(1))

    def quote_with_margin(self, dci: DciInput, margin: float) -> DciQuoteResult:
        """
        Quote with the bank keeping a share of the option premium.

        Args:
            dci: DCI input
            margin: Fraction of the option interest retained, in [0, 1)

        Raises:
            InputOutOfRangeError: If margin is outside [0, 1)
        """
        if not (0.0 <= margin < 1.0):
            raise InputOutOfRangeError(f"Margin must be in [0, 1), got {margin}")
        return self._build_quote(dci, self.put_premium(dci), Decimal(1) - to_decimal(margin))

    def quote_batch(
        self,
        dci: DciInput,
        strikes: Sequence[Union[Decimal, float, str]]
    ) -> List[DciQuoteResult]:
        """Quote the same DCI at several strikes."""
        return [self.quote(dci.with_strike(k)) for k in strikes]

    def coupon_for_strike(self, dci: DciInput) -> Callable[[Decimal], float]:
        """Annualized coupon as a function of strike, for the strike solver."""
        def coupon(strike: Decimal) -> float:
            return self.quote(dci.with_strike(strike)).coupon_annual
        return coupon

    def calculate_payoff(
        self,
        dci: DciInput,
        quote: DciQuoteResult,
        spot_at_maturity: Union[Decimal, float, str]
    ) -> DciPayoffResult:
        """
        Settle the DCI against the fixing at maturity.

        At or below the strike the principal plus interest is converted
        into the domestic currency at the strike; otherwise it is repaid
        in the foreign currency.
        """
        final_spot = to_decimal(spot_at_maturity)
        if final_spot <= 0:
            raise InputOutOfRangeError(f"Spot at maturity must be positive, got {final_spot}")

        redemption = dci.notional_foreign + quote.total_interest_foreign
        if final_spot <= dci.strike:
            return DciPayoffResult(
                is_knocked_in=True,
                payoff_domestic=round_money(redemption * dci.strike),
                final_spot=final_spot,
                strike=dci.strike,
            )
        return DciPayoffResult(
            is_knocked_in=False,
            payoff_foreign=round_money(redemption),
            final_spot=final_spot,
            strike=dci.strike,
        )

    def pnl_vs_deposit(self, dci: DciInput, payoff: DciPayoffResult) -> Decimal:
        """
        DCI outcome minus a plain deposit, in foreign currency.

        Domestic settlements are converted back at the final spot.
        """
        deposit_value = dci.notional_foreign * (
            1 + to_decimal(dci.deposit_rate_annual) * to_decimal(dci.tenor_in_years)
        )
        if payoff.is_knocked_in:
            dci_value = payoff.payoff_domestic / payoff.final_spot
        else:
            dci_value = payoff.payoff_foreign
        return round_money(dci_value - deposit_value)

    def format_summary(self, dci: DciInput, quote: DciQuoteResult) -> str:
        """Human-readable quote summary."""
        pair = dci.currency_pair or "FOR/DOM"
        lines = [
            "=" * 60,
            f"DCI QUOTE: {pair}",
            "=" * 60,
            f"  Notional:          {dci.notional_foreign:,.2f}",
            f"  Spot (mid):        {dci.spot_mid:.4f}",
            f"  Strike:            {dci.strike:.4f}",
            f"  Tenor:             {dci.tenor_in_years:.4f}y",
            f"  Volatility:        {dci.volatility:.2%}",
            f"  Put premium:       {quote.option_premium:.6f}",
            f"  Deposit interest:  {quote.interest_from_deposit:,.4f}",
            f"  Option interest:   {quote.interest_from_option:,.4f}",
            f"  Total interest:    {quote.total_interest_foreign:,.4f}",
            f"  Coupon (annual):   {quote.coupon_annual:.4%}",
            "=" * 60,
        ]
        return "\n".join(lines)

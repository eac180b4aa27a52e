"""
Market instruments used to bootstrap zero curves.

Each instrument knows its tenor, its present value against a curve and
a finite-difference sensitivity to a curve pillar.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Tuple
import math

from dci_pricer.core.calendar import BusinessDayConvention, Calendar, adjust_date
from dci_pricer.core.day_count import DayCountConvention, day_count_fraction, year_fraction
from dci_pricer.core.errors import InputOutOfRangeError
from dci_pricer.core.numerics import is_finite
from dci_pricer.market.curves import FlatZeroCurve, ZeroCurve


# Pillar bump for instrument sensitivities
JACOBIAN_BUMP = 1e-6


class MarketInstrument(ABC):
    """
    Base class for curve instruments.

    Attributes:
        start_date: Accrual start (the curve reference date)
        maturity_date: Final date, strictly after start_date
        market_quote: Quoted simple rate
        notional: Notional amount
    """

    def __init__(
        self,
        start_date: date,
        maturity_date: date,
        market_quote: float,
        day_count: DayCountConvention,
        notional: float = 1.0
    ) -> None:
        if maturity_date <= start_date:
            raise InputOutOfRangeError(
                f"Maturity {maturity_date} must be after start {start_date}"
            )
        if not is_finite(market_quote):
            raise InputOutOfRangeError(f"Market quote must be finite, got {market_quote}")
        if not is_finite(notional) or notional <= 0:
            raise InputOutOfRangeError(f"Notional must be positive, got {notional}")

        self.start_date = start_date
        self.maturity_date = maturity_date
        self.market_quote = market_quote
        self.day_count = day_count
        self.notional = notional

    @property
    def tenor(self) -> float:
        """Years from start to maturity on an ACT/365F basis."""
        return year_fraction(self.start_date, self.maturity_date)

    def time_to(self, d: date) -> float:
        """Curve time of a date measured from the start date."""
        return year_fraction(self.start_date, d)

    @abstractmethod
    def present_value(self, curve: ZeroCurve) -> float:
        """Present value of the instrument against a curve."""

    def jacobian(self, curve: ZeroCurve, pillar_tenor: float) -> float:
        """
        dPV/dRate against a flat curve bumped from the pillar's zero rate.

        Args:
            curve: Curve to value against
            pillar_tenor: Tenor whose zero rate seeds the bumped flat curve
        """
        base_rate = curve.zero_rate(pillar_tenor)
        bumped = FlatZeroCurve(base_rate + JACOBIAN_BUMP)
        return (self.present_value(bumped) - self.present_value(curve)) / JACOBIAN_BUMP

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.start_date} -> {self.maturity_date}, "
            f"quote={self.market_quote})"
        )


class Deposit(MarketInstrument):
    """Money market deposit paying simple interest at maturity."""

    def __init__(
        self,
        start_date: date,
        maturity_date: date,
        market_quote: float,
        day_count: DayCountConvention = DayCountConvention.ACT_360,
        notional: float = 1.0
    ) -> None:
        super().__init__(start_date, maturity_date, market_quote, day_count, notional)

    @property
    def accrual(self) -> float:
        """Accrual fraction under the deposit day count."""
        return day_count_fraction(self.start_date, self.maturity_date, self.day_count)

    def implied_discount_factor(self) -> float:
        """DF = 1 / (1 + quote * accrual)."""
        return 1.0 / (1.0 + self.market_quote * self.accrual)

    def implied_zero_rate(self) -> float:
        """Continuously compounded zero rate implied by the quote."""
        return -math.log(self.implied_discount_factor()) / self.accrual

    def present_value(self, curve: ZeroCurve) -> float:
        payoff = self.notional * (1.0 + self.market_quote * self.accrual)
        return payoff * curve.discount_factor(self.tenor)


@dataclass(frozen=True)
class SwapPayment:
    """One fixed leg payment."""

    payment_date: date
    accrual_start: date
    accrual_end: date
    accrual: float


class Swap(MarketInstrument):
    """
    Plain fixed-for-floating interest rate swap.

    The floating leg is valued as notional * (DF(start) - DF(maturity)).

    The fixed schedule counts int(tenor * frequency) periods of
    365 / frequency days, so a tenor just short of a whole number of
    periods loses its last one: an 18M swap from 2024-01-01 runs 547 days
    (1.4986y) and pays semi-annually only up to 1Y. The closed form then
    solves the discount factor at the last payment date while the
    bootstrapped pillar still sits at the full tenor.
    """

    def __init__(
        self,
        start_date: date,
        maturity_date: date,
        market_quote: float,
        payment_frequency: int = 2,
        day_count: DayCountConvention = DayCountConvention.ACT_365F,
        notional: float = 1.0,
        calendar: Optional[Calendar] = None
    ) -> None:
        if payment_frequency <= 0:
            raise InputOutOfRangeError(
                f"Payment frequency must be positive, got {payment_frequency}"
            )
        super().__init__(start_date, maturity_date, market_quote, day_count, notional)
        self.payment_frequency = payment_frequency
        self.calendar = calendar
        self._schedule = self._build_schedule()

    def _build_schedule(self) -> Tuple[SwapPayment, ...]:
        # Whole periods only; a trailing stub is dropped
        total_periods = int(self.tenor * self.payment_frequency)
        period_days = 365.0 / self.payment_frequency

        payments: List[SwapPayment] = []
        accrual_start = self.start_date
        for i in range(1, total_periods + 1):
            accrual_end = self.start_date + timedelta(days=int(round(i * period_days)))
            payment_date = adjust_date(accrual_end, BusinessDayConvention.FOLLOWING, self.calendar)
            payments.append(SwapPayment(
                payment_date=payment_date,
                accrual_start=accrual_start,
                accrual_end=accrual_end,
                accrual=day_count_fraction(accrual_start, accrual_end, self.day_count),
            ))
            accrual_start = accrual_end

        return tuple(payments)

    @property
    def schedule(self) -> Tuple[SwapPayment, ...]:
        return self._schedule

    def annuity(self, curve: ZeroCurve) -> float:
        """Sum of accrual * DF(payment) over the fixed leg (per unit notional)."""
        return sum(p.accrual * curve.discount_factor(self.time_to(p.payment_date))
                   for p in self._schedule)

    def fixed_leg_value(self, curve: ZeroCurve) -> float:
        return self.notional * self.market_quote * self.annuity(curve)

    def floating_leg_value(self, curve: ZeroCurve) -> float:
        return self.notional * (curve.discount_factor(0.0) - curve.discount_factor(self.tenor))

    def present_value(self, curve: ZeroCurve) -> float:
        """Receiver-fixed value: fixed leg minus floating leg."""
        return self.fixed_leg_value(curve) - self.floating_leg_value(curve)

    def par_rate(self, curve: ZeroCurve) -> float:
        """Fixed rate that makes the swap worth zero on the curve."""
        annuity = self.annuity(curve)
        if annuity <= 0:
            raise InputOutOfRangeError("Swap has no fixed leg payments")
        return (curve.discount_factor(0.0) - curve.discount_factor(self.tenor)) / annuity

    def implied_discount_factor(self, curve: ZeroCurve) -> float:
        """
        Final discount factor from the par condition, given the earlier
        payments discounted on an intermediate curve.

        DF(Tn) = [DF(T0) - q * sum_{i<n} DF(Ti) * tau_i] / (1 + q * tau_n)
        """
        if not self._schedule:
            raise InputOutOfRangeError(
                f"Swap {self!r} is shorter than one payment period"
            )
        q = self.market_quote
        *earlier, last = self._schedule
        running = sum(p.accrual * curve.discount_factor(self.time_to(p.payment_date))
                      for p in earlier)
        return (curve.discount_factor(0.0) - q * running) / (1.0 + q * last.accrual)

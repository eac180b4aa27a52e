"""
Zero curve bootstrapping from deposits and swaps.

Instruments are processed in tenor order. Each one adds a pillar to
the curve: deposits in closed form, swaps in closed form against the
curve built so far, with a Newton-Raphson fallback on the pillar rate
when the closed form breaks down.
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence, Type
import logging

from dci_pricer.core.calendar import Calendar
from dci_pricer.core.day_count import maturity_date, tenor_to_days
from dci_pricer.core.errors import CurveConstructionError, InputOutOfRangeError
from dci_pricer.market.curves import (
    CurvePoint,
    FlatZeroCurve,
    InterpolationMethod,
    ZeroCurve,
    build_curve,
)
from dci_pricer.market.instruments import Deposit, MarketInstrument, Swap


logger = logging.getLogger(__name__)


# Longest tenor quoted as a deposit in build_standard_curve
DEPOSIT_MAX_DAYS = 365


@dataclass
class BootstrapConfig:
    """Settings for the swap Newton-Raphson fallback."""

    max_iterations: int = 20
    pv_tolerance: float = 1e-8
    # Finite-difference bump on the trial pillar rate
    rate_bump: float = 1e-8
    min_jacobian: float = 1e-12
    # Trial rates stay inside the curve's open rate band
    min_rate: float = -0.10
    max_rate: float = 0.4999
    # Rate used before any pillar exists
    seed_rate: float = 0.01


class CurveBootstrapper:
    """
    Builds a zero curve from an ordered set of market instruments.

    Example:
        >>> bootstrapper = CurveBootstrapper("USD-OIS", date(2024, 1, 1))
        >>> curve = bootstrapper.bootstrap([dep_3m, dep_6m, swap_2y])
    """

    def __init__(
        self,
        curve_name: str,
        reference_date: date,
        config: Optional[BootstrapConfig] = None
    ) -> None:
        self.curve_name = curve_name
        self.reference_date = reference_date
        self.config = config or BootstrapConfig()
        self._rules: Dict[Type[MarketInstrument], Callable[..., CurvePoint]] = {
            Deposit: self._bootstrap_deposit,
            Swap: self._bootstrap_swap,
        }

    def bootstrap(
        self,
        instruments: Sequence[MarketInstrument],
        interpolation: InterpolationMethod = InterpolationMethod.LINEAR
    ) -> ZeroCurve:
        """
        Bootstrap a curve.

        Args:
            instruments: Instruments in strictly increasing tenor order,
                all starting on the reference date
            interpolation: Interpolation of the resulting curve

        Returns:
            The bootstrapped zero curve

        Raises:
            CurveConstructionError: If the instruments are empty, unordered
                or start on another date
        """
        self._validate(instruments)

        points: List[CurvePoint] = []
        for instrument in instruments:
            rule = self._rule_for(instrument)
            point = rule(instrument, points, interpolation)
            logger.debug(
                f"{self.curve_name}: {type(instrument).__name__} tenor={point.tenor:.4f} "
                f"zero={point.zero_rate:.6f} df={point.discount_factor:.6f}"
            )
            points.append(point)

        curve = build_curve(points, interpolation, self.curve_name, self.reference_date)
        logger.info(
            f"Bootstrapped {self.curve_name} with {len(points)} pillars "
            f"({curve.interpolation.value})"
        )
        return curve

    def _rule_for(self, instrument: MarketInstrument) -> Callable[..., CurvePoint]:
        for kind, rule in self._rules.items():
            if isinstance(instrument, kind):
                return rule
        raise CurveConstructionError(
            f"No bootstrap rule for instrument type {type(instrument).__name__}"
        )

    def _validate(self, instruments: Sequence[MarketInstrument]) -> None:
        if not instruments:
            raise CurveConstructionError("Cannot bootstrap a curve from no instruments")

        for instrument in instruments:
            if instrument.start_date != self.reference_date:
                raise CurveConstructionError(
                    f"{instrument!r} starts on {instrument.start_date}, "
                    f"expected reference date {self.reference_date}"
                )

        for prev, curr in zip(instruments, instruments[1:]):
            if curr.tenor <= prev.tenor:
                raise CurveConstructionError(
                    f"Instrument tenors must be strictly increasing: "
                    f"{prev.tenor:.6f} then {curr.tenor:.6f}"
                )

    def _bootstrap_deposit(
        self,
        deposit: Deposit,
        points: List[CurvePoint],
        interpolation: InterpolationMethod
    ) -> CurvePoint:
        return CurvePoint(deposit.tenor, deposit.implied_zero_rate())

    def _bootstrap_swap(
        self,
        swap: Swap,
        points: List[CurvePoint],
        interpolation: InterpolationMethod
    ) -> CurvePoint:
        curve = self._intermediate_curve(points, interpolation)
        try:
            df = swap.implied_discount_factor(curve)
            return CurvePoint.from_discount_factor(swap.tenor, df)
        except InputOutOfRangeError as exc:
            logger.warning(
                f"{self.curve_name}: closed form failed for {swap!r} ({exc}), "
                f"falling back to Newton-Raphson"
            )
        return CurvePoint(swap.tenor, self._solve_swap_rate(swap, points))

    def _intermediate_curve(
        self,
        points: List[CurvePoint],
        interpolation: InterpolationMethod
    ) -> ZeroCurve:
        if not points:
            return FlatZeroCurve(self.config.seed_rate)
        if interpolation == InterpolationMethod.FLAT:
            interpolation = InterpolationMethod.LINEAR
        return build_curve(points, interpolation)

    def _trial_curve(self, points: List[CurvePoint], tenor: float, rate: float) -> ZeroCurve:
        return build_curve(points + [CurvePoint(tenor, rate)], InterpolationMethod.LINEAR)

    def _solve_swap_rate(self, swap: Swap, points: List[CurvePoint]) -> float:
        """Newton-Raphson on the pillar zero rate until the swap prices at par."""
        cfg = self.config
        rate = swap.market_quote

        for iteration in range(cfg.max_iterations):
            pv = swap.present_value(self._trial_curve(points, swap.tenor, rate))
            if abs(pv) < cfg.pv_tolerance:
                return rate

            bumped_pv = swap.present_value(
                self._trial_curve(points, swap.tenor, rate + cfg.rate_bump)
            )
            jacobian = (bumped_pv - pv) / cfg.rate_bump
            if abs(jacobian) < cfg.min_jacobian:
                break

            rate = min(max(rate - pv / jacobian, cfg.min_rate), cfg.max_rate)
            logger.debug(f"Swap solve iter {iteration}: rate={rate:.8f} pv={pv:.3e}")

        logger.warning(
            f"{self.curve_name}: swap {swap!r} did not converge, using rate {rate:.6f}"
        )
        return rate


def build_standard_curve(
    curve_name: str,
    reference_date: date,
    quotes: Dict[str, float],
    interpolation: InterpolationMethod = InterpolationMethod.LINEAR,
    calendar: Optional[Calendar] = None,
    config: Optional[BootstrapConfig] = None
) -> ZeroCurve:
    """
    Bootstrap a curve from tenor-string quotes such as {"3M": 0.015, "2Y": 0.02}.

    Tenors up to one year become deposits, longer tenors become
    semi-annual swaps. Maturities roll forward off weekends.
    """
    if not quotes:
        raise CurveConstructionError("No quotes supplied")

    instruments: List[MarketInstrument] = []
    for tenor in sorted(quotes, key=tenor_to_days):
        maturity = maturity_date(reference_date, tenor, calendar)
        if tenor_to_days(tenor) <= DEPOSIT_MAX_DAYS:
            instruments.append(Deposit(reference_date, maturity, quotes[tenor]))
        else:
            instruments.append(Swap(reference_date, maturity, quotes[tenor], calendar=calendar))

    return CurveBootstrapper(curve_name, reference_date, config).bootstrap(
        instruments, interpolation
    )

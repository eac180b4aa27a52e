"""
Strike solving: find the strike at which a pricing objective hits a target.

Newton-Raphson runs in Decimal strike space with a central-difference
derivative. Each step is capped at a fraction of the current strike and
the strike is kept inside a band around spot. Unlike implied vol, a
failure here raises NonConvergenceError.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Optional, Tuple, Union
import logging

from dci_pricer.core.errors import InputOutOfRangeError, NonConvergenceError
from dci_pricer.core.numerics import round_money, to_decimal
from dci_pricer.pricers.dci import DciPricer
from dci_pricer.products.schema import DciInput


logger = logging.getLogger(__name__)


Objective = Callable[[Decimal], float]
Number = Union[Decimal, float, int, str]


@dataclass
class StrikeSolverConfig:
    """Newton-Raphson settings for strike solving."""

    tolerance: float = 1e-4
    max_iterations: int = 50
    # Central difference half-width in strike units
    bump: Decimal = Decimal("0.01")
    # Largest step as a fraction of the current strike
    max_step_ratio: Decimal = Decimal("0.10")
    # Strike band as a fraction of spot
    min_ratio: Decimal = Decimal("0.80")
    max_ratio: Decimal = Decimal("1.20")
    min_update: Decimal = Decimal("0.0001")
    min_derivative: float = 1e-10
    # Initial guess when none is supplied, as a fraction of spot
    initial_guess_ratio: Decimal = Decimal("0.98")


def _clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    return min(max(value, low), high)


def solve_strike(
    objective: Objective,
    target: float,
    spot: Number,
    initial_guess: Optional[Number] = None,
    config: Optional[StrikeSolverConfig] = None
) -> Decimal:
    """
    Solve objective(strike) = target for the strike.

    Args:
        objective: Function of strike, typically a coupon or a price
        target: Target objective value
        spot: Current spot, sets the strike band
        initial_guess: Starting strike (defaults to 98% of spot)
        config: Solver settings

    Returns:
        Strike rounded to 4 dp, half away from zero

    Raises:
        InputOutOfRangeError: If spot is not positive
        NonConvergenceError: If the derivative vanishes, the strike stalls
            short of the target or the iteration limit is reached; carries
            the last strike and objective value
    """
    cfg = config or StrikeSolverConfig()
    spot_d = to_decimal(spot)
    if spot_d <= 0:
        raise InputOutOfRangeError(f"Spot must be positive, got {spot}")

    low = spot_d * cfg.min_ratio
    high = spot_d * cfg.max_ratio
    if initial_guess is None:
        strike = spot_d * cfg.initial_guess_ratio
    else:
        strike = to_decimal(initial_guess)
    strike = _clamp(strike, low, high)

    value = objective(strike)
    for iteration in range(cfg.max_iterations):
        diff = value - target
        if abs(diff) < cfg.tolerance:
            logger.debug(f"Strike solved in {iteration} iterations: {strike}")
            return round_money(strike)

        up = objective(strike + cfg.bump)
        down = objective(strike - cfg.bump)
        derivative = (up - down) / (2.0 * float(cfg.bump))
        if abs(derivative) < cfg.min_derivative:
            raise NonConvergenceError(
                f"Objective is flat at strike {strike} (derivative {derivative:.3e})",
                last_strike=strike,
                last_value=value,
                iterations=iteration,
            )

        cap = strike * cfg.max_step_ratio
        step = _clamp(to_decimal(-diff / derivative), -cap, cap)
        new_strike = _clamp(strike + step, low, high)

        logger.debug(
            f"Strike iter {iteration}: strike={strike:.6f} value={value:.6f} "
            f"derivative={derivative:.6f}"
        )

        if abs(new_strike - strike) < cfg.min_update:
            # Pinned at the band edge or stuck short of the target
            logger.warning(
                f"Strike stalled at {new_strike:.6f} with objective {value:.6f} "
                f"(target {target})"
            )
            raise NonConvergenceError(
                f"Strike solver stalled at {new_strike} with objective {value:.6f}, "
                f"target {target}",
                last_strike=new_strike,
                last_value=value,
                iterations=iteration,
            )

        strike = new_strike
        value = objective(strike)

    raise NonConvergenceError(
        f"Strike solver did not converge in {cfg.max_iterations} iterations",
        last_strike=strike,
        last_value=value,
        iterations=cfg.max_iterations,
    )


def generate_strike_ladder(
    objective: Objective,
    spot: Number,
    count: int,
    min_ratio: Number,
    max_ratio: Number
) -> List[Tuple[Decimal, float]]:
    """
    Evaluate the objective on evenly spaced strikes.

    Args:
        objective: Function of strike
        spot: Current spot
        count: Number of strikes, at least 2
        min_ratio: Lowest strike as a fraction of spot
        max_ratio: Highest strike as a fraction of spot

    Returns:
        List of (strike, objective value) in increasing strike order
    """
    if count < 2:
        raise InputOutOfRangeError(f"Ladder needs at least 2 strikes, got {count}")
    low, high = to_decimal(min_ratio), to_decimal(max_ratio)
    if not (0 < low < high):
        raise InputOutOfRangeError(
            f"Ladder ratios must satisfy 0 < min < max, got {min_ratio}, {max_ratio}"
        )

    spot_d = to_decimal(spot)
    step = (high - low) / (count - 1)
    ladder: List[Tuple[Decimal, float]] = []
    for i in range(count):
        strike = round_money(spot_d * (low + step * i))
        ladder.append((strike, objective(strike)))
    return ladder


def is_strike_reasonable(
    strike: Number,
    spot: Number,
    config: Optional[StrikeSolverConfig] = None
) -> bool:
    """True if the strike lies within the solver band around spot."""
    cfg = config or StrikeSolverConfig()
    strike_d, spot_d = to_decimal(strike), to_decimal(spot)
    return spot_d * cfg.min_ratio <= strike_d <= spot_d * cfg.max_ratio


# ============================================================================
# DCI helpers
# ============================================================================

def solve_dci_strike(
    dci: DciInput,
    target_coupon: float,
    pricer: Optional[DciPricer] = None,
    initial_guess: Optional[Number] = None,
    config: Optional[StrikeSolverConfig] = None
) -> Decimal:
    """Strike at which the DCI pays the target annualized coupon."""
    pricer = pricer or DciPricer()
    strike = solve_strike(
        pricer.coupon_for_strike(dci),
        target_coupon,
        dci.spot_mid,
        initial_guess=initial_guess,
        config=config,
    )
    logger.info(f"DCI strike for coupon {target_coupon:.4%}: {strike}")
    return strike


def dci_strike_ladder(
    dci: DciInput,
    count: int = 10,
    min_ratio: Number = Decimal("0.95"),
    max_ratio: Number = Decimal("1.00"),
    pricer: Optional[DciPricer] = None
) -> List[Tuple[Decimal, float]]:
    """Coupons across a range of strikes below spot."""
    pricer = pricer or DciPricer()
    return generate_strike_ladder(
        pricer.coupon_for_strike(dci), dci.spot_mid, count, min_ratio, max_ratio
    )


def max_coupon(
    dci: DciInput,
    pricer: Optional[DciPricer] = None,
    config: Optional[StrikeSolverConfig] = None
) -> float:
    """Coupon at the top of the strike band."""
    cfg = config or StrikeSolverConfig()
    pricer = pricer or DciPricer()
    return pricer.coupon_for_strike(dci)(round_money(dci.spot_mid * cfg.max_ratio))


def min_coupon(
    dci: DciInput,
    pricer: Optional[DciPricer] = None,
    config: Optional[StrikeSolverConfig] = None
) -> float:
    """Coupon at the bottom of the strike band."""
    cfg = config or StrikeSolverConfig()
    pricer = pricer or DciPricer()
    return pricer.coupon_for_strike(dci)(round_money(dci.spot_mid * cfg.min_ratio))

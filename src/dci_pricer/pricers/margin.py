"""
Bank margin and spread adjustments on DCI quotes.

Margin lowers what the investor receives: either a cut of the option
premium (percent) or a more conservative conversion strike (pips).
"""

from decimal import Decimal
from typing import Tuple, Union

from dci_pricer.core.errors import InputOutOfRangeError
from dci_pricer.core.numerics import to_decimal


Number = Union[Decimal, float, int, str]

DEFAULT_PIP_SIZE = Decimal("0.01")


def _check_margin(margin_percent: float) -> None:
    if not (0.0 <= margin_percent < 1.0):
        raise InputOutOfRangeError(f"Margin must be in [0, 1), got {margin_percent}")


def apply_margin_to_strike(
    strike: Number,
    margin_pips: Number,
    pip_size: Number = DEFAULT_PIP_SIZE
) -> Decimal:
    """
    Lower a theoretical strike by a margin in pips.

    A lower strike on the sold put is more conservative for the investor
    and leaves the difference with the bank. 10 pips of 0.01 take 30.00
    to 29.90.

    Raises:
        InputOutOfRangeError: If the strike or pip size is not positive,
            or the adjusted strike would not be positive
    """
    strike_d, pips, size = to_decimal(strike), to_decimal(margin_pips), to_decimal(pip_size)
    if strike_d <= 0:
        raise InputOutOfRangeError(f"Strike must be positive, got {strike}")
    if size <= 0:
        raise InputOutOfRangeError(f"Pip size must be positive, got {pip_size}")

    adjusted = strike_d - pips * size
    if adjusted <= 0:
        raise InputOutOfRangeError(
            f"Adjusted strike {adjusted} must be positive "
            f"(strike {strike}, margin {margin_pips} pips)"
        )
    return adjusted


def apply_margin_to_price(option_price: Number, margin_percent: float) -> Decimal:
    """Option price after the bank keeps `margin_percent` of it."""
    price = to_decimal(option_price)
    if price < 0:
        raise InputOutOfRangeError(f"Option price must not be negative, got {option_price}")
    _check_margin(margin_percent)
    return price * (1 - to_decimal(margin_percent))


def coupon_with_margin(base_coupon: float, margin_percent: float) -> float:
    """Coupon scaled down by a margin fraction."""
    if base_coupon < 0:
        raise InputOutOfRangeError(f"Base coupon must not be negative, got {base_coupon}")
    _check_margin(margin_percent)
    return base_coupon * (1.0 - margin_percent)


def solve_margin_for_target_coupon(theoretical_coupon: float, target_coupon: float) -> float:
    """
    Margin fraction that takes the theoretical coupon down to the target.

    Returns 0 when the target is already at or above the theoretical
    coupon, since margin can only lower a coupon.

    Raises:
        InputOutOfRangeError: If either coupon is not positive
    """
    if theoretical_coupon <= 0:
        raise InputOutOfRangeError(
            f"Theoretical coupon must be positive, got {theoretical_coupon}"
        )
    if target_coupon <= 0:
        raise InputOutOfRangeError(f"Target coupon must be positive, got {target_coupon}")
    if target_coupon >= theoretical_coupon:
        return 0.0
    return 1.0 - target_coupon / theoretical_coupon


def apply_spread(
    mid: Number,
    spread_pips: Number,
    pip_size: Number = DEFAULT_PIP_SIZE
) -> Tuple[Decimal, Decimal]:
    """
    Bid and ask around a mid for a total spread in pips.

    Example:
        >>> apply_spread("30.50", 2)
        (Decimal('30.49'), Decimal('30.51'))
    """
    mid_d, pips = to_decimal(mid), to_decimal(spread_pips)
    if mid_d <= 0:
        raise InputOutOfRangeError(f"Mid must be positive, got {mid}")
    if pips < 0:
        raise InputOutOfRangeError(f"Spread must not be negative, got {spread_pips}")

    half = pips * to_decimal(pip_size) / 2
    return mid_d - half, mid_d + half


def spread_percent(bid: Number, ask: Number) -> float:
    """Bid/ask spread as a fraction of the mid."""
    bid_d, ask_d = to_decimal(bid), to_decimal(ask)
    if bid_d < 0 or ask_d < 0:
        raise InputOutOfRangeError(f"Prices must not be negative, got {bid}/{ask}")
    if ask_d < bid_d:
        raise InputOutOfRangeError(f"Ask {ask} is below bid {bid}")

    mid = (bid_d + ask_d) / 2
    if mid == 0:
        return 0.0
    return float((ask_d - bid_d) / mid)


def apply_total_cost(
    theoretical_coupon: float,
    margin_percent: float,
    spread_cost_percent: float
) -> float:
    """Coupon after margin and spread cost, both as fractions of the coupon."""
    total_cost = margin_percent + spread_cost_percent
    if total_cost >= 1.0:
        raise InputOutOfRangeError(f"Total cost must be below 100%, got {total_cost:.2%}")
    return theoretical_coupon * (1.0 - total_cost)

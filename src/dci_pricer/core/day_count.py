"""
Day count conventions and tenor parsing.

Supports: ACT/360, ACT/365F, ACT/ACT, 30/360, BUS/252
"""

import calendar as _calendar
import re
from datetime import date, timedelta
from enum import Enum
from typing import Optional

from dci_pricer.core.calendar import Calendar, DEFAULT_CALENDAR
from dci_pricer.core.errors import InputOutOfRangeError


class DayCountConvention(str, Enum):
    """Supported day count conventions."""

    ACT_360 = "ACT/360"
    ACT_365F = "ACT/365F"
    ACT_ACT = "ACT/ACT"
    THIRTY_360 = "30/360"
    BUS_252 = "BUS/252"


# Calendar days per tenor unit
_TENOR_UNIT_DAYS = {"D": 1, "W": 7, "M": 30, "Y": 365}

_TENOR_PATTERN = re.compile(r"^\s*(\d+)\s*([DWMY])\s*$", re.IGNORECASE)


def _actual_days(start: date, end: date) -> int:
    """Calculate actual number of days between two dates."""
    return (end - start).days


def _thirty_360_days(start: date, end: date) -> int:
    """
    Calculate days using 30/360 convention (ISDA).

    Each month is treated as having 30 days, year has 360 days.
    """
    d1, m1, y1 = start.day, start.month, start.year
    d2, m2, y2 = end.day, end.month, end.year

    if d1 == 31:
        d1 = 30
    if d2 == 31 and d1 >= 30:
        d2 = 30

    return 360 * (y2 - y1) + 30 * (m2 - m1) + (d2 - d1)


def _act_act_fraction(start: date, end: date) -> float:
    """ACT/ACT ISDA: days in each calendar year over that year's length."""
    if start.year == end.year:
        return _actual_days(start, end) / _year_length(start.year)

    fraction = _actual_days(start, date(start.year + 1, 1, 1)) / _year_length(start.year)
    fraction += end.year - start.year - 1
    fraction += _actual_days(date(end.year, 1, 1), end) / _year_length(end.year)
    return fraction


def _year_length(year: int) -> float:
    return 366.0 if _calendar.isleap(year) else 365.0


def day_count_fraction(
    start: date,
    end: date,
    convention: DayCountConvention,
    calendar: Optional[Calendar] = None
) -> float:
    """
    Calculate the year fraction between two dates.

    Args:
        start: Start date (exclusive for accrual)
        end: End date (inclusive for accrual)
        convention: Day count convention to use
        calendar: Business day calendar for BUS/252 (defaults to weekend-only)

    Returns:
        Year fraction as a float

    Examples:
        >>> from datetime import date
        >>> day_count_fraction(date(2024, 1, 1), date(2024, 7, 1), DayCountConvention.ACT_360)
        0.5055555555555555
    """
    if end < start:
        raise InputOutOfRangeError(f"End date {end} must be >= start date {start}")

    if end == start:
        return 0.0

    if convention == DayCountConvention.ACT_360:
        return _actual_days(start, end) / 360.0

    elif convention == DayCountConvention.ACT_365F:
        return _actual_days(start, end) / 365.0

    elif convention == DayCountConvention.ACT_ACT:
        return _act_act_fraction(start, end)

    elif convention == DayCountConvention.THIRTY_360:
        return _thirty_360_days(start, end) / 360.0

    elif convention == DayCountConvention.BUS_252:
        return (calendar or DEFAULT_CALENDAR).business_days_between(start, end) / 252.0

    else:
        raise ValueError(f"Unknown day count convention: {convention}")


def tenor_to_days(tenor: str) -> int:
    """
    Convert a tenor string to calendar days.

    Months count as 30 days and years as 365 days, so "3M" is 90 days
    and "1Y" is 365 days.

    Raises:
        InputOutOfRangeError: If the tenor string cannot be parsed
    """
    match = _TENOR_PATTERN.match(tenor or "")
    if match is None:
        raise InputOutOfRangeError(f"Invalid tenor format: {tenor!r}")

    count = int(match.group(1))
    unit = match.group(2).upper()
    return count * _TENOR_UNIT_DAYS[unit]


def maturity_date(
    start: date,
    tenor: str,
    calendar: Optional[Calendar] = None
) -> date:
    """Maturity for a tenor string, rolled forward to the next business day."""
    cal = calendar or DEFAULT_CALENDAR
    return cal.next_business_day(start + timedelta(days=tenor_to_days(tenor)))


def year_fraction(start: date, end: date) -> float:
    """Time in years between two dates on an ACT/365F basis."""
    return _actual_days(start, end) / 365.0

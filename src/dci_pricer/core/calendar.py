"""
Business day calendar used for FX settlement and swap payment dates.

Weekends are never business days; holidays are optional per calendar.
"""

from datetime import date, timedelta
from enum import Enum
from typing import FrozenSet, Iterable, Optional


class BusinessDayConvention(str, Enum):
    """How a date falling on a non-business day is rolled."""

    UNADJUSTED = "UNADJUSTED"
    FOLLOWING = "FOLLOWING"
    MODIFIED_FOLLOWING = "MODIFIED_FOLLOWING"
    PRECEDING = "PRECEDING"


class Calendar:
    """
    Weekend-aware business day calendar.

    Holidays are held as a frozenset so a calendar can be shared
    between curves and instruments without copying.
    """

    def __init__(
        self,
        name: str = "WE",
        holidays: Optional[Iterable[date]] = None
    ) -> None:
        """
        Args:
            name: Calendar identifier (e.g., "WE", "USD", "CNH")
            holidays: Holiday dates in addition to weekends
        """
        self.name = name
        self.holidays: FrozenSet[date] = frozenset(holidays or ())

    def is_business_day(self, d: date) -> bool:
        """True unless d is a Saturday, a Sunday or a holiday."""
        return d.weekday() < 5 and d not in self.holidays

    def next_business_day(self, d: date) -> date:
        """First business day on or after d."""
        while not self.is_business_day(d):
            d += timedelta(days=1)
        return d

    def prev_business_day(self, d: date) -> date:
        """Last business day on or before d."""
        while not self.is_business_day(d):
            d -= timedelta(days=1)
        return d

    def business_days_between(self, start: date, end: date) -> int:
        """Count business days in (start, end]."""
        count = 0
        current = start + timedelta(days=1)
        while current <= end:
            if self.is_business_day(current):
                count += 1
            current += timedelta(days=1)
        return count

    def with_holidays(self, holidays: Iterable[date]) -> "Calendar":
        """Return a new calendar with extra holidays."""
        return Calendar(self.name, self.holidays.union(holidays))

    def __repr__(self) -> str:
        return f"Calendar({self.name!r}, holidays={len(self.holidays)})"


# Weekend-only calendar
DEFAULT_CALENDAR = Calendar("WE")


def adjust_date(
    d: date,
    convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
    calendar: Optional[Calendar] = None
) -> date:
    """
    Roll a date according to a business day convention.

    Args:
        d: Date to roll
        convention: Business day convention
        calendar: Calendar to use (defaults to weekend-only)

    Returns:
        Rolled date
    """
    cal = calendar or DEFAULT_CALENDAR

    if convention == BusinessDayConvention.UNADJUSTED:
        return d
    if convention == BusinessDayConvention.FOLLOWING:
        return cal.next_business_day(d)
    if convention == BusinessDayConvention.PRECEDING:
        return cal.prev_business_day(d)
    if convention == BusinessDayConvention.MODIFIED_FOLLOWING:
        rolled = cal.next_business_day(d)
        # Stay within the month
        if rolled.month != d.month:
            rolled = cal.prev_business_day(d)
        return rolled

    raise ValueError(f"Unknown business day convention: {convention}")

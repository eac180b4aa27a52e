"""Core utilities: errors, day counts, calendars and numerics."""

from dci_pricer.core.errors import (
    PricerError,
    InputOutOfRangeError,
    CurveConstructionError,
    SurfaceLookupError,
    NonConvergenceError,
)
from dci_pricer.core.day_count import (
    DayCountConvention,
    day_count_fraction,
    maturity_date,
    tenor_to_days,
    year_fraction,
)
from dci_pricer.core.calendar import Calendar, BusinessDayConvention, adjust_date

__all__ = [
    "PricerError",
    "InputOutOfRangeError",
    "CurveConstructionError",
    "SurfaceLookupError",
    "NonConvergenceError",
    "DayCountConvention",
    "day_count_fraction",
    "maturity_date",
    "tenor_to_days",
    "year_fraction",
    "Calendar",
    "BusinessDayConvention",
    "adjust_date",
]

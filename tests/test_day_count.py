"""Tests for day count conventions, tenor parsing and calendars."""

import pytest
from datetime import date

from dci_pricer.core.calendar import BusinessDayConvention, Calendar, adjust_date
from dci_pricer.core.day_count import (
    DayCountConvention,
    day_count_fraction,
    maturity_date,
    tenor_to_days,
    year_fraction,
)
from dci_pricer.core.errors import InputOutOfRangeError


class TestDayCountFraction:
    """Tests for day_count_fraction function."""

    def test_act_360_half_year(self) -> None:
        """ACT/360 for roughly half a year."""
        result = day_count_fraction(date(2024, 1, 1), date(2024, 7, 1), DayCountConvention.ACT_360)

        # 182 days / 360
        assert result == pytest.approx(182 / 360, rel=1e-12)

    def test_act_365f_full_year(self) -> None:
        """ACT/365F over a leap year."""
        result = day_count_fraction(date(2024, 1, 1), date(2025, 1, 1), DayCountConvention.ACT_365F)

        assert result == pytest.approx(366 / 365, rel=1e-12)

    def test_act_act_spans_two_years(self) -> None:
        """ACT/ACT splits days by calendar year length."""
        result = day_count_fraction(date(2023, 7, 1), date(2024, 7, 1), DayCountConvention.ACT_ACT)

        assert result == pytest.approx(184 / 365 + 182 / 366, rel=1e-12)

    def test_act_act_within_leap_year(self) -> None:
        result = day_count_fraction(date(2024, 1, 1), date(2024, 7, 1), DayCountConvention.ACT_ACT)

        assert result == pytest.approx(182 / 366, rel=1e-12)

    def test_thirty_360_quarter(self) -> None:
        """30/360 for a quarter."""
        result = day_count_fraction(date(2024, 1, 15), date(2024, 4, 15), DayCountConvention.THIRTY_360)

        assert result == pytest.approx(0.25, rel=1e-12)

    def test_bus_252_counts_weekdays(self) -> None:
        """Monday to the next Monday has 5 business days."""
        result = day_count_fraction(date(2024, 1, 1), date(2024, 1, 8), DayCountConvention.BUS_252)

        assert result == pytest.approx(5 / 252, rel=1e-12)

    def test_bus_252_skips_holidays(self) -> None:
        cal = Calendar("TEST", holidays=[date(2024, 1, 3)])
        result = day_count_fraction(
            date(2024, 1, 1), date(2024, 1, 8), DayCountConvention.BUS_252, calendar=cal
        )

        assert result == pytest.approx(4 / 252, rel=1e-12)

    def test_same_date(self) -> None:
        d = date(2024, 6, 15)

        assert day_count_fraction(d, d, DayCountConvention.ACT_360) == 0.0

    def test_end_before_start_raises(self) -> None:
        with pytest.raises(ValueError, match="must be >= start"):
            day_count_fraction(date(2024, 6, 15), date(2024, 1, 1), DayCountConvention.ACT_360)

    def test_year_fraction_is_act_365(self) -> None:
        assert year_fraction(date(2024, 1, 1), date(2024, 3, 31)) == pytest.approx(90 / 365)


class TestTenorParsing:
    """Tests for tenor strings."""

    @pytest.mark.parametrize("tenor,days", [
        ("1D", 1),
        ("2W", 14),
        ("3M", 90),
        ("6M", 180),
        ("1Y", 365),
        ("10Y", 3650),
        ("1y", 365),
    ])
    def test_tenor_to_days(self, tenor: str, days: int) -> None:
        assert tenor_to_days(tenor) == days

    @pytest.mark.parametrize("tenor", ["", "3X", "M3", "1.5Y"])
    def test_invalid_tenor_raises(self, tenor: str) -> None:
        with pytest.raises(InputOutOfRangeError, match="Invalid tenor"):
            tenor_to_days(tenor)

    def test_maturity_rolls_off_weekend(self) -> None:
        """2024-01-01 + 90 days is Sunday 2024-03-31, rolled to Monday."""
        assert maturity_date(date(2024, 1, 1), "3M") == date(2024, 4, 1)

    def test_maturity_on_business_day_unchanged(self) -> None:
        assert maturity_date(date(2024, 1, 1), "1Y") == date(2024, 12, 31)


class TestCalendar:
    """Tests for business day calendar."""

    def test_weekend_is_not_business_day(self) -> None:
        cal = Calendar()

        assert not cal.is_business_day(date(2024, 1, 6))  # Saturday
        assert not cal.is_business_day(date(2024, 1, 7))  # Sunday
        assert cal.is_business_day(date(2024, 1, 8))

    def test_next_and_prev_business_day(self) -> None:
        cal = Calendar()

        assert cal.next_business_day(date(2024, 1, 6)) == date(2024, 1, 8)
        assert cal.prev_business_day(date(2024, 1, 6)) == date(2024, 1, 5)

    def test_holiday_is_skipped(self) -> None:
        cal = Calendar().with_holidays([date(2024, 1, 8)])

        assert cal.next_business_day(date(2024, 1, 6)) == date(2024, 1, 9)

    def test_business_days_between(self) -> None:
        cal = Calendar()

        assert cal.business_days_between(date(2024, 1, 5), date(2024, 1, 8)) == 1
        assert cal.business_days_between(date(2024, 1, 8), date(2024, 1, 5)) == 0

    def test_modified_following_stays_in_month(self) -> None:
        """Saturday 2024-03-30 rolls back to Friday under modified following."""
        d = date(2024, 3, 30)

        assert adjust_date(d, BusinessDayConvention.FOLLOWING) == date(2024, 4, 1)
        assert adjust_date(d, BusinessDayConvention.MODIFIED_FOLLOWING) == date(2024, 3, 29)
        assert adjust_date(d, BusinessDayConvention.PRECEDING) == date(2024, 3, 29)
        assert adjust_date(d, BusinessDayConvention.UNADJUSTED) == d

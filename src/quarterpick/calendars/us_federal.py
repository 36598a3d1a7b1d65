"""
US Federal Holiday Calendar

Implements the US federal holiday schedule used for holiday avoidance.

Federal holidays:
- New Year's Day (January 1)
- Martin Luther King Jr. Day (3rd Monday in January)
- Presidents' Day (3rd Monday in February)
- Memorial Day (Last Monday in May)
- Independence Day (July 4)
- Labor Day (1st Monday in September)
- Columbus Day (2nd Monday in October)
- Veterans Day (November 11)
- Thanksgiving Day (4th Thursday in November)
- Christmas Day (December 25)

Fixed-date holidays are recognized on the date itself; a holiday falling
on a weekend is not moved to a neighbouring weekday.
"""
from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from .base import MONDAY, THURSDAY, BaseCalendar, day_of_week


# =============================================================================
# Weekday Occurrence Primitives
# =============================================================================

def nth_weekday_of_month(year: int, month: int, weekday: int, n: int) -> date:
    """
    Get the nth occurrence of a weekday in a month, counting from the 1st.

    The result falls outside the month when the month has fewer than n
    occurrences.
    """
    first_day = date(year, month, 1)
    days_until_weekday = (weekday - day_of_week(first_day)) % 7
    first_occurrence = first_day + timedelta(days=days_until_weekday)
    return first_occurrence + timedelta(weeks=n - 1)


def last_weekday_of_month(year: int, month: int, weekday: int) -> date:
    """Get the last occurrence of a weekday in a month, counting back from month end."""
    last_day = date(year, month, monthrange(year, month)[1])
    days_since_weekday = (day_of_week(last_day) - weekday) % 7
    return last_day - timedelta(days=days_since_weekday)


def is_nth_weekday_of_month(d: date, weekday: int, n: int) -> bool:
    """True iff `d` is the n-th occurrence of `weekday` in its month."""
    if day_of_week(d) != weekday:
        return False
    return d == nth_weekday_of_month(d.year, d.month, weekday, n)


def is_last_weekday_of_month(d: date, weekday: int) -> bool:
    """True iff `d` is the last occurrence of `weekday` in its month."""
    if day_of_week(d) != weekday:
        return False
    return d == last_weekday_of_month(d.year, d.month, weekday)


# =============================================================================
# Calendar
# =============================================================================

@dataclass
class USFederalCalendar(BaseCalendar):
    """US Federal holiday calendar."""

    _holiday_cache: dict[int, dict[date, str]] = field(default_factory=dict, repr=False)

    def _compute_holidays_for_year(self, year: int) -> dict[date, str]:
        return {
            date(year, 1, 1): "New Year's Day",
            nth_weekday_of_month(year, 1, MONDAY, 3): "Martin Luther King Jr. Day",
            nth_weekday_of_month(year, 2, MONDAY, 3): "Presidents' Day",
            last_weekday_of_month(year, 5, MONDAY): "Memorial Day",
            date(year, 7, 4): "Independence Day",
            nth_weekday_of_month(year, 9, MONDAY, 1): "Labor Day",
            nth_weekday_of_month(year, 10, MONDAY, 2): "Columbus Day",
            date(year, 11, 11): "Veterans Day",
            nth_weekday_of_month(year, 11, THURSDAY, 4): "Thanksgiving Day",
            date(year, 12, 25): "Christmas Day",
        }

    def _get_holidays_for_year(self, year: int) -> dict[date, str]:
        if year not in self._holiday_cache:
            self._holiday_cache[year] = self._compute_holidays_for_year(year)
        return self._holiday_cache[year]

    def is_holiday(self, d: date) -> bool:
        return d in self._get_holidays_for_year(d.year)

    def get_holiday_name(self, d: date) -> Optional[str]:
        return self._get_holidays_for_year(d.year).get(d)


# Pre-configured calendar instance
US_FEDERAL_CALENDAR = USFederalCalendar()


def is_us_federal_holiday(d: date) -> bool:
    """Check if a date is a US federal holiday."""
    return US_FEDERAL_CALENDAR.is_holiday(d)

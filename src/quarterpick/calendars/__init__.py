"""
QuarterPick Calendars

Holiday calendars consulted by the selection validator when holiday
avoidance is enabled.

Provides:
- HolidayCalendar protocol for custom implementations
- BaseCalendar with holiday range and naming helpers
- NoHolidayCalendar and FixedHolidayCalendar for hosts outside the US
- USFederalCalendar for US federal holidays (default)
- Weekday occurrence primitives (nth / last weekday of month)

Usage:
    from quarterpick.calendars import is_us_federal_holiday

    if is_us_federal_holiday(date(2024, 11, 28)):
        print("Thanksgiving")

    # Company shutdown days instead of federal holidays
    calendar = FixedHolidayCalendar.from_dates(date(2024, 12, 24))
"""
from __future__ import annotations

from .base import (
    FRIDAY,
    MONDAY,
    SATURDAY,
    SUNDAY,
    THURSDAY,
    TUESDAY,
    WEDNESDAY,
    WEEKDAY_NAMES,
    BaseCalendar,
    FixedHolidayCalendar,
    HolidayCalendar,
    NoHolidayCalendar,
    day_of_week,
)
from .us_federal import (
    US_FEDERAL_CALENDAR,
    USFederalCalendar,
    is_last_weekday_of_month,
    is_nth_weekday_of_month,
    is_us_federal_holiday,
    last_weekday_of_month,
    nth_weekday_of_month,
)

__all__ = [
    # Weekday numbering
    "SUNDAY",
    "MONDAY",
    "TUESDAY",
    "WEDNESDAY",
    "THURSDAY",
    "FRIDAY",
    "SATURDAY",
    "WEEKDAY_NAMES",
    "day_of_week",
    # Protocols and base classes
    "HolidayCalendar",
    "BaseCalendar",
    "NoHolidayCalendar",
    "FixedHolidayCalendar",
    # US Federal
    "USFederalCalendar",
    "US_FEDERAL_CALENDAR",
    "is_us_federal_holiday",
    # Primitives
    "nth_weekday_of_month",
    "last_weekday_of_month",
    "is_nth_weekday_of_month",
    "is_last_weekday_of_month",
]

"""
QuarterPick Holiday Calendar Base

Provides the protocol and base implementation for holiday calendars
consulted by the selection validator. Weekend handling belongs to the
rule configuration, not to the calendar.

Weekdays use the Sunday-first numbering of DateMetadata.day_of_week:
0=Sunday, 1=Monday, ..., 6=Saturday.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional, Protocol, runtime_checkable


SUNDAY = 0
MONDAY = 1
TUESDAY = 2
WEDNESDAY = 3
THURSDAY = 4
FRIDAY = 5
SATURDAY = 6

WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def day_of_week(d: date) -> int:
    """Sunday-first weekday number (0=Sunday..6=Saturday)."""
    return d.isoweekday() % 7


@runtime_checkable
class HolidayCalendar(Protocol):
    """
    Protocol for holiday calendars.

    Implementations must tell whether a date is a holiday and may name it.
    """

    def is_holiday(self, d: date) -> bool:
        ...

    def get_holiday_name(self, d: date) -> Optional[str]:
        ...

    def get_holidays_in_range(self, start: date, end: date) -> list[date]:
        ...


@dataclass
class BaseCalendar(ABC):
    """
    Abstract base class for holiday calendars.

    Subclasses must implement `is_holiday()`.
    """

    @abstractmethod
    def is_holiday(self, d: date) -> bool:
        """Check if a date is a holiday."""
        ...

    def get_holiday_name(self, d: date) -> Optional[str]:
        """Name of the holiday on `d`, if the calendar names its holidays."""
        return None

    def get_holidays_in_range(self, start: date, end: date) -> list[date]:
        """Get all holidays within a date range (inclusive)."""
        holidays = []
        for offset in range((end - start).days + 1):
            current = start + timedelta(days=offset)
            if self.is_holiday(current):
                holidays.append(current)
        return holidays


@dataclass
class NoHolidayCalendar(BaseCalendar):
    """A calendar with no holidays."""

    def is_holiday(self, d: date) -> bool:
        return False


@dataclass
class FixedHolidayCalendar(BaseCalendar):
    """A calendar with a fixed set of holiday dates."""

    holidays: frozenset[date] = field(default_factory=frozenset)

    def is_holiday(self, d: date) -> bool:
        return d in self.holidays

    @classmethod
    def from_dates(cls, *dates: date) -> FixedHolidayCalendar:
        """Create a calendar from a list of holiday dates."""
        return cls(holidays=frozenset(dates))

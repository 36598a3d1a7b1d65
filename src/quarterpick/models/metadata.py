"""
QuarterPick Date Metadata

The date classifier: derives every rule-relevant attribute of a calendar
date. Metadata is a pure function of the date and is recomputed on demand,
never stored independently of it.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from ..calendars.base import day_of_week
from .enums import PatternAttribute


_QUARTER_KEY_PATTERN = re.compile(r"^(\d{4})-Q([1-4])$")
_ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True, order=True)
class QuarterKey:
    """Identity of a calendar quarter, e.g. QuarterKey(2024, 1) for Jan-Mar 2024."""
    year: int
    quarter: int

    @property
    def sequence(self) -> int:
        """Monotonic quarter number (year * 4 + quarter)."""
        return self.year * 4 + self.quarter

    def __str__(self) -> str:
        return f"{self.year}-Q{self.quarter}"

    @classmethod
    def parse(cls, value: str) -> QuarterKey:
        """Parse the "YYYY-Qn" form produced by str()."""
        match = _QUARTER_KEY_PATTERN.match(value)
        if not match:
            raise ValueError(f"Invalid quarter key: {value!r}")
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def of(cls, d: date) -> QuarterKey:
        return cls(d.year, (d.month - 1) // 3 + 1)


@dataclass(frozen=True)
class DateMetadata:
    """
    Rule-relevant attributes of a single calendar date.

    Attributes:
        date: The classified date
        year: Calendar year
        quarter: 1-4
        month_of_quarter: 1-3, position of the month within its quarter
        month: 1-12
        day_period: 1 (days 1-10), 2 (days 11-20) or 3 (day 21 onward)
        day_of_week: 0=Sunday..6=Saturday
    """
    date: date
    year: int
    quarter: int
    month_of_quarter: int
    month: int
    day_period: int
    day_of_week: int

    @property
    def quarter_key(self) -> QuarterKey:
        return QuarterKey(self.year, self.quarter)

    @property
    def quarter_sequence(self) -> int:
        return self.year * 4 + self.quarter

    @property
    def month_key(self) -> tuple[int, int]:
        return (self.year, self.month)

    def value_of(self, attribute: PatternAttribute) -> int:
        """Value of a pattern attribute for this date."""
        return getattr(self, attribute.value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "year": self.year,
            "quarter": self.quarter,
            "month_of_quarter": self.month_of_quarter,
            "month": self.month,
            "day_period": self.day_period,
            "day_of_week": self.day_of_week,
        }


def _day_period(day: int) -> int:
    if day <= 10:
        return 1
    if day <= 20:
        return 2
    return 3


def classify(d: date) -> DateMetadata:
    """Derive the metadata of a date. Total and side-effect free."""
    return DateMetadata(
        date=d,
        year=d.year,
        quarter=(d.month - 1) // 3 + 1,
        month_of_quarter=(d.month - 1) % 3 + 1,
        month=d.month,
        day_period=_day_period(d.day),
        day_of_week=day_of_week(d),
    )


def parse_calendar_date(value: Any) -> Optional[date]:
    """
    Parse an ISO calendar date ("YYYY-MM-DD").

    Returns None for anything that is not a valid calendar date, including
    datetimes and impossible days such as 2023-02-29.
    """
    if not isinstance(value, str):
        return None
    if not _ISO_DATE_PATTERN.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None

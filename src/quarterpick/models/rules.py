"""
QuarterPick Rule Configuration

Tunable parameters of the selection rules. The defaults are the standard
US quarterly policy; rule packs (see quarterpick.packs) override them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..calendars import BaseCalendar, NoHolidayCalendar, USFederalCalendar
from ..calendars.base import SATURDAY, SUNDAY
from .enums import PatternAttribute


CALENDAR_US_FEDERAL = "us_federal"
CALENDAR_NONE = "none"


@dataclass(frozen=True)
class RuleConfig:
    """
    Selection rule parameters.

    Attributes:
        max_run_length: Longest allowed run of equal attribute values; a
            candidate extending a run of this length is rejected.
        window_quarters: Preceding quarters (besides the candidate's own)
            whose selections constrain pattern checks.
        coarse_attributes: Pattern attributes checked for coarse
            candidates, in check order.
        fine_attributes: Pattern attributes checked for fine candidates
            over the merged coarse + fine stream, in check order.
        quarter_overflow_threshold: Quarter selection count above which
            reconciliation warns.
        valid_days_months: Default month span of valid-day scans.
    """
    id: str = "us-quarterly"
    name: str = "US Quarterly Selection Rules"
    version: str = "1.0"
    calendar: str = CALENDAR_US_FEDERAL
    avoid_holidays: bool = True
    weekend_days: frozenset[int] = field(
        default_factory=lambda: frozenset({SUNDAY, SATURDAY})
    )
    max_run_length: int = 2
    window_quarters: int = 2
    coarse_attributes: tuple[PatternAttribute, ...] = (
        PatternAttribute.MONTH_OF_QUARTER,
        PatternAttribute.DAY_PERIOD,
        PatternAttribute.DAY_OF_WEEK,
    )
    fine_attributes: tuple[PatternAttribute, ...] = (
        PatternAttribute.DAY_PERIOD,
        PatternAttribute.DAY_OF_WEEK,
        PatternAttribute.MONTH_OF_QUARTER,
    )
    quarter_overflow_threshold: int = 3
    valid_days_months: int = 6

    def build_calendar(self) -> BaseCalendar:
        """Holiday calendar named by this configuration."""
        if self.calendar == CALENDAR_NONE:
            return NoHolidayCalendar()
        return USFederalCalendar()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "calendar": self.calendar,
            "avoid_holidays": self.avoid_holidays,
            "weekend_days": sorted(self.weekend_days),
            "max_run_length": self.max_run_length,
            "window_quarters": self.window_quarters,
            "coarse_attributes": [a.value for a in self.coarse_attributes],
            "fine_attributes": [a.value for a in self.fine_attributes],
            "quarter_overflow_threshold": self.quarter_overflow_threshold,
            "valid_days_months": self.valid_days_months,
        }


DEFAULT_RULES = RuleConfig()

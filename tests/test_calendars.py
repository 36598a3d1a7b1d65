"""
Tests for the holiday calendars.

Tests cover:
- US federal holiday dates (fixed and floating)
- nth / last weekday primitives
- Holiday naming and range helpers
"""
import pytest
from datetime import date

from quarterpick.calendars import (
    MONDAY,
    THURSDAY,
    FixedHolidayCalendar,
    HolidayCalendar,
    NoHolidayCalendar,
    USFederalCalendar,
    day_of_week,
    is_last_weekday_of_month,
    is_nth_weekday_of_month,
    is_us_federal_holiday,
    last_weekday_of_month,
    nth_weekday_of_month,
)
from quarterpick.engine import SelectionEngine
from quarterpick.models import ReasonCode


class TestUSFederalHolidays:
    """US federal holiday recognition."""

    @pytest.mark.parametrize("holiday", [
        date(2024, 1, 1),    # New Year's Day
        date(2024, 1, 15),   # MLK Day, 3rd Monday
        date(2024, 2, 19),   # Presidents' Day, 3rd Monday
        date(2024, 5, 27),   # Memorial Day, last Monday
        date(2024, 7, 4),    # Independence Day
        date(2024, 9, 2),    # Labor Day, 1st Monday
        date(2024, 10, 14),  # Columbus Day, 2nd Monday
        date(2024, 11, 11),  # Veterans Day
        date(2024, 11, 28),  # Thanksgiving, 4th Thursday
        date(2024, 12, 25),  # Christmas Day
    ])
    def test_2024_holidays(self, holiday):
        assert is_us_federal_holiday(holiday)

    @pytest.mark.parametrize("ordinary", [
        date(2024, 3, 4),
        date(2024, 1, 8),
        date(2024, 1, 22),
        date(2024, 5, 20),
        date(2024, 11, 21),
        date(2024, 6, 19),
    ])
    def test_ordinary_days(self, ordinary):
        assert not is_us_federal_holiday(ordinary)

    def test_holiday_count_per_year(self):
        calendar = USFederalCalendar()
        for year in (2024, 2025):
            holidays = calendar.get_holidays_in_range(date(year, 1, 1), date(year, 12, 31))
            assert len(holidays) == 10

    def test_holiday_names(self):
        calendar = USFederalCalendar()
        assert calendar.get_holiday_name(date(2024, 11, 28)) == "Thanksgiving Day"
        assert calendar.get_holiday_name(date(2024, 5, 27)) == "Memorial Day"
        assert calendar.get_holiday_name(date(2024, 3, 4)) is None

    def test_fixed_holiday_on_weekend_not_shifted(self):
        """Christmas 2022 fell on a Sunday; Monday the 26th stays ordinary."""
        calendar = USFederalCalendar()
        assert calendar.is_holiday(date(2022, 12, 25))
        assert not calendar.is_holiday(date(2022, 12, 26))
        # July 4 2026 is a Saturday
        assert not calendar.is_holiday(date(2026, 7, 3))

    def test_last_year_of_the_date_range(self):
        calendar = USFederalCalendar()
        holidays = calendar.get_holidays_in_range(date(9999, 1, 1), date(9999, 12, 31))
        assert len(holidays) == 10
        assert holidays[-1] == date(9999, 12, 25)
        assert calendar.get_holiday_name(date(9999, 12, 25)) == "Christmas Day"


class TestWeekdayPrimitives:
    """nth / last weekday of month."""

    def test_day_of_week_is_sunday_first(self):
        assert day_of_week(date(2024, 3, 3)) == 0   # Sunday
        assert day_of_week(date(2024, 3, 4)) == 1   # Monday
        assert day_of_week(date(2024, 3, 9)) == 6   # Saturday

    def test_nth_weekday(self):
        assert nth_weekday_of_month(2024, 1, MONDAY, 3) == date(2024, 1, 15)
        assert nth_weekday_of_month(2024, 11, THURSDAY, 4) == date(2024, 11, 28)
        # Month starting on the weekday itself
        assert nth_weekday_of_month(2024, 4, MONDAY, 1) == date(2024, 4, 1)

    def test_last_weekday(self):
        assert last_weekday_of_month(2024, 5, MONDAY) == date(2024, 5, 27)
        assert last_weekday_of_month(2024, 12, MONDAY) == date(2024, 12, 30)
        # December of the last representable year
        assert last_weekday_of_month(9999, 12, MONDAY) == date(9999, 12, 27)

    def test_nth_weekday_predicate(self):
        assert is_nth_weekday_of_month(date(2024, 1, 15), MONDAY, 3)
        assert not is_nth_weekday_of_month(date(2024, 1, 22), MONDAY, 3)
        assert not is_nth_weekday_of_month(date(2024, 1, 16), MONDAY, 3)

    def test_last_weekday_predicate(self):
        assert is_last_weekday_of_month(date(2024, 5, 27), MONDAY)
        assert not is_last_weekday_of_month(date(2024, 5, 20), MONDAY)


class TestCalendarHelpers:
    """Range lookups and alternative calendars."""

    def test_holidays_in_range(self):
        calendar = USFederalCalendar()
        assert calendar.get_holidays_in_range(date(2024, 5, 1), date(2024, 7, 31)) == [
            date(2024, 5, 27),
            date(2024, 7, 4),
        ]

    def test_empty_range(self):
        calendar = USFederalCalendar()
        assert calendar.get_holidays_in_range(date(2024, 7, 4), date(2024, 7, 3)) == []

    def test_no_holiday_calendar(self):
        calendar = NoHolidayCalendar()
        assert not calendar.is_holiday(date(2024, 12, 25))
        assert calendar.get_holiday_name(date(2024, 12, 25)) is None

    def test_fixed_holiday_calendar(self):
        calendar = FixedHolidayCalendar.from_dates(date(2024, 3, 4))
        assert calendar.is_holiday(date(2024, 3, 4))
        assert not calendar.is_holiday(date(2024, 1, 1))

    def test_calendars_satisfy_protocol(self):
        for calendar in (USFederalCalendar(), NoHolidayCalendar(), FixedHolidayCalendar()):
            assert isinstance(calendar, HolidayCalendar)

    def test_fixed_calendar_drives_engine(self):
        engine = SelectionEngine(calendar=FixedHolidayCalendar.from_dates(date(2024, 3, 4)))
        assert engine.evaluate(date(2024, 3, 4)).reason == ReasonCode.HOLIDAY
        # MLK Day is not in this calendar
        assert engine.evaluate(date(2024, 1, 15)).valid

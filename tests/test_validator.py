"""
Tests for the selection validator.

Tests cover:
- Exclusions (blocked, holiday, weekend) and their precedence
- Quarter and month cardinality
- Coarse prerequisite for fine selections
- Consecutive-run detection over the rolling quarter window
"""
import pytest
from datetime import date

from quarterpick.calendars import NoHolidayCalendar
from quarterpick.engine import SelectionStore, SelectionValidator, has_consecutive_run
from quarterpick.models import (
    PatternAttribute,
    QuarterlyOnly,
    QuarterlyPlusMonthly,
    ReasonCode,
    RuleConfig,
    SelectionKind,
    classify,
)


COARSE = QuarterlyOnly()
FINE = QuarterlyPlusMonthly(active=SelectionKind.FINE)


@pytest.fixture
def validator() -> SelectionValidator:
    return SelectionValidator()


# =============================================================================
# Consecutive Run Tests
# =============================================================================

class TestHasConsecutiveRun:
    """Forward-pass run detection."""

    def test_two_equal_values_block_a_third(self):
        stream = [classify(date(2024, 1, 8)), classify(date(2024, 5, 13))]
        candidate = classify(date(2024, 9, 23))
        assert has_consecutive_run(candidate, stream, PatternAttribute.DAY_OF_WEEK)
        assert not has_consecutive_run(candidate, stream, PatternAttribute.DAY_PERIOD)

    def test_stream_order_does_not_matter(self):
        stream = [classify(date(2024, 5, 13)), classify(date(2024, 1, 8))]
        candidate = classify(date(2024, 9, 23))
        assert has_consecutive_run(candidate, stream, PatternAttribute.DAY_OF_WEEK)

    def test_interrupted_run(self):
        stream = [
            classify(date(2024, 1, 8)),    # Mon
            classify(date(2024, 4, 9)),    # Tue
            classify(date(2024, 7, 8)),    # Mon
        ]
        candidate = classify(date(2024, 10, 21))  # Mon
        assert not has_consecutive_run(candidate, stream, PatternAttribute.DAY_OF_WEEK)

    def test_only_trailing_run_counts(self):
        stream = [
            classify(date(2024, 1, 8)),    # Mon
            classify(date(2024, 2, 12)),   # Mon
            classify(date(2024, 3, 12)),   # Tue
        ]
        candidate = classify(date(2024, 3, 25))  # Mon
        assert not has_consecutive_run(candidate, stream, PatternAttribute.DAY_OF_WEEK)

    def test_selections_outside_window_ignored(self):
        stream = [classify(date(2024, 1, 8)), classify(date(2024, 4, 8))]
        # 2025-Q1 is three quarters after 2024-Q2
        candidate = classify(date(2025, 1, 13))
        assert not has_consecutive_run(candidate, stream, PatternAttribute.DAY_OF_WEEK)

    def test_future_selections_ignored(self):
        stream = [classify(date(2024, 7, 8)), classify(date(2024, 10, 21))]
        candidate = classify(date(2024, 1, 8))
        assert not has_consecutive_run(candidate, stream, PatternAttribute.DAY_OF_WEEK)

    def test_empty_stream(self):
        assert not has_consecutive_run(
            classify(date(2024, 1, 8)), [], PatternAttribute.DAY_OF_WEEK
        )

    def test_custom_max_run(self):
        stream = [classify(date(2024, 1, 8))]
        candidate = classify(date(2024, 4, 8))
        assert has_consecutive_run(
            candidate, stream, PatternAttribute.DAY_OF_WEEK, max_run=1
        )


# =============================================================================
# Exclusion Tests
# =============================================================================

class TestExclusions:
    """Mode-independent filters."""

    def test_weekend(self, validator, store):
        decision = validator.evaluate(date(2024, 3, 2), COARSE, store)
        assert decision.reason == ReasonCode.WEEKEND

    def test_holiday(self, validator, store):
        decision = validator.evaluate(date(2024, 1, 15), COARSE, store)
        assert decision.reason == ReasonCode.HOLIDAY

    def test_holiday_allowed_when_avoidance_off(self, validator, store):
        decision = validator.evaluate(date(2024, 1, 15), COARSE, store, avoid_holidays=False)
        assert decision.valid

    def test_blocked_takes_precedence(self, validator, store):
        store.block(date(2024, 1, 15))
        decision = validator.evaluate(date(2024, 1, 15), COARSE, store)
        assert decision.reason == ReasonCode.BLOCKED

    def test_holiday_before_weekend(self, validator, store):
        # 2022-12-25 is a Sunday and Christmas
        decision = validator.evaluate(date(2022, 12, 25), COARSE, store)
        assert decision.reason == ReasonCode.HOLIDAY

    def test_exclusions_apply_to_fine(self, validator, store):
        store.add_coarse(date(2024, 4, 9))
        decision = validator.evaluate(date(2024, 5, 27), FINE, store)
        assert decision.reason == ReasonCode.HOLIDAY

    def test_custom_calendar_and_weekend(self, store):
        rules = RuleConfig(weekend_days=frozenset({5, 6}))
        validator = SelectionValidator(calendar=NoHolidayCalendar(), rules=rules)
        assert validator.evaluate(date(2024, 3, 8), COARSE, store).reason == ReasonCode.WEEKEND
        assert validator.evaluate(date(2024, 3, 3), COARSE, SelectionStore()).valid
        assert validator.evaluate(date(2024, 1, 15), COARSE, SelectionStore()).valid


# =============================================================================
# Coarse Rule Tests
# =============================================================================

class TestCoarseRules:
    """Quarter cardinality and coarse patterns."""

    def test_first_selection_valid(self, validator, store):
        assert validator.evaluate(date(2024, 2, 5), COARSE, store).valid

    def test_quarter_occupied(self, validator, store):
        store.add_coarse(date(2024, 2, 5))
        for d in (date(2024, 1, 2), date(2024, 2, 6), date(2024, 3, 29)):
            decision = validator.evaluate(d, COARSE, store)
            assert decision.reason == ReasonCode.QUARTER_OCCUPIED

    def test_selected_date_reports_quarter_occupied(self, validator, store):
        store.add_coarse(date(2024, 2, 5))
        decision = validator.evaluate(date(2024, 2, 5), COARSE, store)
        assert decision.reason == ReasonCode.QUARTER_OCCUPIED

    def test_next_quarter_free(self, validator, store):
        store.add_coarse(date(2024, 2, 5))
        assert validator.evaluate(date(2024, 4, 9), COARSE, store).valid

    def test_day_of_week_run(self, validator, store):
        store.add_coarse(date(2024, 1, 8))
        store.add_coarse(date(2024, 5, 13))
        decision = validator.evaluate(date(2024, 9, 23), COARSE, store)
        assert decision.reason == ReasonCode.PATTERN_RUN
        assert decision.attribute == PatternAttribute.DAY_OF_WEEK
        assert decision.label == "pattern_run:day_of_week"

    def test_month_of_quarter_checked_first(self, validator, store):
        # Mondays, all in the first month of their quarter
        store.add_coarse(date(2024, 1, 8))
        store.add_coarse(date(2024, 4, 15))
        decision = validator.evaluate(date(2024, 7, 22), COARSE, store)
        assert decision.attribute == PatternAttribute.MONTH_OF_QUARTER

    def test_day_period_run(self, validator, store):
        # Period 2, different weekdays and months of quarter
        store.add_coarse(date(2024, 1, 16))   # Tue, moq 1
        store.add_coarse(date(2024, 5, 15))   # Wed, moq 2
        decision = validator.evaluate(date(2024, 9, 12), COARSE, store)  # Thu, moq 3
        assert decision.attribute == PatternAttribute.DAY_PERIOD

    def test_run_spaced_beyond_window_accepted(self, validator, store):
        store.add_coarse(date(2024, 1, 8))
        store.add_coarse(date(2024, 10, 21))
        assert validator.evaluate(date(2025, 7, 21), COARSE, store).valid

    def test_fine_selections_ignored_by_coarse_patterns(self, validator, store):
        store.add_coarse(date(2024, 1, 8))      # Mon
        store.add_fine(date(2024, 3, 11))       # Mon
        # Only one Monday in the coarse stream
        assert validator.evaluate(date(2024, 5, 13), COARSE, store).valid


# =============================================================================
# Fine Rule Tests
# =============================================================================

class TestFineRules:
    """Prerequisite, month cardinality and fine patterns."""

    def test_missing_prerequisite(self, validator, store):
        decision = validator.evaluate(date(2024, 4, 9), FINE, store)
        assert decision.reason == ReasonCode.MISSING_PREREQUISITE

    def test_prerequisite_checked_per_quarter(self, validator, store):
        store.add_coarse(date(2024, 2, 5))
        decision = validator.evaluate(date(2024, 5, 15), FINE, store)
        assert decision.reason == ReasonCode.MISSING_PREREQUISITE

    def test_valid_fine(self, validator, store):
        store.add_coarse(date(2024, 4, 9))
        assert validator.evaluate(date(2024, 5, 15), FINE, store).valid

    def test_month_occupied_by_coarse(self, validator, store):
        store.add_coarse(date(2024, 4, 9))
        decision = validator.evaluate(date(2024, 4, 16), FINE, store)
        assert decision.reason == ReasonCode.MONTH_OCCUPIED

    def test_month_occupied_by_fine(self, validator, store):
        store.add_coarse(date(2024, 4, 9))
        store.add_fine(date(2024, 5, 15))
        decision = validator.evaluate(date(2024, 5, 22), FINE, store)
        assert decision.reason == ReasonCode.MONTH_OCCUPIED

    def test_day_period_run_over_merged_stream(self, validator, store):
        store.add_coarse(date(2024, 4, 9))   # Tue, period 1
        store.add_fine(date(2024, 5, 7))     # Tue, period 1
        decision = validator.evaluate(date(2024, 6, 4), FINE, store)  # Tue, period 1
        assert decision.reason == ReasonCode.PATTERN_RUN
        assert decision.attribute == PatternAttribute.DAY_PERIOD

    def test_day_of_week_run_over_merged_stream(self, validator, store):
        store.add_coarse(date(2024, 4, 9))   # Tue, period 1
        store.add_fine(date(2024, 5, 14))    # Tue, period 2
        decision = validator.evaluate(date(2024, 6, 25), FINE, store)  # Tue, period 3
        assert decision.attribute == PatternAttribute.DAY_OF_WEEK

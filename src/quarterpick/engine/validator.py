"""
QuarterPick Selection Validator

Decides whether a candidate date may be selected, given the selection
mode and the current store contents. Evaluation has no side effects; the
caller applies an accepted decision through the store.

Checks run in order and the first failure wins:

1. Exclusions (any mode): blocked date, holiday (when avoidance is on),
   weekend.
2. Coarse candidates: quarter already holds a coarse date; pattern runs
   over the coarse stream.
3. Fine candidates: quarter lacks a coarse anchor; month already holds a
   selection; pattern runs over the merged coarse + fine stream.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from ..calendars import HolidayCalendar, USFederalCalendar
from ..models import (
    DateMetadata,
    Decision,
    Mode,
    PatternAttribute,
    ReasonCode,
    RuleConfig,
    SelectionKind,
    classify,
)
from .selection_store import SelectionStore


# =============================================================================
# Consecutive-Run Check
# =============================================================================

def has_consecutive_run(
    candidate: DateMetadata,
    stream: Iterable[DateMetadata],
    attribute: PatternAttribute,
    max_run: int = 2,
    window_quarters: int = 2,
) -> bool:
    """
    Would adding `candidate` extend a run of equal `attribute` values past
    `max_run`?

    Only selections from the candidate's quarter and the `window_quarters`
    quarters before it count. They are re-sorted by date (insertion order
    is meaningless once selections have been removed and re-added) and
    walked once, tracking the trailing run.
    """
    q = candidate.quarter_sequence
    windowed = sorted(
        (m for m in stream if 0 <= q - m.quarter_sequence <= window_quarters),
        key=lambda m: m.date,
    )

    run_value: Optional[int] = None
    run_length = 0
    for metadata in windowed:
        value = metadata.value_of(attribute)
        if run_length and value == run_value:
            run_length += 1
        else:
            run_value = value
            run_length = 1

    return run_length >= max_run and run_value == candidate.value_of(attribute)


# =============================================================================
# Validator
# =============================================================================

@dataclass
class SelectionValidator:
    """
    Rule engine for candidate dates.

    Usage:
        validator = SelectionValidator()

        decision = validator.evaluate(
            date(2024, 2, 5),
            mode=QuarterlyOnly(),
            store=store,
            avoid_holidays=True,
        )
        if not decision.valid:
            print(decision.label)      # e.g. "quarter_occupied"
    """

    calendar: HolidayCalendar = field(default_factory=USFederalCalendar)
    rules: RuleConfig = field(default_factory=RuleConfig)

    def evaluate(
        self,
        d: date,
        mode: Mode,
        store: SelectionStore,
        avoid_holidays: bool = True,
    ) -> Decision:
        """
        Evaluate a candidate date.

        Args:
            d: Candidate date
            mode: Selection mode; its active kind decides coarse vs fine rules
            store: Current selections (read only)
            avoid_holidays: Whether holidays are excluded

        Returns:
            Decision.accept() or a rejection with its reason code
        """
        metadata = classify(d)

        exclusion = self.check_exclusions(metadata, store, avoid_holidays)
        if exclusion is not None:
            return exclusion

        if mode.produces == SelectionKind.FINE:
            return self._evaluate_fine(metadata, store)
        return self._evaluate_coarse(metadata, store)

    def check_exclusions(
        self,
        metadata: DateMetadata,
        store: SelectionStore,
        avoid_holidays: bool = True,
    ) -> Optional[Decision]:
        """Mode-independent filters. Returns None when the date passes."""
        d = metadata.date
        if store.is_blocked(d):
            return Decision.reject(ReasonCode.BLOCKED, f"{d} is manually blocked")
        if avoid_holidays and self.calendar.is_holiday(d):
            return Decision.reject(ReasonCode.HOLIDAY, f"{d} is a holiday")
        if metadata.day_of_week in self.rules.weekend_days:
            return Decision.reject(ReasonCode.WEEKEND, f"{d} falls on a weekend")
        return None

    def _evaluate_coarse(self, metadata: DateMetadata, store: SelectionStore) -> Decision:
        key = metadata.quarter_key
        if store.has_coarse_in_quarter(key):
            return Decision.reject(
                ReasonCode.QUARTER_OCCUPIED,
                f"{key} already has a quarterly selection",
            )
        return self._check_patterns(
            metadata, store.coarse_stream(), self.rules.coarse_attributes
        )

    def _evaluate_fine(self, metadata: DateMetadata, store: SelectionStore) -> Decision:
        key = metadata.quarter_key
        if not store.has_coarse_in_quarter(key):
            return Decision.reject(
                ReasonCode.MISSING_PREREQUISITE,
                f"{key} has no quarterly selection to anchor a monthly one",
            )
        if store.is_month_occupied(metadata.year, metadata.month):
            return Decision.reject(
                ReasonCode.MONTH_OCCUPIED,
                f"{metadata.year}-{metadata.month:02d} already has a selection",
            )
        return self._check_patterns(
            metadata, store.monthly_stream(), self.rules.fine_attributes
        )

    def _check_patterns(
        self,
        metadata: DateMetadata,
        stream: list[DateMetadata],
        attributes: tuple[PatternAttribute, ...],
    ) -> Decision:
        for attribute in attributes:
            if has_consecutive_run(
                metadata,
                stream,
                attribute,
                max_run=self.rules.max_run_length,
                window_quarters=self.rules.window_quarters,
            ):
                return Decision.reject(
                    ReasonCode.PATTERN_RUN,
                    f"would make {self.rules.max_run_length + 1} consecutive "
                    f"selections with the same {attribute.value}",
                    attribute=attribute,
                )
        return Decision.accept()

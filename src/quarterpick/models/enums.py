"""
QuarterPick Enumerations

All enumeration types used throughout the QuarterPick system.

All enums inherit from (str, Enum) for JSON serialization compatibility.
"""
from __future__ import annotations

from enum import Enum


# =============================================================================
# Selection Kinds
# =============================================================================

class SelectionKind(str, Enum):
    """
    Kind of selection record.

    COARSE selections are quarter-scoped (one per quarter) and anchor the
    FINE selections of their quarter. FINE selections are month-scoped
    (one per month).
    """
    COARSE = "coarse"
    FINE = "fine"


class StoreSet(str, Enum):
    """Collections owned by the selection store."""
    COARSE_SELECTIONS = "coarse_selections"
    FINE_SELECTIONS = "fine_selections"
    DEPENDENCY = "dependency"
    BLOCKED_DATES = "blocked_dates"


# =============================================================================
# Pattern Attributes
# =============================================================================

class PatternAttribute(str, Enum):
    """Recurring date attributes subject to run-length limits."""
    MONTH_OF_QUARTER = "month_of_quarter"  # 1st, 2nd or 3rd month of quarter
    DAY_PERIOD = "day_period"              # days 1-10, 11-20, 21+
    DAY_OF_WEEK = "day_of_week"            # 0=Sunday..6=Saturday


# =============================================================================
# Rejection Reasons
# =============================================================================

class ReasonCategory(str, Enum):
    """Grouping of rejection reasons."""
    EXCLUSION = "exclusion"      # Categorically ineligible date
    CARDINALITY = "cardinality"  # Per-period quota already met
    DEPENDENCY = "dependency"    # Missing coarse anchor
    PATTERN = "pattern"          # Would create a run
    INTEGRITY = "integrity"      # Reported by reconciliation only


class ReasonCode(str, Enum):
    """
    Stable reason code for a rejected candidate date.

    Returned by value from the validator; never raised.
    """
    BLOCKED = "blocked"
    HOLIDAY = "holiday"
    WEEKEND = "weekend"
    QUARTER_OCCUPIED = "quarter_occupied"
    MONTH_OCCUPIED = "month_occupied"
    MISSING_PREREQUISITE = "missing_prerequisite"
    PATTERN_RUN = "pattern_run"

    @property
    def category(self) -> ReasonCategory:
        return _REASON_CATEGORIES[self]


_REASON_CATEGORIES = {
    ReasonCode.BLOCKED: ReasonCategory.EXCLUSION,
    ReasonCode.HOLIDAY: ReasonCategory.EXCLUSION,
    ReasonCode.WEEKEND: ReasonCategory.EXCLUSION,
    ReasonCode.QUARTER_OCCUPIED: ReasonCategory.CARDINALITY,
    ReasonCode.MONTH_OCCUPIED: ReasonCategory.CARDINALITY,
    ReasonCode.MISSING_PREREQUISITE: ReasonCategory.DEPENDENCY,
    ReasonCode.PATTERN_RUN: ReasonCategory.PATTERN,
}


# =============================================================================
# Integrity Issues
# =============================================================================

class IntegrityIssue(str, Enum):
    """
    Inconsistencies repaired (or flagged) by reconciliation.

    QUARTER_OVERFLOW is advisory only and never mutates the store.
    """
    MALFORMED_DATE = "malformed_date"
    BLOCKED_SELECTION = "blocked_selection"
    ORPHANED_FINE = "orphaned_fine"
    DUPLICATE_SELECTION = "duplicate_selection"
    DANGLING_DEPENDENCY = "dangling_dependency"
    QUARTER_OVERFLOW = "quarter_overflow"

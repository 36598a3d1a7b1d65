"""
QuarterPick - Rule-Checked Quarterly and Monthly Date Selection

QuarterPick decides whether a calendar date may be picked under a layered
policy: weekdays only, holiday and blackout exclusion, one pick per
quarter (and optionally one per month), and no attribute repeating three
picks in a row.

Key Features:
- Date classification (quarter, month of quarter, day period, weekday)
- US federal holiday math (fixed dates, nth / last weekday rules)
- Deterministic accept/reject decisions with stable reason codes
- Quarterly anchors with dependent monthly picks and cascading removal
- Integrity reconciliation of imported state
- YAML rule packs

Quick Start:
    from datetime import date
    from quarterpick import SelectionEngine, QuarterlyPlusMonthly, SelectionKind

    engine = SelectionEngine()
    engine.commit(date(2024, 2, 5))

    engine.set_mode(QuarterlyPlusMonthly(active=SelectionKind.FINE))
    result = engine.commit(date(2024, 3, 12))
    print(result.decision.label)

    state = engine.export_state()

Version: 0.1.0
"""
from __future__ import annotations

__version__ = "0.1.0"

# =============================================================================
# Core Models (Re-exported for convenience)
# =============================================================================
from .models import (
    # Enums
    IntegrityIssue,
    PatternAttribute,
    ReasonCategory,
    ReasonCode,
    SelectionKind,
    StoreSet,
    # Metadata
    DateMetadata,
    QuarterKey,
    classify,
    parse_calendar_date,
    # Mode
    Mode,
    QuarterlyOnly,
    QuarterlyPlusMonthly,
    mode_from_dict,
    # Records
    AppliedChange,
    CommitResult,
    Decision,
    ReconciliationReport,
    RemovalPlan,
    SelectionRecord,
    # Rules
    DEFAULT_RULES,
    RuleConfig,
)

# =============================================================================
# Engine
# =============================================================================
from .engine import (
    IntegrityReconciler,
    SelectionEngine,
    SelectionStore,
    SelectionValidator,
    StateSnapshot,
)

# =============================================================================
# Calendars
# =============================================================================
from .calendars import (
    BaseCalendar,
    HolidayCalendar,
    NoHolidayCalendar,
    USFederalCalendar,
    is_us_federal_holiday,
)

# =============================================================================
# Rule Packs
# =============================================================================
from .packs import (
    RulePackLoader,
    load_default_rule_pack,
    load_rule_pack,
    load_rule_pack_from_string,
)

# =============================================================================
# Exceptions
# =============================================================================
from .exceptions import (
    QuarterPickError,
    RulePackLoadError,
    RulePackValidationError,
    RulePackVersionMismatch,
    SelectionNotFoundError,
    StaleRemovalPlanError,
    StateValidationError,
    StoreInvariantError,
)

__all__ = [
    "__version__",
    # Enums
    "IntegrityIssue",
    "PatternAttribute",
    "ReasonCategory",
    "ReasonCode",
    "SelectionKind",
    "StoreSet",
    # Metadata
    "DateMetadata",
    "QuarterKey",
    "classify",
    "parse_calendar_date",
    # Mode
    "Mode",
    "QuarterlyOnly",
    "QuarterlyPlusMonthly",
    "mode_from_dict",
    # Records
    "AppliedChange",
    "CommitResult",
    "Decision",
    "ReconciliationReport",
    "RemovalPlan",
    "SelectionRecord",
    # Rules
    "DEFAULT_RULES",
    "RuleConfig",
    # Engine
    "IntegrityReconciler",
    "SelectionEngine",
    "SelectionStore",
    "SelectionValidator",
    "StateSnapshot",
    # Calendars
    "BaseCalendar",
    "HolidayCalendar",
    "NoHolidayCalendar",
    "USFederalCalendar",
    "is_us_federal_holiday",
    # Rule Packs
    "RulePackLoader",
    "load_default_rule_pack",
    "load_rule_pack",
    "load_rule_pack_from_string",
    # Exceptions
    "QuarterPickError",
    "RulePackLoadError",
    "RulePackValidationError",
    "RulePackVersionMismatch",
    "SelectionNotFoundError",
    "StaleRemovalPlanError",
    "StateValidationError",
    "StoreInvariantError",
]

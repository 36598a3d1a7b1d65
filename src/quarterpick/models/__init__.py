"""
QuarterPick Models

Domain models for the selection rule engine.

Modules:
- enums: SelectionKind, PatternAttribute, ReasonCode, IntegrityIssue, ...
- metadata: DateMetadata, QuarterKey and the `classify` date classifier
- mode: QuarterlyOnly / QuarterlyPlusMonthly selection modes
- records: SelectionRecord, Decision, RemovalPlan, ReconciliationReport, ...
- rules: RuleConfig, the tunable rule parameters
"""
from __future__ import annotations

from .enums import (
    IntegrityIssue,
    PatternAttribute,
    ReasonCategory,
    ReasonCode,
    SelectionKind,
    StoreSet,
)
from .metadata import (
    DateMetadata,
    QuarterKey,
    classify,
    parse_calendar_date,
)
from .mode import (
    Mode,
    QuarterlyOnly,
    QuarterlyPlusMonthly,
    mode_from_dict,
)
from .rules import (
    CALENDAR_NONE,
    CALENDAR_US_FEDERAL,
    DEFAULT_RULES,
    RuleConfig,
)
from .records import (
    REPAIR_ISSUES,
    AppliedChange,
    CommitResult,
    Decision,
    ReconciliationReport,
    RemovalPlan,
    SelectionRecord,
)

__all__ = [
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
    "REPAIR_ISSUES",
    "AppliedChange",
    "CommitResult",
    "Decision",
    "ReconciliationReport",
    "RemovalPlan",
    "SelectionRecord",
    # Rules
    "CALENDAR_NONE",
    "CALENDAR_US_FEDERAL",
    "DEFAULT_RULES",
    "RuleConfig",
]

"""
QuarterPick Records

Value objects exchanged between the rule engine and its host:

- SelectionRecord: a selected date and its kind
- Decision: the validator's verdict for a candidate date
- AppliedChange / CommitResult: what a commit changed
- RemovalPlan: the two-phase (cascading) removal proposal
- ReconciliationReport: what an integrity sweep repaired
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from .enums import (
    IntegrityIssue,
    PatternAttribute,
    ReasonCategory,
    ReasonCode,
    SelectionKind,
    StoreSet,
)
from .metadata import DateMetadata, classify


# =============================================================================
# Selection Record
# =============================================================================

@dataclass(frozen=True)
class SelectionRecord:
    """A selected date. Metadata is derived from the date on access."""
    date: date
    kind: SelectionKind

    @property
    def metadata(self) -> DateMetadata:
        return classify(self.date)

    def to_dict(self) -> dict[str, Any]:
        result = self.metadata.to_dict()
        result["kind"] = self.kind.value
        return result


# =============================================================================
# Decision
# =============================================================================

@dataclass(frozen=True)
class Decision:
    """
    Verdict on a candidate date.

    Either valid, or invalid with a stable reason code. Pattern-run
    rejections also name the attribute whose run would reach the limit.
    """
    valid: bool
    reason: Optional[ReasonCode] = None
    attribute: Optional[PatternAttribute] = None
    message: str = ""

    @classmethod
    def accept(cls) -> Decision:
        return cls(valid=True)

    @classmethod
    def reject(
        cls,
        reason: ReasonCode,
        message: str = "",
        attribute: Optional[PatternAttribute] = None,
    ) -> Decision:
        return cls(valid=False, reason=reason, attribute=attribute, message=message)

    @property
    def category(self) -> Optional[ReasonCategory]:
        return self.reason.category if self.reason else None

    @property
    def label(self) -> str:
        """Compact form: "valid", "weekend", "pattern_run:day_of_week"."""
        if self.valid:
            return "valid"
        if self.attribute is not None:
            return f"{self.reason.value}:{self.attribute.value}"
        return self.reason.value

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"valid": self.valid, "label": self.label}
        if self.reason is not None:
            result["reason"] = self.reason.value
            result["category"] = self.reason.category.value
        if self.attribute is not None:
            result["attribute"] = self.attribute.value
        if self.message:
            result["message"] = self.message
        return result


# =============================================================================
# Applied Changes
# =============================================================================

@dataclass(frozen=True)
class AppliedChange:
    """A committed store mutation and the collections it touched."""
    selection_date: date
    kind: Optional[SelectionKind]
    changed_sets: frozenset[StoreSet]
    added: tuple[date, ...] = ()
    removed: tuple[date, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.selection_date.isoformat(),
            "kind": self.kind.value if self.kind else None,
            "changed_sets": sorted(s.value for s in self.changed_sets),
            "added": [d.isoformat() for d in self.added],
            "removed": [d.isoformat() for d in self.removed],
        }


@dataclass(frozen=True)
class CommitResult:
    """Outcome of a commit: the decision, and the change if it was accepted."""
    decision: Decision
    change: Optional[AppliedChange] = None

    @property
    def accepted(self) -> bool:
        return self.decision.valid and self.change is not None


# =============================================================================
# Removal Plan
# =============================================================================

@dataclass(frozen=True)
class RemovalPlan:
    """
    Proposed removal of a selection.

    Removing a coarse date also removes every fine date of its quarter;
    those are listed in `cascade`. Nothing is mutated until the plan is
    confirmed.
    """
    target: date
    kind: SelectionKind
    cascade: frozenset[date] = frozenset()

    @property
    def requires_confirmation(self) -> bool:
        return bool(self.cascade)

    @property
    def dates(self) -> list[date]:
        """Every date the plan clears, in date order."""
        return sorted({self.target, *self.cascade})

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": self.target.isoformat(),
            "kind": self.kind.value,
            "cascade": [d.isoformat() for d in sorted(self.cascade)],
            "requires_confirmation": self.requires_confirmation,
        }


# =============================================================================
# Reconciliation Report
# =============================================================================

# Issues that mutate the store when repaired
REPAIR_ISSUES = (
    IntegrityIssue.MALFORMED_DATE,
    IntegrityIssue.BLOCKED_SELECTION,
    IntegrityIssue.ORPHANED_FINE,
    IntegrityIssue.DUPLICATE_SELECTION,
    IntegrityIssue.DANGLING_DEPENDENCY,
)


@dataclass
class ReconciliationReport:
    """
    Per-category results of an integrity sweep.

    `findings` keeps the offending values (as strings, since malformed
    values never parsed). QUARTER_OVERFLOW entries are advisory.
    """
    findings: dict[IntegrityIssue, list[str]] = field(
        default_factory=lambda: {issue: [] for issue in IntegrityIssue}
    )
    reindexed: int = 0
    warnings: list[str] = field(default_factory=list)

    def record(self, issue: IntegrityIssue, value: Any) -> None:
        self.findings[issue].append(value.isoformat() if isinstance(value, date) else str(value))

    def count(self, issue: IntegrityIssue) -> int:
        return len(self.findings[issue])

    @property
    def changes(self) -> dict[IntegrityIssue, int]:
        return {issue: self.count(issue) for issue in REPAIR_ISSUES}

    @property
    def total_changes(self) -> int:
        return sum(self.changes.values()) + self.reindexed

    @property
    def is_clean(self) -> bool:
        return self.total_changes == 0 and not self.warnings

    def merge(self, other: ReconciliationReport) -> None:
        for issue, values in other.findings.items():
            self.findings[issue].extend(values)
        self.reindexed += other.reindexed
        self.warnings.extend(other.warnings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "changes": {issue.value: n for issue, n in self.changes.items()},
            "findings": {
                issue.value: list(values)
                for issue, values in self.findings.items()
                if values
            },
            "reindexed": self.reindexed,
            "total_changes": self.total_changes,
            "warnings": list(self.warnings),
        }

"""
QuarterPick Integrity Reconciler

Sweeps selection state for inconsistencies and repairs them. Runs after
mode changes and bulk loads (imported or persisted state).

Repairs, in order:
1. Drop values that are not valid calendar dates (raw snapshots only)
2. Drop selections on blocked dates
3. Drop fine dates whose quarter has no coarse date
4. Drop fine dates that duplicate a coarse date (coarse wins)
5. Drop dependency entries without a coarse date, re-index the rest
6. Warn (without mutating) when a quarter holds too many selections
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from ..models import (
    REPAIR_ISSUES,
    IntegrityIssue,
    QuarterKey,
    ReconciliationReport,
    parse_calendar_date,
)
from .selection_store import SelectionStore

logger = logging.getLogger(__name__)


@dataclass
class StateSnapshot:
    """
    Unparsed selection state as read from a host (file, form, API).

    Values are kept as given; anything that is not an ISO calendar date is
    dropped during reconciliation.
    """
    coarse_selections: list[Any] = field(default_factory=list)
    fine_selections: list[Any] = field(default_factory=list)
    dependency: dict[Any, Any] = field(default_factory=dict)
    blocked_dates: list[Any] = field(default_factory=list)


def _parse_quarter_key(value: Any) -> Optional[QuarterKey]:
    if isinstance(value, QuarterKey):
        return value
    try:
        return QuarterKey.parse(value)
    except (TypeError, ValueError):
        return None


@dataclass
class IntegrityReconciler:
    """
    Repairs selection state and reports what changed.

    Reconciliation is idempotent: a second pass over a repaired store
    reports zero changes.

    Usage:
        reconciler = IntegrityReconciler()
        report = reconciler.reconcile(store)
        print(report.to_dict()["changes"])
    """

    # Selections per quarter above which a warning is raised
    quarter_overflow_threshold: int = 3

    def reconcile_snapshot(
        self, snapshot: StateSnapshot
    ) -> tuple[SelectionStore, ReconciliationReport]:
        """
        Parse a raw snapshot into a new store and repair it.

        Returns:
            (store, report); the report includes malformed values dropped
            while parsing.
        """
        report = ReconciliationReport()

        coarse = self._parse_dates(snapshot.coarse_selections, report)
        fine = self._parse_dates(snapshot.fine_selections, report)
        blocked = self._parse_dates(snapshot.blocked_dates, report)

        dependency: dict[date, QuarterKey] = {}
        for raw_key, raw_value in snapshot.dependency.items():
            key = parse_calendar_date(raw_key)
            if key is None:
                report.record(IntegrityIssue.MALFORMED_DATE, raw_key)
                continue
            quarter = _parse_quarter_key(raw_value)
            if quarter is not None:
                dependency[key] = quarter

        store = SelectionStore()
        store.restore(coarse, fine, dependency, blocked)

        report.merge(self.reconcile(store))
        return store, report

    def reconcile(self, store: SelectionStore) -> ReconciliationReport:
        """Repair a store in place."""
        report = ReconciliationReport()

        self._drop_blocked_selections(store, report)
        self._drop_orphaned_fine(store, report)
        self._drop_duplicate_fine(store, report)
        self._drop_dangling_dependencies(store, report)
        self._check_quarter_overflow(store, report)

        self._log_report(report)
        return report

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def _parse_dates(self, values: list[Any], report: ReconciliationReport) -> set[date]:
        parsed = set()
        for value in values:
            d = parse_calendar_date(value)
            if d is None:
                report.record(IntegrityIssue.MALFORMED_DATE, value)
            else:
                parsed.add(d)
        return parsed

    def _drop_blocked_selections(self, store: SelectionStore, report: ReconciliationReport) -> None:
        blocked = store.blocked_dates
        for d in sorted(store.coarse_selections & blocked):
            # Fine dates of its quarter are left to the orphan sweep
            store.remove_coarse(d)
            report.record(IntegrityIssue.BLOCKED_SELECTION, d)
        for d in sorted(store.fine_selections & blocked):
            store.remove_fine(d)
            report.record(IntegrityIssue.BLOCKED_SELECTION, d)

    def _drop_orphaned_fine(self, store: SelectionStore, report: ReconciliationReport) -> None:
        for d in sorted(store.fine_selections):
            if not store.has_coarse_in_quarter(QuarterKey.of(d)):
                store.remove_fine(d)
                report.record(IntegrityIssue.ORPHANED_FINE, d)

    def _drop_duplicate_fine(self, store: SelectionStore, report: ReconciliationReport) -> None:
        for d in sorted(store.fine_selections & store.coarse_selections):
            store.remove_fine(d)
            report.record(IntegrityIssue.DUPLICATE_SELECTION, d)

    def _drop_dangling_dependencies(self, store: SelectionStore, report: ReconciliationReport) -> None:
        coarse = store.coarse_selections
        for d in sorted(store.dependency):
            if d not in coarse:
                store.drop_dependency(d)
                report.record(IntegrityIssue.DANGLING_DEPENDENCY, d)
        report.reindexed += store.reindex_dependencies()

    def _check_quarter_overflow(self, store: SelectionStore, report: ReconciliationReport) -> None:
        for key, count in sorted(store.quarter_counts().items()):
            if count > self.quarter_overflow_threshold:
                message = (
                    f"{key} holds {count} selections "
                    f"(more than {self.quarter_overflow_threshold}); input looks corrupted"
                )
                report.record(IntegrityIssue.QUARTER_OVERFLOW, key)
                report.warnings.append(message)
                logger.warning(message)

    def _log_report(self, report: ReconciliationReport) -> None:
        for issue in REPAIR_ISSUES:
            count = report.count(issue)
            if count:
                logger.warning(
                    "Reconciliation dropped %d %s entr%s: %s",
                    count,
                    issue.value,
                    "y" if count == 1 else "ies",
                    ", ".join(report.findings[issue]),
                )
        if report.reindexed:
            logger.info("Reconciliation re-indexed %d dependency entries", report.reindexed)

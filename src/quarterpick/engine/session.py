"""
QuarterPick Selection Engine

Session facade over the selection store, validator and reconciler.

Key features:
- Evaluate and commit candidate dates under the current mode
- Two-phase (cascading) removal of selections
- Blocking and unblocking of dates
- Export/import of selection state, reconciled on every load
- Valid-day scans over whole months
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import MAXYEAR, date, timedelta
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from ..calendars import HolidayCalendar
from ..exceptions import (
    SelectionNotFoundError,
    StaleRemovalPlanError,
    StateValidationError,
    StoreInvariantError,
)
from ..models import (
    DEFAULT_RULES,
    AppliedChange,
    CommitResult,
    DateMetadata,
    Decision,
    Mode,
    QuarterKey,
    QuarterlyOnly,
    QuarterlyPlusMonthly,
    ReconciliationReport,
    RemovalPlan,
    RuleConfig,
    SelectionKind,
    SelectionRecord,
    StoreSet,
    classify,
    mode_from_dict,
)
from ..packs.loader import load_rule_pack
from ..packs.schema import SCHEMA_VERSION, check_schema_version, validate_selection_state
from .reconciler import IntegrityReconciler, StateSnapshot
from .selection_store import SelectionStore
from .validator import SelectionValidator

logger = logging.getLogger(__name__)


def _add_months(d: date, months: int) -> Optional[date]:
    """First day of the month `months` after d's month, or None past date.max."""
    index = d.year * 12 + (d.month - 1) + months
    if index // 12 > MAXYEAR:
        return None
    return date(index // 12, index % 12 + 1, 1)


@dataclass
class SelectionEngine:
    """
    One selection session.

    The engine owns a single SelectionStore and passes it explicitly to
    the validator and reconciler. Decisions are computed in full before
    anything is written; an accepted commit is applied atomically.

    Usage:
        engine = SelectionEngine()

        result = engine.commit(date(2024, 2, 5))
        if not result.accepted:
            print(result.decision.label)

        engine.set_mode(QuarterlyPlusMonthly(active=SelectionKind.FINE))
        engine.commit(date(2024, 3, 12))

        plan = engine.remove(date(2024, 2, 5))
        if plan.requires_confirmation:
            ...  # ask the user about plan.cascade
        engine.confirm_removal(plan)
    """

    rules: RuleConfig = DEFAULT_RULES
    mode: Mode = field(default_factory=QuarterlyOnly)
    avoid_holidays: Optional[bool] = None
    calendar: Optional[HolidayCalendar] = None

    store: SelectionStore = field(default_factory=SelectionStore)
    validator: SelectionValidator = field(init=False)
    reconciler: IntegrityReconciler = field(init=False)

    def __post_init__(self) -> None:
        if self.avoid_holidays is None:
            self.avoid_holidays = self.rules.avoid_holidays
        if self.calendar is None:
            self.calendar = self.rules.build_calendar()
        self.validator = SelectionValidator(calendar=self.calendar, rules=self.rules)
        self.reconciler = IntegrityReconciler(
            quarter_overflow_threshold=self.rules.quarter_overflow_threshold,
        )

    @classmethod
    def from_rule_pack(cls, path: Union[str, Path], **kwargs: Any) -> SelectionEngine:
        """
        Create an engine configured by a rule pack file.

        Raises:
            RulePackLoadError: If file cannot be loaded
            RulePackValidationError: If validation fails
        """
        return cls(rules=load_rule_pack(path), **kwargs)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def classify(self, d: date) -> DateMetadata:
        return classify(d)

    def is_holiday(self, d: date) -> bool:
        return self.calendar.is_holiday(d)

    def history(self) -> list[SelectionRecord]:
        """All selections in date order."""
        return self.store.records()

    def evaluate(self, d: date, mode: Optional[Mode] = None) -> Decision:
        """
        Decide whether `d` may be selected, without changing anything.

        Args:
            d: Candidate date
            mode: Mode to evaluate under (default: the session mode)

        Raises:
            StoreInvariantError: If the store is inconsistent
        """
        self._assert_consistent()
        decision = self.validator.evaluate(
            d,
            mode=mode or self.mode,
            store=self.store,
            avoid_holidays=self.avoid_holidays,
        )
        logger.debug("Evaluated %s: %s", d, decision.label)
        return decision

    def valid_days(self, start: date, months: Optional[int] = None) -> list[date]:
        """
        Every date that would currently be accepted, scanning whole months
        from the month of `start`.

        Args:
            start: Any date in the first month to scan
            months: Number of months (default: rules.valid_days_months)
        """
        if months is None:
            months = self.rules.valid_days_months
        self._assert_consistent()

        if months <= 0:
            return []

        first = _add_months(start, 0)
        end = _add_months(start, months)
        last = date.max if end is None else end - timedelta(days=1)
        valid = []
        for offset in range((last - first).days + 1):
            d = first + timedelta(days=offset)
            decision = self.validator.evaluate(
                d, mode=self.mode, store=self.store, avoid_holidays=self.avoid_holidays
            )
            if decision.valid:
                valid.append(d)
        return valid

    # -------------------------------------------------------------------------
    # Commit / Remove
    # -------------------------------------------------------------------------

    def commit(self, d: date, mode: Optional[Mode] = None) -> CommitResult:
        """
        Evaluate `d` and, if accepted, record it as the kind the mode produces.

        Rejections are returned, never raised.
        """
        mode = mode or self.mode
        decision = self.evaluate(d, mode)
        if not decision.valid:
            return CommitResult(decision=decision)

        kind = mode.produces
        if kind == SelectionKind.COARSE:
            self.store.add_coarse(d)
            changed = {StoreSet.COARSE_SELECTIONS, StoreSet.DEPENDENCY}
        else:
            self.store.add_fine(d)
            changed = {StoreSet.FINE_SELECTIONS}

        change = AppliedChange(
            selection_date=d,
            kind=kind,
            changed_sets=frozenset(changed),
            added=(d,),
        )
        logger.info("Selected %s (%s)", d, kind.value)
        return CommitResult(decision=decision, change=change)

    def remove(self, d: date) -> RemovalPlan:
        """
        Plan the removal of a selection. Nothing is mutated.

        Removing a coarse date cascades to the fine dates of its quarter;
        those are listed in the plan and need the user's confirmation.

        Raises:
            SelectionNotFoundError: If `d` is not selected
        """
        kind = self.store.kind_of(d)
        if kind is None:
            raise SelectionNotFoundError(
                message=f"{d} is not selected",
                selection_date=d.isoformat(),
            )
        if kind == SelectionKind.COARSE:
            cascade = frozenset(self.store.fine_in_quarter(QuarterKey.of(d)))
            return RemovalPlan(target=d, kind=kind, cascade=cascade)
        return RemovalPlan(target=d, kind=kind)

    def confirm_removal(self, plan: RemovalPlan) -> AppliedChange:
        """
        Apply a removal plan.

        Raises:
            StaleRemovalPlanError: If the store no longer matches the plan
        """
        self._check_plan(plan)

        d = plan.target
        if plan.kind == SelectionKind.COARSE:
            affected = self.store.remove_coarse(d)
            self.store.remove_fine_set(affected)
            changed = {StoreSet.COARSE_SELECTIONS, StoreSet.DEPENDENCY}
            if affected:
                changed.add(StoreSet.FINE_SELECTIONS)
        else:
            self.store.remove_fine(d)
            changed = {StoreSet.FINE_SELECTIONS}

        logger.info(
            "Removed %s (%s)%s",
            d,
            plan.kind.value,
            f" and {len(plan.cascade)} dependent fine selections" if plan.cascade else "",
        )
        return AppliedChange(
            selection_date=d,
            kind=plan.kind,
            changed_sets=frozenset(changed),
            removed=tuple(plan.dates),
        )

    def _check_plan(self, plan: RemovalPlan) -> None:
        current = self.store.kind_of(plan.target)
        stale = current != plan.kind
        if not stale and plan.kind == SelectionKind.COARSE:
            stale = frozenset(self.store.fine_in_quarter(QuarterKey.of(plan.target))) != plan.cascade
        if stale:
            raise StaleRemovalPlanError(
                message="Selections changed since the removal was planned",
                details={"plan": plan.to_dict()},
                selection_date=plan.target.isoformat(),
            )

    # -------------------------------------------------------------------------
    # Blocking
    # -------------------------------------------------------------------------

    def block(self, d: date) -> AppliedChange:
        """
        Block a date. A selection on it is evicted, a coarse one together
        with the fine dates of its quarter.
        """
        kind = self.store.kind_of(d)
        evicted = self.store.block(d)

        changed = {StoreSet.BLOCKED_DATES}
        if kind == SelectionKind.COARSE:
            changed |= {StoreSet.COARSE_SELECTIONS, StoreSet.DEPENDENCY}
            if len(evicted) > 1:
                changed.add(StoreSet.FINE_SELECTIONS)
        elif kind == SelectionKind.FINE:
            changed.add(StoreSet.FINE_SELECTIONS)

        if evicted:
            logger.info("Blocked %s, evicting %s", d, ", ".join(str(e) for e in sorted(evicted)))
        else:
            logger.info("Blocked %s", d)
        return AppliedChange(
            selection_date=d,
            kind=kind,
            changed_sets=frozenset(changed),
            removed=tuple(sorted(evicted)),
        )

    def unblock(self, d: date) -> bool:
        """Unblock a date. Returns False if it was not blocked."""
        unblocked = self.store.unblock(d)
        if unblocked:
            logger.info("Unblocked %s", d)
        return unblocked

    def clear_selections(self) -> None:
        self.store.clear_selections()
        logger.info("Cleared all selections")

    def clear_blocked(self) -> None:
        self.store.clear_blocked()
        logger.info("Cleared all blocked dates")

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def set_mode(self, mode: Mode) -> ReconciliationReport:
        """Switch the selection mode and reconcile the store."""
        logger.info("Mode set to %s", mode.to_dict())
        self.mode = mode
        return self.reconcile()

    def set_active_kind(self, kind: SelectionKind) -> None:
        """
        Choose which kind the next selection produces.

        Selecting FINE switches a quarterly-only session to quarterly plus
        monthly; selecting COARSE keeps the current mode family.
        """
        if isinstance(self.mode, QuarterlyPlusMonthly):
            self.mode = self.mode.with_active(kind)
        elif kind == SelectionKind.FINE:
            self.mode = QuarterlyPlusMonthly(active=kind)

    def set_holiday_avoidance(self, avoid: bool) -> None:
        self.avoid_holidays = avoid

    # -------------------------------------------------------------------------
    # Integrity
    # -------------------------------------------------------------------------

    def reconcile(self) -> ReconciliationReport:
        """Repair the store in place."""
        report = self.reconciler.reconcile(self.store)
        logger.info("Reconciled store: %d changes", report.total_changes)
        return report

    def _assert_consistent(self) -> None:
        violations = self.store.check_invariants()
        if violations:
            raise StoreInvariantError(
                message="Selection store is inconsistent",
                details={"violations": violations},
            )

    # -------------------------------------------------------------------------
    # Export / Import
    # -------------------------------------------------------------------------

    def export_state(self) -> dict[str, Any]:
        """Serialize selection state with ISO date strings."""
        return {
            "schema_version": SCHEMA_VERSION,
            "coarse_selections": sorted(d.isoformat() for d in self.store.coarse_selections),
            "fine_selections": sorted(d.isoformat() for d in self.store.fine_selections),
            "dependency": {
                d.isoformat(): str(key)
                for d, key in sorted(self.store.dependency.items())
            },
            "blocked_dates": sorted(d.isoformat() for d in self.store.blocked_dates),
            "mode": self.mode.to_dict(),
            "avoid_holidays": self.avoid_holidays,
        }

    def import_state(self, data: Any) -> ReconciliationReport:
        """
        Replace the session state with exported data.

        The data is always reconciled: malformed dates, orphans and
        duplicates are dropped and reported rather than raised. Nothing is
        changed if the import fails.

        Raises:
            StateValidationError: If the structure is wrong, the schema
                version is incompatible, or the data breaks selection rules
                that reconciliation does not repair
        """
        if not isinstance(data, dict):
            raise StateValidationError(
                message="Selection state must be a mapping",
                details={"type": type(data).__name__},
            )
        if not check_schema_version(data):
            raise StateValidationError(
                message=f"Incompatible state schema version {data.get('schema_version')!r}",
                details={"expected_version": SCHEMA_VERSION},
            )
        try:
            schema = validate_selection_state(data)
        except ValidationError as e:
            raise StateValidationError(
                message=f"Selection state validation failed: {e.error_count()} errors",
                details={"errors": e.errors(include_url=False)},
            ) from e

        mode = mode_from_dict(schema.mode.model_dump(exclude_none=True))
        snapshot = StateSnapshot(
            coarse_selections=schema.coarse_selections,
            fine_selections=schema.fine_selections,
            dependency=schema.dependency,
            blocked_dates=schema.blocked_dates,
        )
        store, report = self.reconciler.reconcile_snapshot(snapshot)

        violations = store.check_invariants()
        if violations:
            raise StateValidationError(
                message="Imported selections break the selection rules",
                details={"violations": violations, "reconciliation": report.to_dict()},
            )

        self.store = store
        self.mode = mode
        if schema.avoid_holidays is None:
            self.avoid_holidays = self.rules.avoid_holidays
        else:
            self.avoid_holidays = schema.avoid_holidays
        logger.info(
            "Imported %d selections, %d blocked dates (%d reconciliation changes)",
            len(store),
            len(store.blocked_dates),
            report.total_changes,
        )
        return report

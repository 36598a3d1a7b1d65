"""
QuarterPick Selection Store

Owns the selection collections:

- coarse selections (one per quarter, enforced by the validator)
- fine selections (one per month, each inside a quarter with a coarse date)
- the dependency index: coarse date -> quarter key
- blocked dates (manually excluded; never selected)

Mutations are plain data operations with no rule checking. The dependency
index is maintained by every coarse mutation and is never an independent
source of truth.
"""
from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Iterable, Mapping, Optional

from ..models import (
    DateMetadata,
    QuarterKey,
    SelectionKind,
    SelectionRecord,
    classify,
)


class SelectionStore:
    """
    Selection state of one session.

    Usage:
        store = SelectionStore()
        store.add_coarse(date(2024, 2, 5))
        store.add_fine(date(2024, 3, 12))

        affected = store.remove_coarse(date(2024, 2, 5))
        store.remove_fine_set(affected)   # after the caller confirms
    """

    def __init__(self) -> None:
        self._coarse: set[date] = set()
        self._fine: set[date] = set()
        self._dependency: dict[date, QuarterKey] = {}
        self._blocked: set[date] = set()

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    @property
    def coarse_selections(self) -> frozenset[date]:
        return frozenset(self._coarse)

    @property
    def fine_selections(self) -> frozenset[date]:
        return frozenset(self._fine)

    @property
    def dependency(self) -> dict[date, QuarterKey]:
        return dict(self._dependency)

    @property
    def blocked_dates(self) -> frozenset[date]:
        return frozenset(self._blocked)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_coarse(self, d: date) -> None:
        self._coarse.add(d)
        self._dependency[d] = QuarterKey.of(d)

    def add_fine(self, d: date) -> None:
        self._fine.add(d)

    def remove_coarse(self, d: date) -> set[date]:
        """
        Remove a coarse date and its dependency entry.

        Returns the fine dates of the same quarter without removing them;
        the caller must confirm before passing them to remove_fine_set().
        """
        self._coarse.discard(d)
        self._dependency.pop(d, None)
        return self.fine_in_quarter(QuarterKey.of(d))

    def remove_fine(self, d: date) -> None:
        self._fine.discard(d)

    def remove_fine_set(self, dates: Iterable[date]) -> None:
        self._fine.difference_update(dates)

    def block(self, d: date) -> set[date]:
        """
        Block a date, evicting any selection on it.

        A blocked coarse date takes the fine dates of its quarter with it.

        Returns:
            The evicted selection dates (empty if `d` was not selected)
        """
        self._blocked.add(d)
        if d in self._coarse:
            affected = self.remove_coarse(d)
            self.remove_fine_set(affected)
            return {d} | affected
        if d in self._fine:
            self.remove_fine(d)
            return {d}
        return set()

    def unblock(self, d: date) -> bool:
        """Unblock a date. Returns False if it was not blocked."""
        if d not in self._blocked:
            return False
        self._blocked.discard(d)
        return True

    def clear_selections(self) -> None:
        self._coarse.clear()
        self._fine.clear()
        self._dependency.clear()

    def clear_blocked(self) -> None:
        self._blocked.clear()

    def restore(
        self,
        coarse: Iterable[date] = (),
        fine: Iterable[date] = (),
        dependency: Optional[Mapping[date, QuarterKey]] = None,
        blocked: Iterable[date] = (),
    ) -> None:
        """
        Replace the whole state with bulk-loaded data, as-is.

        Nothing is checked; run the integrity reconciler afterwards.
        """
        self._coarse = set(coarse)
        self._fine = set(fine)
        self._dependency = dict(dependency or {})
        self._blocked = set(blocked)

    def drop_dependency(self, d: date) -> None:
        self._dependency.pop(d, None)

    def reindex_dependencies(self) -> int:
        """
        Rebuild missing or stale dependency entries from the coarse dates.

        Returns:
            Number of entries added or corrected
        """
        fixed = 0
        for d in self._coarse:
            key = QuarterKey.of(d)
            if self._dependency.get(d) != key:
                self._dependency[d] = key
                fixed += 1
        return fixed

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_selected(self, d: date) -> bool:
        return d in self._coarse or d in self._fine

    def is_blocked(self, d: date) -> bool:
        return d in self._blocked

    def kind_of(self, d: date) -> Optional[SelectionKind]:
        if d in self._coarse:
            return SelectionKind.COARSE
        if d in self._fine:
            return SelectionKind.FINE
        return None

    def coarse_in_quarter(self, key: QuarterKey) -> Optional[date]:
        """The coarse date of a quarter (earliest, if the store is corrupted)."""
        matches = sorted(d for d in self._coarse if QuarterKey.of(d) == key)
        return matches[0] if matches else None

    def has_coarse_in_quarter(self, key: QuarterKey) -> bool:
        """Prerequisite check: does the quarter hold a coarse anchor?"""
        return any(QuarterKey.of(d) == key for d in self._coarse)

    def fine_in_quarter(self, key: QuarterKey) -> set[date]:
        return {d for d in self._fine if QuarterKey.of(d) == key}

    def selections_in_quarter(self, key: QuarterKey) -> list[SelectionRecord]:
        return [r for r in self.records() if QuarterKey.of(r.date) == key]

    def is_month_occupied(self, year: int, month: int) -> bool:
        """True if any coarse or fine date falls in the given month."""
        return any(
            d.year == year and d.month == month
            for d in self._coarse | self._fine
        )

    def records(self) -> list[SelectionRecord]:
        """All selections in date order."""
        records = [SelectionRecord(d, SelectionKind.COARSE) for d in self._coarse]
        records.extend(SelectionRecord(d, SelectionKind.FINE) for d in self._fine)
        return sorted(records, key=lambda r: (r.date, r.kind.value))

    def coarse_stream(self) -> list[DateMetadata]:
        return [classify(d) for d in self._coarse]

    def monthly_stream(self) -> list[DateMetadata]:
        """Merged coarse + fine metadata, the stream fine pattern checks scan."""
        return [classify(d) for d in self._coarse | self._fine]

    def quarter_counts(self) -> Counter:
        """Selection count per QuarterKey."""
        return Counter(QuarterKey.of(d) for d in self._coarse | self._fine)

    # -------------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------------

    def check_invariants(self) -> list[str]:
        """
        Describe every violated store invariant (empty when consistent).

        Pattern-run limits are enforced at commit time by the validator and
        are not re-checked here.
        """
        violations = []

        for d in sorted(self._coarse & self._fine):
            violations.append(f"{d} is both coarse and fine")
        for d in sorted((self._coarse | self._fine) & self._blocked):
            violations.append(f"{d} is selected and blocked")

        coarse_per_quarter = Counter(QuarterKey.of(d) for d in self._coarse)
        for key, count in sorted(coarse_per_quarter.items()):
            if count > 1:
                violations.append(f"{key} has {count} coarse selections")

        units_per_month = Counter((d.year, d.month) for d in self._coarse | self._fine)
        for (year, month), count in sorted(units_per_month.items()):
            if count > 1:
                violations.append(f"{year}-{month:02d} has {count} selections")

        anchored = set(coarse_per_quarter)
        for d in sorted(self._fine):
            if QuarterKey.of(d) not in anchored:
                violations.append(f"fine {d} has no coarse selection in {QuarterKey.of(d)}")

        for d in sorted(set(self._dependency) - self._coarse):
            violations.append(f"dependency entry {d} is not a coarse selection")

        return violations

    # -------------------------------------------------------------------------
    # Dunder
    # -------------------------------------------------------------------------

    def copy(self) -> SelectionStore:
        clone = SelectionStore()
        clone.restore(self._coarse, self._fine, self._dependency, self._blocked)
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SelectionStore):
            return NotImplemented
        return (
            self._coarse == other._coarse
            and self._fine == other._fine
            and self._dependency == other._dependency
            and self._blocked == other._blocked
        )

    def __len__(self) -> int:
        return len(self._coarse) + len(self._fine)

    def __repr__(self) -> str:
        return (
            f"SelectionStore(coarse={len(self._coarse)}, "
            f"fine={len(self._fine)}, "
            f"blocked={len(self._blocked)})"
        )

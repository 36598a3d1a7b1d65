"""
Tests for the selection store.

Tests cover:
- Dependency index maintenance
- Cascade candidates on coarse removal
- Blocking and eviction
- Invariant reporting
"""
from datetime import date

from quarterpick.models import QuarterKey, SelectionKind


class TestSelectionStore:
    """Store mutations and queries."""

    def test_add_coarse_indexes_dependency(self, store):
        store.add_coarse(date(2024, 4, 9))
        assert store.dependency == {date(2024, 4, 9): QuarterKey(2024, 2)}
        assert store.has_coarse_in_quarter(QuarterKey(2024, 2))
        assert store.coarse_in_quarter(QuarterKey(2024, 2)) == date(2024, 4, 9)

    def test_remove_coarse_reports_fine_without_removing(self, store):
        store.add_coarse(date(2024, 4, 9))
        store.add_fine(date(2024, 5, 15))
        store.add_fine(date(2024, 6, 26))
        store.add_fine(date(2024, 7, 10))  # other quarter

        affected = store.remove_coarse(date(2024, 4, 9))

        assert affected == {date(2024, 5, 15), date(2024, 6, 26)}
        assert store.dependency == {}
        assert store.fine_selections == {date(2024, 5, 15), date(2024, 6, 26), date(2024, 7, 10)}

        store.remove_fine_set(affected)
        assert store.fine_selections == {date(2024, 7, 10)}

    def test_block_coarse_cascades(self, store):
        store.add_coarse(date(2024, 4, 9))
        store.add_fine(date(2024, 5, 15))

        evicted = store.block(date(2024, 4, 9))

        assert evicted == {date(2024, 4, 9), date(2024, 5, 15)}
        assert len(store) == 0
        assert store.is_blocked(date(2024, 4, 9))

    def test_block_unselected(self, store):
        assert store.block(date(2024, 3, 4)) == set()
        assert store.blocked_dates == {date(2024, 3, 4)}

    def test_unblock(self, store):
        store.block(date(2024, 3, 4))
        assert store.unblock(date(2024, 3, 4))
        assert not store.unblock(date(2024, 3, 4))

    def test_kind_of(self, store):
        store.add_coarse(date(2024, 4, 9))
        store.add_fine(date(2024, 5, 15))
        assert store.kind_of(date(2024, 4, 9)) == SelectionKind.COARSE
        assert store.kind_of(date(2024, 5, 15)) == SelectionKind.FINE
        assert store.kind_of(date(2024, 5, 16)) is None

    def test_month_occupied_counts_both_kinds(self, store):
        store.add_coarse(date(2024, 4, 9))
        store.add_fine(date(2024, 5, 15))
        assert store.is_month_occupied(2024, 4)
        assert store.is_month_occupied(2024, 5)
        assert not store.is_month_occupied(2024, 6)

    def test_records_sorted_by_date(self, store):
        store.add_fine(date(2024, 6, 26))
        store.add_coarse(date(2024, 4, 9))
        store.add_fine(date(2024, 5, 15))
        assert [r.date for r in store.records()] == [
            date(2024, 4, 9), date(2024, 5, 15), date(2024, 6, 26),
        ]

    def test_reindex_dependencies(self, store):
        store.restore(coarse=[date(2024, 4, 9)], dependency={})
        assert store.reindex_dependencies() == 1
        assert store.reindex_dependencies() == 0

    def test_copy_and_equality(self, store):
        store.add_coarse(date(2024, 4, 9))
        store.block(date(2024, 3, 4))
        clone = store.copy()
        assert clone == store
        clone.add_fine(date(2024, 5, 15))
        assert clone != store


class TestStoreInvariants:
    """check_invariants() reports every violated rule."""

    def test_consistent_store(self, store):
        store.add_coarse(date(2024, 4, 9))
        store.add_fine(date(2024, 5, 15))
        assert store.check_invariants() == []

    def test_violations(self, store):
        store.restore(
            coarse=[date(2024, 4, 9), date(2024, 5, 7)],
            fine=[date(2024, 4, 9), date(2024, 4, 16), date(2024, 8, 6)],
            dependency={date(2024, 1, 8): QuarterKey(2024, 1)},
            blocked=[date(2024, 5, 7)],
        )
        violations = store.check_invariants()
        assert "2024-04-09 is both coarse and fine" in violations
        assert "2024-05-07 is selected and blocked" in violations
        assert "2024-Q2 has 2 coarse selections" in violations
        assert "2024-04 has 2 selections" in violations
        assert "fine 2024-08-06 has no coarse selection in 2024-Q3" in violations
        assert "dependency entry 2024-01-08 is not a coarse selection" in violations

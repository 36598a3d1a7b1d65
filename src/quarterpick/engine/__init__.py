"""
QuarterPick Engine

Components:
- selection_store: SelectionStore, the selection collections
- validator: SelectionValidator and the consecutive-run check
- reconciler: IntegrityReconciler for bulk-loaded state
- session: SelectionEngine, the session facade
"""
from __future__ import annotations

from .reconciler import IntegrityReconciler, StateSnapshot
from .selection_store import SelectionStore
from .session import SelectionEngine
from .validator import SelectionValidator, has_consecutive_run

__all__ = [
    "IntegrityReconciler",
    "SelectionEngine",
    "SelectionStore",
    "SelectionValidator",
    "StateSnapshot",
    "has_consecutive_run",
]
